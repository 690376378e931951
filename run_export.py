"""Запуск экспорта компонента с открытой страницы: python run_export.py ".card" --name card"""

from pluck.cli import main

if __name__ == '__main__':
	main()
