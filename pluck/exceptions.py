"""Исключения для всех компонентов экспорта."""


# Базовые исключения
class PluckError(Exception):
	"""Базовое исключение для ошибок экспорта."""

	pass


class ExtractionFailed(PluckError):
	"""Экспорт целиком не удался: стили или геометрия корневого узла недоступны.

	Частичное дерево никогда не возвращается вызывающему коду.
	"""

	def __init__(self, message: str, tag: str | None = None):
		super().__init__(message)
		self.tag = tag
		self.message = message


class ChildSkipped(PluckError):
	"""Внутренний сигнал: отдельный потомок не может быть построен и пропускается."""

	def __init__(self, message: str, tag: str | None = None):
		super().__init__(message)
		self.tag = tag


# Исключения для шрифтов и таблиц стилей
class FontFetchFailed(PluckError):
	"""Исключение, возникающее при ошибке загрузки файла шрифта."""

	def __init__(self, url: str, reason: str = ''):
		super().__init__(f'Could not fetch font {url}: {reason}' if reason else f'Could not fetch font {url}')
		self.url = url
		self.reason = reason


class StylesheetAccessError(PluckError):
	"""Правила таблицы стилей нельзя прочитать напрямую (cross-origin)."""

	def __init__(self, href: str | None):
		super().__init__(f'Stylesheet rules are not accessible: {href}')
		self.href = href


class StylesheetUnreadable(PluckError):
	"""Таблица стилей недоступна ни напрямую, ни через загрузку текста."""

	def __init__(self, href: str | None, reason: str = ''):
		super().__init__(f'Stylesheet is unreadable: {href} {reason}'.rstrip())
		self.href = href
		self.reason = reason


# Исключения для снимка страницы
class SnapshotFormatError(PluckError):
	"""Ответ DOMSnapshot не совпадает с запрошенным списком computedStyles."""

	def __init__(self, expected: int, received: int):
		super().__init__(f'Snapshot returned {received} computed styles per node, expected {expected}')
		self.expected = expected
		self.received = received
