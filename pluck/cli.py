"""Экспорт компонента с открытой страницы Chromium через CDP"""

import argparse
import asyncio
import logging
import sys
from urllib.parse import urlparse, urlunparse

import httpx
from cdp_use import CDPClient

from pluck.browser.cdp_page import SELECTION_ATTRIBUTE, capture_page, mark_selection, unmark_selection
from pluck.browser.fetcher import HttpResourceFetcher
from pluck.config import CONFIG
from pluck.exceptions import ExtractionFailed, SnapshotFormatError
from pluck.extraction.output import write_export
from pluck.extraction.service import ExtractionService, SelectionSet
from pluck.extraction.settings import ExtractionSettings

logger = logging.getLogger(__name__)


async def resolve_websocket_url(cdp_url: str) -> str:
	"""http://host:port -> webSocketDebuggerUrl из /json/version."""
	if cdp_url.startswith('ws'):
		return cdp_url

	parsed_url = urlparse(cdp_url)
	path = parsed_url.path.rstrip('/')
	if not path.endswith('/json/version'):
		path = path + '/json/version'
	url = urlunparse((parsed_url.scheme, parsed_url.netloc, path, parsed_url.params, parsed_url.query, parsed_url.fragment))

	async with httpx.AsyncClient() as client:
		version_info = await client.get(url)
		version_info.raise_for_status()
		return version_info.json()['webSocketDebuggerUrl']


async def _attach_to_page(client: CDPClient, url_contains: str | None) -> str:
	targets = await client.send.Target.getTargets()
	pages = [target for target in targets['targetInfos'] if target['type'] == 'page']
	if url_contains:
		pages = [target for target in pages if url_contains in target['url']]
	if not pages:
		raise RuntimeError(f'No open page matches {url_contains!r}' if url_contains else 'No open page found')

	target = pages[0]
	logger.info(f'📄 Using page {target["url"]}')
	attach_result = await client.send.Target.attachToTarget(params={'targetId': target['targetId'], 'flatten': True})
	return attach_result['sessionId']


async def run_export(
	selector: str,
	output_dir: str,
	filename: str,
	cdp_url: str,
	url_contains: str | None = None,
	embed_fonts: bool = True,
) -> dict:
	ws_url = await resolve_websocket_url(cdp_url)
	logger.debug(f'🌎 Connecting to browser via CDP: {ws_url}')

	client = CDPClient(ws_url, max_ws_frame_size=200 * 1024 * 1024)
	await client.start()
	try:
		session_id = await _attach_to_page(client, url_contains)

		count = await mark_selection(client, session_id, selector)
		if not count:
			raise ExtractionFailed(f'Selector {selector!r} matched no elements')
		logger.info(f'🎯 Selected {count} element(s) for {selector!r}')

		try:
			page = await capture_page(client, session_id)
		finally:
			await unmark_selection(client, session_id)
	finally:
		await client.stop()

	selection = SelectionSet(page.elements_with_attribute(SELECTION_ATTRIBUTE))
	settings = ExtractionSettings.from_env()

	async with HttpResourceFetcher(timeout=settings.fetch_timeout) as fetcher:
		service = ExtractionService(document=page if embed_fonts else None, fetcher=fetcher, settings=settings)
		result = await service.extract(selection)

	return write_export(result, output_dir, filename)


def main():
	"""Главная функция"""
	parser = argparse.ArgumentParser(
		prog='pluck-export',
		description='Экспорт выбранного фрагмента страницы в компактную нотацию, HTML и CSS',
		formatter_class=argparse.RawDescriptionHelpFormatter,
		epilog="""
Примеры использования:
  pluck-export ".pricing-card"
  pluck-export "#hero" --name hero --output ./exports
  pluck-export "nav" --cdp-url http://localhost:9223 --page github.com
        """,
	)
	parser.add_argument('selector', help='CSS-селектор выделяемых элементов')
	parser.add_argument('--name', '-n', default='component', help='Имя файлов экспорта (по умолчанию: component)')
	parser.add_argument('--output', '-o', default=None, help='Каталог для файлов (по умолчанию: PLUCK_OUTPUT_DIR)')
	parser.add_argument('--cdp-url', default=None, help='Адрес CDP браузера (по умолчанию: PLUCK_CDP_URL)')
	parser.add_argument('--page', default=None, help='Подстрока URL вкладки, с которой делать экспорт')
	parser.add_argument('--no-fonts', action='store_true', help='Не встраивать веб-шрифты')

	args = parser.parse_args()

	try:
		paths = asyncio.run(
			run_export(
				selector=args.selector,
				output_dir=args.output or CONFIG.PLUCK_OUTPUT_DIR,
				filename=args.name,
				cdp_url=args.cdp_url or CONFIG.PLUCK_CDP_URL,
				url_contains=args.page,
				embed_fonts=not args.no_fonts,
			)
		)
	except KeyboardInterrupt:
		print('\n\n👋 Выход из программы...\n')
		sys.exit(0)
	except (ExtractionFailed, SnapshotFormatError) as e:
		print(f'\n❌ Экспорт не удался: {e}\n')
		sys.exit(1)

	for kind, path in paths.items():
		print(f'✅ {kind}: {path}')


if __name__ == '__main__':
	main()
