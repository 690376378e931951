"""
Захват живой страницы через CDP: пометка выделения, DOMSnapshot и сведения о шрифтах.

@dev вся логика извлечения живёт в pluck.extraction, здесь только транспорт
"""

import json
import logging
from typing import TYPE_CHECKING, Any

from pluck.browser.snapshot_page import CAPTURED_STYLE_NAMES, SnapshotPage, SnapshotStyleSheet
from pluck.extraction.models import FontFaceRule

if TYPE_CHECKING:
	from cdp_use import CDPClient

logger = logging.getLogger(__name__)

SELECTION_ATTRIBUTE = 'data-pluck-selected'

# Правила @font-face доступных таблиц; для cross-origin таблиц rules = null
FONT_FACES_JS = """(() => {
	const sheets = [];
	for (const sheet of document.styleSheets) {
		let rules = null;
		try {
			rules = [];
			for (const rule of sheet.cssRules || []) {
				if (rule instanceof CSSFontFaceRule) {
					rules.push({
						family: rule.style.getPropertyValue('font-family'),
						src: rule.style.getPropertyValue('src'),
						weight: rule.style.getPropertyValue('font-weight') || 'normal',
						style: rule.style.getPropertyValue('font-style') || 'normal',
					});
				}
			}
		} catch (e) {
			rules = null;
		}
		sheets.push({ href: sheet.href, rules });
	}
	return sheets;
})()"""

RESOURCE_URLS_JS = "performance.getEntriesByType('resource').map(entry => entry.name)"

MARK_SELECTION_JS = """((selector, attribute) => {
	const found = document.querySelectorAll(selector);
	found.forEach(el => el.setAttribute(attribute, ''));
	return found.length;
})"""

UNMARK_SELECTION_JS = """((attribute) => {
	document.querySelectorAll('[' + attribute + ']').forEach(el => el.removeAttribute(attribute));
})"""


async def _evaluate(client: 'CDPClient', session_id: str, expression: str) -> Any:
	result = await client.send.Runtime.evaluate(
		params={'expression': expression, 'returnByValue': True, 'awaitPromise': True},
		session_id=session_id,
	)
	if 'exceptionDetails' in result:
		raise RuntimeError(f'JavaScript evaluation failed: {result["exceptionDetails"]}')
	return result.get('result', {}).get('value')


async def mark_selection(client: 'CDPClient', session_id: str, selector: str) -> int:
	"""Пометить элементы, подходящие под CSS-селектор. Returns: число помеченных элементов."""
	expression = f'{MARK_SELECTION_JS}({json.dumps(selector)}, {json.dumps(SELECTION_ATTRIBUTE)})'
	count = await _evaluate(client, session_id, expression)
	return int(count or 0)


async def unmark_selection(client: 'CDPClient', session_id: str) -> None:
	await _evaluate(client, session_id, f'{UNMARK_SELECTION_JS}({json.dumps(SELECTION_ATTRIBUTE)})')


async def capture_page(client: 'CDPClient', session_id: str) -> SnapshotPage:
	"""Снять DOMSnapshot со стилями, нужными извлечению, и собрать SnapshotPage."""
	snapshot = await client.send.DOMSnapshot.captureSnapshot(
		params={
			'computedStyles': list(CAPTURED_STYLE_NAMES),
			'includeDOMRects': True,
			'includePaintOrder': False,
		},
		session_id=session_id,
	)

	base_url = await _evaluate(client, session_id, 'document.baseURI') or ''
	pixel_ratio = await _evaluate(client, session_id, 'window.devicePixelRatio') or 1.0

	raw_sheets = await _evaluate(client, session_id, FONT_FACES_JS) or []
	sheets = []
	for raw_sheet in raw_sheets:
		rules = raw_sheet.get('rules')
		sheets.append(
			SnapshotStyleSheet(
				href=raw_sheet.get('href'),
				rules=None if rules is None else [FontFaceRule(**rule) for rule in rules],
			)
		)

	resources = await _evaluate(client, session_id, RESOURCE_URLS_JS) or []

	page = SnapshotPage.from_snapshot(
		snapshot,
		base_url=base_url,
		sheets=sheets,
		resources=resources,
		pixel_ratio=float(pixel_ratio),
	)
	logger.debug(f'Captured {base_url}: {len(page.elements)} elements, {len(sheets)} stylesheets, {len(resources)} resources')
	return page
