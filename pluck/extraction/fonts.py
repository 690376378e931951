"""
Поиск @font-face, используемых экспортируемым деревом, и встраивание их файлов в data: URL.

Единственная асинхронная фаза экспорта: каждая загрузка - независимая точка ожидания,
ошибка одной загрузки убирает только этот шрифт.
"""

import asyncio
import base64
import logging
import re
from collections.abc import Iterable
from urllib.parse import urljoin

from pluck.exceptions import FontFetchFailed, StylesheetAccessError, StylesheetUnreadable
from pluck.extraction.models import (
	ElementNode,
	FontFaceDescriptor,
	FontFaceRule,
	LiveDocument,
	ResourceFetcher,
	StructureNode,
	StyleSheetHandle,
)
from pluck.extraction.registry import StyleRegistry
from pluck.extraction.settings import ExtractionSettings

logger = logging.getLogger(__name__)

FONT_MIME_TYPES = {
	'woff2': 'font/woff2',
	'woff': 'font/woff',
	'truetype': 'font/ttf',
	'opentype': 'font/otf',
	'embedded-opentype': 'application/vnd.ms-fontobject',
}

# Родовые семейства ничего не говорят о конкретном файле шрифта
GENERIC_FAMILIES = frozenset(
	{
		'serif',
		'sansserif',
		'monospace',
		'cursive',
		'fantasy',
		'systemui',
		'uiserif',
		'uisansserif',
		'uimonospace',
		'uirounded',
		'emoji',
		'math',
		'fangsong',
		'inherit',
		'initial',
	}
)

FONT_URL_RE = re.compile(r'\.(woff2?|ttf|otf|eot)(\?|#|$)', re.IGNORECASE)
_FONT_FACE_BLOCK_RE = re.compile(r'@font-face\s*\{([^}]+)\}', re.IGNORECASE)
_FAMILY_RE = re.compile(r'font-family\s*:\s*["\']?([^"\';\n}]+)["\']?', re.IGNORECASE)
_SRC_URL_RE = re.compile(r'src\s*:[^;]*?url\(\s*["\']?([^"\')]+)["\']?\s*\)', re.IGNORECASE)
_RULE_URL_RE = re.compile(r'url\(\s*["\']?([^"\')]+\.(?:woff2?|ttf|otf|eot)[^"\')]*?)["\']?\s*\)', re.IGNORECASE)
_WEIGHT_RE = re.compile(r'font-weight\s*:\s*([^;\n}]+)', re.IGNORECASE)
_STYLE_RE = re.compile(r'font-style\s*:\s*([^;\n}]+)', re.IGNORECASE)
_NETWORK_FAMILY_RE = re.compile(r'/([^/?#]+)\.(?:woff2?|ttf|otf|eot)', re.IGNORECASE)


def detect_font_format(url: str) -> str:
	url_lower = url.lower()
	if '.woff2' in url_lower:
		return 'woff2'
	if '.woff' in url_lower:
		return 'woff'
	if '.ttf' in url_lower:
		return 'truetype'
	if '.otf' in url_lower:
		return 'opentype'
	if '.eot' in url_lower:
		return 'embedded-opentype'
	return 'woff2'


def normalize_family_name(name: str) -> str:
	"""Нижний регистр без пробелов, кавычек и дефисов: 'Open Sans' == open-sans."""
	return re.sub(r'[^a-z0-9]', '', name.lower())


def to_data_url(data: bytes, font_format: str) -> str:
	mime_type = FONT_MIME_TYPES.get(font_format, 'application/octet-stream')
	return f'data:{mime_type};base64,{base64.b64encode(data).decode("ascii")}'


def _block_field(pattern: re.Pattern[str], block: str, default: str = 'normal') -> str:
	match = pattern.search(block)
	return match.group(1).strip() if match else default


def parse_font_faces_from_text(css_text: str, base_url: str = '') -> list[FontFaceDescriptor]:
	"""Вытащить блоки @font-face из сырого текста таблицы стилей."""
	descriptors: list[FontFaceDescriptor] = []
	for match in _FONT_FACE_BLOCK_RE.finditer(css_text):
		block = match.group(1)

		family_match = _FAMILY_RE.search(block)
		if not family_match:
			continue
		family = family_match.group(1).strip()

		src_match = _SRC_URL_RE.search(block)
		if not family or not src_match:
			continue
		url = urljoin(base_url, src_match.group(1).strip()) if base_url else src_match.group(1).strip()

		descriptors.append(
			FontFaceDescriptor(
				family=family,
				source_url=url,
				format=detect_font_format(url),
				weight=_block_field(_WEIGHT_RE, block),
				style=_block_field(_STYLE_RE, block),
			)
		)
	return descriptors


def descriptor_from_rule(rule: FontFaceRule, base_url: str = '') -> FontFaceDescriptor | None:
	family = rule.family.replace('"', '').replace("'", '').strip()
	if not family:
		return None
	url_match = _RULE_URL_RE.search(rule.src)
	if not url_match:
		return None
	url = urljoin(base_url, url_match.group(1)) if base_url else url_match.group(1)
	return FontFaceDescriptor(
		family=family,
		source_url=url,
		format=detect_font_format(url),
		weight=rule.weight or 'normal',
		style=rule.style or 'normal',
	)


def _families_from_declaration(value: str) -> list[str]:
	return [family.strip().strip('"\'').strip() for family in value.split(',') if family.strip().strip('"\'').strip()]


def collect_used_font_families(roots: Iterable[StructureNode], style_registry: StyleRegistry) -> set[str]:
	"""Семейства из общих стилей, inline-стилей и иконочных шрифтов дерева."""
	families: set[str] = set()

	def visit(node: StructureNode) -> None:
		if not isinstance(node, ElementNode):
			return
		if node.inline_style and node.inline_style.get('font-family'):
			families.update(_families_from_declaration(node.inline_style['font-family']))
		if node.style_ref:
			record = style_registry.get(node.style_ref) or {}
			if record.get('font-family'):
				families.update(_families_from_declaration(record['font-family']))
		if node.icon is not None:
			families.add(node.icon.font)
		for child in node.children:
			visit(child)

	for root in roots:
		visit(root)
	return families


def filter_used_fonts(font_faces: dict[str, FontFaceDescriptor], used_families: Iterable[str]) -> dict[str, FontFaceDescriptor]:
	"""Оставить только шрифты, на которые ссылается дерево.

	Совпадение - вхождение нормализованных имён в любую сторону ('Inter' и 'Inter Variable').
	Шрифты из сетевой телеметрии без подтверждённого семейства отбрасываются.
	"""
	normalized_used = {normalize_family_name(family) for family in used_families}
	normalized_used = {family for family in normalized_used if family and family not in GENERIC_FAMILIES}

	used_fonts: dict[str, FontFaceDescriptor] = {}
	for key, descriptor in font_faces.items():
		if descriptor.provisional:
			logger.debug(f'Dropping unresolved network font {descriptor.source_url}')
			continue
		family = normalize_family_name(descriptor.family)
		if not family:
			continue
		if any(used in family or family in used for used in normalized_used):
			used_fonts[key] = descriptor
	return used_fonts


def generate_font_face_css(descriptors: Iterable[FontFaceDescriptor]) -> str:
	"""Правила @font-face со встроенными файлами. Шрифты без данных или семейства пропускаются."""
	rules = []
	for font in descriptors:
		if not font.payload or not font.family or font.provisional:
			logger.debug(f'Skipping font without valid family/data: {font.family} {font.source_url}')
			continue
		rules.append(
			'@font-face {\n'
			f"  font-family: '{font.family}';\n"
			f"  src: url({font.payload}) format('{font.format}');\n"
			f'  font-weight: {font.weight};\n'
			f'  font-style: {font.style};\n'
			'  font-display: swap;\n'
			'}\n'
		)
	return ''.join(rules)


class FontResolver:
	"""Находит @font-face страницы, сопоставляет их с деревом и встраивает файлы."""

	def __init__(self, document: LiveDocument | None, fetcher: ResourceFetcher | None, settings: ExtractionSettings | None = None):
		self.document = document
		self.fetcher = fetcher
		self.settings = settings or ExtractionSettings()
		self._sheet_texts: dict[str, str | None] = {}

	async def resolve_fonts(self, roots: list[StructureNode], style_registry: StyleRegistry) -> dict[str, FontFaceDescriptor]:
		if self.document is None:
			return {}

		font_faces = await self.discover_font_faces()
		logger.debug(f'Found {len(font_faces)} font faces')
		if not font_faces:
			return {}

		used_families = collect_used_font_families(roots, style_registry)
		used_fonts = filter_used_fonts(font_faces, used_families)
		logger.debug(f'Fonts to embed: {len(used_fonts)} of {len(font_faces)} (used families: {sorted(used_families)})')
		if not used_fonts or self.fetcher is None:
			return {}

		semaphore = asyncio.Semaphore(self.settings.max_concurrent_fetches)
		results = await asyncio.gather(*(self._embed(descriptor, semaphore) for descriptor in used_fonts.values()))
		return {descriptor.key: descriptor for descriptor in results if descriptor is not None}

	async def discover_font_faces(self) -> dict[str, FontFaceDescriptor]:
		"""Сначала правила таблиц стилей (с именами семейств), затем шрифты из сетевой телеметрии."""
		assert self.document is not None
		font_faces: dict[str, FontFaceDescriptor] = {}

		for sheet in self.document.style_sheets():
			for descriptor in await self._sheet_font_faces(sheet):
				font_faces[descriptor.key] = descriptor

		known_urls = {descriptor.source_url for descriptor in font_faces.values()}
		for url in self.document.resource_urls():
			if not FONT_URL_RE.search(url):
				continue
			absolute_url = urljoin(self.document.base_url, url) if self.document.base_url else url
			if absolute_url in known_urls:
				continue
			known_urls.add(absolute_url)

			descriptor = await self._network_descriptor(absolute_url)
			font_faces[descriptor.key] = descriptor

		return font_faces

	async def _sheet_font_faces(self, sheet: StyleSheetHandle) -> list[FontFaceDescriptor]:
		base_url = sheet.href or (self.document.base_url if self.document else '')
		try:
			rules = sheet.font_face_rules()
		except StylesheetAccessError:
			if not sheet.href:
				return []
			try:
				css_text = await self._fetch_sheet_text(sheet.href)
			except StylesheetUnreadable as e:
				logger.debug(str(e))
				return []
			logger.debug(f'Parsed cross-origin stylesheet {sheet.href}')
			return parse_font_faces_from_text(css_text, base_url)
		except Exception as e:
			# Ошибка чтения изолируется в пределах одной таблицы
			logger.debug(str(StylesheetUnreadable(sheet.href, f'{type(e).__name__}: {e}')))
			return []

		descriptors = []
		for rule in rules:
			descriptor = descriptor_from_rule(rule, base_url)
			if descriptor is None:
				logger.debug(f'Skipping @font-face without family or font url in {sheet.href}')
				continue
			descriptors.append(descriptor)
		return descriptors

	async def _network_descriptor(self, url: str) -> FontFaceDescriptor:
		"""Шрифт, загруженный скриптом: ищем его семейство в тексте таблиц стилей."""
		path_match = _NETWORK_FAMILY_RE.search(url)
		guessed_family = re.sub(r'[-_]', ' ', path_match.group(1)) if path_match else 'Unknown'
		descriptor = FontFaceDescriptor(family=guessed_family, source_url=url, format=detect_font_format(url), provisional=True)

		file_name = url.rsplit('/', 1)[-1]
		assert self.document is not None
		for sheet in self.document.style_sheets():
			if not sheet.href:
				continue
			try:
				css_text = await self._fetch_sheet_text(sheet.href)
			except StylesheetUnreadable:
				continue
			for match in _FONT_FACE_BLOCK_RE.finditer(css_text):
				block = match.group(1)
				if url not in block and file_name not in block:
					continue
				family_match = _FAMILY_RE.search(block)
				if family_match:
					descriptor.family = family_match.group(1).strip()
					descriptor.weight = _block_field(_WEIGHT_RE, block)
					descriptor.style = _block_field(_STYLE_RE, block)
					descriptor.provisional = False
					logger.debug(f'Found family for network font: {descriptor.family} {url}')
					return descriptor

		return descriptor

	async def _fetch_sheet_text(self, href: str) -> str:
		if href in self._sheet_texts:
			cached = self._sheet_texts[href]
			if cached is None:
				raise StylesheetUnreadable(href)
			return cached

		if self.fetcher is None:
			self._sheet_texts[href] = None
			raise StylesheetUnreadable(href, 'no fetcher configured')
		try:
			data = await asyncio.wait_for(self.fetcher.fetch(href), timeout=self.settings.fetch_timeout)
		except Exception as e:
			self._sheet_texts[href] = None
			raise StylesheetUnreadable(href, f'{type(e).__name__}: {e}') from e

		css_text = data.decode('utf-8', errors='replace')
		self._sheet_texts[href] = css_text
		return css_text

	async def _embed(self, descriptor: FontFaceDescriptor, semaphore: asyncio.Semaphore) -> FontFaceDescriptor | None:
		try:
			async with semaphore:
				descriptor.payload = await self._fetch_font(descriptor.source_url, descriptor.format)
		except FontFetchFailed as e:
			logger.warning(f'⚠️ {e}')
			return None
		logger.debug(f'Embedded font {descriptor.family} ({descriptor.weight} {descriptor.style})')
		return descriptor

	async def _fetch_font(self, url: str, font_format: str) -> str:
		assert self.fetcher is not None
		try:
			data = await asyncio.wait_for(self.fetcher.fetch(url), timeout=self.settings.fetch_timeout)
		except asyncio.TimeoutError as e:
			raise FontFetchFailed(url, f'timed out after {self.settings.fetch_timeout}s') from e
		except Exception as e:
			raise FontFetchFailed(url, f'{type(e).__name__}: {e}') from e
		if not data:
			raise FontFetchFailed(url, 'empty response')
		return to_data_url(data, font_format)
