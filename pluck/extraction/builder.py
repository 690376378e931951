"""
Рекурсивный обход замороженного снимка и построение канонического дерева структуры.

@dev все запросы стилей идут к живому узлу через ExportContext, клон вычисленных стилей не имеет
"""

import logging
import re
from collections.abc import Mapping
from urllib.parse import urljoin

from pluck.exceptions import ChildSkipped, ExtractionFailed
from pluck.extraction.colors import normalize_color
from pluck.extraction.context import ExportContext
from pluck.extraction.models import (
	BoxModel,
	ElementNode,
	FrozenElement,
	FrozenText,
	IconInfo,
	LiveNode,
	NodeAttributes,
	PseudoDecoration,
	RawMarkupNode,
	StructureNode,
	StyleRecord,
	TextLeaf,
)
from pluck.extraction.serializer.html_serializer import FrozenMarkupSerializer
from pluck.extraction.styles import capture_hover_styles, compute_node_styles
from pluck.extraction.visibility import is_element_visible

logger = logging.getLogger(__name__)

# Интерактивные элементы, для которых имеет смысл дельта :hover
INTERACTIVE_TAGS = frozenset({'a', 'button', 'input', 'select', 'textarea'})

HREF_TAGS = frozenset({'a', 'area'})
SRC_TAGS = frozenset({'img', 'video', 'audio', 'source', 'iframe', 'embed', 'track', 'input'})
ALT_TAGS = frozenset({'img', 'area', 'input'})
FORM_FIELD_TAGS = frozenset({'input', 'textarea'})
DEFAULT_TYPES = {'input': 'text', 'button': 'submit'}

ICON_FONT_KEYWORDS = ('fluent', 'material', 'fontawesome', 'icon')
ICON_CLASSES = ('material-icons', 'material-symbols-outlined')
ABSENT_PSEUDO_CONTENT = frozenset({'', 'none', 'normal'})
TRANSPARENT_FILLS = frozenset({'transparent', 'none'})

_QUOTES_RE = re.compile(r'^["\']|["\']$')


class StructureBuilder:
	"""Строит StructureNode из замороженного узла, используя живой двойник для стилей.

	Один экземпляр на экспорт: всё изменяемое состояние живёт в ExportContext.
	"""

	def __init__(self, context: ExportContext):
		self.context = context
		self.settings = context.settings
		self._svg_serializer = FrozenMarkupSerializer()

	def build_root(self, frozen: FrozenElement) -> ElementNode | RawMarkupNode | None:
		"""Построить корень выделения. Ошибка чтения стилей корня прерывает весь экспорт."""
		try:
			return self.build(frozen, is_root=True)
		except ChildSkipped as e:
			raise ExtractionFailed(f'Could not read computed style of <{frozen.tag_name.lower()}>: {e}', tag=frozen.tag_name.lower()) from e

	def build(self, frozen: FrozenElement, is_root: bool = False) -> ElementNode | RawMarkupNode | None:
		tag = frozen.tag_name.lower()
		live = self.context.live_for(frozen)
		if live is None:
			raise ChildSkipped('snapshot node has no live counterpart', tag=tag)

		computed, box = self._query_style(live, tag)

		if not is_element_visible(computed, box, self.settings.hidden_box_threshold):
			logger.debug(f'Skipping hidden <{tag}>')
			return None

		if tag == 'svg':
			return self._build_vector_graphic(frozen, computed)

		might_be_icon = self._might_be_icon(frozen, computed)

		# Текст клона заморожен в момент выделения - читаем его напрямую
		text_runs: list[str] = []
		for child in frozen.children:
			if isinstance(child, FrozenText):
				text = self._text_run(child, might_be_icon)
				if text:
					text_runs.append(text)
		text_content = ('' if might_be_icon else ' ').join(text_runs)

		node = ElementNode(tag=tag)
		is_leaf = not frozen.element_children() and not frozen.shadow_children
		if text_content and is_leaf:
			node.text = text_content

		if might_be_icon and not node.text:
			icon_text = frozen.text_content().strip()
			if 0 < len(icon_text) <= self.settings.icon_text_limit:
				node.text = icon_text

		try:
			shared, inline = compute_node_styles(live, tag, computed, self.context, is_root=is_root)
		except Exception as e:
			raise ChildSkipped(f'style computation failed: {e}', tag=tag) from e

		uses_icon_font = self._uses_icon_font(frozen, computed)
		node.pseudo = self._extract_pseudo(live, tag, uses_icon_font)
		if node.pseudo is not None:
			if uses_icon_font or not text_content:
				node.text = node.pseudo.content
				node.pseudo.from_pseudo = True
			self._merge_pseudo_background(shared, node.pseudo)

		if shared:
			node.style_ref = self.context.style_registry.intern(shared)
			if tag in INTERACTIVE_TAGS:
				self.context.hover_registry.register(node.style_ref, capture_hover_styles(live, computed, self.context))
		node.inline_style = inline or None

		node.children = self._build_children(frozen, include_text=not is_leaf, keep_whitespace=might_be_icon)
		node.attributes = self._collect_attributes(frozen, tag)
		node.icon = self._detect_icon(frozen, computed, text_content or node.text)

		return node

	# ========== Children ==========

	def _build_children(self, frozen: FrozenElement, include_text: bool, keep_whitespace: bool = False) -> list[StructureNode]:
		ordered: list[StructureNode] = []

		# Содержимое shadow root отрисовывается раньше обычных потомков
		for shadow_child in frozen.shadow_children or []:
			child_node = self._build_child(shadow_child)
			if child_node is not None:
				ordered.append(child_node)

		for child in frozen.children:
			if isinstance(child, FrozenText):
				if not include_text:
					continue
				text = self._text_run(child, keep_whitespace)
				if text:
					ordered.append(TextLeaf(content=text))
				continue

			child_node = self._build_child(child)
			if child_node is None or self._is_empty_wrapper(child_node):
				continue
			ordered.append(child_node)

		return ordered

	@staticmethod
	def _text_run(text: FrozenText, keep_whitespace: bool) -> str:
		# Иконки могут быть одним символом Unicode, пробелы у них не трогаем
		if keep_whitespace:
			return text.content
		# Переносы и отступы исходного HTML схлопываются в один пробел
		return ' '.join(text.content.split())

	def _build_child(self, frozen: FrozenElement) -> ElementNode | RawMarkupNode | None:
		try:
			return self.build(frozen)
		except ChildSkipped as e:
			logger.debug(f'Skipped <{e.tag or frozen.tag_name.lower()}>: {e}')
			return None

	def _is_empty_wrapper(self, node: StructureNode) -> bool:
		"""Пустой <span> без текста, детей, картинки и фона - обычно невидимый оверлей."""
		if not self.settings.prune_empty_wrappers or not isinstance(node, ElementNode):
			return False
		if node.tag != 'span':
			return False
		has_pseudo_background = node.pseudo is not None and node.pseudo.background is not None
		shared = self.context.style_registry.get(node.style_ref) if node.style_ref else None
		has_own_background = bool(shared) and any(prop in shared for prop in ('background-color', 'background-image'))
		return not node.text and not node.children and not node.attributes.src and not has_pseudo_background and not has_own_background

	# ========== Vector graphics ==========

	def _build_vector_graphic(self, frozen: FrozenElement, computed: Mapping[str, str]) -> RawMarkupNode | None:
		if self.settings.prune_decorative_svgs and self._is_decorative_circle(frozen):
			logger.debug('Skipping decorative circle outline <svg>')
			return None

		svg = frozen.without_markers(self.settings.marker_classes, self.settings.marker_attributes)

		existing_style = svg.attributes.get('style', '').strip()
		if existing_style and not existing_style.endswith(';'):
			existing_style += ';'
		additions: list[str] = []
		width = computed.get('width', '')
		height = computed.get('height', '')
		fill = computed.get('fill', '')
		if width and width != 'auto' and 'width' not in existing_style:
			additions.append(f'width: {width};')
		if height and height != 'auto' and 'height' not in existing_style:
			additions.append(f'height: {height};')
		if fill and fill != 'none' and 'fill' not in existing_style:
			additions.append(f'fill: {fill};')
		style = ' '.join(part for part in [existing_style, *additions] if part)
		if style:
			svg.attributes['style'] = style

		return RawMarkupNode(markup=self._svg_serializer.serialize(svg))

	@staticmethod
	def _is_decorative_circle(frozen: FrozenElement) -> bool:
		"""Только круги с прозрачной заливкой и ни одного path - декоративное кольцо аватара."""
		circles = []
		for descendant in frozen.iter_descendants():
			tag = descendant.tag_name.lower()
			if tag == 'path':
				return False
			if tag == 'circle':
				circles.append(descendant)
		return bool(circles) and all(circle.attributes.get('fill') in TRANSPARENT_FILLS for circle in circles)

	# ========== Style queries ==========

	def _query_style(self, live: LiveNode, tag: str) -> tuple[Mapping[str, str], BoxModel]:
		try:
			return live.computed_style(), live.box_model()
		except Exception as e:
			raise ChildSkipped(f'{type(e).__name__}: {e}', tag=tag) from e

	def _extract_pseudo(self, live: LiveNode, tag: str, uses_icon_font: bool) -> PseudoDecoration | None:
		"""Содержимое ::before/::after, которое выглядит как буква аватара или глиф иконки."""
		max_length = self.settings.icon_pseudo_content if uses_icon_font else self.settings.short_pseudo_content

		for pseudo in ('::before', '::after'):
			try:
				pseudo_style = live.computed_style(pseudo)
			except Exception as e:
				raise ChildSkipped(f'{pseudo} style unavailable: {e}', tag=tag) from e

			content = (pseudo_style.get('content') or '').strip()
			if content in ABSENT_PSEUDO_CONTENT:
				continue
			clean = _QUOTES_RE.sub('', content)
			if not clean or len(clean) > max_length:
				continue

			decoration = PseudoDecoration(content=clean, source=pseudo)
			background = pseudo_style.get('background-color', '')
			if background and background not in ('transparent', 'rgba(0, 0, 0, 0)'):
				decoration.background = normalize_color(background)
			radius = pseudo_style.get('border-radius', '')
			if radius and radius != '0px':
				decoration.radius = radius
			color = pseudo_style.get('color', '')
			if color:
				decoration.color = normalize_color(color)
			width = pseudo_style.get('width', '')
			if width and width != 'auto':
				decoration.width = width
			height = pseudo_style.get('height', '')
			if height and height != 'auto':
				decoration.height = height
			return decoration

		return None

	@staticmethod
	def _merge_pseudo_background(shared: StyleRecord, pseudo: PseudoDecoration) -> None:
		# Фон псевдоэлемента переносится в общий стиль до интернирования
		if pseudo.background and shared.get('background-color', 'transparent') == 'transparent':
			shared['background-color'] = pseudo.background

	# ========== Icons ==========

	def _own_classes(self, frozen: FrozenElement) -> list[str]:
		return [name for name in frozen.class_list if name not in self.settings.marker_classes]

	def _might_be_icon(self, frozen: FrozenElement, computed: Mapping[str, str]) -> bool:
		font_family = computed.get('font-family', '').lower()
		if any(keyword in font_family for keyword in ICON_FONT_KEYWORDS):
			return True
		classes = self._own_classes(frozen)
		return any(icon_class in classes for icon_class in ICON_CLASSES) or frozen.tag_name.lower() == 'i'

	def _uses_icon_font(self, frozen: FrozenElement, computed: Mapping[str, str]) -> bool:
		font_family = computed.get('font-family', '').lower()
		if any(keyword in font_family for keyword in ('fluent', 'material', 'fontawesome', 'fa ')):
			return True
		classes = self._own_classes(frozen)
		return any(icon_class in classes for icon_class in ICON_CLASSES)

	def _detect_icon(self, frozen: FrozenElement, computed: Mapping[str, str], text: str | None) -> IconInfo | None:
		if not text:
			return None

		font_family = computed.get('font-family', '').lower()
		is_icon_font = any(keyword in font_family for keyword in ('material', 'symbol', 'icon', 'fontawesome', 'fa ', 'fa-'))
		class_string = ' '.join(self._own_classes(frozen)).lower()
		has_icon_class = any(keyword in class_string for keyword in ('material', 'icon', 'fa-', 'fa '))
		if not (is_icon_font or has_icon_class):
			return None

		if 'symbol' in font_family:
			return IconInfo(font='material-symbols')
		if 'material' in font_family or 'material' in class_string:
			return IconInfo(font='material-icons')
		if 'fontawesome' in font_family or any(name == 'fa' or name.startswith('fa-') for name in class_string.split()):
			return IconInfo(font='fontawesome')
		first_family = font_family.split(',')[0].strip().strip('"\'')
		return IconInfo(font=first_family)

	# ========== Attributes ==========

	def _absolute(self, url: str) -> str:
		if not self.context.base_url:
			return url
		return urljoin(self.context.base_url, url)

	def _collect_attributes(self, frozen: FrozenElement, tag: str) -> NodeAttributes:
		attributes = NodeAttributes()

		href = frozen.get('href')
		if href and tag in HREF_TAGS:
			attributes.href = self._absolute(href)
		src = frozen.get('src')
		if src and tag in SRC_TAGS:
			attributes.src = self._absolute(src)
		if tag in ALT_TAGS:
			attributes.alt = frozen.get('alt') or None

		aria_label = frozen.attributes.get('aria-label') or None
		attributes.aria_label = aria_label

		placeholder = frozen.get('placeholder')
		if placeholder:
			attributes.placeholder = placeholder
		elif tag in FORM_FIELD_TAGS and aria_label:
			attributes.placeholder = aria_label

		if tag in DEFAULT_TYPES:
			attributes.type = (frozen.get('type') or DEFAULT_TYPES[tag]).lower()
		if tag in FORM_FIELD_TAGS:
			attributes.value = frozen.get('value') or None

		return attributes
