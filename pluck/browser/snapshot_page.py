"""
Живой документ, восстановленный из DOMSnapshot (Chrome DevTools Protocol).

Снимок содержит дерево узлов, вычисленные стили каждого отрисованного узла и его
геометрию на один кадр. Элементы реализуют протокол LiveNode, страница - LiveDocument.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from cdp_use.cdp.domsnapshot.commands import CaptureSnapshotReturns
from cdp_use.cdp.domsnapshot.types import LayoutTreeSnapshot, NodeTreeSnapshot, RareStringData

from pluck.exceptions import SnapshotFormatError, StylesheetAccessError
from pluck.extraction.defaults import SHARED_PROPS
from pluck.extraction.models import BoxEdges, BoxModel, FontFaceRule, FrozenElement, FrozenText
from pluck.extraction.visibility import parse_px

logger = logging.getLogger(__name__)

ELEMENT_NODE = 1
TEXT_NODE = 3
DOCUMENT_FRAGMENT_NODE = 11

# Свойства Firefox и Safari: Blink их не знает и молча выбрасывает из computedStyles
BLINK_UNKNOWN_PROPS = frozenset({'-moz-osx-font-smoothing', '-webkit-backdrop-filter'})

# Стили, которые нужны извлечению: общие свойства плюс видимость, геометрия и псевдоэлементы
CAPTURED_STYLE_NAMES: tuple[str, ...] = tuple(
	dict.fromkeys(
		[
			*(prop for prop in SHARED_PROPS if prop not in BLINK_UNKNOWN_PROPS),
			'visibility',
			'clip',
			'clip-path',
			'width',
			'height',
			'fill',
			'content',
			'margin-top',
			'margin-right',
			'margin-bottom',
			'margin-left',
			'border-top-width',
			'border-right-width',
			'border-bottom-width',
			'border-left-width',
		]
	)
)

# Узел без записи в дереве макета не отрисован
UNRENDERED_STYLE: Mapping[str, str] = {'display': 'none'}

_PSEUDO_NAMES = {'before': '::before', 'after': '::after'}


def _rare_string_lookup(strings: list[str], data: RareStringData | None) -> dict[int, str]:
	if not data:
		return {}
	return {node_index: strings[value_index] for node_index, value_index in zip(data['index'], data['value']) if 0 <= value_index < len(strings)}


def _string_at(strings: list[str], index: int) -> str:
	return strings[index] if 0 <= index < len(strings) else ''


def _edges(style: Mapping[str, str], template: str) -> BoxEdges:
	return BoxEdges(
		top=parse_px(style.get(template.format('top'))) or 0.0,
		right=parse_px(style.get(template.format('right'))) or 0.0,
		bottom=parse_px(style.get(template.format('bottom'))) or 0.0,
		left=parse_px(style.get(template.format('left'))) or 0.0,
	)


@dataclass(eq=False)
class SnapshotElement:
	"""Элемент снимка. Сравнивается по идентичности, как узел DOM."""

	index: int
	tag_name: str
	attributes: dict[str, str] = field(default_factory=dict)
	style: Mapping[str, str] = field(default_factory=lambda: UNRENDERED_STYLE)
	rect: tuple[float, float] | None = None
	input_value: str | None = None
	parent: 'SnapshotElement | None' = field(default=None, repr=False)
	pseudo_styles: dict[str, Mapping[str, str]] = field(default_factory=dict, repr=False)
	# Дети в порядке документа: элементы и текст
	content: list['SnapshotElement | str'] = field(default_factory=list, repr=False)
	shadow_content: list['SnapshotElement | str'] | None = field(default=None, repr=False)

	def computed_style(self, pseudo: str | None = None) -> Mapping[str, str]:
		if pseudo is None:
			return self.style
		# :hover-состояние в снимок не попадает
		return self.pseudo_styles.get(pseudo, {})

	def box_model(self) -> BoxModel:
		width, height = self.rect or (0.0, 0.0)
		return BoxModel(
			width=width,
			height=height,
			margin=_edges(self.style, 'margin-{}'),
			border=_edges(self.style, 'border-{}-width'),
			padding=_edges(self.style, 'padding-{}'),
		)

	def element_children(self) -> list['SnapshotElement']:
		return [child for child in self.content if isinstance(child, SnapshotElement)]

	def shadow_children(self) -> list['SnapshotElement'] | None:
		if self.shadow_content is None:
			return None
		return [child for child in self.shadow_content if isinstance(child, SnapshotElement)]

	def parent_element(self) -> 'SnapshotElement | None':
		return self.parent

	def clone_frozen(self) -> FrozenElement:
		frozen = FrozenElement(tag_name=self.tag_name, attributes=dict(self.attributes))
		if self.input_value is not None:
			frozen.properties['value'] = self.input_value
		frozen.children = [FrozenText(child) if isinstance(child, str) else child.clone_frozen() for child in self.content]
		if self.shadow_content is not None:
			frozen.shadow_children = [child.clone_frozen() for child in self.shadow_content if isinstance(child, SnapshotElement)]
		return frozen


@dataclass
class SnapshotStyleSheet:
	href: str | None
	rules: list[FontFaceRule] | None = None
	"""None когда правила недоступны (cross-origin)"""

	def font_face_rules(self) -> list[FontFaceRule]:
		if self.rules is None:
			raise StylesheetAccessError(self.href)
		return list(self.rules)


class SnapshotPage:
	"""Документ, собранный из ответа DOMSnapshot.captureSnapshot.

	Вычисленные стили берутся из layout-дерева в порядке CAPTURED_STYLE_NAMES,
	поэтому снимок должен быть сделан с тем же списком computedStyles.
	"""

	def __init__(
		self,
		base_url: str = '',
		sheets: list[SnapshotStyleSheet] | None = None,
		resources: list[str] | None = None,
	):
		self.base_url = base_url
		self.document_element: SnapshotElement | None = None
		self.elements: list[SnapshotElement] = []
		self._sheets = sheets or []
		self._resources = resources or []

	# ========== LiveDocument ==========

	def style_sheets(self) -> list[SnapshotStyleSheet]:
		return list(self._sheets)

	def resource_urls(self) -> list[str]:
		return list(self._resources)

	# ========== Queries ==========

	def elements_with_attribute(self, name: str, value: str | None = None) -> list[SnapshotElement]:
		return [element for element in self.elements if name in element.attributes and (value is None or element.attributes[name] == value)]

	# ========== Construction ==========

	@classmethod
	def from_snapshot(
		cls,
		snapshot: CaptureSnapshotReturns,
		base_url: str = '',
		style_names: tuple[str, ...] = CAPTURED_STYLE_NAMES,
		sheets: list[SnapshotStyleSheet] | None = None,
		resources: list[str] | None = None,
		pixel_ratio: float = 1.0,
	) -> 'SnapshotPage':
		"""Разобрать основной документ снимка (iframe не поддерживаются)."""
		page = cls(base_url=base_url, sheets=sheets, resources=resources)
		if not snapshot['documents']:
			return page

		strings = snapshot['strings']
		document = snapshot['documents'][0]
		node_tree: NodeTreeSnapshot = document['nodes']
		layout_tree: LayoutTreeSnapshot = document['layout']
		if not page.base_url:
			page.base_url = _string_at(strings, document.get('baseURL', document.get('documentURL', -1)))

		styles_by_node, rects_by_node = cls._parse_layout(strings, layout_tree, style_names, pixel_ratio)

		parent_indexes = node_tree.get('parentIndex', [])
		node_types = node_tree.get('nodeType', [])
		node_names = node_tree.get('nodeName', [])
		node_values = node_tree.get('nodeValue', [])
		attribute_lists = node_tree.get('attributes', [])
		pseudo_types = _rare_string_lookup(strings, node_tree.get('pseudoType'))
		shadow_root_types = _rare_string_lookup(strings, node_tree.get('shadowRootType'))
		input_values = _rare_string_lookup(strings, node_tree.get('inputValue'))

		elements: dict[int, SnapshotElement] = {}
		# Shadow root не элемент: его дети становятся shadow-детьми хоста
		shadow_hosts: dict[int, SnapshotElement] = {}

		for index, node_type in enumerate(node_types):
			parent_index = parent_indexes[index] if index < len(parent_indexes) else -1
			parent = elements.get(parent_index)
			shadow_host = shadow_hosts.get(parent_index)

			if node_type == DOCUMENT_FRAGMENT_NODE:
				host = elements.get(parent_index)
				if host is not None and shadow_root_types.get(index) in ('open', 'closed'):
					host.shadow_content = []
					shadow_hosts[index] = host
				continue

			if node_type == TEXT_NODE:
				text = _string_at(strings, node_values[index]) if index < len(node_values) else ''
				if parent is not None:
					parent.content.append(text)
				elif shadow_host is not None and shadow_host.shadow_content is not None:
					shadow_host.shadow_content.append(text)
				continue

			if node_type != ELEMENT_NODE:
				continue

			pseudo_type = pseudo_types.get(index)
			if pseudo_type is not None:
				pseudo_name = _PSEUDO_NAMES.get(pseudo_type)
				if parent is not None and pseudo_name is not None:
					parent.pseudo_styles[pseudo_name] = styles_by_node.get(index, {})
				continue

			raw_attributes = attribute_lists[index] if index < len(attribute_lists) else []
			attributes = {
				_string_at(strings, raw_attributes[i]): _string_at(strings, raw_attributes[i + 1]) for i in range(0, len(raw_attributes) - 1, 2)
			}
			name = _string_at(strings, node_names[index])
			element = SnapshotElement(
				index=index,
				tag_name=name.lower() if name.isupper() else name,
				attributes=attributes,
				style=styles_by_node.get(index, UNRENDERED_STYLE),
				rect=rects_by_node.get(index),
				input_value=input_values.get(index),
			)

			if parent is not None:
				element.parent = parent
				parent.content.append(element)
			elif shadow_host is not None and shadow_host.shadow_content is not None:
				# Родитель узла внутри shadow root - хост
				element.parent = shadow_host
				shadow_host.shadow_content.append(element)

			elements[index] = element
			page.elements.append(element)
			if page.document_element is None and element.tag_name.lower() == 'html':
				page.document_element = element

		logger.debug(f'Parsed snapshot: {len(page.elements)} elements, {len(styles_by_node)} rendered nodes')
		return page

	@staticmethod
	def _parse_layout(
		strings: list[str],
		layout_tree: LayoutTreeSnapshot,
		style_names: tuple[str, ...],
		pixel_ratio: float,
	) -> tuple[dict[int, dict[str, str]], dict[int, tuple[float, float]]]:
		styles_by_node: dict[int, dict[str, str]] = {}
		rects_by_node: dict[int, tuple[float, float]] = {}

		style_lists = layout_tree.get('styles', [])
		offset_rects = layout_tree.get('offsetRects', [])
		bounds = layout_tree.get('bounds', [])

		for layout_index, node_index in enumerate(layout_tree.get('nodeIndex', [])):
			# Первое вхождение узла (узлы с continuation встречаются несколько раз)
			if node_index in styles_by_node:
				continue

			style_indexes = style_lists[layout_index] if layout_index < len(style_lists) else []
			# Значения сопоставляются с именами по позиции
			if len(style_indexes) != len(style_names):
				raise SnapshotFormatError(expected=len(style_names), received=len(style_indexes))
			styles_by_node[node_index] = {
				name: strings[string_index] for name, string_index in zip(style_names, style_indexes) if 0 <= string_index < len(strings)
			}

			# offsetRects уже в CSS-пикселях, bounds - в пикселях устройства
			if layout_index < len(offset_rects) and len(offset_rects[layout_index]) >= 4:
				rect = offset_rects[layout_index]
				rects_by_node[node_index] = (rect[2], rect[3])
			elif layout_index < len(bounds) and len(bounds[layout_index]) >= 4:
				rect = bounds[layout_index]
				rects_by_node[node_index] = (rect[2] / pixel_ratio, rect[3] / pixel_ratio)

		return styles_by_node, rects_by_node
