from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

# Упорядоченное отображение CSS-свойство -> значение
StyleRecord = dict[str, str]


# ========== Frozen snapshot ==========


@dataclass(slots=True)
class BoxEdges:
	top: float = 0.0
	right: float = 0.0
	bottom: float = 0.0
	left: float = 0.0


@dataclass(slots=True)
class BoxModel:
	"""Border-box geometry of a rendered element (offsetWidth/offsetHeight semantics)."""

	width: float
	height: float
	margin: BoxEdges = field(default_factory=BoxEdges)
	border: BoxEdges = field(default_factory=BoxEdges)
	padding: BoxEdges = field(default_factory=BoxEdges)


@dataclass(slots=True)
class FrozenText:
	content: str


@dataclass(slots=True)
class FrozenElement:
	"""
	Detached deep copy of an element taken at selection time.

	@dev has no computed style, every style query goes through the live counterpart
	"""

	tag_name: str
	attributes: dict[str, str] = field(default_factory=dict)
	children: list['FrozenElement | FrozenText'] = field(default_factory=list)
	shadow_children: list['FrozenElement'] | None = None
	properties: dict[str, str] = field(default_factory=dict)
	"""Значения DOM-свойств, отличающиеся от атрибутов (например, текущий value поля ввода)"""

	@property
	def class_list(self) -> list[str]:
		return self.attributes.get('class', '').split()

	def element_children(self) -> list['FrozenElement']:
		return [child for child in self.children if isinstance(child, FrozenElement)]

	def get(self, name: str) -> str | None:
		"""Свойство DOM, а при его отсутствии - одноимённый атрибут."""
		if name in self.properties:
			return self.properties[name]
		return self.attributes.get(name)

	def iter_descendants(self) -> Iterator['FrozenElement']:
		for child in self.element_children():
			yield child
			yield from child.iter_descendants()

	def text_content(self) -> str:
		parts: list[str] = []
		for child in self.children:
			if isinstance(child, FrozenText):
				parts.append(child.content)
			else:
				parts.append(child.text_content())
		return ''.join(parts)

	def without_markers(self, marker_classes: tuple[str, ...], marker_attributes: tuple[str, ...] = ()) -> 'FrozenElement':
		"""Глубокая копия без классов и атрибутов, которыми хост помечает выделение."""
		attributes = {name: value for name, value in self.attributes.items() if name not in marker_attributes}
		if 'class' in attributes:
			remaining = [name for name in attributes['class'].split() if name not in marker_classes]
			if remaining:
				attributes['class'] = ' '.join(remaining)
			else:
				del attributes['class']

		children: list[FrozenElement | FrozenText] = []
		for child in self.children:
			if isinstance(child, FrozenElement):
				children.append(child.without_markers(marker_classes, marker_attributes))
			else:
				children.append(FrozenText(child.content))

		shadow_children = None
		if self.shadow_children is not None:
			shadow_children = [child.without_markers(marker_classes, marker_attributes) for child in self.shadow_children]

		return FrozenElement(
			tag_name=self.tag_name,
			attributes=attributes,
			children=children,
			shadow_children=shadow_children,
			properties=dict(self.properties),
		)


# ========== Live document interfaces ==========


@runtime_checkable
class LiveNode(Protocol):
	"""Protocol для живого узла, который отрисован в документе."""

	tag_name: str
	attributes: dict[str, str]

	def clone_frozen(self) -> FrozenElement: ...

	def computed_style(self, pseudo: str | None = None) -> Mapping[str, str]:
		"""pseudo: None, '::before' или '::after'."""
		...

	def box_model(self) -> BoxModel: ...

	def element_children(self) -> list['LiveNode']: ...

	def shadow_children(self) -> list['LiveNode'] | None: ...

	def parent_element(self) -> 'LiveNode | None':
		"""Родитель, а на границе shadow root - его хост."""
		...


@dataclass(slots=True)
class FontFaceRule:
	"""Declared @font-face rule as exposed by an accessible stylesheet."""

	family: str
	src: str
	weight: str = 'normal'
	style: str = 'normal'


class StyleSheetHandle(Protocol):
	href: str | None

	def font_face_rules(self) -> list[FontFaceRule]:
		"""Raises StylesheetAccessError when the sheet is cross-origin."""
		...


@runtime_checkable
class LiveDocument(Protocol):
	base_url: str

	def style_sheets(self) -> list[StyleSheetHandle]: ...

	def resource_urls(self) -> list[str]:
		"""URLs from resource-load telemetry (performance entries)."""
		...


@runtime_checkable
class ResourceFetcher(Protocol):
	async def fetch(self, url: str) -> bytes:
		"""Raises on any failure."""
		...


# ========== Structure tree ==========


@dataclass(slots=True)
class TextLeaf:
	content: str


@dataclass(slots=True)
class RawMarkupNode:
	"""Opaque vector graphic, never recursed into."""

	markup: str
	tag: str = 'svg'


@dataclass(slots=True)
class NodeAttributes:
	href: str | None = None
	src: str | None = None
	alt: str | None = None
	type: str | None = None
	value: str | None = None
	aria_label: str | None = None
	placeholder: str | None = None

	def items(self) -> list[tuple[str, str]]:
		"""Непустые атрибуты в фиксированном порядке вывода."""
		ordered = [
			('href', self.href),
			('src', self.src),
			('alt', self.alt),
			('type', self.type),
			('placeholder', self.placeholder),
			('value', self.value),
			('aria-label', self.aria_label),
		]
		return [(name, value) for name, value in ordered if value]


@dataclass(slots=True)
class IconInfo:
	font: str
	"""'material-symbols', 'material-icons', 'fontawesome' или первое семейство шрифта"""


@dataclass(slots=True)
class PseudoDecoration:
	"""Visual facts harvested from ::before/::after generated content."""

	content: str
	source: str
	background: str | None = None
	radius: str | None = None
	color: str | None = None
	width: str | None = None
	height: str | None = None
	from_pseudo: bool = False
	"""True когда текст узла взят из псевдоэлемента"""


@dataclass(slots=True)
class ElementNode:
	tag: str
	style_ref: str | None = None
	inline_style: StyleRecord | None = None
	text: str | None = None
	attributes: NodeAttributes = field(default_factory=NodeAttributes)
	icon: IconInfo | None = None
	pseudo: PseudoDecoration | None = None
	children: list['StructureNode'] = field(default_factory=list)

	@property
	def is_leaf(self) -> bool:
		return not self.children and bool(self.text)

	def element_children(self) -> list['ElementNode | RawMarkupNode']:
		return [child for child in self.children if not isinstance(child, TextLeaf)]


StructureNode = ElementNode | TextLeaf | RawMarkupNode


@dataclass(slots=True)
class FontFaceDescriptor:
	family: str
	source_url: str
	format: str
	weight: str = 'normal'
	style: str = 'normal'
	payload: str | None = None
	"""data: URL with the embedded font binary"""
	provisional: bool = False
	"""Обнаружен только по сетевой телеметрии, семейство не подтверждено"""

	@property
	def key(self) -> str:
		if self.provisional:
			return f'network-{self.source_url}'
		return f'{self.family}-{self.weight}-{self.style}'


# ========== Result ==========


class ExportResult(BaseModel):
	"""Три текстовых представления одного экспорта."""

	compact_notation: str
	markup: str
	stylesheet: str
	icon_fonts: list[str] = Field(default_factory=list)
	web_fonts: list[str] = Field(default_factory=list)
	embedded_fonts: list[str] = Field(default_factory=list)

	@property
	def is_empty(self) -> bool:
		return not self.markup.strip()
