# @file purpose: Сериализует дерево структуры и замороженные узлы в HTML

from pluck.extraction.models import ElementNode, FrozenElement, FrozenText, RawMarkupNode, StructureNode, TextLeaf
from pluck.extraction.visibility import parse_px

VOID_ELEMENTS = frozenset(
	{
		'area',
		'base',
		'br',
		'col',
		'embed',
		'hr',
		'img',
		'input',
		'link',
		'meta',
		'param',
		'source',
		'track',
		'wbr',
	}
)

# Поле ввода с нулевой шириной прячет placeholder - растягиваем его
DEGRADED_INPUT_STYLE = 'width: 100%; min-width: 0; flex-grow: 1;'
COLLAPSED_INPUT_WIDTH = 1.0

AVATAR_CENTERING = ('display: flex', 'align-items: center', 'justify-content: center')


def escape_html(text: str) -> str:
	return text.replace('&', '&amp;').replace('>', '&gt;').replace('<', '&lt;')


def escape_attribute(value: str) -> str:
	return value.replace('&', '&amp;').replace('>', '&gt;').replace('<', '&lt;').replace("'", '&#x27;').replace('"', '&quot;')


def icon_class_for(font: str) -> str | None:
	"""CSS-класс, который заставляет текст иконки отрисоваться глифом."""
	font_lower = font.lower()
	if 'symbol' in font_lower:
		return 'material-symbols-outlined'
	if 'material' in font_lower or 'google' in font_lower:
		return 'material-icons'
	if 'fontawesome' in font_lower or 'fa' in font_lower:
		# У Font Awesome свои классы, оригинальные не подменяем
		return None
	return 'material-icons'


class MarkupSerializer:
	"""Сериализует дерево StructureNode в отформатированный HTML-фрагмент.

	Каждый корень выделения становится отдельным корневым элементом. Потомки выводятся
	в том же порядке, что и в компактной нотации: текст и элементы чередуются как в исходнике.
	"""

	def __init__(self, indent: str = '  '):
		self.indent = indent

	def serialize(self, node: StructureNode, depth: int = 0) -> str:
		pad = self.indent * depth

		if isinstance(node, RawMarkupNode):
			return f'{pad}{node.markup}'
		if isinstance(node, TextLeaf):
			return f'{pad}{escape_html(node.content)}'
		if isinstance(node, ElementNode):
			return self._serialize_element(node, depth)
		raise TypeError(f'Unknown structure node: {type(node).__name__}')

	def _serialize_element(self, node: ElementNode, depth: int) -> str:
		pad = self.indent * depth
		tag = node.tag
		attrs = self._class_attribute(node)

		if tag in VOID_ELEMENTS:
			style = self._style_value(node, leaf=False)
			if tag == 'input' and self._has_collapsed_width(node):
				style = DEGRADED_INPUT_STYLE
			if style:
				attrs.append(('style', style))
			attrs.extend(self._void_attributes(node))
			return f'{pad}<{tag}{self._serialize_attributes(attrs)} />'

		if tag == 'textarea':
			style = self._style_value(node, leaf=False)
			if style:
				attrs.append(('style', style))
			placeholder = node.attributes.placeholder or node.attributes.aria_label
			if placeholder:
				attrs.append(('placeholder', placeholder))
			content = node.attributes.value or node.text or ''
			return f'{pad}<{tag}{self._serialize_attributes(attrs)}>{escape_html(content)}</{tag}>'

		style = self._style_value(node, leaf=node.is_leaf)
		if style:
			attrs.append(('style', style))
		if node.attributes.href:
			attrs.append(('href', node.attributes.href))
		if node.attributes.src:
			attrs.append(('src', node.attributes.src))
		if node.attributes.aria_label:
			attrs.append(('aria-label', node.attributes.aria_label))
		opening = f'{pad}<{tag}{self._serialize_attributes(attrs)}>'

		if node.is_leaf:
			return f'{opening}{escape_html(node.text or "")}</{tag}>'

		if not node.children:
			return f'{opening}</{tag}>'

		lines = [opening]
		if node.text:
			lines.append(f'{pad}{self.indent}{escape_html(node.text)}')
		for child in node.children:
			lines.append(self.serialize(child, depth + 1))
		lines.append(f'{pad}</{tag}>')
		return '\n'.join(lines)

	@staticmethod
	def _class_attribute(node: ElementNode) -> list[tuple[str, str]]:
		classes = []
		if node.style_ref:
			classes.append(node.style_ref)
		if node.icon is not None:
			icon_class = icon_class_for(node.icon.font)
			if icon_class:
				classes.append(icon_class)
		return [('class', ' '.join(classes))] if classes else []

	@staticmethod
	def _style_value(node: ElementNode, leaf: bool) -> str:
		"""Inline-размеры плюс оформление из псевдоэлемента."""
		parts = [f'{prop}: {value}' for prop, value in (node.inline_style or {}).items()]

		pseudo = node.pseudo
		if pseudo is not None:
			if pseudo.background:
				parts.append(f'background-color: {pseudo.background}')
			if pseudo.radius:
				parts.append(f'border-radius: {pseudo.radius}')
			if leaf:
				if pseudo.color:
					parts.append(f'color: {pseudo.color}')
				if pseudo.width:
					parts.append(f'width: {pseudo.width}')
				if pseudo.height:
					parts.append(f'height: {pseudo.height}')
				# Буква аватара по центру круга
				if pseudo.from_pseudo and pseudo.background:
					parts.extend(AVATAR_CENTERING)

		return '; '.join(parts)

	@staticmethod
	def _has_collapsed_width(node: ElementNode) -> bool:
		if not node.inline_style:
			return True
		width = parse_px(node.inline_style.get('width'))
		return width is not None and width <= COLLAPSED_INPUT_WIDTH

	@staticmethod
	def _void_attributes(node: ElementNode) -> list[tuple[str, str]]:
		attributes = node.attributes
		result = []
		if attributes.src:
			result.append(('src', attributes.src))
		if attributes.alt:
			result.append(('alt', attributes.alt))
		if attributes.type:
			result.append(('type', attributes.type))
		placeholder = attributes.placeholder or attributes.aria_label
		if placeholder:
			result.append(('placeholder', placeholder))
		if attributes.value:
			result.append(('value', attributes.value))
		return result

	@staticmethod
	def _serialize_attributes(attributes: list[tuple[str, str]]) -> str:
		if not attributes:
			return ''
		return ' ' + ' '.join(f'{name}="{escape_attribute(value)}"' for name, value in attributes)


def to_markup(roots: list[StructureNode]) -> str:
	serializer = MarkupSerializer()
	return '\n\n'.join(serializer.serialize(root) for root in roots)


class FrozenMarkupSerializer:
	"""Сериализует замороженный узел обратно в HTML без изменений.

	Используется для векторной графики, которая переносится в экспорт как есть,
	поэтому сохраняются все атрибуты, включая data-* и href.
	"""

	def serialize(self, node: FrozenElement | FrozenText) -> str:
		if isinstance(node, FrozenText):
			return escape_html(node.content)

		tag_name = node.tag_name.lower() if node.tag_name.isupper() else node.tag_name
		if tag_name == 'script':
			return ''

		parts = [f'<{tag_name}']
		for key, value in node.attributes.items():
			if value is None or value == '':
				parts.append(f' {key}')
			else:
				parts.append(f' {key}="{escape_attribute(value)}"')

		if tag_name in VOID_ELEMENTS:
			parts.append(' />')
			return ''.join(parts)
		parts.append('>')

		# Shadow roots первыми (декларативный shadow DOM)
		if node.shadow_children is not None:
			parts.append('<template shadowrootmode="open">')
			for child in node.shadow_children:
				parts.append(self.serialize(child))
			parts.append('</template>')

		for child in node.children:
			parts.append(self.serialize(child))

		parts.append(f'</{tag_name}>')
		return ''.join(parts)


__all__ = ['MarkupSerializer', 'FrozenMarkupSerializer', 'to_markup', 'icon_class_for']
