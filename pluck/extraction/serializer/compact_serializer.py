# @file purpose: Компактная построчная нотация дерева структуры для LLM

import re

from pluck.extraction.models import ElementNode, RawMarkupNode, StructureNode, StyleRecord, TextLeaf
from pluck.extraction.registry import HoverRegistry, StyleRegistry

_LINE_BREAKS = re.compile(r'\r\n|\r|\n')

HEADER = (
	'# Component Structure (TOON format)\n'
	'# Paste to an LLM: "Replicate this component in React/Vue/Tailwind"\n'
	'# Format: tag.class[inline-style] (attrs) "text" { children }\n'
)


def declarations(record: StyleRecord) -> str:
	return '; '.join(f'{prop}: {value}' for prop, value in record.items())


def quoted(value: str) -> str:
	"""Строка в кавычках, которая всегда остаётся в пределах одной строки нотации."""
	escaped = value.replace('\\', '\\\\').replace('"', '\\"')
	escaped = _LINE_BREAKS.sub(r'\\n', escaped)
	return f'"{escaped}"'


class CompactSerializer:
	"""Одна строка на узел, вложенность через { } и два пробела отступа на уровень."""

	def __init__(self, indent: str = '  '):
		self.indent = indent

	def serialize(self, node: StructureNode, depth: int = 0) -> str:
		pad = self.indent * depth

		if isinstance(node, RawMarkupNode):
			return f'{pad}SVG: {_LINE_BREAKS.sub(" ", node.markup)}'
		if isinstance(node, TextLeaf):
			return f'{pad}{quoted(node.content)}'
		if not isinstance(node, ElementNode):
			raise TypeError(f'Unknown structure node: {type(node).__name__}')

		line = f'{pad}{node.tag}'
		if node.style_ref:
			line += f'.{node.style_ref}'
		if node.inline_style:
			line += f'[{declarations(node.inline_style)}]'

		attrs = [f'{name}={quoted(value)}' for name, value in node.attributes.items()]
		if node.icon is not None:
			attrs.append('icon')
		if attrs:
			line += f' ({" ".join(attrs)})'

		if node.text:
			line += f' {quoted(node.text)}'

		if node.children:
			lines = [line + ' {']
			for child in node.children:
				lines.append(self.serialize(child, depth + 1))
			lines.append(f'{pad}}}')
			return '\n'.join(lines)

		return line


def to_compact_notation(roots: list[StructureNode], style_registry: StyleRegistry, hover_registry: HoverRegistry) -> str:
	sections = [HEADER, '## Styles']
	for name, record in style_registry.items():
		sections.append(f'.{name}: {declarations(record)}')

	if len(hover_registry):
		sections.append('')
		sections.append('## Hover Styles')
		for name, record in hover_registry.items():
			sections.append(f'.{name}:hover: {declarations(record)}')

	sections.append('')
	sections.append('## Structure')
	serializer = CompactSerializer()
	sections.append('\n\n'.join(serializer.serialize(root) for root in roots))

	return '\n'.join(sections) + '\n'
