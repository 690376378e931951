# @file purpose: Таблица стилей из реестров общих и :hover стилей

import re
from collections.abc import Iterable

from pluck.extraction.fonts import generate_font_face_css
from pluck.extraction.models import FontFaceDescriptor, StyleRecord
from pluck.extraction.registry import HoverRegistry, StyleRegistry

_OVERFLOW_CLIP_RE = re.compile(r'\b(overflow(?:-x|-y)?):\s*clip\b')
_BACKDROP_RE = re.compile(r'(?<!-webkit-)backdrop-filter:\s*([^;]+)')


def sanitize_css(css: str) -> str:
	"""Заменить значения, которые поддерживаются не везде."""
	result = _OVERFLOW_CLIP_RE.sub(r'\1: hidden', css)

	# backdrop-filter без префикса не работает в Safari
	if 'backdrop-filter:' in result and '-webkit-backdrop-filter:' not in result:
		match = _BACKDROP_RE.search(result)
		if match:
			value = match.group(1).strip()
			result = result[: match.start()] + f'backdrop-filter: {value}; -webkit-backdrop-filter: {value}' + result[match.end() :]

	return result


def rule_body(record: StyleRecord) -> str:
	return sanitize_css('; '.join(f'{prop}: {value}' for prop, value in record.items()))


def to_stylesheet(style_registry: StyleRegistry, hover_registry: HoverRegistry, fonts: Iterable[FontFaceDescriptor] = ()) -> str:
	"""@font-face со встроенными шрифтами, затем .name и .name:hover правила в порядке выдачи имён."""
	rules = [f'.{name} {{ {rule_body(record)}; }}\n' for name, record in style_registry.items()]
	rules.extend(f'.{name}:hover {{ {rule_body(record)}; }}\n' for name, record in hover_registry.items())
	return generate_font_face_css(fonts) + ''.join(rules)
