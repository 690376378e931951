"""Выбор стратегии размеров узла: фиксированные размеры или подстройка под содержимое."""

from enum import Enum

from pluck.extraction.models import StyleRecord

# Медиа и элементы форм всегда фиксируются по размеру
MEDIA_TAGS = frozenset({'img', 'video', 'canvas', 'svg', 'iframe', 'input', 'textarea', 'select'})

# Типографские и строчные теги растягиваются под текст
FLUID_TAGS = frozenset(
	{
		'a',
		'button',
		'span',
		'label',
		'p',
		'h1',
		'h2',
		'h3',
		'h4',
		'h5',
		'h6',
		'summary',
		'cite',
		'li',
		'td',
		'th',
		'strong',
		'em',
		'b',
		'i',
		'mark',
		'q',
		'small',
		'sub',
		'sup',
	}
)

UNBOXED_DISPLAYS = frozenset({'none', 'inline'})


class SizingStrategy(str, Enum):
	STRICT = 'strict'
	"""Зафиксировать width/height и min-width/min-height - сохраняет сетку макета"""
	FLUID = 'fluid'
	"""Только min-width/min-height, width/height вычисляются по содержимому"""
	NONE = 'none'
	"""Никаких объявлений размера (строчные и скрытые элементы)"""


def format_px(value: float) -> str:
	if float(value).is_integer():
		return f'{int(value)}px'
	return f'{round(value, 2):.2f}'.rstrip('0').rstrip('.') + 'px'


def classify_sizing(tag: str, display: str | None) -> SizingStrategy:
	display_value = (display or '').strip().lower()
	if display_value in UNBOXED_DISPLAYS:
		return SizingStrategy.NONE

	tag_name = tag.lower()
	if tag_name in MEDIA_TAGS or tag_name not in FLUID_TAGS:
		return SizingStrategy.STRICT
	return SizingStrategy.FLUID


def sizing_declarations(tag: str, display: str | None, width: float, height: float) -> StyleRecord:
	"""Inline-объявления размеров для border-box width x height.

	Нулевые и отрицательные измерения не порождают объявлений.
	"""
	strategy = classify_sizing(tag, display)
	declarations: StyleRecord = {}
	if strategy == SizingStrategy.NONE:
		return declarations

	if width > 0:
		if strategy == SizingStrategy.STRICT:
			declarations['width'] = format_px(width)
			# min-width не даёт flex-контейнеру сжать элемент
			declarations['min-width'] = format_px(width)
		else:
			declarations['min-width'] = format_px(width)
			declarations['width'] = 'auto'

	if height > 0:
		if strategy == SizingStrategy.STRICT:
			declarations['height'] = format_px(height)
			declarations['min-height'] = format_px(height)
		else:
			declarations['min-height'] = format_px(height)
			declarations['height'] = 'auto'

	return declarations
