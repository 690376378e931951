"""Вычисление компактных стилей узла: общий (дедуплицируемый) и inline наборы."""

import logging
from collections.abc import Mapping

from pluck.extraction.colors import is_neutral_color, normalize_color
from pluck.extraction.context import ExportContext
from pluck.extraction.defaults import OFFSET_PROPS, SHARED_PROPS, is_default_value
from pluck.extraction.dimensions import sizing_declarations
from pluck.extraction.models import LiveNode, StyleRecord

logger = logging.getLogger(__name__)

LIST_TAGS = frozenset({'ul', 'ol', 'li'})

SYSTEM_FONT_STACK = '-apple-system, BlinkMacSystemFont, "Segoe UI", "Noto Sans", Helvetica, Arial, sans-serif, "Apple Color Emoji", "Segoe UI Emoji"'
SYSTEM_FONT_MARKERS = ('system-ui', 'segoe', '-apple-system', 'blinkmacsystemfont')

# Веб-шрифты, которые подключаются в превью через Google Fonts
KNOWN_WEB_FONTS = (
	'mona sans',
	'inter',
	'roboto',
	'open sans',
	'lato',
	'montserrat',
	'poppins',
	'nunito',
	'raleway',
	'source sans',
	'ubuntu',
	'fira sans',
)

# Свойства, которые сравниваются в состоянии :hover
HOVER_PROPS = (
	'background-color',
	'color',
	'opacity',
	'transform',
	'box-shadow',
	'border-color',
	'text-decoration',
	'cursor',
	'outline',
)

TRANSPARENT_BACKGROUNDS = frozenset({'', 'transparent', 'rgba(0, 0, 0, 0)'})


def split_font_stack(value: str) -> list[str]:
	return [family.strip().strip('"\'').strip() for family in value.split(',') if family.strip().strip('"\'').strip()]


def shorten_font_family(value: str | None, detected_web_fonts: set[str] | None = None) -> str | None:
	"""Заменить системный стек шрифтов кросс-платформенным и запомнить найденные веб-шрифты."""
	if not value:
		return None

	families = split_font_stack(value)
	if not families:
		return None

	if detected_web_fonts is not None:
		for family in families:
			family_lower = family.lower()
			if any(web_font in family_lower for web_font in KNOWN_WEB_FONTS):
				detected_web_fonts.add(family)

	first_family = families[0].lower()
	if any(marker in first_family for marker in SYSTEM_FONT_MARKERS):
		return SYSTEM_FONT_STACK

	return value


def has_meaningful_border(computed: Mapping[str, str], neutral_threshold: int) -> bool:
	"""Цвет рамки часто наследуется от цвета текста - такую рамку не захватываем.

	Рамка сохраняется, если она видима и её цвет отличается от цвета текста или нейтрален.
	"""
	border_width = computed.get('border-width', '')
	border_style = computed.get('border-style', '')
	if border_width in ('', '0px') or border_style in ('', 'none'):
		return False

	border_color = normalize_color(computed.get('border-color'))
	if not border_color:
		return False
	text_color = normalize_color(computed.get('color'))
	return border_color != text_color or is_neutral_color(border_color, neutral_threshold)


def compute_shared_styles(tag: str, computed: Mapping[str, str], context: ExportContext) -> StyleRecord:
	shared: StyleRecord = {}
	position = computed.get('position', '')
	is_list_element = tag in LIST_TAGS
	meaningful_border = has_meaningful_border(computed, context.settings.neutral_color_threshold)

	for prop in SHARED_PROPS:
		if prop.startswith('list-style') and not is_list_element:
			continue
		if prop in OFFSET_PROPS and position == 'static':
			continue
		if prop.startswith('border-') and prop != 'border-radius' and not meaningful_border:
			continue

		value = computed.get(prop, '')

		if prop == 'backdrop-filter' and (not value or value == 'none'):
			webkit_value = computed.get('-webkit-backdrop-filter', '')
			if webkit_value and webkit_value != 'none':
				value = webkit_value

		if is_default_value(prop, value):
			continue

		if 'color' in prop:
			value = normalize_color(value)
			if not value:
				continue

		if prop == 'font-family':
			value = shorten_font_family(value, context.detected_web_fonts)
			if not value:
				continue

		shared[prop] = value.strip()

	return shared


def inherited_background(live: LiveNode) -> str | None:
	"""Первый непрозрачный фон предка (до <html>)."""
	parent = live.parent_element()
	while parent is not None and parent.tag_name.lower() != 'html':
		background = parent.computed_style().get('background-color', '')
		if background not in TRANSPARENT_BACKGROUNDS:
			normalized = normalize_color(background)
			if normalized:
				return normalized
		parent = parent.parent_element()
	return None


def compute_node_styles(live: LiveNode, tag: str, computed: Mapping[str, str], context: ExportContext, is_root: bool = False) -> tuple[StyleRecord, StyleRecord]:
	"""Вернуть (shared, inline). Наборы не пересекаются по назначению: inline - только размеры."""
	shared = compute_shared_styles(tag, computed, context)

	# Используем border-box (offsetWidth/offsetHeight), а не content-box из computed width,
	# иначе padding вычитается дважды и блок сжимается
	box = live.box_model()
	inline = sizing_declarations(tag, computed.get('display'), box.width, box.height)

	if is_root and 'background-color' not in shared:
		background = inherited_background(live)
		if background:
			shared['background-color'] = background

	return shared, inline


def capture_hover_styles(live: LiveNode, computed: Mapping[str, str], context: ExportContext) -> StyleRecord | None:
	"""Дельта стилей :hover относительно обычного состояния.

	Выключено по умолчанию (settings.capture_hover_styles). Раньше состояние :hover
	вызывалось синтетическими событиями мыши, что меняло живую страницу: подсказки
	начинали ротацию, динамический контент обновлялся. Включать только для источников,
	которые отдают :hover-стили без изменения страницы.
	"""
	if not context.settings.capture_hover_styles:
		return None

	hover_computed = live.computed_style(':hover')
	if not hover_computed:
		return None

	delta: StyleRecord = {}
	for prop in HOVER_PROPS:
		hover_value = hover_computed.get(prop, '')
		base_value = computed.get(prop, '')
		if not hover_value:
			continue
		if 'color' in prop:
			hover_value = normalize_color(hover_value) or ''
			base_value = normalize_color(base_value) or ''
			if not hover_value:
				continue
		if hover_value != base_value:
			delta[prop] = hover_value

	return delta or None
