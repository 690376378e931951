"""Проверка видимости: скрытые узлы и содержимое только для скринридеров."""

from collections.abc import Mapping

from pluck.extraction.models import BoxModel

HIDDEN_BOX_THRESHOLD = 1.0


def parse_px(value: str | None) -> float | None:
	if not value:
		return None
	stripped = value.strip().lower()
	if stripped.endswith('px'):
		stripped = stripped[:-2]
	try:
		return float(stripped)
	except ValueError:
		return None


def _is_zero_opacity(value: str | None) -> bool:
	if not value:
		return False
	try:
		return float(value) == 0
	except ValueError:
		return False


def is_visually_hidden(computed: Mapping[str, str], box: BoxModel | None = None, hidden_box_threshold: float = HIDDEN_BOX_THRESHOLD) -> bool:
	"""Узел присутствует в дереве, но визуально спрятан (паттерн sr-only)."""
	position = computed.get('position', '')

	# Крошечный абсолютно позиционированный блок
	if position == 'absolute':
		width = parse_px(computed.get('width'))
		height = parse_px(computed.get('height'))
		if width is None and box is not None:
			width = box.width
		if height is None and box is not None:
			height = box.height
		if (width or 0) <= hidden_box_threshold or (height or 0) <= hidden_box_threshold:
			return True

	# clip: rect(0, 0, 0, 0) или clip-path: inset(50%)
	clip = computed.get('clip', '') or ''
	if clip and clip != 'auto' and 'rect(0' in clip.replace(' ', ''):
		return True
	clip_path = computed.get('clip-path', '') or ''
	if 'inset(50%)' in clip_path:
		return True

	return False


def is_element_visible(computed: Mapping[str, str], box: BoxModel | None = None, hidden_box_threshold: float = HIDDEN_BOX_THRESHOLD) -> bool:
	if computed.get('display') == 'none' or computed.get('visibility') == 'hidden' or _is_zero_opacity(computed.get('opacity')):
		return False
	return not is_visually_hidden(computed, box, hidden_box_threshold)
