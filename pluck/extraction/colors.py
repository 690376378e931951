"""Нормализация цветов к короткой канонической форме."""

import re

NEUTRAL_COLOR_THRESHOLD = 30

_FUNCTIONAL_COLOR_RE = re.compile(
	r'^rgba?\(\s*(?P<r>[\d.]+)\s*[,\s]\s*(?P<g>[\d.]+)\s*[,\s]\s*(?P<b>[\d.]+)\s*(?:[,/]\s*(?P<a>[\d.]+%?)\s*)?\)$',
	re.IGNORECASE,
)
_HEX_COLOR_RE = re.compile(r'^#(?P<hex>[0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$', re.IGNORECASE)


def _clamp_channel(raw: str) -> int:
	return max(0, min(255, round(float(raw))))


def _parse_alpha(raw: str | None) -> float:
	if raw is None:
		return 1.0
	if raw.endswith('%'):
		return max(0.0, min(1.0, float(raw[:-1]) / 100))
	return max(0.0, min(1.0, float(raw)))


def _format_alpha(alpha: float) -> str:
	# После округления альфа остаётся строго между 0 и 1
	return format(min(max(round(alpha, 4), 0.0001), 0.9999), 'g')


def parse_color_channels(color: str | None) -> tuple[int, int, int, float] | None:
	"""Разобрать #hex, rgb() или rgba() в (r, g, b, alpha). None для прочих форм."""
	if not color:
		return None
	value = color.strip()

	hex_match = _HEX_COLOR_RE.match(value)
	if hex_match:
		digits = hex_match.group('hex')
		if len(digits) in (3, 4):
			digits = ''.join(char * 2 for char in digits)
		r, g, b = int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
		alpha = int(digits[6:8], 16) / 255 if len(digits) == 8 else 1.0
		return r, g, b, alpha

	functional_match = _FUNCTIONAL_COLOR_RE.match(value)
	if functional_match:
		try:
			return (
				_clamp_channel(functional_match.group('r')),
				_clamp_channel(functional_match.group('g')),
				_clamp_channel(functional_match.group('b')),
				_parse_alpha(functional_match.group('a')),
			)
		except ValueError:
			return None

	return None


def normalize_color(color: str | None) -> str | None:
	"""Полностью прозрачный -> None, полупрозрачный -> rgba(), непрозрачный -> #RRGGBB.

	Нераспознанные формы (currentcolor, hsl(), ключевые слова) возвращаются как есть.
	"""
	if not color:
		return None
	value = color.strip()
	if not value or value.lower() == 'transparent':
		return None

	channels = parse_color_channels(value)
	if channels is None:
		return value

	r, g, b, alpha = channels
	if alpha == 0:
		return None
	# Полупрозрачность критична для эффектов backdrop - не округляем до непрозрачного
	if alpha < 1:
		return f'rgba({r}, {g}, {b}, {_format_alpha(alpha)})'
	return f'#{r:02X}{g:02X}{b:02X}'


def is_neutral_color(color: str | None, threshold: int = NEUTRAL_COLOR_THRESHOLD) -> bool:
	"""Серый/чёрный/белый цвет: каналы отличаются попарно меньше чем на threshold."""
	channels = parse_color_channels(color)
	if channels is None:
		return False
	r, g, b, _ = channels
	max_difference = max(abs(r - g), abs(g - b), abs(r - b))
	return max_difference < threshold
