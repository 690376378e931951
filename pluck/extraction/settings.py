"""Политика одного экспорта: именованные пороги эвристик и флаги возможностей."""

from pydantic import BaseModel, ConfigDict, Field

from pluck.config import CONFIG

# Классы и атрибуты, которыми хост помечает выделенные и подсвеченные узлы
DEFAULT_MARKER_CLASSES = ('web-replica-hover', 'web-replica-selected')
DEFAULT_MARKER_ATTRIBUTES = ('data-pluck-selected',)


class ExtractionSettings(BaseModel):
	"""Пороговые значения - приближения, подобранные на реальных сайтах, а не точные законы."""

	model_config = ConfigDict(frozen=True)

	# Длина содержимого ::before/::after, которое считается декорацией
	short_pseudo_content: int = Field(default=5, ge=0)
	# Для иконочных шрифтов допускаются более длинные последовательности символов
	icon_pseudo_content: int = Field(default=50, ge=0)
	# Максимальная длина текста иконки, собранного из потомков
	icon_text_limit: int = Field(default=10, ge=0)
	# Максимальная разница каналов, при которой цвет считается серым
	neutral_color_threshold: int = Field(default=30, ge=0, le=255)
	# Абсолютно позиционированный блок такого размера (px) считается невидимым
	hidden_box_threshold: float = Field(default=1.0, ge=0)

	# Захват :hover-стилей выключен: синтетические события наведения вызывали
	# видимые побочные эффекты на динамических страницах (смена подсказок, обновление контента).
	capture_hover_styles: bool = False

	prune_empty_wrappers: bool = True
	prune_decorative_svgs: bool = True

	marker_classes: tuple[str, ...] = DEFAULT_MARKER_CLASSES
	marker_attributes: tuple[str, ...] = DEFAULT_MARKER_ATTRIBUTES

	fetch_timeout: float = Field(default=10.0, gt=0)
	max_concurrent_fetches: int = Field(default=6, ge=1)

	@classmethod
	def from_env(cls) -> 'ExtractionSettings':
		"""Собрать настройки из переменных окружения."""
		return cls(
			short_pseudo_content=CONFIG.PLUCK_SHORT_PSEUDO_CONTENT,
			icon_pseudo_content=CONFIG.PLUCK_ICON_PSEUDO_CONTENT,
			neutral_color_threshold=CONFIG.PLUCK_NEUTRAL_COLOR_THRESHOLD,
			hidden_box_threshold=CONFIG.PLUCK_HIDDEN_BOX_THRESHOLD,
			capture_hover_styles=CONFIG.PLUCK_CAPTURE_HOVER_STYLES,
			fetch_timeout=CONFIG.PLUCK_FETCH_TIMEOUT,
			max_concurrent_fetches=CONFIG.PLUCK_MAX_CONCURRENT_FETCHES,
		)
