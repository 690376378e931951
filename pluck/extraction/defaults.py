"""Классификация значений CSS как структурных значений по умолчанию."""

# Значения, которые не несут визуальной информации. Свойство без записи
# в этой таблице никогда не отбрасывается.
DEFAULT_SKIP: dict[str, tuple[str, ...]] = {
	'position': ('static',),
	# Отдельные стороны margin/padding - пропускаем только точный ноль
	'margin-top': ('0px',),
	'margin-right': ('0px',),
	'margin-bottom': ('0px',),
	'margin-left': ('0px',),
	'padding-top': ('0px',),
	'padding-right': ('0px',),
	'padding-bottom': ('0px',),
	'padding-left': ('0px',),
	'min-width': ('0px',),
	'min-height': ('0px',),
	'max-width': ('none',),
	'max-height': ('none',),
	'top': ('auto',),
	'right': ('auto',),
	'bottom': ('auto',),
	'left': ('auto',),
	'z-index': ('auto',),
	'flex-grow': ('0',),
	'flex-shrink': ('1',),
	'flex-basis': ('auto',),
	'align-self': ('auto',),
	'order': ('0',),
	'grid-template-columns': ('none',),
	'grid-template-rows': ('none',),
	'grid-column': ('auto',),
	'grid-row': ('auto',),
	'background-color': ('transparent', 'rgba(0, 0, 0, 0)'),
	'background-image': ('none',),
	'background-size': ('auto',),
	'background-position': ('0% 0%',),
	'background-repeat': ('repeat',),
	'opacity': ('1',),
	'border-width': ('0px',),
	'border-style': ('none',),
	'border-radius': ('0px',),
	'box-shadow': ('none',),
	'outline': ('none',),
	'text-decoration': ('none',),
	'text-transform': ('none',),
	'text-overflow': ('clip',),
	'letter-spacing': ('normal',),
	'vertical-align': ('baseline',),
	'overflow': ('visible',),
	'overflow-x': ('visible',),
	'overflow-y': ('visible',),
	'cursor': ('auto',),
	'pointer-events': ('auto',),
	'user-select': ('auto',),
	'transform': ('none',),
	'object-fit': ('fill',),
	# Визуальные эффекты
	'backdrop-filter': ('none',),
	'-webkit-backdrop-filter': ('none',),
	'filter': ('none',),
	# Рендеринг шрифтов
	'-webkit-font-smoothing': ('auto',),
	'-moz-osx-font-smoothing': ('auto',),
	'text-rendering': ('auto',),
	'font-optical-sizing': ('auto',),
	'font-variant': ('normal',),
	'font-variant-ligatures': ('normal',),
}

# Свойства общих стилей (попадают в дедуплицируемый класс).
# margin/padding в полной записи, чтобы сохранить отдельные стороны.
SHARED_PROPS: tuple[str, ...] = (
	# Layout
	'display',
	'position',
	'margin-top',
	'margin-right',
	'margin-bottom',
	'margin-left',
	'padding-top',
	'padding-right',
	'padding-bottom',
	'padding-left',
	# Sizing
	'min-width',
	'min-height',
	'max-width',
	'max-height',
	# Flex container
	'flex-direction',
	'flex-wrap',
	'justify-content',
	'align-items',
	'align-content',
	'gap',
	# Flex item
	'flex-grow',
	'flex-shrink',
	'flex-basis',
	'align-self',
	'order',
	# Grid
	'grid-template-columns',
	'grid-template-rows',
	'grid-column',
	'grid-row',
	# Position offsets
	'top',
	'right',
	'bottom',
	'left',
	'z-index',
	# Background
	'background-color',
	'background-image',
	'background-size',
	'background-position',
	'background-repeat',
	# Visual
	'color',
	'opacity',
	'border-width',
	'border-style',
	'border-color',
	'border-radius',
	'box-shadow',
	'outline',
	# Text
	'font-family',
	'font-size',
	'font-weight',
	'line-height',
	'text-align',
	'text-decoration',
	'text-transform',
	'white-space',
	'text-overflow',
	'word-break',
	'overflow-wrap',
	'hyphens',
	'tab-size',
	'text-indent',
	'letter-spacing',
	'vertical-align',
	# Lists
	'list-style-type',
	'list-style-position',
	# Other
	'overflow',
	'overflow-x',
	'overflow-y',
	'cursor',
	'pointer-events',
	'user-select',
	'transform',
	'object-fit',
	'backdrop-filter',
	'-webkit-backdrop-filter',
	'filter',
	'-webkit-font-smoothing',
	'-moz-osx-font-smoothing',
	'text-rendering',
	'font-optical-sizing',
	'font-variant',
	'font-variant-ligatures',
	'scrollbar-width',
	'scrollbar-color',
)

OFFSET_PROPS = frozenset({'top', 'right', 'bottom', 'left'})


def is_default_value(prop: str, value: str | None) -> bool:
	"""Пустое значение или значение из списка бессмысленных для данного свойства."""
	if value is None:
		return True
	normalized = value.strip().lower()
	if not normalized:
		return True

	defaults = DEFAULT_SKIP.get(prop)
	if not defaults:
		# Нет правила - всегда сохраняем
		return False

	return any(normalized == default.lower() for default in defaults)
