# @file purpose: Самостоятельная HTML-страница предпросмотра экспортированного компонента

from pluck.extraction.models import ExportResult

MATERIAL_ICONS_LINK = '<link href="https://fonts.googleapis.com/icon?family=Material+Icons" rel="stylesheet">'
MATERIAL_SYMBOLS_LINK = '<link href="https://fonts.googleapis.com/css2?family=Material+Symbols+Outlined" rel="stylesheet">'
FONT_AWESOME_LINK = '<link href="https://cdnjs.cloudflare.com/ajax/libs/font-awesome/6.4.0/css/all.min.css" rel="stylesheet">'

# Фон, на котором виден эффект backdrop-filter
BACKDROP_BACKGROUND = 'html { background: linear-gradient(135deg, #667eea 0%, #764ba2 50%, #f093fb 100%); min-height: 100vh; }'

RESET_CSS = """/* Reset base styles */
html, body { margin: 0; padding: 0; }
body { padding: 16px; font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", "Noto Sans", Helvetica, Arial, sans-serif, "Apple Color Emoji", "Segoe UI Emoji"; box-sizing: border-box; -webkit-font-smoothing: antialiased; -moz-osx-font-smoothing: grayscale; font-size: 14px; line-height: 1.5; }
ul, ol { list-style: none; margin: 0; padding: 0; background: inherit; color: inherit; }
li { list-style: none; background: inherit; color: inherit; }
*, *::before, *::after { box-sizing: border-box; }
img, video, svg, canvas { max-width: 100%; }
button { background: transparent; border: none; cursor: pointer; color: inherit; padding: 0; }
input { background: transparent; border: none; outline: none; color: inherit; min-width: 0; }
input::placeholder { color: inherit; opacity: 0.5; }
a { color: inherit; text-decoration: inherit; }
span { display: inline; }
"""

ICON_FONT_CSS = """/* Icon font styles override captured ones */
.material-icons {
  font-family: 'Material Icons', 'Google Material Icons' !important;
  font-weight: normal !important;
  font-style: normal !important;
  letter-spacing: normal !important;
  text-transform: none !important;
  white-space: nowrap !important;
  word-wrap: normal !important;
  direction: ltr !important;
  -webkit-font-feature-settings: 'liga' !important;
  font-feature-settings: 'liga' !important;
  -webkit-font-smoothing: antialiased;
  text-rendering: optimizeLegibility;
  -moz-osx-font-smoothing: grayscale;
}
.material-symbols-outlined {
  font-family: 'Material Symbols Outlined' !important;
  font-weight: normal !important;
  font-style: normal !important;
  letter-spacing: normal !important;
  text-transform: none !important;
  white-space: nowrap !important;
  word-wrap: normal !important;
  direction: ltr !important;
  font-variation-settings: 'FILL' 0, 'wght' 400, 'GRAD' 0, 'opsz' 24;
  -webkit-font-smoothing: antialiased;
  text-rendering: optimizeLegibility;
  -moz-osx-font-smoothing: grayscale;
}
"""


def font_links(icon_fonts: list[str], web_fonts: list[str]) -> list[str]:
	links = []
	if icon_fonts:
		links.append(MATERIAL_ICONS_LINK)
		links.append(MATERIAL_SYMBOLS_LINK)
		if any('fontawesome' in font.lower() or 'fa' in font.lower() for font in icon_fonts):
			links.append(FONT_AWESOME_LINK)

	if web_fonts:
		families = '&'.join(f'family={"+".join(font.split())}:wght@400;500;600;700' for font in web_fonts)
		links.append(f'<link href="https://fonts.googleapis.com/css2?{families}&display=swap" rel="stylesheet">')
	return links


def render_preview_document(result: ExportResult, title: str = 'Component Preview') -> str:
	"""Разметка и стили экспорта, обёрнутые в самостоятельную страницу."""
	head_links = ''.join(f'  {link}\n' for link in font_links(result.icon_fonts, result.web_fonts))
	backdrop = f'{BACKDROP_BACKGROUND}\n' if 'backdrop-filter' in result.stylesheet else ''

	return (
		'<!DOCTYPE html>\n'
		'<html>\n'
		'<head>\n'
		'  <meta charset="UTF-8">\n'
		f'  <title>{title}</title>\n'
		f'{head_links}'
		'  <style>\n'
		f'{RESET_CSS}'
		f'{backdrop}'
		f'{ICON_FONT_CSS}'
		'/* Captured component styles */\n'
		f'{result.stylesheet}'
		'  </style>\n'
		'</head>\n'
		'<body>\n'
		f'{result.markup}\n'
		'</body>\n'
		'</html>\n'
	)
