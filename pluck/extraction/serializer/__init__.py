from pluck.extraction.serializer.compact_serializer import to_compact_notation
from pluck.extraction.serializer.html_serializer import FrozenMarkupSerializer, MarkupSerializer, to_markup
from pluck.extraction.serializer.preview import render_preview_document
from pluck.extraction.serializer.stylesheet import to_stylesheet

__all__ = [
	'FrozenMarkupSerializer',
	'MarkupSerializer',
	'render_preview_document',
	'to_compact_notation',
	'to_markup',
	'to_stylesheet',
]
