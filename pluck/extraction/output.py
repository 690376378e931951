"""Запись результата экспорта на диск."""

import logging
import re
from pathlib import Path

from pluck.extraction.models import ExportResult
from pluck.extraction.serializer.preview import render_preview_document

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_RE = re.compile(r'[^\w.-]+')


def safe_filename(name: str, default: str = 'component') -> str:
	cleaned = _UNSAFE_FILENAME_RE.sub('-', name.strip()).strip('-.')
	return cleaned or default


def write_export(result: ExportResult, directory: str | Path, filename: str = 'component') -> dict[str, Path]:
	"""
	Write <name>.toon.txt, <name>.html and <name>.css into directory.

	@dev the .html file is the standalone preview page, markup alone lives in the result
	"""
	if result.is_empty:
		raise ValueError('Refusing to write an empty export')

	target = Path(directory).expanduser()
	target.mkdir(parents=True, exist_ok=True)
	name = safe_filename(filename)

	paths = {
		'toon': target / f'{name}.toon.txt',
		'html': target / f'{name}.html',
		'css': target / f'{name}.css',
	}
	paths['toon'].write_text(result.compact_notation, encoding='utf-8')
	paths['html'].write_text(render_preview_document(result, title=name), encoding='utf-8')
	paths['css'].write_text(result.stylesheet, encoding='utf-8')

	for path in paths.values():
		logger.info(f'💾 Wrote {path}')
	return paths
