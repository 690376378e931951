"""Экспорт выбранных фрагментов страницы в переносимый компонент"""

import os
from typing import TYPE_CHECKING

from pluck.logging_config import setup_logging

# Setup logging
if os.environ.get('PLUCK_SETUP_LOGGING', 'true').lower() != 'false':
	from pluck.config import CONFIG
	debug_log_file = getattr(CONFIG, 'PLUCK_DEBUG_LOG_FILE', None)
	info_log_file = getattr(CONFIG, 'PLUCK_INFO_LOG_FILE', None)
	logger = setup_logging(debug_log_file=debug_log_file, info_log_file=info_log_file)
else:
	import logging
	logger = logging.getLogger('pluck')

# Типы для lazy imports
if TYPE_CHECKING:
	from pluck.browser.fetcher import HttpResourceFetcher
	from pluck.browser.snapshot_page import SnapshotPage
	from pluck.extraction.models import ExportResult
	from pluck.extraction.service import ExtractionService, SelectionSet
	from pluck.extraction.settings import ExtractionSettings

# Lazy imports mapping
_LAZY_IMPORTS = {
	'ExtractionService': ('pluck.extraction.service', 'ExtractionService'),
	'SelectionSet': ('pluck.extraction.service', 'SelectionSet'),
	'ExtractionSettings': ('pluck.extraction.settings', 'ExtractionSettings'),
	'ExportResult': ('pluck.extraction.models', 'ExportResult'),
	'HttpResourceFetcher': ('pluck.browser.fetcher', 'HttpResourceFetcher'),
	'SnapshotPage': ('pluck.browser.snapshot_page', 'SnapshotPage'),
}


def __getattr__(name: str):
	"""Lazy import mechanism."""
	if name in _LAZY_IMPORTS:
		module_path, attr_name = _LAZY_IMPORTS[name]
		try:
			from importlib import import_module
			module = import_module(module_path)
			attr = getattr(module, attr_name)
			globals()[name] = attr
			return attr
		except ImportError as e:
			raise ImportError(f'Failed to import {name} from {module_path}: {e}') from e
	raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
	'ExtractionService',
	'SelectionSet',
	'ExtractionSettings',
	'ExportResult',
	'HttpResourceFetcher',
	'SnapshotPage',
]
