"""Точка входа экспорта: выделение -> снимок -> дерево структуры -> шрифты -> три текста."""

import logging
from collections.abc import Callable, Iterable, Iterator

from pluck.exceptions import ExtractionFailed
from pluck.extraction.builder import StructureBuilder
from pluck.extraction.context import ExportContext
from pluck.extraction.fonts import FontResolver
from pluck.extraction.models import (
	ElementNode,
	ExportResult,
	FontFaceDescriptor,
	FrozenElement,
	LiveDocument,
	LiveNode,
	RawMarkupNode,
	ResourceFetcher,
	StructureNode,
)
from pluck.extraction.serializer.compact_serializer import to_compact_notation
from pluck.extraction.serializer.html_serializer import to_markup
from pluck.extraction.serializer.stylesheet import to_stylesheet
from pluck.extraction.settings import ExtractionSettings

logger = logging.getLogger(__name__)


def select_top_level(nodes: Iterable[LiveNode]) -> list[LiveNode]:
	"""Узлы без выделенного предка, в том числе через границы shadow root."""
	candidates = list(nodes)
	selected_ids = {id(node) for node in candidates}

	top_level = []
	for node in candidates:
		ancestor = node.parent_element()
		while ancestor is not None:
			if id(ancestor) in selected_ids:
				break
			ancestor = ancestor.parent_element()
		else:
			top_level.append(node)
	return top_level


class SelectionSet:
	"""Выделенные узлы вместе со снимками, сделанными в момент выделения.

	Снимок фиксирует то, что видел пользователь: ротация подсказок и другой
	динамический контент после выделения в экспорт не попадают.
	"""

	def __init__(self, nodes: Iterable[LiveNode] = ()):
		self._nodes: list[LiveNode] = []
		self._snapshots: dict[int, FrozenElement] = {}
		for node in nodes:
			self.add(node)

	def add(self, node: LiveNode) -> None:
		if id(node) in self._snapshots:
			return
		self._nodes.append(node)
		self._snapshots[id(node)] = node.clone_frozen()

	def remove(self, node: LiveNode) -> None:
		if self._snapshots.pop(id(node), None) is not None:
			self._nodes = [existing for existing in self._nodes if existing is not node]

	def toggle(self, node: LiveNode) -> bool:
		"""Returns True if the node is selected after the call."""
		if node in self:
			self.remove(node)
			return False
		self.add(node)
		return True

	def clear(self) -> None:
		self._nodes.clear()
		self._snapshots.clear()

	def snapshot_for(self, node: LiveNode) -> FrozenElement | None:
		return self._snapshots.get(id(node))

	def top_level(self) -> list[LiveNode]:
		return select_top_level(self._nodes)

	def __contains__(self, node: object) -> bool:
		return id(node) in self._snapshots

	def __iter__(self) -> Iterator[LiveNode]:
		return iter(list(self._nodes))

	def __len__(self) -> int:
		return len(self._nodes)


def collect_icon_fonts(roots: Iterable[StructureNode]) -> list[str]:
	fonts: set[str] = set()

	def visit(node: StructureNode) -> None:
		if not isinstance(node, ElementNode):
			return
		if node.icon is not None:
			fonts.add(node.icon.font.lower())
		for child in node.children:
			visit(child)

	for root in roots:
		visit(root)
	return sorted(fonts)


class ExtractionService:
	"""Экспорт выделенных поддеревьев в компактную нотацию, HTML и CSS.

	Каждый вызов extract() создаёт свой ExportContext, поэтому повторный экспорт того же
	снимка даёт побайтно одинаковый результат, а разные экспорты не делят имена стилей.
	"""

	def __init__(self, document: LiveDocument | None = None, fetcher: ResourceFetcher | None = None, settings: ExtractionSettings | None = None):
		self.document = document
		self.fetcher = fetcher
		self.settings = settings or ExtractionSettings()

	def new_context(self) -> ExportContext:
		return ExportContext(settings=self.settings, base_url=self.document.base_url if self.document is not None else '')

	def build_structures(
		self,
		roots: list[LiveNode],
		context: ExportContext,
		snapshot_for: Callable[[LiveNode], FrozenElement | None] | None = None,
	) -> list[ElementNode | RawMarkupNode]:
		"""Синхронная фаза: заморозить корни, связать клоны с живыми узлами и построить деревья.

		Внутри нет точек ожидания - все запросы стилей относятся к одному кадру документа.
		"""
		frozen_roots = []
		for live in roots:
			frozen = snapshot_for(live) if snapshot_for is not None else None
			frozen_roots.append(context.bind_snapshot(live, frozen))
		logger.debug(f'Mapped {context.mapped_count} snapshot nodes for {len(frozen_roots)} roots')

		builder = StructureBuilder(context)
		structures = []
		for frozen in frozen_roots:
			structure = builder.build_root(frozen)
			if structure is not None:
				structures.append(structure)
		return structures

	async def extract(self, selected: SelectionSet | Iterable[LiveNode]) -> ExportResult:
		"""
		Build the three export texts for the selected roots.

		@raise ExtractionFailed: style of a root could not be read, or nothing visible was selected
		"""
		if isinstance(selected, SelectionSet):
			roots = selected.top_level()
			snapshot_for = selected.snapshot_for
		else:
			roots = select_top_level(selected)
			snapshot_for = None

		if not roots:
			raise ExtractionFailed('nothing to export')

		context = self.new_context()
		structures = self.build_structures(roots, context, snapshot_for)
		if not structures:
			raise ExtractionFailed('nothing to export')

		fonts = await self._resolve_fonts(structures, context)

		result = ExportResult(
			compact_notation=to_compact_notation(structures, context.style_registry, context.hover_registry),
			markup=to_markup(structures),
			stylesheet=to_stylesheet(context.style_registry, context.hover_registry, fonts),
			icon_fonts=collect_icon_fonts(structures),
			web_fonts=sorted(context.detected_web_fonts),
			embedded_fonts=[font.family for font in fonts],
		)
		logger.info(
			f'📦 Exported {len(structures)} root(s): {len(context.style_registry)} styles, '
			f'{len(context.hover_registry)} hover styles, {len(fonts)} embedded fonts'
		)
		return result

	async def _resolve_fonts(self, structures: list[ElementNode | RawMarkupNode], context: ExportContext) -> list[FontFaceDescriptor]:
		resolver = FontResolver(self.document, self.fetcher, self.settings)
		try:
			resolved = await resolver.resolve_fonts(list(structures), context.style_registry)
		except Exception as e:
			# Без встроенных шрифтов экспорт остаётся пригодным
			logger.warning(f'⚠️ Font embedding failed: {type(e).__name__}: {e}')
			return []
		return [resolved[key] for key in sorted(resolved)]
