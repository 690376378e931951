"""Контекст одного экспорта: реестры, соответствие клон -> живой узел, найденные шрифты."""

import logging
from dataclasses import dataclass, field

from pluck.extraction.models import FrozenElement, LiveNode
from pluck.extraction.registry import HoverRegistry, StyleRegistry
from pluck.extraction.settings import ExtractionSettings

logger = logging.getLogger(__name__)


@dataclass
class ExportContext:
	"""Создаётся заново на каждый вызов экспорта и передаётся во все рекурсивные вызовы.

	Ничего отсюда не переживает экспорт: повторное использование между экспортами
	привело бы к коллизиям имён стилей.
	"""

	settings: ExtractionSettings = field(default_factory=ExtractionSettings)
	base_url: str = ''
	style_registry: StyleRegistry = field(default_factory=StyleRegistry)
	hover_registry: HoverRegistry = field(default_factory=HoverRegistry)
	detected_web_fonts: set[str] = field(default_factory=set)
	# Ключ - id() замороженного узла; сами корни хранятся в frozen_roots, чтобы id не переиспользовались
	_live_by_frozen: dict[int, LiveNode] = field(default_factory=dict)
	frozen_roots: list[FrozenElement] = field(default_factory=list)

	def bind_snapshot(self, live: LiveNode, frozen: FrozenElement | None = None) -> FrozenElement:
		"""Заморозить узел (или принять снимок, сделанный при выделении) и связать клон с оригиналом."""
		if frozen is None:
			frozen = live.clone_frozen()
		self.frozen_roots.append(frozen)
		self._map_pair(frozen, live)
		return frozen

	def _map_pair(self, frozen: FrozenElement, live: LiveNode) -> None:
		self._live_by_frozen[id(frozen)] = live

		frozen_children = frozen.element_children()
		live_children = live.element_children()
		if len(frozen_children) != len(live_children):
			logger.debug(f'Snapshot of <{frozen.tag_name}> has {len(frozen_children)} children, live node has {len(live_children)}')
		for frozen_child, live_child in zip(frozen_children, live_children):
			self._map_pair(frozen_child, live_child)

		if frozen.shadow_children:
			live_shadow_children = live.shadow_children() or []
			for frozen_child, live_child in zip(frozen.shadow_children, live_shadow_children):
				self._map_pair(frozen_child, live_child)

	def live_for(self, frozen: FrozenElement) -> LiveNode | None:
		return self._live_by_frozen.get(id(frozen))

	@property
	def mapped_count(self) -> int:
		return len(self._live_by_frozen)
