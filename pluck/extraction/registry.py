"""Дедупликация общих стилей в именованные записи."""

import json
import logging

from pluck.extraction.models import StyleRecord

logger = logging.getLogger(__name__)


def canonical_key(record: StyleRecord) -> str:
	"""Ключ не зависит от порядка вставки свойств."""
	return json.dumps(sorted(record.items()), separators=(',', ':'))


class StyleRegistry:
	"""Реестр общих стилей: канонический ключ записи -> имя (s1, s2, ...).

	Один экземпляр на экспорт, счётчик строго возрастает.
	"""

	def __init__(self, prefix: str = 's'):
		self.prefix = prefix
		self._names: dict[str, str] = {}
		self._records: dict[str, StyleRecord] = {}
		self._counter = 0

	def intern(self, record: StyleRecord) -> str:
		key = canonical_key(record)
		existing_name = self._names.get(key)
		if existing_name is not None:
			return existing_name

		self._counter += 1
		name = f'{self.prefix}{self._counter}'
		self._names[key] = name
		self._records[name] = dict(record)
		return name

	def get(self, name: str) -> StyleRecord | None:
		return self._records.get(name)

	def items(self) -> list[tuple[str, StyleRecord]]:
		"""Записи в порядке создания имён."""
		return list(self._records.items())

	def reset(self) -> None:
		self._names.clear()
		self._records.clear()
		self._counter = 0

	def __contains__(self, name: object) -> bool:
		return name in self._records

	def __len__(self) -> int:
		return len(self._records)


class HoverRegistry:
	"""Дельты стилей состояния :hover, привязанные к уже выданным именам общих стилей."""

	def __init__(self):
		self._deltas: dict[str, StyleRecord] = {}

	def register(self, name: str, record: StyleRecord | None) -> None:
		if not record:
			return
		self._deltas[name] = dict(record)

	def get(self, name: str) -> StyleRecord | None:
		return self._deltas.get(name)

	def items(self) -> list[tuple[str, StyleRecord]]:
		return list(self._deltas.items())

	def reset(self) -> None:
		self._deltas.clear()

	def __contains__(self, name: object) -> bool:
		return name in self._deltas

	def __len__(self) -> int:
		return len(self._deltas)
