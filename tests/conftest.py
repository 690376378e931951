"""In-memory live document used across the extraction tests."""

import os
from collections.abc import Mapping

import pytest

# Обработчики пакета не пропускают записи в caplog
os.environ.setdefault('PLUCK_SETUP_LOGGING', 'false')

from pluck.exceptions import StylesheetAccessError
from pluck.extraction.models import BoxModel, FontFaceRule, FrozenElement, FrozenText

DEFAULT_STYLE = {'display': 'block', 'position': 'static', 'visibility': 'visible', 'opacity': '1'}


class FakeNode:
	"""Rendered element with a fixed computed style and border-box size."""

	def __init__(
		self,
		tag: str,
		*children: 'FakeNode | str',
		attributes: dict[str, str] | None = None,
		style: dict[str, str] | None = None,
		width: float = 40,
		height: float = 20,
		pseudo: dict[str, dict[str, str]] | None = None,
		hover: dict[str, str] | None = None,
		shadow: list['FakeNode'] | None = None,
		properties: dict[str, str] | None = None,
	):
		self.tag_name = tag
		self.attributes = dict(attributes or {})
		self.style = {**DEFAULT_STYLE, **(style or {})}
		self.width = width
		self.height = height
		self.pseudo = pseudo or {}
		self.hover = hover or {}
		self.properties = dict(properties or {})
		self.content = list(children)
		self.shadow = list(shadow) if shadow is not None else None
		self.parent: FakeNode | None = None
		self.fail_style = False
		self.style_queries = 0

		for child in self.element_children():
			child.parent = self
		for child in self.shadow or []:
			child.parent = self

	def computed_style(self, pseudo: str | None = None) -> Mapping[str, str]:
		self.style_queries += 1
		if self.fail_style:
			raise RuntimeError('node detached from document')
		if pseudo == ':hover':
			return {**self.style, **self.hover} if self.hover else {}
		if pseudo is not None:
			return self.pseudo.get(pseudo, {})
		return self.style

	def box_model(self) -> BoxModel:
		if self.fail_style:
			raise RuntimeError('node detached from document')
		return BoxModel(width=self.width, height=self.height)

	def element_children(self) -> list['FakeNode']:
		return [child for child in self.content if isinstance(child, FakeNode)]

	def shadow_children(self) -> list['FakeNode'] | None:
		return self.shadow

	def parent_element(self) -> 'FakeNode | None':
		return self.parent

	def clone_frozen(self) -> FrozenElement:
		return FrozenElement(
			tag_name=self.tag_name,
			attributes=dict(self.attributes),
			children=[FrozenText(child) if isinstance(child, str) else child.clone_frozen() for child in self.content],
			shadow_children=[child.clone_frozen() for child in self.shadow] if self.shadow is not None else None,
			properties=dict(self.properties),
		)


class FakeSheet:
	def __init__(self, href: str | None, rules: list[FontFaceRule] | None = None):
		self.href = href
		self.rules = rules

	def font_face_rules(self) -> list[FontFaceRule]:
		if self.rules is None:
			raise StylesheetAccessError(self.href)
		return list(self.rules)


class FakeDocument:
	def __init__(self, base_url: str = 'https://example.com/app/', sheets: list[FakeSheet] | None = None, resources: list[str] | None = None):
		self.base_url = base_url
		self.sheets = sheets or []
		self.resources = resources or []

	def style_sheets(self) -> list[FakeSheet]:
		return list(self.sheets)

	def resource_urls(self) -> list[str]:
		return list(self.resources)


class FakeFetcher:
	"""Serves canned bytes by URL and records every request."""

	def __init__(self, responses: dict[str, bytes] | None = None):
		self.responses = responses or {}
		self.requested: list[str] = []

	async def fetch(self, url: str) -> bytes:
		self.requested.append(url)
		if url not in self.responses:
			raise ConnectionError(f'404 {url}')
		return self.responses[url]


@pytest.fixture
def document() -> FakeDocument:
	return FakeDocument()


@pytest.fixture
def fetcher() -> FakeFetcher:
	return FakeFetcher()
