"""HTTP fetcher and CDP page capture against in-memory transports."""

import json
from types import SimpleNamespace

import httpx
import pytest

from pluck.browser.cdp_page import FONT_FACES_JS, RESOURCE_URLS_JS, SELECTION_ATTRIBUTE, capture_page, mark_selection, unmark_selection
from pluck.browser.fetcher import HttpResourceFetcher, decode_data_url
from pluck.browser.snapshot_page import CAPTURED_STYLE_NAMES
from pluck.cli import resolve_websocket_url
from pluck.exceptions import StylesheetAccessError


def mock_client(routes: dict[str, httpx.Response], seen: list[httpx.Request] | None = None) -> httpx.AsyncClient:
	def handler(request: httpx.Request) -> httpx.Response:
		if seen is not None:
			seen.append(request)
		return routes.get(str(request.url), httpx.Response(404))

	return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class FakeCDP:
	"""Отвечает на Runtime.evaluate и DOMSnapshot.captureSnapshot заранее заданными значениями."""

	def __init__(self, values: dict[str, object], snapshot: dict | None = None):
		self.values = values
		self.snapshot = snapshot or {'strings': [], 'documents': []}
		self.expressions: list[str] = []
		self.snapshot_params: dict | None = None
		self.send = SimpleNamespace(
			Runtime=SimpleNamespace(evaluate=self._evaluate),
			DOMSnapshot=SimpleNamespace(captureSnapshot=self._capture),
		)

	async def _evaluate(self, params, session_id=None):
		expression = params['expression']
		self.expressions.append(expression)
		for prefix, value in self.values.items():
			if expression.startswith(prefix):
				if isinstance(value, Exception):
					return {'result': {}, 'exceptionDetails': {'text': str(value)}}
				return {'result': {'type': 'object', 'value': value}}
		return {'result': {'type': 'undefined'}}

	async def _capture(self, params, session_id=None):
		self.snapshot_params = params
		return self.snapshot


# ---------------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------------


class TestDataUrls:
	def test_base64(self):
		assert decode_data_url('data:font/woff2;base64,AAE=') == b'\x00\x01'

	def test_percent_encoded(self):
		assert decode_data_url('data:text/css,a%20b') == b'a b'


class TestHttpResourceFetcher:
	async def test_returns_body(self):
		client = mock_client({'https://cdn.example.com/a.woff2': httpx.Response(200, content=b'font')})
		fetcher = HttpResourceFetcher(client=client)
		assert await fetcher.fetch('https://cdn.example.com/a.woff2') == b'font'
		await client.aclose()

	async def test_error_status_raises(self):
		client = mock_client({})
		fetcher = HttpResourceFetcher(client=client)
		with pytest.raises(httpx.HTTPStatusError):
			await fetcher.fetch('https://cdn.example.com/missing.woff2')
		await client.aclose()

	async def test_data_urls_skip_the_network(self):
		seen: list[httpx.Request] = []
		client = mock_client({}, seen)
		fetcher = HttpResourceFetcher(client=client)
		assert await fetcher.fetch('data:text/plain,hi') == b'hi'
		assert seen == []
		await client.aclose()

	async def test_borrowed_client_is_not_closed(self):
		client = mock_client({})
		async with HttpResourceFetcher(client=client):
			pass
		assert not client.is_closed
		await client.aclose()

	async def test_own_client_sends_user_agent(self):
		async with HttpResourceFetcher(user_agent='pluck-test', timeout=5) as fetcher:
			client = fetcher._get_client()
			assert client.headers['User-Agent'] == 'pluck-test'
		assert fetcher._client is None


# ---------------------------------------------------------------------------
# CDP page capture
# ---------------------------------------------------------------------------


class TestSelectionMarking:
	async def test_mark_returns_match_count(self):
		cdp = FakeCDP({'((selector, attribute)': 3})
		assert await mark_selection(cdp, 'session', '.card[data-x="1"]') == 3
		assert json.dumps('.card[data-x="1"]') in cdp.expressions[0]
		assert json.dumps(SELECTION_ATTRIBUTE) in cdp.expressions[0]

	async def test_unmark(self):
		cdp = FakeCDP({})
		await unmark_selection(cdp, 'session')
		assert json.dumps(SELECTION_ATTRIBUTE) in cdp.expressions[0]

	async def test_script_error_raises(self):
		cdp = FakeCDP({'((selector, attribute)': SyntaxError('bad selector')})
		with pytest.raises(RuntimeError):
			await mark_selection(cdp, 'session', '!!')


class TestCapturePage:
	async def test_collects_page_facts(self):
		cdp = FakeCDP(
			{
				'document.baseURI': 'https://example.com/docs/',
				'window.devicePixelRatio': 2,
				FONT_FACES_JS: [
					{'href': None, 'rules': [{'family': 'Inter', 'src': 'url(/inter.woff2)', 'weight': '400', 'style': 'normal'}]},
					{'href': 'https://cdn.example.com/x.css', 'rules': None},
				],
				RESOURCE_URLS_JS: ['https://example.com/inter.woff2'],
			}
		)

		page = await capture_page(cdp, 'session')

		assert cdp.snapshot_params['computedStyles'] == list(CAPTURED_STYLE_NAMES)
		assert cdp.snapshot_params['includeDOMRects'] is True
		assert page.base_url == 'https://example.com/docs/'
		assert page.resource_urls() == ['https://example.com/inter.woff2']

		accessible, cross_origin = page.style_sheets()
		assert accessible.font_face_rules()[0].family == 'Inter'
		with pytest.raises(StylesheetAccessError):
			cross_origin.font_face_rules()


class TestWebsocketUrl:
	async def test_websocket_url_is_used_as_is(self):
		url = 'ws://localhost:9222/devtools/browser/abc'
		assert await resolve_websocket_url(url) == url
