"""Загрузка файлов шрифтов и текстов таблиц стилей по HTTP."""

import base64
import logging
from urllib.parse import unquote_to_bytes

import httpx

from pluck.config import CONFIG

logger = logging.getLogger(__name__)


def decode_data_url(url: str) -> bytes:
	"""data:[<mime>][;base64],<payload>"""
	header, _, payload = url.partition(',')
	if header.endswith(';base64'):
		return base64.b64decode(payload)
	return unquote_to_bytes(payload)


class HttpResourceFetcher:
	"""Реализация ResourceFetcher поверх httpx.AsyncClient.

	Бросает исключение при любой ошибке: сети, таймауте или HTTP-статусе >= 400.
	"""

	def __init__(self, timeout: float | None = None, user_agent: str | None = None, client: httpx.AsyncClient | None = None):
		self.timeout = timeout if timeout is not None else CONFIG.PLUCK_FETCH_TIMEOUT
		self.user_agent = user_agent or CONFIG.PLUCK_USER_AGENT
		self._client = client
		self._owns_client = client is None

	async def __aenter__(self) -> 'HttpResourceFetcher':
		self._get_client()
		return self

	async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
		await self.aclose()

	def _get_client(self) -> httpx.AsyncClient:
		if self._client is None:
			self._client = httpx.AsyncClient(
				timeout=self.timeout,
				follow_redirects=True,
				headers={'User-Agent': self.user_agent},
			)
		return self._client

	async def fetch(self, url: str) -> bytes:
		if url.startswith('data:'):
			return decode_data_url(url)

		response = await self._get_client().get(url)
		response.raise_for_status()
		logger.debug(f'Fetched {url} ({len(response.content)} bytes)')
		return response.content

	async def aclose(self) -> None:
		if self._client is not None and self._owns_client:
			await self._client.aclose()
		self._client = None
