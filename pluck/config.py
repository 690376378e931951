"""Конфигурация экспорта с чтением переменных окружения."""

import logging
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

logger = logging.getLogger(__name__)


class FlatEnvConfig(BaseSettings):
	"""Все переменные окружения в плоском пространстве имен."""

	model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', case_sensitive=True, extra='allow')

	# Логирование
	PLUCK_LOGGING_LEVEL: str = Field(default='info')
	PLUCK_DEBUG_LOG_FILE: str | None = Field(default=None)
	PLUCK_INFO_LOG_FILE: str | None = Field(default=None)

	# Загрузка ресурсов
	PLUCK_FETCH_TIMEOUT: float = Field(default=10.0)
	PLUCK_MAX_CONCURRENT_FETCHES: int = Field(default=6)
	PLUCK_USER_AGENT: str = Field(default='pluck/0.3 (+component export)')

	# Эвристики извлечения
	PLUCK_SHORT_PSEUDO_CONTENT: int = Field(default=5)
	PLUCK_ICON_PSEUDO_CONTENT: int = Field(default=50)
	PLUCK_NEUTRAL_COLOR_THRESHOLD: int = Field(default=30)
	PLUCK_HIDDEN_BOX_THRESHOLD: float = Field(default=1.0)
	PLUCK_CAPTURE_HOVER_STYLES: bool = Field(default=False)

	# CLI
	PLUCK_CDP_URL: str = Field(default='http://localhost:9222')
	PLUCK_OUTPUT_DIR: str = Field(default='.')


class Config:
	"""Прокси конфигурации: перечитывает переменные окружения при каждом доступе."""

	def __getattr__(self, attribute_name: str) -> Any:
		# Специальная обработка внутренних атрибутов
		if attribute_name.startswith('_'):
			raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{attribute_name}'")

		env_config_instance = FlatEnvConfig()
		if hasattr(env_config_instance, attribute_name):
			return getattr(env_config_instance, attribute_name)

		raise AttributeError(f"'{self.__class__.__name__}' object has no attribute '{attribute_name}'")


# Create singleton instance
CONFIG = Config()
