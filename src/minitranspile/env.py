"""
Centralized environment variable definitions and typed accessors.
"""

from __future__ import annotations

import os

ENV_MINITRANSPILE_LOG_LEVEL = "MINITRANSPILE_LOG_LEVEL"
ENV_MINITRANSPILE_CALLER_ID = "MINITRANSPILE_CALLER_ID"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Env:
	def _get(self, key: str) -> str | None:
		return os.environ.get(key)

	def _set(self, key: str, value: str | None) -> None:
		if value is None:
			os.environ.pop(key, None)
		else:
			os.environ[key] = value

	@property
	def log_level(self) -> str:
		value = (self._get(ENV_MINITRANSPILE_LOG_LEVEL) or "WARNING").upper()
		return value if value in _LOG_LEVELS else "WARNING"

	@log_level.setter
	def log_level(self, value: str | None) -> None:
		self._set(ENV_MINITRANSPILE_LOG_LEVEL, value)

	@property
	def caller_id(self) -> str | None:
		return self._get(ENV_MINITRANSPILE_CALLER_ID) or None

	@caller_id.setter
	def caller_id(self, value: str | None) -> None:
		self._set(ENV_MINITRANSPILE_CALLER_ID, value)


# Singleton
env = Env()

__all__ = [
	"ENV_MINITRANSPILE_CALLER_ID",
	"ENV_MINITRANSPILE_LOG_LEVEL",
	"Env",
	"env",
]
