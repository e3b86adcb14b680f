"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a cached ``Settings`` loader that reads from:
- Real environment variables (highest precedence)
- ``.env`` files at the working directory: .env, .env.local, .env.dev/.env.test/.env.prod

It also builds the immutable :class:`PipelineConfig` handed to the pipeline
driver, so the concurrency core never reads process-wide state on its own.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_TRANSLATE_URL = "https://www.googleapis.com/language/translate/v2"
DEFAULT_RATE_LIMIT = 100.0  # Google's documented ceiling, requests per second
DEFAULT_BURST = 1
DEFAULT_WORKERS = 20
DEFAULT_ABORT_GRACE_SECONDS = 5.0


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `TRANSLINES_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    google_api_key : Optional[str]
        Credential for the translation endpoint. Maps from `GOOGLE_API_KEY`.
        Its absence is only fatal when a real translator is built.
    translate_base_url : str
        Endpoint of the v2 translate API; maps from `GOOGLE_TRANSLATE_BASE_URL`.
    rate_limit, burst, workers, max_items
        Pipeline throttling knobs, see :class:`PipelineConfig`.
    error_marker : str
        Text printed in place of a line whose translation failed.
    abort_grace : float
        Seconds an aborted run waits for in-flight calls; maps from
        `TRANSLINES_ABORT_GRACE`.
    """

    environment: EnvName = Field(default="dev", alias="TRANSLINES_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    google_api_key: str | None = Field(default=None, alias="GOOGLE_API_KEY")
    translate_base_url: str = Field(
        default=DEFAULT_TRANSLATE_URL, alias="GOOGLE_TRANSLATE_BASE_URL"
    )
    source_language: str = Field(default="zh-CN", alias="TRANSLINES_SOURCE_LANG")
    target_language: str = Field(default="zh-TW", alias="TRANSLINES_TARGET_LANG")
    rate_limit: float = Field(default=DEFAULT_RATE_LIMIT, gt=0, alias="TRANSLINES_RATE_LIMIT")
    burst: int = Field(default=DEFAULT_BURST, ge=1, alias="TRANSLINES_BURST")
    workers: int = Field(default=DEFAULT_WORKERS, ge=1, alias="TRANSLINES_WORKERS")
    max_items: int | None = Field(default=None, ge=0, alias="TRANSLINES_MAX_ITEMS")
    request_timeout: float = Field(default=30.0, gt=0, alias="TRANSLINES_REQUEST_TIMEOUT")
    error_marker: str = Field(default="", alias="TRANSLINES_ERROR_MARKER")
    abort_grace: float = Field(
        default=DEFAULT_ABORT_GRACE_SECONDS, ge=0, alias="TRANSLINES_ABORT_GRACE"
    )

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


class PipelineConfig(BaseModel):
    """Immutable throttling configuration for one pipeline run.

    Attributes
    ----------
    rate_limit : float
        Ceiling on permit grants per second across all workers.
    burst : int
        Bucket capacity; ``1`` means no queued burst beyond one call.
    workers : int
        Number of concurrent worker threads.
    max_items : int | None
        Optional cap on the number of lines read from the input. ``None``
        reads everything.
    abort_grace_seconds : float
        How long an aborted run waits for in-flight translator calls before
        abandoning the (daemon) worker threads.
    """

    model_config = ConfigDict(frozen=True)

    rate_limit: float = Field(default=DEFAULT_RATE_LIMIT, gt=0)
    burst: int = Field(default=DEFAULT_BURST, ge=1)
    workers: int = Field(default=DEFAULT_WORKERS, ge=1)
    max_items: int | None = Field(default=None, ge=0)
    abort_grace_seconds: float = Field(default=DEFAULT_ABORT_GRACE_SECONDS, ge=0)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> PipelineConfig:
        """Project the throttling fields out of ``settings`` (or the cached one)."""
        s = settings or load_settings()
        return cls(
            rate_limit=s.rate_limit,
            burst=s.burst,
            workers=s.workers,
            max_items=s.max_items,
            abort_grace_seconds=s.abort_grace,
        )


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("TRANSLINES_ENV", "dev")
    return Settings()


def get_logger(name: str = "translines") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger


__all__ = [
    "Settings",
    "PipelineConfig",
    "load_settings",
    "get_logger",
    "DEFAULT_TRANSLATE_URL",
]
