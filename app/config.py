"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache

from db.config import load_env_files

logger = logging.getLogger(__name__)

_ALLOWED_LLM_ADAPTERS = {"openai", "mock"}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_aliases_env(name: str) -> dict[str, tuple[str, ...]]:
    """
    Read extra column aliases as a JSON object of field -> list of headers.

    Malformed values are logged and ignored.
    """

    raw = _get_optional_str_env(name)
    if raw is None:
        return {}
    try:
        loaded = json.loads(raw)
    except ValueError:
        logger.warning("%s is not valid JSON; ignoring extra column aliases.", name)
        return {}
    if not isinstance(loaded, dict):
        logger.warning("%s must be a JSON object; ignoring extra column aliases.", name)
        return {}

    aliases: dict[str, tuple[str, ...]] = {}
    for field_name, headers in loaded.items():
        if isinstance(headers, str):
            headers = [headers]
        if not isinstance(headers, list):
            continue
        aliases[str(field_name)] = tuple(str(header) for header in headers if str(header).strip())
    return aliases


@dataclass(frozen=True)
class SalesIngestionSettings:
    """
    Runtime settings for sales CSV / manual ingestion.
    """

    insert_batch_size: int = 500
    max_upload_bytes: int = 10 * 1024 * 1024
    extra_column_aliases: dict[str, tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class AnomalySettings:
    """
    Anomaly detector thresholds.
    """

    std_threshold: float = 2.0
    min_samples: int = 3
    max_alerts: int = 10


@dataclass(frozen=True)
class LLMSettings:
    """
    Language-model collaborator settings.
    """

    adapter: str = "openai"
    model: str = "gpt-4o-mini"
    max_tokens: int = 2048
    api_key: str | None = None
    base_url: str | None = None
    max_retries: int = 2


@dataclass(frozen=True)
class ApiSettings:
    """
    HTTP surface settings.
    """

    cors_allowed_origins: tuple[str, ...] = ("*",)


@dataclass(frozen=True)
class ShareSettings:
    """
    Share-link defaults.
    """

    default_expiry_days: int | None = None


@lru_cache(maxsize=1)
def get_sales_ingestion_settings() -> SalesIngestionSettings:
    """
    Return cached ingestion settings from environment variables.
    """

    return SalesIngestionSettings(
        insert_batch_size=max(1, _get_int_env("SALES_INSERT_BATCH_SIZE", 500)),
        max_upload_bytes=max(1, _get_int_env("SALES_MAX_UPLOAD_BYTES", 10 * 1024 * 1024)),
        extra_column_aliases=_get_aliases_env("SALES_COLUMN_ALIASES_JSON"),
    )


@lru_cache(maxsize=1)
def get_anomaly_settings() -> AnomalySettings:
    """
    Return cached anomaly detector settings from environment variables.
    """

    return AnomalySettings(
        std_threshold=max(0.0, _get_float_env("ANOMALY_STD_THRESHOLD", 2.0)),
        min_samples=max(1, _get_int_env("ANOMALY_MIN_SAMPLES", 3)),
        max_alerts=max(0, _get_int_env("ANOMALY_MAX_ALERTS", 10)),
    )


@lru_cache(maxsize=1)
def get_llm_settings() -> LLMSettings:
    """
    Return cached LLM adapter settings from environment variables.

    Unknown adapter names fall back to ``openai``.
    """

    adapter = _get_str_env("LLM_ADAPTER", "openai").lower()
    if adapter not in _ALLOWED_LLM_ADAPTERS:
        logger.warning("Unknown LLM_ADAPTER=%r; falling back to 'openai'.", adapter)
        adapter = "openai"
    return LLMSettings(
        adapter=adapter,
        model=_get_str_env("LLM_MODEL", "gpt-4o-mini"),
        max_tokens=max(1, _get_int_env("LLM_MAX_TOKENS", 2048)),
        api_key=_get_optional_str_env("LLM_API_KEY") or _get_optional_str_env("OPENAI_API_KEY"),
        base_url=_get_optional_str_env("LLM_BASE_URL"),
        max_retries=max(0, _get_int_env("LLM_MAX_RETRIES", 2)),
    )


@lru_cache(maxsize=1)
def get_share_settings() -> ShareSettings:
    """
    Return cached share-link settings.

    A non-positive ``SHARE_DEFAULT_EXPIRY_DAYS`` means links never expire.
    """

    days = _get_int_env("SHARE_DEFAULT_EXPIRY_DAYS", 0)
    return ShareSettings(default_expiry_days=days if days > 0 else None)


@lru_cache(maxsize=1)
def get_api_settings() -> ApiSettings:
    """
    Return cached API settings.

    ``CORS_ALLOWED_ORIGINS`` is a comma-separated list; unset allows any origin.
    """

    raw = _get_optional_str_env("CORS_ALLOWED_ORIGINS")
    if raw is None:
        return ApiSettings()
    origins = tuple(origin.strip() for origin in raw.split(",") if origin.strip())
    return ApiSettings(cors_allowed_origins=origins or ("*",))
