from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlsplit

from .errors import ConfigError


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Core
    base_url: str | None = os.getenv("BASE_URL")
    label_prefix: str = os.getenv("DHP_LABEL_PREFIX", "routing")
    docker_timeout_s: int = _env_int("DHP_DOCKER_TIMEOUT_S", 10)

    # Skip containers with broken labels instead of failing the whole request.
    skip_invalid_containers: bool = _env_bool("DHP_SKIP_INVALID_CONTAINERS", False)

    # Server
    host: str = os.getenv("DHP_HOST", "0.0.0.0")
    port: int = _env_int("DHP_PORT", 8000)

    # Logging
    log_level: str = os.getenv("DHP_LOG_LEVEL", "INFO")
    log_json: bool = _env_bool("DHP_LOG_JSON", True)


def parse_base_url(raw: str | None) -> str:
    """Validate the configured base address.

    Only absence and obviously malformed values are rejected here. Whether the
    scheme can carry a port is decided per request when backend URLs are built.
    """
    if raw is None or not raw.strip():
        raise ConfigError("Cannot get base URL: BASE_URL is not set")
    value = raw.strip()
    parts = urlsplit(value)
    if not parts.scheme:
        raise ConfigError(f"Invalid BASE_URL '{value}': missing scheme")
    if value[len(parts.scheme):].startswith("://") and not parts.hostname:
        raise ConfigError(f"Invalid BASE_URL '{value}': missing host")
    try:
        parts.port
    except ValueError as e:
        raise ConfigError(f"Invalid BASE_URL '{value}': {e}") from e
    return value


settings = Settings()
