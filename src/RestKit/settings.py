# === NAVMAP v1 ===
# {
#   "module": "RestKit.settings",
#   "purpose": "Typed client settings with RESTKIT_* environment overrides.",
#   "sections": [
#     {"id": "httpsettings", "name": "HttpSettings", "anchor": "class-httpsettings", "kind": "class"},
#     {"id": "clientsettings", "name": "ClientSettings", "anchor": "class-clientsettings", "kind": "class"},
#     {"id": "get-settings", "name": "get_settings", "anchor": "function-get-settings", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Configuration for the client core.

:class:`ClientSettings` is a ``pydantic-settings`` model whose fields can be
overridden with ``RESTKIT_*`` environment variables (nested transport
settings use ``RESTKIT_HTTP__*``, e.g. ``RESTKIT_HTTP__TIMEOUT_READ=10``).
:meth:`RestKit.network.client.Client.from_settings` turns a settings object
into a configured client.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .codecs import CONTENT_TYPE_JSON
from .network import policy
from .ratelimit.config import normalize_rate_list

logger = logging.getLogger(__name__)

__all__ = ["ClientSettings", "HttpSettings", "get_settings", "reset_settings"]


class HttpSettings(BaseModel):
    """Transport settings for the default ``httpx.Client``."""

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    timeout_connect: float = Field(
        default=policy.HTTP_CONNECT_TIMEOUT,
        gt=0.0,
        le=300.0,
        description="Connect timeout in seconds",
    )
    timeout_read: float = Field(
        default=policy.HTTP_READ_TIMEOUT,
        gt=0.0,
        le=600.0,
        description="Read timeout in seconds",
    )
    timeout_write: float = Field(
        default=policy.HTTP_WRITE_TIMEOUT,
        gt=0.0,
        le=600.0,
        description="Write timeout in seconds",
    )
    timeout_pool: float = Field(
        default=policy.HTTP_POOL_TIMEOUT,
        gt=0.0,
        le=60.0,
        description="Acquire-from-pool timeout in seconds",
    )
    pool_max_connections: int = Field(
        default=policy.MAX_CONNECTIONS,
        ge=1,
        le=1024,
        description="Max concurrent connections",
    )
    pool_keepalive_max: int = Field(
        default=policy.MAX_KEEPALIVE_CONNECTIONS,
        ge=0,
        le=1024,
        description="Keepalive pool size",
    )
    keepalive_expiry: float = Field(
        default=policy.KEEPALIVE_EXPIRY,
        ge=0.0,
        le=600.0,
        description="Idle connection expiry in seconds",
    )
    trust_env: bool = Field(
        default=True,
        description="Honor HTTP(S)_PROXY and NO_PROXY environment variables",
    )
    user_agent: str = Field(
        default=policy.USER_AGENT,
        min_length=1,
        description="User-Agent header value",
    )


class ClientSettings(BaseSettings):
    """Settings for one client instance."""

    model_config = SettingsConfigDict(
        env_prefix="RESTKIT_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: Optional[str] = Field(default=None, description="Base address for relative paths")
    content_type: str = Field(
        default=CONTENT_TYPE_JSON,
        min_length=1,
        description="Content-Type and Accept header value; selects the codec",
    )
    username: Optional[str] = Field(default=None, description="Basic-auth username")
    password: Optional[SecretStr] = Field(default=None, description="Basic-auth password")
    headers: Dict[str, str] = Field(
        default_factory=dict,
        description="Custom headers replacing the defaults on every request",
    )
    keep_response_body: bool = Field(
        default=False,
        description="Leave response bodies readable after dispatch",
    )
    rate_limit: Optional[str] = Field(
        default=None,
        description="Rate limit windows, e.g. '5/second' or '5/second,300/minute'",
    )
    log_level: str = Field(default="INFO", description="Logging level for setup_logging")
    http: HttpSettings = Field(default_factory=HttpSettings)

    @field_validator("rate_limit")
    @classmethod
    def validate_rate_limit(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        normalize_rate_list(value)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level


_settings: Optional[ClientSettings] = None
_settings_lock = threading.Lock()


def get_settings() -> ClientSettings:
    """Return the process-wide settings, loading them from the environment on first use."""
    global _settings

    if _settings is not None:
        return _settings
    with _settings_lock:
        if _settings is None:
            _settings = ClientSettings()
            logger.debug(
                "Client settings loaded",
                extra={
                    "base_url": _settings.base_url,
                    "content_type": _settings.content_type,
                    "rate_limit": _settings.rate_limit,
                },
            )
        return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next ``get_settings`` re-reads the environment."""
    global _settings

    with _settings_lock:
        _settings = None
