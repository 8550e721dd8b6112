"""
Configuration models and the process-wide default settings holder.

The credential core receives a ``WorkspaceSettings`` instance explicitly. Only
the outermost layer (``workspace_bridge.dependencies``) reaches for the cached
default returned by :func:`get_settings`.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkspaceSettings(BaseSettings):
    """Settings consumed by the credential core and the service adapters."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GOOGLE_",
        extra="ignore",
    )

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    redirect_uri: str = Field(
        "urn:ietf:wg:oauth:2.0:oob",
        description="Redirect target registered for the interactive consent flow.",
    )
    token_expiry_buffer_seconds: int = Field(
        60,
        ge=0,
        description="Refresh access tokens this many seconds before they expire.",
    )
    refresh_timeout_seconds: float = Field(
        10.0,
        gt=0,
        description="Deadline applied to every call against the token endpoint.",
    )
    default_calendar_id: str = "primary"
    log_level: str = "INFO"

    @field_validator("client_id", "client_secret", mode="before")
    @classmethod
    def _blank_as_unset(cls, value: Any) -> Any:
        """Treat empty strings from the environment as unset."""
        if isinstance(value, str) and not value.strip():
            return None
        return value


_overrides: Dict[str, Any] = {}


@lru_cache()
def get_settings() -> WorkspaceSettings:
    """Return a cached settings object."""
    return WorkspaceSettings(**_overrides)


def configure(**overrides: Any) -> WorkspaceSettings:
    """Apply ``overrides`` on top of the environment for the process default."""
    _overrides.update(overrides)
    get_settings.cache_clear()
    return get_settings()


def reset_settings() -> None:
    """Drop any overrides applied through :func:`configure`."""
    _overrides.clear()
    get_settings.cache_clear()


__all__ = ["WorkspaceSettings", "configure", "get_settings", "reset_settings"]
