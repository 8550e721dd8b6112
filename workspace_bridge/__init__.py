"""
Google Calendar, Docs and Meet access on behalf of OAuth-authenticated users.

``calendar``, ``docs`` and ``meet`` build clients from a caller's credentials
using the process default settings (see :func:`configure`). Applications that
want the package log format call :func:`configure_logging`, which honours
``GOOGLE_LOG_LEVEL``.
"""

from workspace_bridge.core.config import WorkspaceSettings, configure, get_settings
from workspace_bridge.core.errors import (
    ApiError,
    AuthorizationError,
    ConfigurationError,
    MissingTokenError,
    NotFoundError,
    QuotaExceededError,
    TokenExpiredError,
    WorkspaceError,
)
from workspace_bridge.core.logging import configure_logging
from workspace_bridge.dependencies import (
    get_calendar_client as calendar,
    get_docs_client as docs,
    get_meet_client as meet,
)
from workspace_bridge.services import AuthorizationContext, CredentialManager

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "AuthorizationContext",
    "AuthorizationError",
    "ConfigurationError",
    "CredentialManager",
    "MissingTokenError",
    "NotFoundError",
    "QuotaExceededError",
    "TokenExpiredError",
    "WorkspaceError",
    "WorkspaceSettings",
    "calendar",
    "configure",
    "configure_logging",
    "docs",
    "get_settings",
    "meet",
]
