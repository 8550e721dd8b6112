"""
Factory functions that wire clients to the process default settings.

This is the only layer that reads the cached settings; everything below it
receives configuration explicitly.
"""

from typing import Any, Optional

from workspace_bridge.clients import (
    GoogleCalendarClient,
    GoogleDocsClient,
    GoogleMeetClient,
    GoogleOAuthClient,
)
from workspace_bridge.core.config import WorkspaceSettings, get_settings
from workspace_bridge.services import CredentialManager


def _settings(settings: Optional[WorkspaceSettings]) -> WorkspaceSettings:
    return settings if settings is not None else get_settings()


def get_google_oauth_client(settings: Optional[WorkspaceSettings] = None) -> GoogleOAuthClient:
    """Create a Google OAuth client for ``settings`` or the process default."""
    return GoogleOAuthClient(_settings(settings))


def get_credential_manager(
    credentials: Any,
    *,
    settings: Optional[WorkspaceSettings] = None,
) -> CredentialManager:
    """Build a credential manager; raises ConfigurationError for incomplete credentials."""
    resolved = _settings(settings)
    return CredentialManager(credentials, get_google_oauth_client(resolved), resolved)


def get_calendar_client(
    credentials: Any,
    *,
    calendar_id: Optional[str] = None,
    settings: Optional[WorkspaceSettings] = None,
) -> GoogleCalendarClient:
    """Provide a Calendar client bound to ``calendar_id`` or the configured default."""
    resolved = _settings(settings)
    return GoogleCalendarClient(
        get_credential_manager(credentials, settings=settings),
        calendar_id=calendar_id or resolved.default_calendar_id,
    )


def get_docs_client(
    credentials: Any,
    *,
    settings: Optional[WorkspaceSettings] = None,
) -> GoogleDocsClient:
    """Provide a Docs client."""
    return GoogleDocsClient(get_credential_manager(credentials, settings=settings))


def get_meet_client(
    credentials: Any,
    *,
    calendar_id: Optional[str] = None,
    settings: Optional[WorkspaceSettings] = None,
) -> GoogleMeetClient:
    """Provide a Meet client that schedules onto the configured default calendar."""
    resolved = _settings(settings)
    return GoogleMeetClient(
        get_credential_manager(credentials, settings=settings),
        calendar_id=calendar_id or resolved.default_calendar_id,
    )


__all__ = [
    "get_calendar_client",
    "get_credential_manager",
    "get_docs_client",
    "get_google_oauth_client",
    "get_meet_client",
]
