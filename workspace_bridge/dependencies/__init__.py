"""Expose factory helpers for applications embedding the bridge."""

from .clients import (
    get_calendar_client,
    get_credential_manager,
    get_docs_client,
    get_google_oauth_client,
    get_meet_client,
)

__all__ = [
    "get_calendar_client",
    "get_credential_manager",
    "get_docs_client",
    "get_google_oauth_client",
    "get_meet_client",
]
