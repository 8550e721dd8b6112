"""
Freshness assessment and refresh-grant execution for a single credential.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Protocol, Tuple

import httpx

from workspace_bridge.clients.google_auth import OAuthTokenExchangeError
from workspace_bridge.core.errors import TokenExpiredError
from workspace_bridge.models.credentials import CredentialRecord


class Freshness(str, Enum):
    FRESH = "fresh"
    STALE = "stale"
    UNREFRESHABLE = "unrefreshable"


class RefreshGrantClient(Protocol):
    async def refresh_access_token(
        self, refresh_token: str
    ) -> Tuple[str, int, Optional[str]]: ...


class TokenRefresher:
    """Decide whether a credential needs refreshing and perform the refresh."""

    def __init__(self, oauth_client: RefreshGrantClient, *, expiry_buffer_seconds: int = 60) -> None:
        self._oauth = oauth_client
        self._buffer = expiry_buffer_seconds

    @property
    def expiry_buffer_seconds(self) -> int:
        return self._buffer

    def assess(self, record: CredentialRecord, *, now: Optional[datetime] = None) -> Freshness:
        """Classify ``record`` without touching the network."""
        if not record.has_refresh_token():
            return Freshness.UNREFRESHABLE
        if not record.access_token or record.expires_within(self._buffer, now=now):
            return Freshness.STALE
        return Freshness.FRESH

    async def refresh(self, record: CredentialRecord) -> CredentialRecord:
        """Exchange the refresh token and return the updated record.

        The input record is left untouched. A refresh token omitted by the
        server means it was not rotated, so the previous one is kept.
        """
        requested_at = datetime.now(timezone.utc)
        try:
            access_token, expires_in, rotated = await self._oauth.refresh_access_token(
                record.refresh_token or ""
            )
        except (OAuthTokenExchangeError, httpx.HTTPError) as exc:
            raise TokenExpiredError(
                f"Your Google authorization has expired. Please sign in again. ({exc})"
            ) from exc

        return replace(
            record,
            access_token=access_token,
            refresh_token=rotated or record.refresh_token,
            access_token_expires_at=requested_at + timedelta(seconds=expires_in),
        )


__all__ = ["Freshness", "RefreshGrantClient", "TokenRefresher"]
