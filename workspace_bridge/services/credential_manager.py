"""
Credential lifecycle management for Google API access.

A :class:`CredentialManager` owns one caller-supplied credential. It validates
the credential once, refreshes the access token whenever it is inside the
expiry buffer, pushes refreshed values back to the caller's object where the
object allows it, and hands out a fresh :class:`AuthorizationContext` for every
remote operation.

Write-back is asymmetric: the manager's own record always receives every
refreshed field, while the caller's object only receives the fields it has
writers for. A caller exposing ``set_access_token`` but not
``set_refresh_token`` can therefore drift from the manager when Google rotates
the refresh token.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from google.oauth2.credentials import Credentials

from workspace_bridge.core.config import WorkspaceSettings
from workspace_bridge.core.errors import MissingTokenError, TokenExpiredError
from workspace_bridge.models.credentials import (
    ACCESS_TOKEN,
    ACCESS_TOKEN_EXPIRES_AT,
    REFRESH_TOKEN,
    AccessTokenWriter,
    CredentialRecord,
    CredentialSource,
    ExpiryWriter,
    RefreshTokenWriter,
    as_credential_source,
    normalize_credentials,
    validate_credentials,
)
from workspace_bridge.services.token_refresher import Freshness, RefreshGrantClient, TokenRefresher

logger = logging.getLogger(__name__)


class CredentialState(str, Enum):
    VALIDATED = "validated"
    FRESH = "fresh"
    STALE = "stale"
    REFRESHING = "refreshing"
    REFRESHED = "refreshed"
    REFRESH_FAILED = "refresh_failed"


@dataclass(frozen=True, slots=True)
class AuthorizationContext:
    """Bearer token plus the scopes it was requested for, valid for one operation."""

    access_token: str = field(repr=False)
    scopes: Tuple[str, ...]
    expires_at: datetime

    def authorization_header(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    def to_google_credentials(self) -> Credentials:
        """Credentials for ``googleapiclient`` that never refresh on their own.

        No expiry is set, so freshness is decided by the manager alone.
        """
        return Credentials(token=self.access_token, scopes=list(self.scopes))


class CredentialManager:
    """Validate, refresh and hand out authorization for one credential."""

    def __init__(
        self,
        credentials: Any,
        oauth_client: RefreshGrantClient,
        settings: WorkspaceSettings,
    ) -> None:
        self._source: CredentialSource = as_credential_source(credentials)
        record = normalize_credentials(self._source)
        validate_credentials(record)

        self._record = record
        self._refresher = TokenRefresher(
            oauth_client,
            expiry_buffer_seconds=settings.token_expiry_buffer_seconds,
        )
        self._writers = self._resolve_writers(self._source)
        self._lock = asyncio.Lock()
        self._state = CredentialState.VALIDATED
        self._failure: Optional[TokenExpiredError] = None

    @staticmethod
    def _resolve_writers(source: CredentialSource) -> List[Tuple[str, Callable[[Any], None]]]:
        writers: List[Tuple[str, Callable[[Any], None]]] = []
        if isinstance(source, AccessTokenWriter):
            writers.append((ACCESS_TOKEN, source.set_access_token))
        if isinstance(source, RefreshTokenWriter):
            writers.append((REFRESH_TOKEN, source.set_refresh_token))
        if isinstance(source, ExpiryWriter):
            writers.append((ACCESS_TOKEN_EXPIRES_AT, source.set_access_token_expires_at))
        return writers

    @property
    def record(self) -> CredentialRecord:
        return self._record

    @property
    def state(self) -> CredentialState:
        return self._state

    @property
    def writable_fields(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self._writers)

    def freshness(self) -> Freshness:
        return self._refresher.assess(self._record)

    async def authorize(self, scopes: Iterable[str]) -> AuthorizationContext:
        """Return an authorization context, refreshing the token first if needed.

        Raises:
            MissingTokenError: no refresh token is available.
            TokenExpiredError: the refresh failed now or on an earlier call.
        """
        async with self._lock:
            if self._failure is not None:
                raise TokenExpiredError(self._failure.message)

            freshness = self._refresher.assess(self._record)
            if freshness is Freshness.UNREFRESHABLE:
                raise MissingTokenError(
                    "Missing Google refresh token. Please re-authenticate with Google."
                )
            if freshness is Freshness.STALE:
                self._state = CredentialState.STALE
                await self._refresh()
            else:
                self._state = CredentialState.FRESH
            record = self._record

        return AuthorizationContext(
            access_token=record.access_token or "",
            scopes=tuple(scopes),
            expires_at=record.access_token_expires_at,
        )

    async def _refresh(self) -> None:
        self._state = CredentialState.REFRESHING
        logger.info(
            "Refreshing Google access token",
            extra={"expires_at": self._record.access_token_expires_at.isoformat()},
        )
        try:
            refreshed = await self._refresher.refresh(self._record)
        except TokenExpiredError as exc:
            self._state = CredentialState.REFRESH_FAILED
            self._failure = exc
            logger.warning("Google token refresh failed; re-authentication required")
            raise
        except Exception:
            self._state = CredentialState.STALE
            raise

        self._write_back(refreshed)
        self._record = refreshed
        self._state = CredentialState.REFRESHED
        logger.info(
            "Refreshed Google access token",
            extra={"expires_at": refreshed.access_token_expires_at.isoformat()},
        )

    def _write_back(self, refreshed: CredentialRecord) -> None:
        """Push refreshed values into the caller's object, field by field."""
        for name, writer in self._writers:
            try:
                writer(getattr(refreshed, name))
            except Exception:
                logger.warning(
                    "Could not write refreshed %s back to credential source",
                    name,
                    exc_info=True,
                )
        skipped = [name for name in (ACCESS_TOKEN, REFRESH_TOKEN, ACCESS_TOKEN_EXPIRES_AT)
                   if name not in self.writable_fields]
        if skipped:
            logger.debug("Credential source does not store %s", ", ".join(skipped))


__all__ = ["AuthorizationContext", "CredentialManager", "CredentialState"]
