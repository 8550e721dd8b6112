"""
Error taxonomy shared by the credential core and the service adapters.

Callers are expected to branch on the exception class, never on message text.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

logger = logging.getLogger(__name__)


class WorkspaceError(Exception):
    """Base class for every error surfaced by this package."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(WorkspaceError):
    """Raised when supplied credentials or settings are incomplete."""


class AuthorizationError(WorkspaceError):
    """Raised when the provider rejects a call as unauthorized."""


class TokenExpiredError(AuthorizationError):
    """Raised when refreshing an expired access token fails."""


class MissingTokenError(AuthorizationError):
    """Raised when a refresh token is required but not available."""


class ApiError(WorkspaceError):
    """Raised for provider client errors not covered by a narrower kind."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(ApiError):
    """Raised when the provider reports that a resource does not exist."""

    def __init__(self, message: str, status_code: Optional[int] = 404) -> None:
        super().__init__(message, status_code)


class QuotaExceededError(ApiError):
    """Raised when the provider rate-limits the caller."""

    def __init__(self, message: str, status_code: Optional[int] = 429) -> None:
        super().__init__(message, status_code)


def _provider_message(exc: HttpError) -> str:
    reason = exc.reason if isinstance(exc.reason, str) else ""
    return reason or str(exc)


def map_http_error(exc: HttpError) -> WorkspaceError:
    """Convert a Google API client error into the local taxonomy."""
    status_code = int(exc.resp.status)
    message = _provider_message(exc)
    if status_code == 401:
        return AuthorizationError(message)
    if status_code == 404:
        return NotFoundError(message)
    if status_code == 429:
        return QuotaExceededError(message)
    return ApiError(f"{status_code}: {message}", status_code=status_code)


@contextmanager
def translate_provider_errors() -> Iterator[None]:
    """Wrap a block that talks to Google so that only local errors escape."""
    try:
        yield
    except WorkspaceError:
        raise
    except HttpError as exc:
        mapped = map_http_error(exc)
        logger.debug(
            "Translated provider error",
            extra={"status_code": exc.resp.status, "error_kind": type(mapped).__name__},
        )
        raise mapped from exc
    except GoogleAuthError as exc:
        raise AuthorizationError(str(exc)) from exc
    except Exception as exc:
        raise WorkspaceError(str(exc)) from exc


__all__ = [
    "ApiError",
    "AuthorizationError",
    "ConfigurationError",
    "MissingTokenError",
    "NotFoundError",
    "QuotaExceededError",
    "TokenExpiredError",
    "WorkspaceError",
    "map_http_error",
    "translate_provider_errors",
]
