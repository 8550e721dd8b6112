"""
Credential records and the protocols callers implement to supply them.

Callers hand over either a mapping or an object implementing
:class:`CredentialSource`. Objects that also implement any of the writer
protocols receive refreshed values back after a successful refresh.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Protocol, Tuple, runtime_checkable

from workspace_bridge.core.errors import ConfigurationError

ACCESS_TOKEN = "access_token"
REFRESH_TOKEN = "refresh_token"
ACCESS_TOKEN_EXPIRES_AT = "access_token_expires_at"
REQUIRED_FIELDS: Tuple[str, ...] = (ACCESS_TOKEN, REFRESH_TOKEN, ACCESS_TOKEN_EXPIRES_AT)

# Canonical key first; the rest are accepted when reading a mapping.
_KEY_ALIASES: dict[str, Tuple[str, ...]] = {
    ACCESS_TOKEN: ("access_token", "accessToken", "google_token"),
    REFRESH_TOKEN: ("refresh_token", "refreshToken", "google_refresh_token"),
    ACCESS_TOKEN_EXPIRES_AT: (
        "access_token_expires_at",
        "accessTokenExpiresAt",
        "google_token_expires_at",
    ),
}


@runtime_checkable
class CredentialSource(Protocol):
    """Anything exposing the three OAuth token fields."""

    access_token: Optional[str]
    refresh_token: Optional[str]
    access_token_expires_at: Any


@runtime_checkable
class AccessTokenWriter(Protocol):
    def set_access_token(self, token: str) -> None: ...


@runtime_checkable
class RefreshTokenWriter(Protocol):
    def set_refresh_token(self, token: str) -> None: ...


@runtime_checkable
class ExpiryWriter(Protocol):
    def set_access_token_expires_at(self, expires_at: datetime) -> None: ...


class MappingCredentials:
    """Read-only :class:`CredentialSource` view over a mapping."""

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = data

    def _key_for(self, name: str) -> str:
        for key in _KEY_ALIASES[name]:
            if self._data.get(key) is not None:
                return key
        return name

    def _lookup(self, name: str) -> Any:
        return self._data.get(self._key_for(name))

    @property
    def access_token(self) -> Optional[str]:
        return self._lookup(ACCESS_TOKEN)

    @property
    def refresh_token(self) -> Optional[str]:
        return self._lookup(REFRESH_TOKEN)

    @property
    def access_token_expires_at(self) -> Any:
        return self._lookup(ACCESS_TOKEN_EXPIRES_AT)


class MutableMappingCredentials(MappingCredentials):
    """Mapping view that also writes refreshed values back into the mapping.

    Values are stored under whichever key the caller originally used, and the
    expiry keeps the caller's representation (epoch number, string, datetime).
    """

    _data: MutableMapping[str, Any]

    def set_access_token(self, token: str) -> None:
        self._data[self._key_for(ACCESS_TOKEN)] = token

    def set_refresh_token(self, token: str) -> None:
        self._data[self._key_for(REFRESH_TOKEN)] = token

    def set_access_token_expires_at(self, expires_at: datetime) -> None:
        key = self._key_for(ACCESS_TOKEN_EXPIRES_AT)
        previous = self._data.get(key)
        if isinstance(previous, bool):
            value: Any = expires_at
        elif isinstance(previous, int):
            value = int(expires_at.timestamp())
        elif isinstance(previous, float):
            value = expires_at.timestamp()
        elif isinstance(previous, str):
            value = expires_at.isoformat()
        else:
            value = expires_at
        self._data[key] = value


@dataclass(frozen=True, slots=True)
class CredentialRecord:
    """Normalized token triple held by a credential manager."""

    access_token: Optional[str] = field(default=None, repr=False)
    refresh_token: Optional[str] = field(default=None, repr=False)
    access_token_expires_at: Any = None

    def missing_fields(self) -> List[str]:
        return [name for name in REQUIRED_FIELDS if getattr(self, name) is None]

    def has_refresh_token(self) -> bool:
        return bool(self.refresh_token and self.refresh_token.strip())

    def expires_within(self, seconds: float, *, now: Optional[datetime] = None) -> bool:
        """Return True when the access token expires less than ``seconds`` from ``now``."""
        current = now or datetime.now(timezone.utc)
        return self.access_token_expires_at < current + timedelta(seconds=seconds)


def _from_epoch(seconds: float) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def coerce_expiry(value: Any) -> Any:
    """Normalize an expiry to an aware UTC ``datetime``.

    Accepts datetimes (naive values are taken as UTC), epoch seconds as numbers
    or numeric strings, ISO-8601 strings and ``"YYYY-MM-DD HH:MM:SS UTC"``.
    Anything else is returned as-is so that validation can report it.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return _from_epoch(value) or value
    if isinstance(value, str):
        text = value.strip()
        try:
            seconds = float(text)
        except ValueError:
            pass
        else:
            return _from_epoch(seconds) or value
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        elif text.upper().endswith(" UTC"):
            text = f"{text[:-4]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return value
        return coerce_expiry(parsed)
    return value


def as_credential_source(credentials: Any) -> CredentialSource:
    """Wrap mappings; accept objects that already implement the protocol."""
    if isinstance(credentials, MutableMapping):
        return MutableMappingCredentials(credentials)
    if isinstance(credentials, Mapping):
        return MappingCredentials(credentials)
    if isinstance(credentials, CredentialSource):
        return credentials
    raise ConfigurationError(
        f"Unsupported credential source {type(credentials).__name__!r}; "
        f"expected a mapping or an object exposing {', '.join(REQUIRED_FIELDS)}"
    )


def normalize_credentials(source: CredentialSource) -> CredentialRecord:
    """Snapshot a credential source into a :class:`CredentialRecord`."""
    return CredentialRecord(
        access_token=source.access_token,
        refresh_token=source.refresh_token,
        access_token_expires_at=coerce_expiry(source.access_token_expires_at),
    )


def validate_credentials(record: CredentialRecord) -> None:
    """Raise ``ConfigurationError`` unless every required field is usable."""
    missing = record.missing_fields()
    if missing:
        raise ConfigurationError(f"Credentials must include: {', '.join(missing)}")
    if not isinstance(record.access_token_expires_at, datetime):
        raise ConfigurationError(
            f"Credentials field {ACCESS_TOKEN_EXPIRES_AT} is not a recognizable "
            f"timestamp: {record.access_token_expires_at!r}"
        )


__all__ = [
    "ACCESS_TOKEN",
    "ACCESS_TOKEN_EXPIRES_AT",
    "AccessTokenWriter",
    "CredentialRecord",
    "CredentialSource",
    "ExpiryWriter",
    "MappingCredentials",
    "MutableMappingCredentials",
    "REFRESH_TOKEN",
    "REQUIRED_FIELDS",
    "RefreshTokenWriter",
    "as_credential_source",
    "coerce_expiry",
    "normalize_credentials",
    "validate_credentials",
]
