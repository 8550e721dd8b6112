"""
Google OAuth utilities.

These helpers build the consent URL and talk to the token endpoint for the
authorization-code and refresh-token grants.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Dict, Iterable, Optional, Tuple
from urllib.parse import urlencode

import httpx

from workspace_bridge.core.config import WorkspaceSettings
from workspace_bridge.core.errors import ConfigurationError


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint returns an error."""


class GoogleOAuthClient:
    """Build Google authorization URLs and call the token endpoint."""

    SITE = "https://accounts.google.com"
    AUTHORIZE_PATH = "/o/oauth2/auth"
    TOKEN_PATH = "/o/oauth2/token"
    AUTH_BASE_URL = SITE + AUTHORIZE_PATH
    TOKEN_URL = SITE + TOKEN_PATH

    def __init__(
        self,
        settings: WorkspaceSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def _client_credentials(self) -> Tuple[str, str]:
        client_id = self._settings.client_id
        client_secret = self._settings.client_secret
        if not client_id or not client_secret:
            raise ConfigurationError(
                "Google OAuth client is not configured; set client_id/client_secret "
                "or GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET."
            )
        return client_id, client_secret

    def build_authorization_url(
        self,
        scopes: Iterable[str],
        state: Optional[str] = None,
        access_type: str = "offline",
    ) -> str:
        """Construct the Google OAuth consent URL."""
        client_id, _ = self._client_credentials()
        params = {
            "client_id": client_id,
            "redirect_uri": self._settings.redirect_uri,
            "response_type": "code",
            "scope": " ".join(scopes),
            "access_type": access_type,
            "include_granted_scopes": "true",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{self.AUTH_BASE_URL}?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> Tuple[str, str, int]:
        """
        Exchange an authorization code for tokens.

        Returns a tuple of (access_token, refresh_token, expires_in_seconds).
        """
        client_id, client_secret = self._client_credentials()
        token_payload = await self._post_token(
            {
                "code": code,
                "client_id": client_id,
                "client_secret": client_secret,
                "redirect_uri": self._settings.redirect_uri,
                "grant_type": "authorization_code",
            }
        )
        access_token = token_payload.get("access_token")
        refresh_token = token_payload.get("refresh_token")
        expires_in = token_payload.get("expires_in")

        if not access_token or not refresh_token or not expires_in:
            raise OAuthTokenExchangeError("Incomplete token payload returned from Google.")

        return access_token, refresh_token, _expires_in_seconds(expires_in)

    async def refresh_access_token(self, refresh_token: str) -> Tuple[str, int, Optional[str]]:
        """
        Refresh the access token using a stored refresh token.

        Returns (access_token, expires_in_seconds, rotated_refresh_token); the
        last element is None when Google keeps the existing refresh token.
        """
        client_id, client_secret = self._client_credentials()
        token_payload = await self._post_token(
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            }
        )
        access_token = token_payload.get("access_token")
        expires_in = token_payload.get("expires_in")

        if not access_token or not expires_in:
            raise OAuthTokenExchangeError("Incomplete refresh payload returned from Google.")

        rotated = token_payload.get("refresh_token") or None
        return access_token, _expires_in_seconds(expires_in), rotated

    async def _post_token(self, payload: Dict[str, str]) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            timeout=self._settings.refresh_timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await client.post(self.TOKEN_URL, data=payload)

        if response.status_code != HTTPStatus.OK:
            raise OAuthTokenExchangeError(_describe_error(response))

        try:
            token_payload = response.json()
        except ValueError as exc:
            raise OAuthTokenExchangeError("Token endpoint returned a non-JSON body.") from exc
        if not isinstance(token_payload, dict):
            raise OAuthTokenExchangeError("Token endpoint returned an unexpected payload.")
        return token_payload


def _expires_in_seconds(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise OAuthTokenExchangeError(f"Token endpoint returned an invalid expires_in: {value!r}") from exc


def _describe_error(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"{response.status_code}: {response.text}"
    if isinstance(body, dict) and body.get("error"):
        description = body.get("error_description")
        if description:
            return f"{body['error']}: {description}"
        return str(body["error"])
    return f"{response.status_code}: {response.text}"


__all__ = ["GoogleOAuthClient", "OAuthTokenExchangeError"]
