"""Pytest configuration and fakes shared across the suite."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Tuple

import _bootstrap  # noqa: F401
import httplib2
import pytest
from googleapiclient.errors import HttpError

from workspace_bridge.core.config import WorkspaceSettings, reset_settings
from workspace_bridge.services import CredentialManager


def make_http_error(status: int, message: str = "provider failure") -> HttpError:
    resp = httplib2.Response({"status": status})
    content = json.dumps({"error": {"code": status, "message": message}}).encode("utf-8")
    return HttpError(resp, content)


class DummyOAuthClient:
    """Stand-in for GoogleOAuthClient.refresh_access_token."""

    def __init__(
        self,
        *,
        access_token: str = "refreshed-access",
        expires_in: int = 3600,
        rotated_refresh_token: str | None = None,
        error: Exception | None = None,
    ) -> None:
        self.access_token = access_token
        self.expires_in = expires_in
        self.rotated_refresh_token = rotated_refresh_token
        self.error = error
        self.calls: list[str] = []

    async def refresh_access_token(self, refresh_token: str) -> tuple[str, int, str | None]:
        self.calls.append(refresh_token)
        if self.error is not None:
            raise self.error
        return self.access_token, self.expires_in, self.rotated_refresh_token


class FakeRequest:
    def __init__(self, response: Any) -> None:
        self._response = response

    def execute(self) -> Any:
        if isinstance(self._response, Exception):
            raise self._response
        return self._response


class FakeResource:
    """Mimic googleapiclient resource chains such as ``events().insert(...).execute()``.

    ``responses`` maps a dotted method path (``"events.insert"``) to the value
    returned by ``execute()``; a list is consumed one item per call and an
    exception instance is raised.
    """

    def __init__(self, responses: Dict[str, Any], calls: List[Tuple[str, dict]], path: Tuple[str, ...] = ()) -> None:
        self._responses = responses
        self._calls = calls
        self._path = path

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)
        path = self._path + (name,)
        key = ".".join(path)

        def _call(*args: Any, **kwargs: Any) -> Any:
            if key not in self._responses:
                if name == "execute":
                    raise AssertionError(f"No fake response configured for {'.'.join(self._path)}")
                return FakeResource(self._responses, self._calls, path)
            self._calls.append((key, kwargs))
            response = self._responses[key]
            if isinstance(response, list):
                response = response.pop(0)
            return FakeRequest(response)

        return _call


class FakeGoogleApi:
    """Records ``build`` invocations and serves canned responses per API."""

    def __init__(self) -> None:
        self.responses: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, dict]] = []
        self.builds: List[Tuple[str, str, Any]] = []

    def build(self, service_name: str, version: str, credentials: Any = None, **_: Any) -> FakeResource:
        self.builds.append((service_name, version, credentials))
        return FakeResource(self.responses.setdefault(service_name, {}), self.calls)

    def calls_to(self, key: str) -> List[dict]:
        return [kwargs for name, kwargs in self.calls if name == key]


@pytest.fixture
def settings() -> WorkspaceSettings:
    return WorkspaceSettings(client_id="client", client_secret="secret")


@pytest.fixture
def fresh_credentials() -> dict:
    return {
        "access_token": "access-1",
        "refresh_token": "refresh-1",
        "access_token_expires_at": datetime.now(timezone.utc) + timedelta(hours=1),
    }


@pytest.fixture
def oauth_client() -> DummyOAuthClient:
    return DummyOAuthClient()


@pytest.fixture
def credential_manager(fresh_credentials, oauth_client, settings) -> CredentialManager:
    return CredentialManager(fresh_credentials, oauth_client, settings)


@pytest.fixture
def google_api(monkeypatch) -> FakeGoogleApi:
    from workspace_bridge.clients import google_calendar, google_docs, google_meet

    fake = FakeGoogleApi()
    for module in (google_calendar, google_docs, google_meet):
        monkeypatch.setattr(module, "build", fake.build)
    return fake


@pytest.fixture(autouse=True)
def _reset_default_settings():
    reset_settings()
    yield
    reset_settings()
