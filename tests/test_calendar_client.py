from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import httpx
import pytest

from workspace_bridge.clients import GoogleCalendarClient
from workspace_bridge.core.errors import ApiError, NotFoundError, QuotaExceededError, TokenExpiredError
from workspace_bridge.services import CredentialManager

from conftest import DummyOAuthClient, make_http_error

START = datetime(2030, 3, 4, 15, 0, tzinfo=timezone.utc)


def _event_payload(**overrides) -> dict:
    payload = {
        "id": "evt-1",
        "summary": "Planning",
        "start": {"dateTime": "2030-03-04T15:00:00Z"},
        "end": {"dateTime": "2030-03-04T15:30:00Z"},
        "htmlLink": "https://www.google.com/calendar/event?eid=evt-1",
        "created": "2030-03-01T08:00:00.000Z",
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_event_builds_request_body(google_api, credential_manager) -> None:
    google_api.responses["calendar"] = {"events.insert": _event_payload()}
    client = GoogleCalendarClient(credential_manager)

    event = await client.create_event(
        title="Planning",
        start_time=START,
        duration_minutes=30,
        attendees=["a@example.com"],
        time_zone="Europe/Berlin",
        colorId="5",
    )

    (call,) = google_api.calls_to("events.insert")
    assert call["calendarId"] == "primary"
    body = call["body"]
    assert body["summary"] == "Planning"
    assert body["start"] == {"dateTime": "2030-03-04T15:00:00+00:00", "timeZone": "Europe/Berlin"}
    assert body["end"]["dateTime"] == "2030-03-04T15:30:00+00:00"
    assert body["attendees"] == [{"email": "a@example.com"}]
    assert body["colorId"] == "5"
    assert "description" not in body
    assert event.id == "evt-1"
    assert event.url.endswith("eid=evt-1")
    assert event.end_time - event.start_time == timedelta(minutes=30)


@pytest.mark.asyncio
async def test_service_is_built_with_current_access_token(google_api, credential_manager) -> None:
    google_api.responses["calendar"] = {"events.get": _event_payload()}
    client = GoogleCalendarClient(credential_manager, calendar_id="team@example.com")

    await client.find_event("evt-1")

    service_name, version, credentials = google_api.builds[0]
    assert (service_name, version) == ("calendar", "v3")
    assert credentials.token == "access-1"
    assert tuple(credentials.scopes) == GoogleCalendarClient.API_SCOPES
    assert google_api.calls_to("events.get") == [{"calendarId": "team@example.com", "eventId": "evt-1"}]


@pytest.mark.asyncio
async def test_stale_token_is_refreshed_before_the_call(google_api, settings) -> None:
    google_api.responses["calendar"] = {"events.get": _event_payload()}
    oauth_client = DummyOAuthClient(access_token="A2")
    manager = CredentialManager(
        {
            "access_token": "A1",
            "refresh_token": "R1",
            "access_token_expires_at": datetime.now(timezone.utc) - timedelta(seconds=10),
        },
        oauth_client,
        settings,
    )

    await GoogleCalendarClient(manager).find_event("evt-1")

    assert oauth_client.calls == ["R1"]
    assert google_api.builds[0][2].token == "A2"


@pytest.mark.asyncio
async def test_refresh_failure_prevents_the_remote_call(google_api, settings) -> None:
    oauth_client = DummyOAuthClient(error=httpx.ConnectError("unreachable"))
    manager = CredentialManager(
        {
            "access_token": "A1",
            "refresh_token": "R1",
            "access_token_expires_at": datetime.now(timezone.utc) - timedelta(seconds=10),
        },
        oauth_client,
        settings,
    )

    with pytest.raises(TokenExpiredError, match="unreachable"):
        await GoogleCalendarClient(manager).find_event("evt-1")

    assert google_api.builds == []


@pytest.mark.asyncio
async def test_list_events_defaults_to_whole_day(google_api, credential_manager) -> None:
    google_api.responses["calendar"] = {
        "events.list": {
            "items": [
                _event_payload(),
                _event_payload(id="evt-2", start={"date": "2030-03-04"}, end={"date": "2030-03-05"}),
            ]
        }
    }
    client = GoogleCalendarClient(credential_manager)

    events = await client.list_events(day=date(2030, 3, 4), limit=10)

    (call,) = google_api.calls_to("events.list")
    assert call["maxResults"] == 10
    assert call["singleEvents"] is True
    assert call["orderBy"] == "startTime"
    assert call["timeMin"].startswith("2030-03-04T00:00:00")
    assert call["timeMax"].startswith("2030-03-04T23:59:59")
    assert [event.id for event in events] == ["evt-1", "evt-2"]
    assert events[1].start_time == datetime(2030, 3, 4)


@pytest.mark.asyncio
async def test_list_events_accepts_explicit_bounds(google_api, credential_manager) -> None:
    google_api.responses["calendar"] = {"events.list": {}}
    client = GoogleCalendarClient(credential_manager)

    events = await client.list_events(time_min="2030-03-01T00:00:00Z", time_max=START)

    (call,) = google_api.calls_to("events.list")
    assert call["timeMin"] == "2030-03-01T00:00:00Z"
    assert call["timeMax"] == "2030-03-04T15:00:00+00:00"
    assert events == []


@pytest.mark.asyncio
async def test_update_event_only_changes_given_fields(google_api, credential_manager) -> None:
    google_api.responses["calendar"] = {
        "events.get": _event_payload(location="Room 1"),
        "events.update": _event_payload(summary="Renamed", location="Room 1"),
    }
    client = GoogleCalendarClient(credential_manager)

    event = await client.update_event("evt-1", title="Renamed")

    (call,) = google_api.calls_to("events.update")
    assert call["eventId"] == "evt-1"
    assert call["body"]["summary"] == "Renamed"
    assert call["body"]["location"] == "Room 1"
    assert event.title == "Renamed"


@pytest.mark.asyncio
async def test_delete_event_and_timezone(google_api, credential_manager) -> None:
    google_api.responses["calendar"] = {
        "events.delete": "",
        "calendars.get": {"id": "primary", "timeZone": "America/Chicago"},
    }
    client = GoogleCalendarClient(credential_manager)

    assert await client.delete_event("evt-1") is True
    assert await client.timezone() == "America/Chicago"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "expected"),
    [(404, NotFoundError), (429, QuotaExceededError), (500, ApiError)],
)
async def test_provider_errors_are_translated(google_api, credential_manager, status, expected) -> None:
    google_api.responses["calendar"] = {"events.get": make_http_error(status)}
    client = GoogleCalendarClient(credential_manager)

    with pytest.raises(expected) as excinfo:
        await client.find_event("missing")

    assert type(excinfo.value) is expected
    assert excinfo.value.status_code == status


@pytest.mark.asyncio
async def test_credentials_near_expiry_are_usable_by_the_api_client(google_api, settings) -> None:
    google_api.responses["calendar"] = {"events.get": _event_payload()}
    oauth_client = DummyOAuthClient()
    manager = CredentialManager(
        {
            "access_token": "A1",
            "refresh_token": "R1",
            "access_token_expires_at": datetime.now(timezone.utc) + timedelta(seconds=120),
        },
        oauth_client,
        settings,
    )

    await GoogleCalendarClient(manager).find_event("evt-1")

    credentials = google_api.builds[0][2]
    headers: dict = {}
    credentials.before_request(None, "GET", "https://www.googleapis.com/calendar/v3", headers)
    assert credentials.valid is True
    assert headers["authorization"] == "Bearer A1"
    assert oauth_client.calls == []
