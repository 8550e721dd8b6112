"""Google Calendar client wrapper."""

from __future__ import annotations

import asyncio
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING, Union

from googleapiclient.discovery import build

from workspace_bridge.core.errors import translate_provider_errors
from workspace_bridge.schemas import Event

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from workspace_bridge.services.credential_manager import (
        AuthorizationContext,
        CredentialManager,
    )

TimeBound = Union[datetime, str]


def _rfc3339(value: TimeBound) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.astimezone()
        return value.isoformat()
    return value


def _event_time_node(value: datetime, time_zone: Optional[str]) -> Dict[str, str]:
    node = {"dateTime": _rfc3339(value)}
    if time_zone:
        node["timeZone"] = time_zone
    return node


class GoogleCalendarClient:
    """Create, read, update and delete events on one calendar."""

    API_SCOPES = (
        "https://www.googleapis.com/auth/calendar",
        "https://www.googleapis.com/auth/calendar.events",
    )

    def __init__(self, credential_manager: "CredentialManager", calendar_id: str = "primary") -> None:
        self._credentials = credential_manager
        self._calendar_id = calendar_id

    @property
    def calendar_id(self) -> str:
        return self._calendar_id

    @staticmethod
    def _service(context: "AuthorizationContext") -> Any:
        return build(
            "calendar",
            "v3",
            credentials=context.to_google_credentials(),
            cache_discovery=False,
        )

    async def create_event(
        self,
        *,
        title: str,
        start_time: datetime,
        duration_minutes: int = 60,
        end_time: Optional[datetime] = None,
        description: Optional[str] = None,
        location: Optional[str] = None,
        attendees: Iterable[str] = (),
        time_zone: Optional[str] = None,
        **extra_fields: Any,
    ) -> Event:
        """Create an event; ``extra_fields`` are merged into the API request body."""
        finish = end_time or start_time + timedelta(minutes=duration_minutes)
        body: Dict[str, Any] = {
            "summary": title,
            "start": _event_time_node(start_time, time_zone),
            "end": _event_time_node(finish, time_zone),
        }
        if description is not None:
            body["description"] = description
        if location is not None:
            body["location"] = location
        attendee_list = [{"email": email} for email in attendees]
        if attendee_list:
            body["attendees"] = attendee_list
        body.update(extra_fields)

        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_insert() -> dict:
                service = self._service(context)
                return service.events().insert(calendarId=self._calendar_id, body=body).execute()

            created = await asyncio.to_thread(_execute_insert)
            return Event.from_api(created)

    async def list_events(
        self,
        *,
        day: Optional[date] = None,
        limit: int = 100,
        time_min: Optional[TimeBound] = None,
        time_max: Optional[TimeBound] = None,
    ) -> List[Event]:
        """List single events ordered by start time; defaults to the whole of ``day``."""
        target = day or date.today()
        lower = _rfc3339(time_min or datetime.combine(target, time.min))
        upper = _rfc3339(time_max or datetime.combine(target, time.max))

        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_list() -> dict:
                service = self._service(context)
                return (
                    service.events()
                    .list(
                        calendarId=self._calendar_id,
                        maxResults=limit,
                        singleEvents=True,
                        orderBy="startTime",
                        timeMin=lower,
                        timeMax=upper,
                    )
                    .execute()
                )

            response = await asyncio.to_thread(_execute_list)
            return [Event.from_api(item) for item in response.get("items", [])]

    async def find_event(self, event_id: str) -> Event:
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_get() -> dict:
                service = self._service(context)
                return service.events().get(calendarId=self._calendar_id, eventId=event_id).execute()

            found = await asyncio.to_thread(_execute_get)
            return Event.from_api(found)

    async def update_event(
        self,
        event_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        location: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> Event:
        """Apply the given changes to an existing event; ``None`` leaves a field as is."""
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_update() -> dict:
                service = self._service(context)
                event = service.events().get(calendarId=self._calendar_id, eventId=event_id).execute()
                if title is not None:
                    event["summary"] = title
                if description is not None:
                    event["description"] = description
                if location is not None:
                    event["location"] = location
                if start_time is not None:
                    event["start"] = {"dateTime": _rfc3339(start_time)}
                if end_time is not None:
                    event["end"] = {"dateTime": _rfc3339(end_time)}
                return (
                    service.events()
                    .update(calendarId=self._calendar_id, eventId=event_id, body=event)
                    .execute()
                )

            updated = await asyncio.to_thread(_execute_update)
            return Event.from_api(updated)

    async def delete_event(self, event_id: str) -> bool:
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_delete() -> None:
                service = self._service(context)
                service.events().delete(calendarId=self._calendar_id, eventId=event_id).execute()

            await asyncio.to_thread(_execute_delete)
        return True

    async def timezone(self) -> str:
        """Return the IANA time zone configured on the calendar."""
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_get() -> dict:
                service = self._service(context)
                return service.calendars().get(calendarId=self._calendar_id).execute()

            calendar = await asyncio.to_thread(_execute_get)
            return calendar["timeZone"]


__all__ = ["GoogleCalendarClient"]
