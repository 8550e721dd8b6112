"""Google Meet client wrapper."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, TYPE_CHECKING
from uuid import uuid4

from googleapiclient.discovery import build

from workspace_bridge.core.errors import translate_provider_errors
from workspace_bridge.schemas import Meeting

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from workspace_bridge.services.credential_manager import CredentialManager


def _video_entry_point(conference: dict) -> Optional[str]:
    entry_points = conference.get("entryPoints") or []
    for entry in entry_points:
        if entry.get("entryPointType") == "video":
            return entry.get("uri")
    return entry_points[0].get("uri") if entry_points else None


class GoogleMeetClient:
    """Schedule Meet conferences through Calendar and create ad-hoc spaces."""

    API_SCOPES = (
        "https://www.googleapis.com/auth/calendar",
        "https://www.googleapis.com/auth/calendar.events",
        "https://www.googleapis.com/auth/meetings.space.created",
    )

    def __init__(self, credential_manager: "CredentialManager", calendar_id: str = "primary") -> None:
        self._credentials = credential_manager
        self._calendar_id = calendar_id

    async def create(
        self,
        title: str,
        *,
        start_time: Optional[datetime] = None,
        duration_minutes: int = 60,
        description: Optional[str] = None,
    ) -> Meeting:
        """Create a calendar event carrying a new Meet conference."""
        start = start_time or datetime.now(timezone.utc)
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        end = start + timedelta(minutes=duration_minutes)
        body: dict[str, Any] = {
            "summary": title,
            "start": {"dateTime": start.isoformat()},
            "end": {"dateTime": end.isoformat()},
            "conferenceData": {
                "createRequest": {
                    "requestId": uuid4().hex,
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                }
            },
        }
        if description is not None:
            body["description"] = description

        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_insert() -> dict:
                service = build(
                    "calendar",
                    "v3",
                    credentials=context.to_google_credentials(),
                    cache_discovery=False,
                )
                return (
                    service.events()
                    .insert(calendarId=self._calendar_id, body=body, conferenceDataVersion=1)
                    .execute()
                )

            created = await asyncio.to_thread(_execute_insert)
            conference = created.get("conferenceData") or {}
            return Meeting(
                id=conference.get("conferenceId"),
                title=created.get("summary"),
                url=_video_entry_point(conference) or created.get("hangoutLink"),
                meeting_code=conference.get("conferenceId"),
                start_time=created.get("start"),
            )

    async def create_space(self, *, access_type: str = "OPEN") -> Meeting:
        """Create a standalone Meet space with the given access type."""
        with translate_provider_errors():
            context = await self._credentials.authorize(self.API_SCOPES)

            def _execute_create() -> dict:
                service = build(
                    "meet",
                    "v2",
                    credentials=context.to_google_credentials(),
                    cache_discovery=False,
                )
                return service.spaces().create(body={"config": {"accessType": access_type}}).execute()

            space = await asyncio.to_thread(_execute_create)
            return Meeting(
                id=space.get("name"),
                url=space.get("meetingUri"),
                meeting_code=space.get("meetingCode"),
            )


__all__ = ["GoogleMeetClient"]
