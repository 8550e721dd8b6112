"""
Pydantic models for results returned by the Calendar, Docs and Meet clients.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def _event_time(node: Any) -> Any:
    """Unpack a Calendar ``{"dateTime": ...}`` / ``{"date": ...}`` node."""
    if isinstance(node, dict):
        if node.get("dateTime"):
            return node["dateTime"]
        if node.get("date"):
            return datetime.fromisoformat(node["date"])
        return None
    return node


class Event(BaseModel):
    """A Google Calendar event."""

    id: str
    title: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    url: Optional[str] = Field(None, description="Link to the event in Google Calendar.")
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _unpack_time(cls, value: Any) -> Any:
        return _event_time(value)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Event":
        return cls(
            id=payload["id"],
            title=payload.get("summary"),
            start_time=payload.get("start"),
            end_time=payload.get("end"),
            location=payload.get("location"),
            url=payload.get("htmlLink"),
            description=payload.get("description"),
            created_at=payload.get("created"),
        )


class Document(BaseModel):
    """A Google Docs document as seen through Drive."""

    id: str
    title: Optional[str] = None
    url: Optional[str] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None

    @classmethod
    def from_drive_file(cls, payload: Dict[str, Any], *, title: Optional[str] = None) -> "Document":
        return cls(
            id=payload["id"],
            title=title or payload.get("name"),
            url=payload.get("webViewLink"),
            created_at=payload.get("createdTime"),
            modified_at=payload.get("modifiedTime"),
        )


class Folder(BaseModel):
    """A Google Drive folder."""

    id: str
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    parent_ids: List[str] = Field(default_factory=list)

    @classmethod
    def from_drive_file(cls, payload: Dict[str, Any], *, parent_ids: Optional[List[str]] = None) -> "Folder":
        return cls(
            id=payload["id"],
            name=payload.get("name"),
            created_at=payload.get("createdTime"),
            modified_at=payload.get("modifiedTime"),
            parent_ids=parent_ids if parent_ids is not None else payload.get("parents") or [],
        )


class Meeting(BaseModel):
    """A Google Meet conference or meeting space."""

    id: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None
    meeting_code: Optional[str] = None
    start_time: Optional[datetime] = None

    @field_validator("start_time", mode="before")
    @classmethod
    def _unpack_time(cls, value: Any) -> Any:
        return _event_time(value)


__all__ = ["Document", "Event", "Folder", "Meeting"]
