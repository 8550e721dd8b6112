"""Public schema exports."""

from .workspace import Document, Event, Folder, Meeting

__all__ = ["Document", "Event", "Folder", "Meeting"]
