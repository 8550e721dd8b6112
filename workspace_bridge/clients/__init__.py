"""Expose constructed client wrappers."""

from .google_auth import GoogleOAuthClient, OAuthTokenExchangeError
from .google_calendar import GoogleCalendarClient
from .google_docs import GoogleDocsClient
from .google_meet import GoogleMeetClient

__all__ = [
    "GoogleCalendarClient",
    "GoogleDocsClient",
    "GoogleMeetClient",
    "GoogleOAuthClient",
    "OAuthTokenExchangeError",
]
