"""Public interface for the Google Calendar adapter."""

from __future__ import annotations

from .auth import ServiceAccountTokenSource, decode_service_account_info
from .client import GoogleCalendarAPIError, GoogleCalendarClient
from .schema import EventListPayload, EventPayload
from .translator import changes_to_body, draft_to_body, parse_event

__all__ = [
    "EventListPayload",
    "EventPayload",
    "GoogleCalendarAPIError",
    "GoogleCalendarClient",
    "ServiceAccountTokenSource",
    "changes_to_body",
    "decode_service_account_info",
    "draft_to_body",
    "parse_event",
]
