"""REST client for Google Calendar API v3."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from contextlib import suppress
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from tasksync.adapters.http_resilience import ResilientClient, default_client_factory
from tasksync.config.gcal import GCAL_BASE_URL

from .schema import ErrorPayload, EventListPayload, EventPayload
from .translator import changes_to_body, copy_body, draft_to_body, parse_event

if TYPE_CHECKING:
    from datetime import datetime
    from types import TracebackType

    import httpx

    from tasksync.config import GoogleCalendarConfig, ResilienceConfig
    from tasksync.domain.model import ExternalEvent
    from tasksync.domain.ports import EventChanges, EventDraft

log = getLogger(__name__)

MAX_RESULTS: Final = 250

type TokenProvider = Callable[[], Awaitable[str]]


class GoogleCalendarAPIError(RuntimeError):
    """Raised when the Calendar API answers with a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class GoogleCalendarClient:
    """Event client bound to one primary calendar; reads may target any calendar."""

    config: GoogleCalendarConfig
    calendar_id: str
    token_provider: TokenProvider
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> GoogleCalendarClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def create_event(self, draft: EventDraft) -> ExternalEvent:
        response = await self._request("POST", self._events_url(self.calendar_id), json=draft_to_body(draft))
        event = parse_event(self._validate(response, EventPayload))
        log.info("Created event %s (%s)", event.id, event.title)
        return event

    async def update_event(self, event_id: str, changes: EventChanges) -> ExternalEvent:
        body = changes_to_body(changes)
        response = await self._request(
            "PATCH",
            self._event_url(self.calendar_id, event_id),
            json=body,
        )
        event = parse_event(self._validate(response, EventPayload))
        log.debug("Patched event %s with %s", event.id, sorted(body))
        return event

    async def list_events(
        self,
        calendar_id: str,
        start: datetime,
        end: datetime,
    ) -> list[ExternalEvent]:
        events: list[ExternalEvent] = []
        page_token: str | None = None
        while True:
            params: dict[str, str | int] = {
                "timeMin": start.isoformat(),
                "timeMax": end.isoformat(),
                "singleEvents": "true",
                "orderBy": "startTime",
                "maxResults": MAX_RESULTS,
            }
            if page_token is not None:
                params["pageToken"] = page_token
            response = await self._request("GET", self._events_url(calendar_id), params=params)
            page = self._validate(response, EventListPayload)
            for payload in page.items:
                if payload.start is None or payload.end is None:
                    log.debug("Skipping event %s without start or end", payload.id)
                    continue
                events.append(parse_event(payload))
            if not page.next_page_token:
                return events
            page_token = page.next_page_token

    async def copy_event(
        self,
        event_id: str,
        target_calendar_id: str,
        title_override: str | None = None,
    ) -> ExternalEvent:
        response = await self._request("GET", self._event_url(self.calendar_id, event_id))
        original = self._validate(response, EventPayload)
        response = await self._request(
            "POST",
            self._events_url(target_calendar_id),
            json=copy_body(original, title_override=title_override),
        )
        copied = parse_event(self._validate(response, EventPayload))
        log.info("Copied event %s to %s as %s", event_id, target_calendar_id, copied.id)
        return copied

    def _events_url(self, calendar_id: str) -> str:
        base_url = (self.config.resilience.base_url or GCAL_BASE_URL).rstrip("/")
        return f"{base_url}/calendars/{quote(calendar_id, safe='')}/events"

    def _event_url(self, calendar_id: str, event_id: str) -> str:
        return f"{self._events_url(calendar_id)}/{quote(event_id, safe='')}"

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: object | None = None,
        params: dict[str, str | int] | None = None,
    ) -> httpx.Response:
        token = await self.token_provider()
        response = await self._http().request(
            method,
            url,
            json=json,
            params=params,
            headers={"Authorization": f"Bearer {token}"},
        )
        if response.is_success:
            return response

        message = response.text
        with suppress(ValidationError, ValueError):
            message = ErrorPayload.model_validate(response.json()).error.message or message
        log.error(f"Google Calendar API error {response.status_code}: {message}")
        raise GoogleCalendarAPIError(
            f"Google Calendar API error {response.status_code}: {message}",
            status_code=response.status_code,
        )

    @staticmethod
    def _validate[ModelT: BaseModel](
        response: httpx.Response,
        model: type[ModelT],
    ) -> ModelT:
        try:
            return model.model_validate(response.json())
        except (ValidationError, ValueError) as exc:
            raise GoogleCalendarAPIError(f"Unexpected Google Calendar payload: {exc}") from exc

    def _http(self) -> ResilientClient:
        if self._client is None:
            self._client = self.client_factory(self.config.resilience)
        return self._client
