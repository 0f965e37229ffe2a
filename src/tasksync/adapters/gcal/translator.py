"""Translate Calendar API payloads into domain entities and request bodies."""

from __future__ import annotations

from datetime import datetime
from logging import getLogger
from typing import TYPE_CHECKING

from tasksync.domain.model import EventStatus, ExternalEvent

if TYPE_CHECKING:
    from tasksync.domain.model import EventTime
    from tasksync.domain.ports import EventChanges, EventDraft

    from .schema import EventDateTime, EventPayload

log = getLogger(__name__)


def _parse_time(value: EventDateTime | None, *, event_id: str, edge: str) -> EventTime:
    if value is not None:
        if value.date_time is not None:
            return value.date_time
        if value.date is not None:
            return value.date
    raise ValueError(f"Event {event_id} has no {edge} time")


def _parse_status(value: str) -> EventStatus:
    try:
        return EventStatus(value)
    except ValueError:
        log.debug("Unknown event status %r, treating it as confirmed", value)
        return EventStatus.CONFIRMED


def parse_event(payload: EventPayload) -> ExternalEvent:
    private = payload.extended_properties.private if payload.extended_properties else {}
    return ExternalEvent(
        id=payload.id,
        title=payload.summary,
        start=_parse_time(payload.start, event_id=payload.id, edge="start"),
        end=_parse_time(payload.end, event_id=payload.id, edge="end"),
        notes=payload.description,
        status=_parse_status(payload.status),
        private=dict(private),
    )


def time_to_payload(value: EventTime) -> dict[str, str]:
    """All-day values use ``date``; timed values use ``dateTime`` with their offset."""

    if isinstance(value, datetime):
        if value.tzinfo is None:
            raise ValueError("Event timestamps must include timezone information")
        return {"dateTime": value.isoformat()}
    return {"date": value.isoformat()}


def draft_to_body(draft: EventDraft) -> dict[str, object]:
    body: dict[str, object] = {
        "summary": draft.title,
        "start": time_to_payload(draft.start),
        "end": time_to_payload(draft.end),
        "status": EventStatus.CONFIRMED.value,
    }
    if draft.notes is not None:
        body["description"] = draft.notes
    if draft.private:
        body["extendedProperties"] = {"private": dict(draft.private)}
    return body


def changes_to_body(changes: EventChanges) -> dict[str, object]:
    """Only fields that are set end up in the PATCH body."""

    body: dict[str, object] = {}
    if changes.title is not None:
        body["summary"] = changes.title
    if changes.notes is not None:
        body["description"] = changes.notes
    if changes.start is not None:
        body["start"] = time_to_payload(changes.start)
    if changes.end is not None:
        body["end"] = time_to_payload(changes.end)
    if changes.status is not None:
        body["status"] = changes.status.value
    if changes.private is not None:
        body["extendedProperties"] = {"private": dict(changes.private)}
    return body


def copy_body(original: EventPayload, *, title_override: str | None = None) -> dict[str, object]:
    body: dict[str, object] = {
        "summary": title_override or original.summary,
    }
    for edge, value in (("start", original.start), ("end", original.end)):
        if value is None:
            raise ValueError(f"Event {original.id} has no {edge} time")
        body[edge] = value.model_dump(by_alias=True, exclude_none=True, mode="json")
    if original.description is not None:
        body["description"] = original.description
    if original.extended_properties is not None:
        body["extendedProperties"] = original.extended_properties.model_dump(
            by_alias=True,
            mode="json",
        )
    return body
