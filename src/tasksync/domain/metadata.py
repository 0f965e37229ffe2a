"""Cross-reference encodings embedded in the external systems.

The issue tracker has no custom fields, so an issue points at its calendar event
through a single structured comment line at the head of its notes::

    <!-- calendar-sync --> EventId:abc123 | Start:2025-07-19T10:00:00+00:00 | DurMin:30

Calendar events carry their side of the link in the private key-value bag
(``uid`` and ``linkedIssueId``) plus a human readable ``Tracked issue:`` line in
their notes. Parsers and serializers here are exact inverses of each other.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

TAG_MARKER: Final[str] = "<!-- calendar-sync -->"
UID_KEY: Final[str] = "uid"
LINKED_ISSUE_KEY: Final[str] = "linkedIssueId"
ISSUE_LINK_LABEL: Final[str] = "Tracked issue:"

_TAG_PATTERN = re.compile(
    r"<!--\s*calendar-sync\s*-->\s*"
    r"(?:EventId|GoogleCalEventId):(?P<event_id>[^\s|]+)\s*\|\s*"
    r"Start:(?P<start>[^\s|]+)\s*\|\s*"
    r"DurMin:(?P<duration>\d+)",
    re.IGNORECASE,
)
_TAG_LINE_PATTERN = re.compile(r"^\s*<!--\s*calendar-sync\s*-->.*$", re.IGNORECASE)
_ISSUE_LINK_PATTERN = re.compile(
    r"^\s*(?:Tracked|Linear) issue:\s*"
    r"(?:\[(?P<label>[^\]]+)\]\((?P<url>[^)\s]+)\)|(?P<bare_url>https?://\S+)|(?P<bare>\S+))\s*$",
    re.IGNORECASE,
)
_CALENDAR_URL_PATTERN = re.compile(r"https://(?:www\.)?calendar\.google\.com/calendar/event\?eid=")
_SHORT_CODE_PATTERN = re.compile(r"\b[A-Z][A-Z0-9]+-\d+\b")
_FORBIDDEN_ID_CHARS = re.compile(r"[\s|]")


class MetadataFormatError(ValueError):
    """Raised when a value cannot be encoded without breaking the round-trip law."""


@dataclass(frozen=True, slots=True)
class IssueEventTag:
    """The issue-side cross-reference: which event, when, and for how long."""

    event_id: str
    start: datetime
    duration_minutes: int

    def format(self) -> str:
        if not self.event_id or _FORBIDDEN_ID_CHARS.search(self.event_id):
            raise MetadataFormatError(f"Event id {self.event_id!r} cannot be embedded")
        if self.start.tzinfo is None:
            raise MetadataFormatError("Tag start time must include timezone information")
        if self.duration_minutes < 0:
            raise MetadataFormatError("Tag duration must be non-negative")
        return (
            f"{TAG_MARKER} EventId:{self.event_id} | Start:{self.start.isoformat()}"
            f" | DurMin:{self.duration_minutes}"
        )


def _parse_timestamp(value: str) -> datetime | None:
    normalized = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


def _iter_tags(text: str) -> Iterator[IssueEventTag]:
    for match in _TAG_PATTERN.finditer(text):
        start = _parse_timestamp(match["start"])
        if start is None:
            continue
        yield IssueEventTag(
            event_id=match["event_id"],
            start=start,
            duration_minutes=int(match["duration"]),
        )


def parse_issue_tag(text: str | None) -> IssueEventTag | None:
    """Return the first well-formed tag found in ``text``."""

    if not text:
        return None
    return next(_iter_tags(text), None)


def parse_all_issue_tags(text: str | None) -> list[IssueEventTag]:
    if not text:
        return []
    return list(_iter_tags(text))


@dataclass(frozen=True, slots=True)
class EventLink:
    """The calendar-side cross-reference stored in an event's private bag."""

    uid: str | None = None
    linked_issue_id: str | None = None

    @classmethod
    def from_private(cls, private: Mapping[str, str] | None) -> EventLink:
        if not private:
            return cls()
        return cls(
            uid=private.get(UID_KEY) or None,
            linked_issue_id=private.get(LINKED_ISSUE_KEY) or None,
        )

    def to_private(self) -> dict[str, str]:
        private: dict[str, str] = {}
        if self.uid is not None:
            private[UID_KEY] = self.uid
        if self.linked_issue_id is not None:
            private[LINKED_ISSUE_KEY] = self.linked_issue_id
        return private


def format_issue_link(reference: str, url: str | None = None) -> str:
    if url:
        return f"{ISSUE_LINK_LABEL} [{reference}]({url})"
    return f"{ISSUE_LINK_LABEL} {reference}"


def parse_issue_link(text: str | None) -> tuple[str, str | None] | None:
    """Return ``(reference, url)`` from the first issue link line in ``text``."""

    if not text:
        return None
    for line in text.splitlines():
        match = _ISSUE_LINK_PATTERN.match(line)
        if match is None:
            continue
        if match["label"]:
            return match["label"], match["url"]
        if match["bare_url"]:
            url = match["bare_url"]
            return url.rstrip("/").rsplit("/", 1)[-1], url
        return match["bare"], None
    return None


def _is_cross_reference(line: str) -> bool:
    return bool(
        _TAG_LINE_PATTERN.match(line)
        or _ISSUE_LINK_PATTERN.match(line)
        or _CALENDAR_URL_PATTERN.search(line)
    )


def strip_cross_references(text: str | None) -> str:
    """Remove every embedded cross-reference line this system writes or recognises."""

    if not text:
        return ""
    kept = [line for line in text.splitlines() if not _is_cross_reference(line)]
    collapsed = re.sub(r"\n{3,}", "\n\n", "\n".join(kept))
    return collapsed.strip()


def compose_issue_notes(body: str | None, tag: IssueEventTag | None) -> str:
    """Build issue notes with ``tag`` as the head line above the cleaned body."""

    cleaned = strip_cross_references(body)
    if tag is None:
        return cleaned
    header = tag.format()
    return f"{header}\n\n{cleaned}" if cleaned else header


def compose_event_notes(body: str | None, reference: str | None, url: str | None = None) -> str:
    """Build event notes with the issue link line above the cleaned body."""

    cleaned = strip_cross_references(body)
    if reference is None:
        return cleaned
    link = format_issue_link(reference, url)
    return f"{link}\n\n{cleaned}" if cleaned else link


def find_short_codes(text: str | None) -> list[str]:
    """Return issue short codes (``ENG-42``) in order of first appearance."""

    if not text:
        return []
    return list(dict.fromkeys(_SHORT_CODE_PATTERN.findall(text)))


__all__ = [
    "ISSUE_LINK_LABEL",
    "LINKED_ISSUE_KEY",
    "TAG_MARKER",
    "UID_KEY",
    "EventLink",
    "IssueEventTag",
    "MetadataFormatError",
    "compose_event_notes",
    "compose_issue_notes",
    "find_short_codes",
    "format_issue_link",
    "parse_all_issue_tags",
    "parse_issue_link",
    "parse_issue_tag",
    "strip_cross_references",
]
