"""Status glyph prefixes carried in event and issue titles."""

from __future__ import annotations

import re
from enum import StrEnum

from .enums import IssueState

_SEPARATOR = "\u202f"


class Glyph(StrEnum):
    INBOX = "📥"
    SCHEDULED = "📅"
    DONE = "✅"
    CANCELED = "🚫"
    FAILED = "❌"
    CARRIED_OVER = "⏳"

    @property
    def prefix(self) -> str:
        return f"{self.value}{_SEPARATOR}"


_COMPLETION_GLYPHS: dict[IssueState, Glyph] = {
    IssueState.DONE: Glyph.DONE,
    IssueState.CANCELED: Glyph.CANCELED,
    IssueState.FAILED: Glyph.FAILED,
}

# Any pictograph followed by the narrow no-break space, so glyphs set by hand
# in either system are recognised too.
_PREFIX_PATTERN = re.compile(
    "^\\s*[\U0001f300-\U0001faff\u2600-\u26ff\u2700-\u27bf\u231a-\u231b\u23e9-\u23f3]"
    "\ufe0f?" + _SEPARATOR
)


def strip_prefix(title: str) -> str:
    return _PREFIX_PATTERN.sub("", title, count=1).strip()


def add_prefix(title: str, glyph: Glyph) -> str:
    return f"{glyph.prefix}{strip_prefix(title)}"


def has_prefix(title: str | None, glyph: Glyph) -> bool:
    return title is not None and title.startswith(glyph.prefix)


def completion_glyph(state: IssueState) -> Glyph:
    """Return the glyph that marks an event whose issue reached ``state``."""

    try:
        return _COMPLETION_GLYPHS[state]
    except KeyError:
        raise ValueError(f"{state} is not a terminal issue state") from None


__all__ = ["Glyph", "add_prefix", "completion_glyph", "has_prefix", "strip_prefix"]
