"""Domain port definitions for adapters."""

from __future__ import annotations

from .clients import (
    EventChanges,
    EventClient,
    EventDraft,
    IssueChanges,
    IssueClient,
    IssueDraft,
    IssueFilter,
)

__all__ = [
    "EventChanges",
    "EventClient",
    "EventDraft",
    "IssueChanges",
    "IssueClient",
    "IssueDraft",
    "IssueFilter",
]
