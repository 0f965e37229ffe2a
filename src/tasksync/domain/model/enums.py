"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum
from logging import getLogger

log = getLogger(__name__)


class IssueState(StrEnum):
    TRIAGE = "Triage"
    SCHEDULED = "Scheduled"
    DONE = "Done"
    CANCELED = "Canceled"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES

    @classmethod
    def from_name(cls, name: str) -> IssueState:
        """Map a tracker workflow state name onto the five states we reason about.

        Trackers allow custom workflow names; anything unrecognised is treated as
        untriaged work.
        """

        normalized = name.strip().casefold()
        for state in cls:
            if state.value.casefold() == normalized:
                return state
        if normalized == "cancelled":
            return cls.CANCELED
        log.warning("Unknown issue state %r, treating it as %s", name, cls.TRIAGE.value)
        return cls.TRIAGE


_TERMINAL_STATES = frozenset({IssueState.DONE, IssueState.CANCELED, IssueState.FAILED})


class EventStatus(StrEnum):
    CONFIRMED = "confirmed"
    TENTATIVE = "tentative"
    CANCELLED = "cancelled"


class Phase(StrEnum):
    """Derived lifecycle stage of a canonical item, recomputed every pass."""

    EVENT_ONLY = "eventOnly"
    ISSUE_ONLY = "issueOnly"
    ACTIVE = "active"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class OperationKind(StrEnum):
    CREATE_ISSUE = "create-issue"
    CREATE_EVENT = "create-event"
    PATCH_EVENT = "patch-event"
    PATCH_ISSUE = "patch-issue"
    COPY_TO_HISTORY = "copy-to-history"
    RESCHEDULE_EVENT = "reschedule-event"
    CREATE_ISSUE_AND_LINK_EVENT = "create-issue-and-link-event"
    CREATE_EVENT_AND_LINK_ISSUE = "create-event-and-link-issue"


class SizeBucket(StrEnum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
