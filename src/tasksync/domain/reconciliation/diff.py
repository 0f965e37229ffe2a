"""Turn canonical items into the minimal set of idempotent operations.

Each item's operations depend only on that item, so the output for a list is
the concatenation of per-item outputs in input order.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from tasksync.domain.model import (
    Glyph,
    IssueState,
    Operation,
    OperationKind,
    Phase,
    add_prefix,
    completion_glyph,
    has_prefix,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tasksync.domain.model import CanonicalItem


def _event_only(item: CanonicalItem) -> list[Operation]:
    target = replace(
        item,
        issue_state=IssueState.TRIAGE,
        title=add_prefix(item.title, Glyph.INBOX),
    )
    return [
        Operation(
            kind=OperationKind.CREATE_ISSUE_AND_LINK_EVENT,
            item=target,
            reason="Calendar event has no issue yet",
        )
    ]


def _issue_only(item: CanonicalItem) -> list[Operation]:
    if item.issue_state is not IssueState.SCHEDULED:
        return []
    target = replace(item, title=add_prefix(item.title, Glyph.SCHEDULED))
    return [
        Operation(
            kind=OperationKind.CREATE_EVENT_AND_LINK_ISSUE,
            item=target,
            reason="Scheduled issue has no calendar event",
        )
    ]


def _active(item: CanonicalItem) -> list[Operation]:
    if item.issue_id is not None and item.event_id is None:
        return [
            Operation(
                kind=OperationKind.CREATE_EVENT,
                item=item,
                reason="Active item is missing its calendar event",
            )
        ]
    if item.event_id is not None and item.issue_id is None:
        return [
            Operation(
                kind=OperationKind.CREATE_ISSUE,
                item=item,
                reason="Active item is missing its issue",
            )
        ]

    operations: list[Operation] = []
    if not item.event_link_current:
        operations.append(
            Operation(
                kind=OperationKind.PATCH_EVENT,
                item=replace(item, title=item.current_event_title or item.title),
                reason="Calendar event does not carry the issue link",
            )
        )
    if not item.issue_link_current:
        operations.append(
            Operation(
                kind=OperationKind.PATCH_ISSUE,
                item=item,
                reason="Issue notes do not reference the calendar event",
            )
        )
    return operations


def _completed(item: CanonicalItem) -> list[Operation]:
    if item.event_id is None or item.issue_state is None:
        return []
    glyph = completion_glyph(item.issue_state)
    if has_prefix(item.current_event_title, glyph):
        return []
    return [
        Operation(
            kind=OperationKind.PATCH_EVENT,
            item=replace(item, title=add_prefix(item.title, glyph)),
            reason=f"Issue marked as {item.issue_state.value}",
        )
    ]


def _overdue(item: CanonicalItem) -> list[Operation]:
    if item.event_id is None:
        return []
    glyph = Glyph.SCHEDULED if item.issue_state is IssueState.SCHEDULED else Glyph.INBOX
    return [
        Operation(
            kind=OperationKind.COPY_TO_HISTORY,
            item=replace(item, title=add_prefix(item.title, Glyph.CARRIED_OVER)),
            reason="Archiving overdue event as carried over",
        ),
        Operation(
            kind=OperationKind.RESCHEDULE_EVENT,
            item=replace(item, title=add_prefix(item.title, glyph), start_time=None, end_time=None),
            reason="Rescheduling overdue event into a new slot",
        ),
    ]


_RULES = {
    Phase.EVENT_ONLY: _event_only,
    Phase.ISSUE_ONLY: _issue_only,
    Phase.ACTIVE: _active,
    Phase.COMPLETED: _completed,
    Phase.OVERDUE: _overdue,
}


def operations_for_item(item: CanonicalItem) -> list[Operation]:
    return _RULES[item.phase](item)


def compute_operations(items: Iterable[CanonicalItem]) -> list[Operation]:
    """Return the operations that bring both systems in line with ``items``."""

    operations: list[Operation] = []
    for item in items:
        operations.extend(operations_for_item(item))
    return operations


__all__ = ["compute_operations", "operations_for_item"]
