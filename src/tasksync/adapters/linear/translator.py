"""Translate Linear payloads into domain entities and mutation inputs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tasksync.domain.model import ExternalIssue, IssueState

if TYPE_CHECKING:
    from tasksync.domain.ports import IssueChanges, IssueDraft

    from .schema import IssueNode


def parse_issue(node: IssueNode) -> ExternalIssue:
    return ExternalIssue(
        id=node.id,
        title=node.title,
        state=IssueState.from_name(node.state.name),
        notes=node.description,
        target_date=node.due_date,
        estimate=round(node.estimate) if node.estimate is not None else None,
        key=node.identifier,
        url=node.url,
    )


def draft_to_input(draft: IssueDraft, *, team_id: str, state_id: str) -> dict[str, object]:
    payload: dict[str, object] = {
        "teamId": team_id,
        "title": draft.title,
        "stateId": state_id,
    }
    if draft.notes is not None:
        payload["description"] = draft.notes
    if draft.estimate is not None:
        payload["estimate"] = draft.estimate
    if draft.target_date is not None:
        payload["dueDate"] = draft.target_date.isoformat()
    return payload


def changes_to_input(changes: IssueChanges, *, state_id: str | None = None) -> dict[str, object]:
    """Only fields that are set end up in the mutation input."""

    payload: dict[str, object] = {}
    if changes.title is not None:
        payload["title"] = changes.title
    if changes.notes is not None:
        payload["description"] = changes.notes
    if state_id is not None:
        payload["stateId"] = state_id
    if changes.estimate is not None:
        payload["estimate"] = changes.estimate
    if changes.target_date is not None:
        payload["dueDate"] = changes.target_date.isoformat()
    return payload
