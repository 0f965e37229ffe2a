"""Pydantic models describing the Linear GraphQL payloads."""

from __future__ import annotations

from datetime import date  # noqa: TC003 - pydantic resolves annotations at runtime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class LinearBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class StateNode(LinearBaseModel):
    name: str


class WorkflowStateNode(LinearBaseModel):
    id: str
    name: str


class IssueNode(LinearBaseModel):
    id: str
    identifier: str | None = None
    title: str
    description: str | None = None
    state: StateNode
    estimate: float | None = None
    due_date: date | None = Field(default=None, alias="dueDate")
    url: str | None = None

    _normalize_description = field_validator("description", mode="before")(_blank_to_none)


class PageInfo(LinearBaseModel):
    has_next_page: bool = Field(default=False, alias="hasNextPage")
    end_cursor: str | None = Field(default=None, alias="endCursor")


class IssueConnection(LinearBaseModel):
    nodes: list[IssueNode] = Field(default_factory=list[IssueNode])
    page_info: PageInfo = Field(default_factory=PageInfo, alias="pageInfo")


class IssuesData(LinearBaseModel):
    issues: IssueConnection


class IssueMutationPayload(LinearBaseModel):
    success: bool
    issue: IssueNode | None = None


class IssueCreateData(LinearBaseModel):
    issue_create: IssueMutationPayload = Field(alias="issueCreate")


class IssueUpdateData(LinearBaseModel):
    issue_update: IssueMutationPayload = Field(alias="issueUpdate")


class StateConnection(LinearBaseModel):
    nodes: list[WorkflowStateNode] = Field(default_factory=list[WorkflowStateNode])


class TeamNode(LinearBaseModel):
    states: StateConnection


class TeamStatesData(LinearBaseModel):
    team: TeamNode


class GraphQLError(LinearBaseModel):
    message: str


class GraphQLResponse(LinearBaseModel):
    data: dict[str, object] | None = None
    errors: list[GraphQLError] | None = None
