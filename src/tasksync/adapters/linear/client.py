"""GraphQL client for the Linear issue tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from tasksync.adapters.http_resilience import ResilientClient, default_client_factory
from tasksync.domain.metadata import TAG_MARKER
from tasksync.domain.model import IssueState

from .schema import (
    GraphQLResponse,
    IssueCreateData,
    IssueMutationPayload,
    IssuesData,
    IssueUpdateData,
    TeamStatesData,
)
from .translator import changes_to_input, draft_to_input, parse_issue

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from pydantic import BaseModel

    from tasksync.config import LinearConfig, ResilienceConfig
    from tasksync.domain.model import ExternalIssue
    from tasksync.domain.ports import IssueChanges, IssueDraft, IssueFilter

log = getLogger(__name__)

PAGE_SIZE: Final = 100

_ISSUE_FIELDS: Final = """
    id
    identifier
    title
    description
    state { name }
    estimate
    dueDate
    url
"""

CREATE_ISSUE_MUTATION: Final = f"""
mutation CreateIssue($input: IssueCreateInput!) {{
  issueCreate(input: $input) {{
    success
    issue {{ {_ISSUE_FIELDS} }}
  }}
}}
"""

UPDATE_ISSUE_MUTATION: Final = f"""
mutation UpdateIssue($id: String!, $input: IssueUpdateInput!) {{
  issueUpdate(id: $id, input: $input) {{
    success
    issue {{ {_ISSUE_FIELDS} }}
  }}
}}
"""

ISSUES_QUERY: Final = f"""
query Issues($filter: IssueFilter, $first: Int!, $after: String) {{
  issues(filter: $filter, first: $first, after: $after) {{
    nodes {{ {_ISSUE_FIELDS} }}
    pageInfo {{ hasNextPage endCursor }}
  }}
}}
"""

TEAM_STATES_QUERY: Final = """
query TeamStates($teamId: String!) {
  team(id: $teamId) {
    states { nodes { id name } }
  }
}
"""


class LinearAPIError(RuntimeError):
    """Raised when Linear reports GraphQL errors or an unsuccessful mutation."""


@dataclass(slots=True)
class LinearIssueClient:
    config: LinearConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False, repr=False)
    _state_ids: dict[IssueState, str] | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> LinearIssueClient:
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

    async def create_issue(self, draft: IssueDraft) -> ExternalIssue:
        state_id = await self._state_id(draft.state)
        payload = draft_to_input(draft, team_id=self.config.team_id, state_id=state_id)
        data = await self._execute(CREATE_ISSUE_MUTATION, {"input": payload}, IssueCreateData)
        issue = self._mutated_issue(data.issue_create, "create issue")
        log.info("Created issue %s (%s)", issue.key or issue.id, issue.title)
        return issue

    async def update_issue(self, issue_id: str, changes: IssueChanges) -> ExternalIssue:
        state_id = await self._state_id(changes.state) if changes.state is not None else None
        payload = changes_to_input(changes, state_id=state_id)
        data = await self._execute(
            UPDATE_ISSUE_MUTATION,
            {"id": issue_id, "input": payload},
            IssueUpdateData,
        )
        issue = self._mutated_issue(data.issue_update, f"update issue {issue_id}")
        log.debug("Updated issue %s with %s", issue.key or issue.id, sorted(payload))
        return issue

    async def list_issues(self, issue_filter: IssueFilter) -> list[ExternalIssue]:
        """Fetch the union of every selection in ``issue_filter``, first occurrence first."""

        found: dict[str, ExternalIssue] = {}
        if issue_filter.ids:
            by_id = {"id": {"in": list(issue_filter.ids)}}
            for issue in await self._paginate(by_id):
                found.setdefault(issue.id, issue)
        if issue_filter.states:
            by_state = {
                "team": {"id": {"eq": self.config.team_id}},
                "state": {"name": {"in": sorted(state.value for state in issue_filter.states)}},
            }
            for issue in await self._paginate(by_state):
                found.setdefault(issue.id, issue)
        if issue_filter.tagged:
            # Issues created for an event whose link patch failed are only reachable by tag.
            by_tag = {
                "team": {"id": {"eq": self.config.team_id}},
                "description": {"contains": TAG_MARKER},
            }
            for issue in await self._paginate(by_tag):
                found.setdefault(issue.id, issue)
        return list(found.values())

    async def _paginate(self, issue_filter: Mapping[str, object]) -> list[ExternalIssue]:
        issues: list[ExternalIssue] = []
        cursor: str | None = None
        while True:
            variables: dict[str, object] = {"filter": issue_filter, "first": PAGE_SIZE}
            if cursor is not None:
                variables["after"] = cursor
            data = await self._execute(ISSUES_QUERY, variables, IssuesData)
            issues.extend(parse_issue(node) for node in data.issues.nodes)
            page_info = data.issues.page_info
            if not page_info.has_next_page or page_info.end_cursor is None:
                return issues
            cursor = page_info.end_cursor

    async def _state_id(self, state: IssueState) -> str:
        if self._state_ids is None:
            data = await self._execute(
                TEAM_STATES_QUERY,
                {"teamId": self.config.team_id},
                TeamStatesData,
            )
            state_ids: dict[IssueState, str] = {}
            for node in data.team.states.nodes:
                for candidate in IssueState:
                    if candidate.value.casefold() == node.name.strip().casefold():
                        state_ids.setdefault(candidate, node.id)
            self._state_ids = state_ids
        try:
            return self._state_ids[state]
        except KeyError:
            raise LinearAPIError(
                f"Team {self.config.team_id} has no workflow state named {state.value!r}"
            ) from None

    def _mutated_issue(self, payload: IssueMutationPayload, action: str) -> ExternalIssue:
        if not payload.success or payload.issue is None:
            raise LinearAPIError(f"Linear refused to {action}")
        return parse_issue(payload.issue)

    async def _execute[ModelT: BaseModel](
        self,
        query: str,
        variables: Mapping[str, object],
        model: type[ModelT],
    ) -> ModelT:
        client = self._http()
        response = await client.post(
            self.config.resilience.base_url or "",
            json={"query": query, "variables": dict(variables)},
            headers={"Authorization": self.config.api_key},
        )
        response.raise_for_status()

        envelope = GraphQLResponse.model_validate(response.json())
        if envelope.errors:
            messages = ", ".join(error.message for error in envelope.errors)
            log.error(f"Linear GraphQL error: {messages}")
            raise LinearAPIError(f"Linear GraphQL error: {messages}")
        if envelope.data is None:
            raise LinearAPIError("Linear response carried no data")
        try:
            return model.model_validate(envelope.data)
        except ValidationError as exc:
            raise LinearAPIError(f"Unexpected Linear response payload: {exc}") from exc

    def _http(self) -> ResilientClient:
        if self._client is None:
            self._client = self.client_factory(self.config.resilience)
        return self._client
