"""Public interface for the Linear adapter."""

from __future__ import annotations

from .client import LinearAPIError, LinearIssueClient
from .schema import GraphQLResponse, IssueNode
from .translator import changes_to_input, draft_to_input, parse_issue

__all__ = [
    "GraphQLResponse",
    "IssueNode",
    "LinearAPIError",
    "LinearIssueClient",
    "changes_to_input",
    "draft_to_input",
    "parse_issue",
]
