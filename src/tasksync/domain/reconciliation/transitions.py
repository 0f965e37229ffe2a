"""Legal phase transitions between consecutive passes.

Not enforced at runtime; the projector and diff engine only ever produce these
by construction. Anything else observed across passes is a classification bug.
"""

from __future__ import annotations

from typing import Final

from tasksync.domain.model import Phase

LEGAL_TRANSITIONS: Final[dict[Phase, frozenset[Phase]]] = {
    Phase.EVENT_ONLY: frozenset({Phase.ACTIVE}),
    Phase.ISSUE_ONLY: frozenset({Phase.ACTIVE}),
    Phase.ACTIVE: frozenset({Phase.ACTIVE, Phase.COMPLETED, Phase.OVERDUE}),
    Phase.COMPLETED: frozenset(),
    Phase.OVERDUE: frozenset({Phase.ACTIVE}),
}


def is_legal_transition(previous: Phase, current: Phase) -> bool:
    return current in LEGAL_TRANSITIONS[previous]
