"""Application Status Transitions — closed state machine over ApplicationStatus.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Only pending -> approved and pending -> rejected are legal
    - approved and rejected are terminal (no outgoing edges, no self-loops)
    - Stored values outside the enum are treated as an unknown source state: every
      transition out of them is rejected

Design Decisions:
    - Raise InvalidTransitionError (not return dicts): the caller is an HTTP route, and the
      global handler turns it into a 409 envelope
"""

from loanlink.core.domain_types import ApplicationStatus
from loanlink.core.errors import InvalidTransitionError

ALLOWED_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    ApplicationStatus.PENDING: frozenset({
        ApplicationStatus.APPROVED, ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.APPROVED: frozenset(),
    ApplicationStatus.REJECTED: frozenset(),
}

TERMINAL_STATES = frozenset(
    s for s, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def parse_status(value: str) -> ApplicationStatus | None:
    """Map a stored status string onto the closed enum, None if unknown."""
    try:
        return ApplicationStatus(value)
    except ValueError:
        return None


def is_allowed(current: str, target: ApplicationStatus) -> bool:
    source = parse_status(current)
    if source is None:
        return False
    return target in ALLOWED_TRANSITIONS[source]


def check_transition(current: str, target: ApplicationStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is a legal edge."""
    if not is_allowed(current, target):
        raise InvalidTransitionError(current, ApplicationStatus(target).value)
