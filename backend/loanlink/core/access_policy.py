"""Access Policy — declarative capability requirements evaluated after authentication.

Invariants:
    - Every role- or ownership-sensitive Operation has exactly one entry in OPERATION_POLICIES
    - authorize() is the single evaluation step; routes never compare roles themselves
    - Ownership policies read the owner field from the resource document; a missing
      resource or field never grants access
    - Pure: no IO, the caller's role is resolved by the session guard beforehand

Design Decisions:
    - Small frozen dataclasses (RoleIn, OwnerOf, AnyOf) composed per operation
    - Unknown operations are denied (no implicit "authenticated is enough")
"""

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from loanlink.core.domain_types import Caller, Operation, Role
from loanlink.core.errors import AccessDeniedError, ErrorContext


class Policy(Protocol):
    def allows(self, caller: Caller, resource: Mapping[str, Any] | None) -> bool: ...


@dataclass(frozen=True)
class Authenticated:
    """Any verified identity."""

    def allows(self, caller: Caller, resource: Mapping[str, Any] | None) -> bool:
        return bool(caller.email)


@dataclass(frozen=True)
class RoleIn:
    roles: frozenset[Role]

    def allows(self, caller: Caller, resource: Mapping[str, Any] | None) -> bool:
        return caller.role in self.roles


@dataclass(frozen=True)
class OwnerOf:
    """caller.email must equal resource[field]."""
    field: str

    def allows(self, caller: Caller, resource: Mapping[str, Any] | None) -> bool:
        if resource is None:
            return False
        owner = resource.get(self.field)
        return owner is not None and owner == caller.email


@dataclass(frozen=True)
class AnyOf:
    policies: tuple[Policy, ...]

    def allows(self, caller: Caller, resource: Mapping[str, Any] | None) -> bool:
        return any(p.allows(caller, resource) for p in self.policies)


STAFF = RoleIn(frozenset({Role.MANAGER, Role.ADMIN}))
ADMIN_ONLY = RoleIn(frozenset({Role.ADMIN}))


OPERATION_POLICIES: dict[Operation, Policy] = {
    Operation.CREATE_LOAN: STAFF,
    Operation.UPDATE_LOAN: AnyOf((ADMIN_ONLY, OwnerOf("added_by"))),
    Operation.DELETE_LOAN: AnyOf((ADMIN_ONLY, OwnerOf("added_by"))),
    Operation.SUBMIT_APPLICATION: Authenticated(),
    Operation.READ_APPLICATION: AnyOf((STAFF, OwnerOf("user_email"))),
    Operation.LIST_ALL_APPLICATIONS: STAFF,
    Operation.UPDATE_APPLICATION_STATUS: STAFF,
    Operation.CANCEL_APPLICATION: AnyOf((ADMIN_ONLY, OwnerOf("user_email"))),
    Operation.START_CHECKOUT: OwnerOf("user_email"),
    Operation.READ_NOTIFICATION: OwnerOf("user_email"),
    Operation.DELETE_NOTIFICATION: AnyOf((ADMIN_ONLY, OwnerOf("user_email"))),
    Operation.LIST_USERS: ADMIN_ONLY,
    Operation.CHANGE_USER_ROLE: ADMIN_ONLY,
}


def is_authorized(
    operation: Operation, caller: Caller,
    resource: Mapping[str, Any] | None = None,
) -> bool:
    policy = OPERATION_POLICIES.get(operation)
    if policy is None:
        return False
    return policy.allows(caller, resource)


def authorize(
    operation: Operation, caller: Caller,
    resource: Mapping[str, Any] | None = None,
) -> None:
    """Raise AccessDeniedError unless the operation's policy admits the caller."""
    if not is_authorized(operation, caller, resource):
        raise AccessDeniedError(
            operation.value, ErrorContext(user_email=caller.email),
        )
