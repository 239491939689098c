"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ApplicationStatus is CLOSED (pending | approved | rejected) — no free-form status strings
    - FeeStatus moves to PAID only through the payment linker
    - UpdateResult/DeleteResult counts are the only way to tell "changed" from "matched nothing"

Design Decisions:
    - NewType over dataclass wrappers for ids: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ApplicationId = NewType("ApplicationId", str)
LoanId = NewType("LoanId", str)
NotificationId = NewType("NotificationId", str)
Email = NewType("Email", str)


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Actor roles. Unknown users act as BORROWER."""
    BORROWER = "borrower"
    MANAGER = "manager"
    ADMIN = "admin"


class ApplicationStatus(str, Enum):
    """Loan application lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class FeeStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class NotificationType(str, Enum):
    """Visual severity of a notification on the client."""
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class Operation(str, Enum):
    """Every role- or ownership-sensitive operation exposed by the API."""
    CREATE_LOAN = "create_loan"
    UPDATE_LOAN = "update_loan"
    DELETE_LOAN = "delete_loan"
    SUBMIT_APPLICATION = "submit_application"
    READ_APPLICATION = "read_application"
    LIST_ALL_APPLICATIONS = "list_all_applications"
    UPDATE_APPLICATION_STATUS = "update_application_status"
    CANCEL_APPLICATION = "cancel_application"
    START_CHECKOUT = "start_checkout"
    READ_NOTIFICATION = "read_notification"
    DELETE_NOTIFICATION = "delete_notification"
    LIST_USERS = "list_users"
    CHANGE_USER_ROLE = "change_user_role"


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Caller:
    """Authenticated identity plus the role resolved from the users collection."""
    email: str
    role: Role = Role.BORROWER


@dataclass(frozen=True)
class UpdateResult:
    matched_count: int
    modified_count: int

    def to_response(self) -> dict:
        return {
            "matched_count": self.matched_count,
            "modified_count": self.modified_count,
        }


@dataclass(frozen=True)
class DeleteResult:
    deleted_count: int

    def to_response(self) -> dict:
        return {"deleted_count": self.deleted_count}
