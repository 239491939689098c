"""Notification Messages — pure builders for notification documents.

Invariants:
    - Every document starts unread, carries a timezone-aware timestamp and a type from
      NotificationType
    - New-loan notifications always deep-link to the loan; decision notifications carry no path
    - approved -> success, anything else -> error
"""

from datetime import datetime
from typing import Any, Iterable

from loanlink.core.domain_types import ApplicationStatus, NotificationType


def loan_path(loan_id: str) -> str:
    return f"/loans/{loan_id}"


def build_notification(
    user_email: str,
    message: str,
    type_: NotificationType,
    timestamp: datetime,
    path: str | None = None,
) -> dict[str, Any]:
    return {
        "user_email": user_email,
        "message": message,
        "type": type_.value,
        "path": path,
        "timestamp": timestamp,
        "read": False,
    }


def new_loan_notifications(
    loan: dict, recipients: Iterable[str], timestamp: datetime,
) -> list[dict[str, Any]]:
    """One info notification per recipient, each linking to the new loan."""
    message = f"New loan available: {loan['title']}"
    path = loan_path(loan["id"])
    return [
        build_notification(email, message, NotificationType.INFO, timestamp, path)
        for email in recipients
    ]


def decision_type(status: ApplicationStatus | str) -> NotificationType:
    if status == ApplicationStatus.APPROVED:
        return NotificationType.SUCCESS
    return NotificationType.ERROR


def decision_notification(
    application: dict, status: ApplicationStatus | str, timestamp: datetime,
) -> dict[str, Any]:
    value = status.value if isinstance(status, ApplicationStatus) else status
    return build_notification(
        application["user_email"],
        f"Your application for {application['loan_title']} has been {value}.",
        decision_type(status),
        timestamp,
    )
