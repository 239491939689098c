"""Notification Fan-out Engine — derives and persists notifications from lifecycle events.

Invariants:
    - The only writer of the notifications collection
    - broadcast_new_loan performs ONE bulk insert for all recipients
    - notify_decision re-reads the application for recipient and loan title; a vanished
      application yields no notification
    - list_for_user is newest-first (timestamp descending)
    - mark_read / mark_all_read are idempotent: a repeat call modifies zero records

Design Decisions:
    - Failures propagate as DatabaseError; callers own the best-effort policy
      (see announce_best_effort), so the engine itself stays testable for failures
"""

import logging
from typing import Awaitable, Callable, Iterable

from loanlink.core.domain_types import (
    ApplicationId, ApplicationStatus, DeleteResult, Email, NotificationId, UpdateResult,
)
from loanlink.core.errors import DatabaseError
from loanlink.core.notification_messages import (
    decision_notification, new_loan_notifications,
)
from loanlink.core.repository_protocols import Store
from loanlink.services.clock import Clock, utcnow

logger = logging.getLogger(__name__)

FANOUT_FAILED = "NOTIFICATION_FANOUT_FAILED"


class NotificationFanout:
    """Notification persistence and inbox operations."""

    def __init__(self, store: Store, clock: Clock = utcnow):
        self.store = store
        self._clock = clock

    async def broadcast_new_loan(self, loan: dict, recipients: Iterable[Email]) -> int:
        """One info notification per recipient, single bulk insert. Returns count."""
        documents = new_loan_notifications(loan, recipients, self._clock())
        ids = await self.store.notifications.insert_many(documents)
        logger.info(
            f"Announced loan '{loan['title']}' to {len(ids)} user(s)",
            extra={"loan_id": loan["id"], "recipients": len(ids)},
        )
        return len(ids)

    async def notify_decision(
        self, application_id: ApplicationId, status: ApplicationStatus,
    ) -> None:
        application = await self.store.applications.find_one({"id": application_id})
        if application is None:
            logger.warning(
                "Decision notification skipped: application vanished",
                extra={"application_id": application_id},
            )
            return
        await self.store.notifications.insert_one(
            decision_notification(application, status, self._clock()),
        )

    async def list_for_user(self, email: Email) -> list[dict]:
        return await self.store.notifications.find_many(
            {"user_email": email}, sort=[("timestamp", -1)],
        )

    async def get(self, notification_id: NotificationId) -> dict | None:
        return await self.store.notifications.find_one({"id": notification_id})

    async def mark_read(self, notification_id: NotificationId) -> UpdateResult:
        return await self.store.notifications.update_one(
            {"id": notification_id}, {"read": True},
        )

    async def mark_all_read(self, email: Email) -> UpdateResult:
        return await self.store.notifications.update_many(
            {"user_email": email, "read": False}, {"read": True},
        )

    async def delete(self, notification_id: NotificationId) -> DeleteResult:
        return await self.store.notifications.delete_one({"id": notification_id})


async def announce_best_effort(
    send: Callable[[], Awaitable[int | None]], **log_extra,
) -> int:
    """Run a fan-out step after its primary write committed.

    A store failure is logged with FANOUT_FAILED and reported as zero
    notifications; it never reaches the caller of the primary operation.
    """
    try:
        sent = await send()
    except DatabaseError as e:
        logger.error(
            f"Notification fan-out failed: {e.message}",
            extra={"error_code": FANOUT_FAILED, **log_extra},
        )
        return 0
    return sent or 0
