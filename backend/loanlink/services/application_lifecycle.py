"""Application Lifecycle Manager — submission, status decisions and cancellation.

Invariants:
    - New applications start pending / unpaid, owned by the submitting email
    - No uniqueness: the same applicant may apply to the same loan more than once
    - update_status on an unknown id reports UpdateResult(0, 0) and notifies nobody
    - Transitions validated against core/enforce_transitions.py before any write
    - Status written with a compare-and-set filter on the status that was validated;
      a concurrent decision makes this write a zero-modified no-op
    - Decision notification sent only when modified_count >= 1, after the status commit
    - Fee fields are never written here (payment linker only)
"""

import logging

from loanlink.core.access_policy import authorize
from loanlink.core.domain_types import (
    ApplicationId, ApplicationStatus, Caller, DeleteResult, Email, FeeStatus, LoanId,
    Operation, UpdateResult,
)
from loanlink.core.enforce_transitions import check_transition
from loanlink.core.errors import ResourceNotFoundError
from loanlink.core.repository_protocols import Store
from loanlink.services.clock import Clock, utcnow
from loanlink.services.notification_fanout import (
    NotificationFanout, announce_best_effort,
)

logger = logging.getLogger(__name__)


class ApplicationLifecycle:
    """State machine over Application.status plus its notification side effect."""

    def __init__(self, store: Store, fanout: NotificationFanout, clock: Clock = utcnow):
        self.store = store
        self.fanout = fanout
        self._clock = clock

    async def create_application(
        self,
        applicant_email: Email,
        loan_id: LoanId,
        loan_title: str,
        details: dict | None = None,
    ) -> dict:
        document = {
            "user_email": applicant_email,
            "loan_id": loan_id,
            "loan_title": loan_title,
            "status": ApplicationStatus.PENDING.value,
            "fee_status": FeeStatus.UNPAID.value,
            "transaction_id": None,
            "paid_at": None,
            "details": details or {},
            "created_at": self._clock(),
        }
        application_id = await self.store.applications.insert_one(document)
        logger.info(
            "Application submitted",
            extra={"application_id": application_id, "loan_id": loan_id,
                   "user_email": applicant_email},
        )
        return {**document, "id": application_id}

    async def find(self, application_id: ApplicationId) -> dict | None:
        return await self.store.applications.find_one({"id": application_id})

    async def get_application(self, application_id: ApplicationId) -> dict:
        application = await self.find(application_id)
        if application is None:
            raise ResourceNotFoundError("Application", application_id)
        return application

    async def list_for_applicant(self, email: Email) -> list[dict]:
        return await self.store.applications.find_many(
            {"user_email": email}, sort=[("created_at", -1)],
        )

    async def list_all(self, status: ApplicationStatus | None = None) -> list[dict]:
        filter = {"status": status.value} if status else {}
        return await self.store.applications.find_many(
            filter, sort=[("created_at", -1)],
        )

    async def update_status(
        self, application_id: ApplicationId, new_status: ApplicationStatus,
    ) -> UpdateResult:
        current = await self.find(application_id)
        if current is None:
            return UpdateResult(matched_count=0, modified_count=0)

        check_transition(current["status"], new_status)
        result = await self.store.applications.update_one(
            {"id": application_id, "status": current["status"]},
            {"status": new_status.value},
        )
        if result.modified_count >= 1:
            logger.info(
                f"Application {new_status.value}",
                extra={"application_id": application_id},
            )
            await announce_best_effort(
                lambda: self.fanout.notify_decision(application_id, new_status),
                application_id=application_id,
            )
        return result

    async def cancel_application(
        self, application_id: ApplicationId, caller: Caller,
    ) -> DeleteResult:
        """Remove an application; only its owner or an admin may do so."""
        current = await self.find(application_id)
        if current is None:
            return DeleteResult(deleted_count=0)
        authorize(Operation.CANCEL_APPLICATION, caller, current)
        return await self.store.applications.delete_one({"id": application_id})
