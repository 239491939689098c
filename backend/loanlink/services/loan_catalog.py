"""Loan Catalog — loan CRUD plus the new-loan announcement.

Invariants:
    - create_loan commits the loan first; announcing it to every known user is best-effort
      and never rolls the loan back
    - notified == number of notifications persisted (0 when the fan-out failed)
"""

import logging

from loanlink.core.domain_types import DeleteResult, Email, LoanId, UpdateResult
from loanlink.core.errors import ResourceNotFoundError
from loanlink.core.repository_protocols import Store
from loanlink.services.clock import Clock, utcnow
from loanlink.services.notification_fanout import (
    NotificationFanout, announce_best_effort,
)
from loanlink.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)


class LoanCatalog:
    def __init__(
        self,
        store: Store,
        fanout: NotificationFanout,
        users: UserDirectory | None = None,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.fanout = fanout
        self.users = users or UserDirectory(store, clock)
        self._clock = clock

    async def create_loan(self, data: dict, added_by: Email) -> tuple[dict, int]:
        loan_id = await self.store.loans.insert_one(
            {**data, "added_by": added_by, "created_at": self._clock()},
        )
        loan = await self.get_loan(loan_id)
        logger.info("Loan published", extra={"loan_id": loan_id, "user_email": added_by})

        async def announce() -> int:
            return await self.fanout.broadcast_new_loan(loan, await self.users.all_emails())

        notified = await announce_best_effort(announce, loan_id=loan_id)
        return loan, notified

    async def list_loans(
        self, category: str | None = None, home_only: bool = False,
    ) -> list[dict]:
        filter: dict = {}
        if category:
            filter["category"] = category
        if home_only:
            filter["show_on_home"] = True
        return await self.store.loans.find_many(filter, sort=[("created_at", -1)])

    async def find_loan(self, loan_id: LoanId) -> dict | None:
        return await self.store.loans.find_one({"id": loan_id})

    async def get_loan(self, loan_id: LoanId) -> dict:
        loan = await self.find_loan(loan_id)
        if loan is None:
            raise ResourceNotFoundError("Loan", loan_id)
        return loan

    async def update_loan(self, loan_id: LoanId, changes: dict) -> UpdateResult:
        return await self.store.loans.update_one({"id": loan_id}, changes)

    async def delete_loan(self, loan_id: LoanId) -> DeleteResult:
        return await self.store.loans.delete_one({"id": loan_id})
