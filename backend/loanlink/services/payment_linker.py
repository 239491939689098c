"""Payment Confirmation Linker — ties a verified provider payment to an application's fee.

Invariants:
    - The only writer of fee_status / transaction_id / paid_at
    - apply() raises PaymentVerificationError for RejectedPayment BEFORE any write
    - confirm_payment on an unknown id reports UpdateResult(0, 0)
    - Re-confirmation with a different transaction id overwrites the previous one
      (logged at WARNING); the checkout flow is expected to confirm once per payment
    - start_checkout refuses applications whose fee is already paid
"""

import logging

from loanlink.core.domain_types import ApplicationId, FeeStatus, UpdateResult
from loanlink.core.errors import FeeAlreadyPaidError, PaymentVerificationError
from loanlink.core.repository_protocols import Store
from loanlink.core.verify_payment import (
    PaymentVerification, RejectedPayment, verify_checkout_session,
)
from loanlink.infrastructure.checkout_client import CheckoutClient
from loanlink.services.clock import Clock, utcnow

logger = logging.getLogger(__name__)


class PaymentLinker:
    def __init__(
        self,
        store: Store,
        checkout: CheckoutClient | None = None,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.checkout = checkout
        self._clock = clock

    async def confirm_payment(
        self, application_id: ApplicationId, transaction_id: str,
    ) -> UpdateResult:
        previous = await self.store.applications.find_one({"id": application_id})
        if previous is None:
            logger.warning(
                "Payment confirmation for unknown application",
                extra={"application_id": application_id,
                       "transaction_id": transaction_id},
            )
            return UpdateResult(matched_count=0, modified_count=0)
        if previous["transaction_id"] and previous["transaction_id"] != transaction_id:
            logger.warning(
                f"Overwriting transaction {previous['transaction_id']}",
                extra={"application_id": application_id,
                       "transaction_id": transaction_id},
            )

        result = await self.store.applications.update_one(
            {"id": application_id},
            {
                "fee_status": FeeStatus.PAID.value,
                "transaction_id": transaction_id,
                "paid_at": self._clock(),
            },
        )
        logger.info(
            "Application fee confirmed",
            extra={"application_id": application_id,
                   "transaction_id": transaction_id},
        )
        return result

    async def apply(self, verification: PaymentVerification) -> UpdateResult:
        """Confirm a verified payment; reject anything else without writing."""
        if isinstance(verification, RejectedPayment):
            logger.warning(f"Payment rejected: {verification.reason}")
            raise PaymentVerificationError(verification.reason)
        return await self.confirm_payment(
            verification.application_id, verification.transaction_id,
        )

    async def start_checkout(self, application: dict, applicant_name: str) -> dict:
        if application["fee_status"] == FeeStatus.PAID.value:
            raise FeeAlreadyPaidError(application["id"])
        session = await self._require_checkout().create_checkout_session(
            application, applicant_name,
        )
        return {"id": session["id"], "url": session.get("url")}

    async def confirm_from_redirect(
        self, application_id: ApplicationId, session_id: str,
    ) -> UpdateResult:
        """Success-redirect flow: look the session up at the provider, then apply."""
        session = await self._require_checkout().retrieve_checkout_session(session_id)
        return await self.apply(verify_checkout_session(session, application_id))

    def _require_checkout(self) -> CheckoutClient:
        if self.checkout is None:
            raise RuntimeError("Checkout client not configured")
        return self.checkout
