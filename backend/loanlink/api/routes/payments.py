"""Payment Routes — start checkout, confirm from redirect, receive signed callbacks.

Invariants:
    - Fee state changes only after a verification step returned VerifiedPayment
    - /webhook is cookie-less: the provider signature is its authentication
    - /confirm never trusts the client's transaction id: the session is looked up
      at the provider and must be paid and linked to the same application
"""

import logging

from fastapi import APIRouter, Depends, Header, Request

from loanlink.api.dependencies import get_lifecycle, get_payment_linker
from loanlink.api.session_guard import get_caller
from loanlink.config import Settings, get_settings
from loanlink.core.access_policy import authorize
from loanlink.core.domain_types import Caller, Operation
from loanlink.core.verify_payment import verify_webhook
from loanlink.schemas.payment import CheckoutRequest, PaymentConfirmRequest
from loanlink.services.application_lifecycle import ApplicationLifecycle
from loanlink.services.clock import utcnow
from loanlink.services.payment_linker import PaymentLinker

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


def _applicant_name(application: dict) -> str:
    details = application.get("details") or {}
    name = " ".join(
        part for part in (details.get("first_name"), details.get("last_name")) if part
    )
    return name or application["user_email"]


@router.post("/checkout")
async def start_checkout(
    body: CheckoutRequest,
    caller: Caller = Depends(get_caller),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
    linker: PaymentLinker = Depends(get_payment_linker),
):
    application = await lifecycle.get_application(body.application_id)
    authorize(Operation.START_CHECKOUT, caller, application)
    return await linker.start_checkout(application, _applicant_name(application))


@router.post("/confirm")
async def confirm_payment(
    body: PaymentConfirmRequest,
    caller: Caller = Depends(get_caller),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
    linker: PaymentLinker = Depends(get_payment_linker),
):
    application = await lifecycle.get_application(body.application_id)
    authorize(Operation.READ_APPLICATION, caller, application)
    result = await linker.confirm_from_redirect(body.application_id, body.session_id)
    return result.to_response()


@router.post("/webhook")
async def payment_webhook(
    request: Request,
    stripe_signature: str | None = Header(None),
    settings: Settings = Depends(get_settings),
    linker: PaymentLinker = Depends(get_payment_linker),
):
    payload = await request.body()
    verification = verify_webhook(
        payload,
        stripe_signature,
        settings.payment_webhook_secret,
        now=int(utcnow().timestamp()),
        tolerance_seconds=settings.payment_webhook_tolerance_seconds,
    )
    result = await linker.apply(verification)
    return {"received": True, **result.to_response()}
