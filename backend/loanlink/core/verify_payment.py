"""Payment Verification — typed verdicts on provider confirmations before fee state changes.

Invariants:
    - All functions are PURE: no IO, the current time is an argument
    - Result is VerifiedPayment or RejectedPayment — never a bare bool
    - Webhook signature: HMAC-SHA256 over "<t>.<raw body>" with the provider-issued secret,
      compared in constant time; timestamps outside the tolerance window are rejected
    - Only a completed, paid checkout carrying an applicationId in its metadata verifies

Design Decisions:
    - Signature header format "t=<unix>,v1=<hex>[,v1=<hex>...]": several v1 entries are
      accepted during secret rotation
    - transaction id is the payment intent when present, the checkout session id otherwise
"""

import hashlib
import hmac
import json
from dataclasses import dataclass

COMPLETED_EVENT = "checkout.session.completed"
SIGNATURE_SCHEME = "v1"


@dataclass(frozen=True)
class VerifiedPayment:
    application_id: str
    transaction_id: str


@dataclass(frozen=True)
class RejectedPayment:
    reason: str


PaymentVerification = VerifiedPayment | RejectedPayment


def compute_signature(payload: bytes, timestamp: int, secret: str) -> str:
    signed = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()


def parse_signature_header(header: str) -> tuple[int | None, list[str]]:
    """Split 't=..,v1=..' into (timestamp, [signatures]). Malformed parts are ignored."""
    timestamp = None
    signatures: list[str] = []
    for part in header.split(","):
        key, sep, value = part.strip().partition("=")
        if not sep:
            continue
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError:
                return None, []
        elif key == SIGNATURE_SCHEME:
            signatures.append(value)
    return timestamp, signatures


def verify_checkout_session(
    session: dict, application_id: str | None = None,
) -> PaymentVerification:
    """Check a provider checkout-session object for a completed, paid fee."""
    if session.get("payment_status") != "paid":
        return RejectedPayment("checkout session is not paid")
    metadata = session.get("metadata") or {}
    linked_id = metadata.get("applicationId")
    if not linked_id:
        return RejectedPayment("checkout session is not linked to an application")
    if application_id is not None and linked_id != application_id:
        return RejectedPayment("checkout session belongs to another application")
    transaction_id = session.get("payment_intent") or session.get("id")
    if not transaction_id:
        return RejectedPayment("checkout session has no transaction id")
    return VerifiedPayment(application_id=linked_id, transaction_id=transaction_id)


def verify_webhook(
    payload: bytes,
    signature_header: str | None,
    secret: str,
    now: int,
    tolerance_seconds: int = 300,
) -> PaymentVerification:
    """Verify a signed provider callback and extract the confirmed application."""
    if not signature_header:
        return RejectedPayment("missing signature header")
    timestamp, signatures = parse_signature_header(signature_header)
    if timestamp is None or not signatures:
        return RejectedPayment("malformed signature header")

    expected = compute_signature(payload, timestamp, secret)
    if not any(hmac.compare_digest(expected, s) for s in signatures):
        return RejectedPayment("signature mismatch")
    if abs(now - timestamp) > tolerance_seconds:
        return RejectedPayment("signature timestamp outside tolerance")

    try:
        event = json.loads(payload)
    except (ValueError, UnicodeDecodeError):
        return RejectedPayment("payload is not valid JSON")
    if not isinstance(event, dict) or event.get("type") != COMPLETED_EVENT:
        return RejectedPayment("unsupported event type")
    data = event.get("data")
    session = data.get("object") if isinstance(data, dict) else None
    if not isinstance(session, dict):
        return RejectedPayment("event carries no checkout session")
    return verify_checkout_session(session)
