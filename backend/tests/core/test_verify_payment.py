"""Payment Verification — webhook signatures and checkout-session checks (pure).

Tests cover:
    - a correctly signed completed checkout verifies to its applicationId
    - bad signature, stale timestamp, wrong event and unpaid sessions are rejected
    - the redirect flow refuses a session linked to another application
"""

import json

import pytest

from loanlink.core.verify_payment import (
    RejectedPayment, VerifiedPayment, compute_signature,
    parse_signature_header, verify_checkout_session, verify_webhook,
)

SECRET = "whsec_unit"
NOW = 1_767_000_000


def _session(**overrides) -> dict:
    session = {
        "id": "cs_test_1",
        "payment_status": "paid",
        "payment_intent": "pi_123",
        "metadata": {"applicationId": "app-1", "loanId": "loan-1"},
    }
    session.update(overrides)
    return session


def _event(session: dict, type_: str = "checkout.session.completed") -> bytes:
    return json.dumps({"type": type_, "data": {"object": session}}).encode()


def _header(payload: bytes, timestamp: int = NOW, secret: str = SECRET) -> str:
    return f"t={timestamp},v1={compute_signature(payload, timestamp, secret)}"


class TestVerifyCheckoutSession:

    def test_paid_session_verifies(self):
        assert verify_checkout_session(_session()) == VerifiedPayment("app-1", "pi_123")

    def test_falls_back_to_session_id(self):
        result = verify_checkout_session(_session(payment_intent=None))
        assert result == VerifiedPayment("app-1", "cs_test_1")

    def test_unpaid_rejected(self):
        result = verify_checkout_session(_session(payment_status="unpaid"))
        assert isinstance(result, RejectedPayment)

    def test_missing_metadata_rejected(self):
        assert isinstance(verify_checkout_session(_session(metadata={})), RejectedPayment)

    def test_other_application_rejected(self):
        result = verify_checkout_session(_session(), application_id="app-2")
        assert result == RejectedPayment("checkout session belongs to another application")

    def test_matching_application_accepted(self):
        assert isinstance(
            verify_checkout_session(_session(), application_id="app-1"), VerifiedPayment,
        )


class TestVerifyWebhook:

    def test_signed_completed_event_verifies(self):
        payload = _event(_session())
        result = verify_webhook(payload, _header(payload), SECRET, now=NOW)
        assert result == VerifiedPayment("app-1", "pi_123")

    def test_any_rotated_signature_accepted(self):
        payload = _event(_session())
        header = f"t={NOW},v1=deadbeef,v1={compute_signature(payload, NOW, SECRET)}"
        assert isinstance(verify_webhook(payload, header, SECRET, now=NOW), VerifiedPayment)

    @pytest.mark.parametrize("header", [None, "", "garbage", "t=abc,v1=00", f"t={NOW}"])
    def test_missing_or_malformed_header(self, header):
        result = verify_webhook(_event(_session()), header, SECRET, now=NOW)
        assert isinstance(result, RejectedPayment)

    def test_wrong_secret(self):
        payload = _event(_session())
        result = verify_webhook(payload, _header(payload, secret="other"), SECRET, now=NOW)
        assert result == RejectedPayment("signature mismatch")

    def test_body_altered_after_signing(self):
        payload = _event(_session())
        header = _header(payload)
        altered = payload.replace(b"app-1", b"app-9")
        assert verify_webhook(altered, header, SECRET, now=NOW) == RejectedPayment(
            "signature mismatch",
        )

    def test_stale_timestamp(self):
        payload = _event(_session())
        result = verify_webhook(payload, _header(payload, NOW - 301), SECRET, now=NOW)
        assert result == RejectedPayment("signature timestamp outside tolerance")

    def test_timestamp_at_tolerance_edge_accepted(self):
        payload = _event(_session())
        result = verify_webhook(payload, _header(payload, NOW - 300), SECRET, now=NOW)
        assert isinstance(result, VerifiedPayment)

    def test_other_event_type(self):
        payload = _event(_session(), type_="payment_intent.created")
        result = verify_webhook(payload, _header(payload), SECRET, now=NOW)
        assert result == RejectedPayment("unsupported event type")

    def test_non_json_body(self):
        payload = b"not json"
        result = verify_webhook(payload, _header(payload), SECRET, now=NOW)
        assert result == RejectedPayment("payload is not valid JSON")


def test_parse_signature_header():
    assert parse_signature_header("t=12, v1=ab,v0=zz,v1=cd") == (12, ["ab", "cd"])
    assert parse_signature_header("v1=ab") == (None, ["ab"])


@pytest.mark.parametrize("data", [None, "oops", ["object"], {"object": "cs_1"}])
def test_signed_event_without_session_object_rejected(data):
    payload = json.dumps({"type": "checkout.session.completed", "data": data}).encode()
    result = verify_webhook(payload, _header(payload), SECRET, now=NOW)
    assert result == RejectedPayment("event carries no checkout session")
