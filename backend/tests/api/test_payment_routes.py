"""Payment Routes — checkout start, redirect confirmation and signed webhooks.

Tests cover:
    - only the applicant may start checkout; a paid fee cannot be paid again (409)
    - /confirm looks the session up at the provider and checks its linkage
    - /webhook accepts a correctly signed completed checkout and rejects anything else (400)
"""

import json
import time
from urllib.parse import parse_qs

from loanlink.config import get_settings
from loanlink.core.verify_payment import compute_signature


def _signed(event: dict, secret: str | None = None, timestamp: int | None = None):
    payload = json.dumps(event).encode()
    timestamp = timestamp or int(time.time())
    secret = secret or get_settings().payment_webhook_secret
    header = f"t={timestamp},v1={compute_signature(payload, timestamp, secret)}"
    return payload, {"stripe-signature": header, "content-type": "application/json"}


def _completed(app_id: str, intent: str = "pi_hook") -> dict:
    return {
        "type": "checkout.session.completed",
        "data": {"object": {
            "id": "cs_hook", "payment_status": "paid", "payment_intent": intent,
            "metadata": {"applicationId": app_id},
        }},
    }


async def test_start_checkout(client, sign_in, provider, seed_application):
    app_id = await seed_application(user_email="bo@x.io")
    sign_in("bo@x.io")

    response = await client.post("/api/v1/payments/checkout", json={"application_id": app_id})

    assert response.status_code == 200
    assert response.json() == {"id": "cs_test_1", "url": "https://pay.test/cs_test_1"}
    [request] = provider.created
    form = parse_qs(request.content.decode())
    assert form["metadata[applicationId]"] == [app_id]
    assert form["metadata[applicantName]"] == ["Ada Lovelace"]
    assert form["line_items[0][price_data][unit_amount]"] == [
        str(get_settings().application_fee_cents),
    ]


async def test_checkout_for_someone_else(client, sign_in, seed_application):
    app_id = await seed_application(user_email="bo@x.io")
    sign_in("eve@x.io")
    response = await client.post("/api/v1/payments/checkout", json={"application_id": app_id})
    assert response.status_code == 403


async def test_checkout_already_paid(client, sign_in, seed_application):
    app_id = await seed_application(user_email="bo@x.io", fee_status="paid")
    sign_in("bo@x.io")
    response = await client.post("/api/v1/payments/checkout", json={"application_id": app_id})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "FEE_ALREADY_PAID"


async def test_confirm_from_redirect(client, sign_in, provider, store, seed_application):
    app_id = await seed_application(user_email="bo@x.io")
    provider.sessions["cs_paid"] = {
        "id": "cs_paid", "payment_status": "paid", "payment_intent": "pi_42",
        "metadata": {"applicationId": app_id},
    }
    sign_in("bo@x.io")

    response = await client.post(
        "/api/v1/payments/confirm", json={"application_id": app_id, "session_id": "cs_paid"},
    )

    assert response.json() == {"matched_count": 1, "modified_count": 1}
    stored = await store.applications.find_one({"id": app_id})
    assert stored["fee_status"] == "paid"
    assert stored["transaction_id"] == "pi_42"
    assert stored["paid_at"] is not None


async def test_confirm_unpaid_session(client, sign_in, provider, store, seed_application):
    app_id = await seed_application(user_email="bo@x.io")
    provider.sessions["cs_open"] = {
        "id": "cs_open", "payment_status": "unpaid", "metadata": {"applicationId": app_id},
    }
    sign_in("bo@x.io")
    response = await client.post(
        "/api/v1/payments/confirm", json={"application_id": app_id, "session_id": "cs_open"},
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PAYMENT_NOT_VERIFIED"
    assert (await store.applications.find_one({"id": app_id}))["fee_status"] == "unpaid"


async def test_confirm_unknown_session_is_provider_error(client, sign_in, seed_application):
    app_id = await seed_application(user_email="bo@x.io")
    sign_in("bo@x.io")
    response = await client.post(
        "/api/v1/payments/confirm", json={"application_id": app_id, "session_id": "cs_none"},
    )
    assert response.status_code == 502


async def test_webhook_marks_fee_paid(client, store, seed_application):
    app_id = await seed_application()
    payload, headers = _signed(_completed(app_id))

    response = await client.post("/api/v1/payments/webhook", content=payload, headers=headers)

    assert response.status_code == 200
    assert response.json() == {"received": True, "matched_count": 1, "modified_count": 1}
    stored = await store.applications.find_one({"id": app_id})
    assert stored["fee_status"] == "paid"
    assert stored["transaction_id"] == "pi_hook"


async def test_webhook_bad_signature(client, store, seed_application):
    app_id = await seed_application()
    payload, headers = _signed(_completed(app_id), secret="whsec_forged")

    response = await client.post("/api/v1/payments/webhook", content=payload, headers=headers)

    assert response.status_code == 400
    assert (await store.applications.find_one({"id": app_id}))["fee_status"] == "unpaid"


async def test_webhook_missing_signature(client, seed_application):
    app_id = await seed_application()
    response = await client.post(
        "/api/v1/payments/webhook", content=json.dumps(_completed(app_id)).encode(),
    )
    assert response.status_code == 400


async def test_webhook_stale_timestamp(client, seed_application):
    app_id = await seed_application()
    payload, headers = _signed(_completed(app_id), timestamp=int(time.time()) - 3600)
    response = await client.post("/api/v1/payments/webhook", content=payload, headers=headers)
    assert response.status_code == 400


async def test_webhook_unknown_application(client):
    payload, headers = _signed(_completed("missing"))
    response = await client.post("/api/v1/payments/webhook", content=payload, headers=headers)
    assert response.json() == {"received": True, "matched_count": 0, "modified_count": 0}


async def test_webhook_signed_event_with_malformed_data(client):
    payload, headers = _signed({"type": "checkout.session.completed", "data": "oops"})
    response = await client.post("/api/v1/payments/webhook", content=payload, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PAYMENT_NOT_VERIFIED"
