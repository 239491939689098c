"""API test fixtures — ASGI client over the test store and a mocked payment provider.

Invariants:
    - get_store / get_checkout_client overridden: the lifespan (real DB, real provider) never runs
    - The payment provider is an httpx.MockTransport answering from `provider.sessions`
    - sign_in() sets a cookie signed with the app's own codec, exactly what /auth/jwt issues
"""

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from loanlink.api.dependencies import get_checkout_client, get_store, get_token_codec
from loanlink.config import get_settings
from loanlink.infrastructure.checkout_client import CheckoutClient
from loanlink.main import app


class FakeProvider:
    """Checkout-session endpoints of the payment provider, in memory."""

    def __init__(self):
        self.sessions: dict[str, dict] = {}
        self.created: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path == "/v1/checkout/sessions":
            self.created.append(request)
            session_id = f"cs_test_{len(self.created)}"
            return httpx.Response(
                200, json={"id": session_id, "url": f"https://pay.test/{session_id}"},
            )
        session_id = request.url.path.rsplit("/", 1)[-1]
        if session_id in self.sessions:
            return httpx.Response(200, json=self.sessions[session_id])
        return httpx.Response(404, json={"error": {"message": "No such checkout.session"}})


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
async def client(store, provider):
    checkout = CheckoutClient.from_settings(
        get_settings(), transport=httpx.MockTransport(provider.handler), base_delay_ms=0,
    )
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_checkout_client] = lambda: checkout
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    await checkout.aclose()


@pytest.fixture
def sign_in(client):
    """Put a valid session cookie for `email` on the client."""

    def _sign_in(email: str, **claims) -> str:
        token = get_token_codec(get_settings()).issue({"email": email, **claims})
        client.cookies.set(get_settings().session_cookie_name, token)
        return token

    return _sign_in
