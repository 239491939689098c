"""Checkout Client — hosted payment-provider checkout over httpx.

Invariants:
    - The fee is the configured fixed amount, never derived from the loan amount
    - Every checkout session carries applicationId, loanId, applicantName and fee metadata
    - Success redirect carries the provider session id and the application id as query params
    - Transient failures (connection errors, 5xx, 429) retried with exponential backoff;
      other 4xx fail immediately
    - All failures mapped to PaymentProviderError (core/errors.py)

Design Decisions:
    - Raw REST via httpx.AsyncClient (form-encoded, bearer auth) over a vendor SDK
    - Idempotency-Key per application and charged amount: a retried POST cannot open two
      sessions, a fee or currency change is not replayed against the old parameters
    - transport injectable: tests use httpx.MockTransport
"""

import asyncio
import logging
from typing import Any

import httpx

from loanlink.config import Settings
from loanlink.core.errors import PaymentProviderError

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


class CheckoutClient:
    """Creates and retrieves hosted checkout sessions."""

    def __init__(
        self,
        api_base: str,
        api_key: str,
        frontend_base_url: str,
        fee_cents: int,
        currency: str = "usd",
        timeout_seconds: float = 15.0,
        max_retries: int = 2,
        base_delay_ms: int = 250,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client = httpx.AsyncClient(
            base_url=api_base,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout_seconds,
            transport=transport,
        )
        self.frontend_base_url = frontend_base_url.rstrip("/")
        self.fee_cents = fee_cents
        self.currency = currency
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "CheckoutClient":
        return cls(
            api_base=settings.payment_api_base,
            api_key=settings.payment_api_key,
            frontend_base_url=settings.frontend_base_url,
            fee_cents=settings.application_fee_cents,
            currency=settings.payment_currency,
            timeout_seconds=settings.payment_timeout_seconds,
            **kwargs,
        )

    def checkout_form(self, application: dict, applicant_name: str) -> dict[str, Any]:
        """Form fields for a one-item checkout session paying the application fee."""
        app_id = application["id"]
        return {
            "mode": "payment",
            "line_items[0][quantity]": 1,
            "line_items[0][price_data][currency]": self.currency,
            "line_items[0][price_data][unit_amount]": self.fee_cents,
            "line_items[0][price_data][product_data][name]": (
                f"Application fee: {application['loan_title']}"
            ),
            "success_url": (
                f"{self.frontend_base_url}/payment-success"
                f"?session_id={{CHECKOUT_SESSION_ID}}&applicationId={app_id}"
            ),
            "cancel_url": f"{self.frontend_base_url}/dashboard/my-loans",
            "customer_email": application["user_email"],
            "metadata[applicationId]": app_id,
            "metadata[loanId]": application["loan_id"],
            "metadata[applicantName]": applicant_name,
            "metadata[fee]": self.fee_cents,
        }

    async def create_checkout_session(
        self, application: dict, applicant_name: str,
    ) -> dict:
        """Open a hosted checkout session; returns the provider's session object."""
        return await self._request(
            "POST", "/v1/checkout/sessions",
            data=self.checkout_form(application, applicant_name),
            headers={"Idempotency-Key": self.idempotency_key(application)},
        )

    def idempotency_key(self, application: dict) -> str:
        """Stable per application and charge; a changed fee or currency opens a new session."""
        return f"application-fee-{application['id']}-{self.fee_cents}-{self.currency}"

    async def retrieve_checkout_session(self, session_id: str) -> dict:
        return await self._request("GET", f"/v1/checkout/sessions/{session_id}")

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.request(method, url, **kwargs)
            except httpx.TimeoutException:
                raise PaymentProviderError("request timed out")
            except httpx.TransportError as e:
                if attempt < self.max_retries:
                    await self._backoff(attempt, f"transport error: {e}")
                    continue
                raise PaymentProviderError(f"connection failed: {e}")

            if response.status_code in _RETRYABLE_STATUS and attempt < self.max_retries:
                await self._backoff(attempt, f"status {response.status_code}")
                continue
            if response.is_error:
                raise PaymentProviderError(
                    _error_message(response), status_code=response.status_code,
                )
            return response.json()
        raise PaymentProviderError("retries exhausted")

    async def _backoff(self, attempt: int, reason: str) -> None:
        delay = self.base_delay_ms * (2 ** attempt) / 1000
        logger.warning(
            f"Payment provider {reason}, retrying in {delay:.2f}s",
            extra={"attempt": attempt + 1},
        )
        await asyncio.sleep(delay)

    async def aclose(self) -> None:
        await self.client.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return f"HTTP {response.status_code}"
