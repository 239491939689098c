"""Payment Schemas — checkout start and success-redirect confirmation."""

from pydantic import BaseModel, ConfigDict, Field


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    application_id: str = Field(min_length=1, max_length=36)


class PaymentConfirmRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    application_id: str = Field(min_length=1, max_length=36)
    session_id: str = Field(min_length=1, max_length=255)
