"""Auth Schemas — sign-in claim accepted by the token endpoint."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SignInRequest(BaseModel):
    """Identity claim: an email plus arbitrary additional claims."""
    model_config = ConfigDict(extra="allow")

    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()
