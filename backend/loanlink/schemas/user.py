"""User Schemas — registration and role management."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from loanlink.core.domain_types import Role


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    name: str | None = Field(None, max_length=200)
    photo_url: str | None = Field(None, max_length=1000)
    role: Literal["borrower"] = "borrower"

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class RoleUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: Role
