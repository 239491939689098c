"""Loan Schemas — publish and edit loan products."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoanCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=10_000)
    category: str = Field(min_length=1, max_length=100)
    interest_rate: float = Field(ge=0, le=100)
    max_limit: float | None = Field(None, gt=0)
    show_on_home: bool = False

    @field_validator("title", "category")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v


class LoanUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=10_000)
    category: str | None = Field(None, min_length=1, max_length=100)
    interest_rate: float | None = Field(None, ge=0, le=100)
    max_limit: float | None = Field(None, gt=0)
    show_on_home: bool | None = None
