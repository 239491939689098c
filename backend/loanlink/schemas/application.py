"""Application Schemas — submission form and status decision.

Invariants:
    - StatusUpdate carries ONLY status: fee fields cannot travel through the generic update
"""

from pydantic import BaseModel, ConfigDict, Field

from loanlink.core.domain_types import ApplicationStatus


class ApplicationCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    loan_id: str = Field(min_length=1, max_length=36)
    loan_title: str = Field(min_length=1, max_length=200)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    contact_number: str | None = Field(None, max_length=40)
    national_id: str | None = Field(None, max_length=40)
    income_source: str | None = Field(None, max_length=200)
    monthly_income: float | None = Field(None, ge=0)
    loan_amount: float = Field(gt=0)
    reason: str | None = Field(None, max_length=2000)
    address: str | None = Field(None, max_length=500)
    extra_notes: str | None = Field(None, max_length=2000)

    def details(self) -> dict:
        return self.model_dump(exclude={"loan_id", "loan_title"}, exclude_none=True)


class StatusUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: ApplicationStatus
