"""Application ORM — a borrower's request against one loan.

Invariants:
    - status starts at "pending"; transitions are validated in core/enforce_transitions.py
    - fee_status becomes "paid" only through the payment linker, which also stamps
      transaction_id and paid_at
    - details holds the applicant-supplied form fields (free shape)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from loanlink.db.base import Base


class Application(Base):
    __tablename__ = "applications"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    user_email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    loan_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    loan_title: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True,
    )
    fee_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="unpaid",
    )
    transaction_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    details: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
