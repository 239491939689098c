"""Loan ORM — loan products published by managers."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Float, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from loanlink.db.base import Base


class Loan(Base):
    __tablename__ = "loans"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    interest_rate: Mapped[float] = mapped_column(Float, nullable=False)
    max_limit: Mapped[float | None] = mapped_column(Float, nullable=True)
    show_on_home: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    # email of the manager who published the loan
    added_by: Mapped[str] = mapped_column(String(320), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
