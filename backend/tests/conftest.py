"""Root conftest — shared test configuration and a fresh store per test.

Invariants:
    - Every test gets a fresh in-memory SQLite database (StaticPool: one shared connection)
    - Settings come from env vars set here, before any loanlink module reads them
"""

import os

os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PAYMENT_API_KEY", "sk_test_fake")
os.environ.setdefault("PAYMENT_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("FRONTEND_BASE_URL", "http://frontend.test")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_FORMAT", "text")

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from loanlink.infrastructure.database import DatabaseSessionManager  # noqa: E402
from loanlink.infrastructure.document_store import ResourceStore  # noqa: E402


@pytest.fixture
async def store():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    resource_store = ResourceStore(DatabaseSessionManager.from_engine(engine))
    await resource_store.create_schema()
    yield resource_store
    await resource_store.close()


@pytest.fixture
def seed_user(store):
    """Insert a user with the given role; returns the email."""

    async def _seed(email: str, role: str = "borrower", name: str | None = None) -> str:
        await store.users.insert_one({
            "email": email, "role": role, "name": name,
            "created_at": datetime.now(timezone.utc),
        })
        return email

    return _seed


@pytest.fixture
def seed_application(store):
    """Insert an application document directly; returns its id."""

    async def _seed(
        user_email: str = "borrower@example.com",
        loan_id: str = "loan-1",
        loan_title: str = "Student Loan",
        status: str = "pending",
        **fields,
    ) -> str:
        return await store.applications.insert_one({
            "user_email": user_email,
            "loan_id": loan_id,
            "loan_title": loan_title,
            "status": status,
            "fee_status": "unpaid",
            "details": {"first_name": "Ada", "last_name": "Lovelace"},
            "created_at": datetime.now(timezone.utc),
            **fields,
        })

    return _seed
