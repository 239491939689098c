"""Loan Catalog — publishing a loan announces it to every user, best-effort."""

import pytest

from loanlink.core.errors import DatabaseError, ResourceNotFoundError
from loanlink.services.loan_catalog import LoanCatalog
from loanlink.services.notification_fanout import NotificationFanout

LOAN = {
    "title": "Green Energy Loan",
    "description": "Solar panels",
    "category": "home",
    "interest_rate": 4.5,
    "max_limit": 20000,
    "show_on_home": True,
}


@pytest.fixture
def catalog(store):
    return LoanCatalog(store, NotificationFanout(store))


async def test_create_loan_notifies_all_users(catalog, store, seed_user):
    for email in ("a@x.io", "b@x.io", "m@x.io"):
        await seed_user(email)

    loan, notified = await catalog.create_loan(LOAN, added_by="m@x.io")

    assert notified == 3
    assert loan["added_by"] == "m@x.io"
    notes = await store.notifications.find_many({"path": f"/loans/{loan['id']}"})
    assert sorted(n["user_email"] for n in notes) == ["a@x.io", "b@x.io", "m@x.io"]


async def test_create_loan_survives_fanout_failure(catalog, store, seed_user, monkeypatch):
    await seed_user("a@x.io")

    async def failing(documents):
        raise DatabaseError("insert failed", "commit")

    monkeypatch.setattr(store.notifications, "insert_many", failing)

    loan, notified = await catalog.create_loan(LOAN, added_by="m@x.io")

    assert notified == 0
    assert (await catalog.get_loan(loan["id"]))["title"] == "Green Energy Loan"


async def test_list_loans_filters(catalog):
    await catalog.create_loan(LOAN, "m@x.io")
    await catalog.create_loan({**LOAN, "category": "car", "show_on_home": False}, "m@x.io")

    assert len(await catalog.list_loans()) == 2
    assert [l["category"] for l in await catalog.list_loans(category="car")] == ["car"]
    assert [l["category"] for l in await catalog.list_loans(home_only=True)] == ["home"]


async def test_get_missing_loan(catalog):
    with pytest.raises(ResourceNotFoundError):
        await catalog.get_loan("missing")


async def test_update_and_delete(catalog):
    loan, _ = await catalog.create_loan(LOAN, "m@x.io")
    assert (await catalog.update_loan(loan["id"], {"interest_rate": 5.0})).modified_count == 1
    assert (await catalog.delete_loan(loan["id"])).deleted_count == 1
    assert (await catalog.delete_loan(loan["id"])).deleted_count == 0


async def test_find_loan_missing_is_none(catalog):
    assert await catalog.find_loan("nope") is None
