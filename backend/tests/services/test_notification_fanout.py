"""Notification Fan-out — broadcast, decision notices and the inbox operations."""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from loanlink.core.domain_types import ApplicationStatus
from loanlink.core.errors import DatabaseError
from loanlink.services.notification_fanout import (
    FANOUT_FAILED, NotificationFanout, announce_best_effort,
)

T0 = datetime(2026, 7, 1, tzinfo=timezone.utc)


class _Clock:
    def __init__(self):
        self.now = T0

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def fanout(store):
    return NotificationFanout(store, clock=_Clock())


async def test_broadcast_one_per_recipient(fanout, store, monkeypatch):
    calls = []
    original = store.notifications.insert_many

    async def counting_insert_many(documents):
        calls.append(len(documents))
        return await original(documents)

    monkeypatch.setattr(store.notifications, "insert_many", counting_insert_many)

    loan = {"id": "loan-1", "title": "Car Loan"}
    sent = await fanout.broadcast_new_loan(loan, ["a@x.io", "b@x.io", "c@x.io"])

    assert sent == 3
    assert calls == [3]
    for email in ("a@x.io", "b@x.io", "c@x.io"):
        [note] = await fanout.list_for_user(email)
        assert note["message"] == "New loan available: Car Loan"
        assert note["path"] == "/loans/loan-1"
        assert note["read"] is False


async def test_broadcast_no_recipients(fanout):
    assert await fanout.broadcast_new_loan({"id": "l", "title": "T"}, []) == 0


async def test_notify_decision_vanished_application(fanout, store):
    await fanout.notify_decision("missing", ApplicationStatus.APPROVED)
    assert await store.notifications.find_many() == []


async def test_list_newest_first(fanout, seed_application):
    first = await seed_application(loan_title="First")
    second = await seed_application(loan_title="Second")
    await fanout.notify_decision(first, ApplicationStatus.APPROVED)
    await fanout.notify_decision(second, ApplicationStatus.REJECTED)

    inbox = await fanout.list_for_user("borrower@example.com")
    assert [n["message"] for n in inbox] == [
        "Your application for Second has been rejected.",
        "Your application for First has been approved.",
    ]


async def test_mark_read_idempotent(fanout):
    await fanout.broadcast_new_loan({"id": "l", "title": "T"}, ["a@x.io"])
    [note] = await fanout.list_for_user("a@x.io")

    first = await fanout.mark_read(note["id"])
    second = await fanout.mark_read(note["id"])

    assert (first.matched_count, first.modified_count) == (1, 1)
    assert (second.matched_count, second.modified_count) == (1, 0)


async def test_mark_all_read_only_touches_caller(fanout):
    await fanout.broadcast_new_loan({"id": "l1", "title": "A"}, ["a@x.io", "b@x.io"])
    await fanout.broadcast_new_loan({"id": "l2", "title": "B"}, ["a@x.io"])

    result = await fanout.mark_all_read("a@x.io")
    assert result.modified_count == 2
    assert (await fanout.mark_all_read("a@x.io")).modified_count == 0
    [other] = await fanout.list_for_user("b@x.io")
    assert other["read"] is False


async def test_delete(fanout):
    await fanout.broadcast_new_loan({"id": "l", "title": "T"}, ["a@x.io"])
    [note] = await fanout.list_for_user("a@x.io")
    assert (await fanout.delete(note["id"])).deleted_count == 1
    assert await fanout.get(note["id"]) is None


async def test_announce_best_effort_swallows_store_failure(caplog):
    async def failing():
        raise DatabaseError("down", "commit")

    with caplog.at_level(logging.ERROR):
        assert await announce_best_effort(failing, loan_id="l1") == 0

    [record] = [r for r in caplog.records if getattr(r, "error_code", None) == FANOUT_FAILED]
    assert record.loan_id == "l1"


async def test_announce_best_effort_propagates_other_errors():
    async def broken():
        raise KeyError("title")

    with pytest.raises(KeyError):
        await announce_best_effort(broken)
