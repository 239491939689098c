"""Notification Routes — the inbox is scoped to the session email."""


async def _broadcast(store, emails):
    await store.notifications.insert_many([
        {"user_email": e, "message": "New loan available: X", "type": "info", "path": "/loans/x"}
        for e in emails
    ])


async def test_inbox_scoped_to_caller(client, sign_in, store):
    await _broadcast(store, ["a@x.io", "a@x.io", "b@x.io"])
    sign_in("a@x.io")
    inbox = (await client.get("/api/v1/notifications")).json()
    assert len(inbox["notifications"]) == 2
    assert inbox["unread"] == 2
    assert {n["user_email"] for n in inbox["notifications"]} == {"a@x.io"}


async def test_mark_read_twice(client, sign_in, store):
    await _broadcast(store, ["a@x.io"])
    [note] = await store.notifications.find_many({"user_email": "a@x.io"})
    sign_in("a@x.io")

    first = await client.patch(f"/api/v1/notifications/{note['id']}/read")
    second = await client.patch(f"/api/v1/notifications/{note['id']}/read")

    assert first.json() == {"matched_count": 1, "modified_count": 1}
    assert second.json() == {"matched_count": 1, "modified_count": 0}


async def test_mark_read_someone_elses(client, sign_in, store):
    await _broadcast(store, ["b@x.io"])
    [note] = await store.notifications.find_many({"user_email": "b@x.io"})
    sign_in("a@x.io")
    response = await client.patch(f"/api/v1/notifications/{note['id']}/read")
    assert response.status_code == 403


async def test_unknown_ids_answer_zero(client, sign_in):
    sign_in("a@x.io")
    assert (await client.patch("/api/v1/notifications/missing/read")).json() == {
        "matched_count": 0, "modified_count": 0,
    }
    assert (await client.delete("/api/v1/notifications/missing")).json() == {"deleted_count": 0}


async def test_mark_all_read_and_delete(client, sign_in, store):
    await _broadcast(store, ["a@x.io", "a@x.io"])
    sign_in("a@x.io")
    result = await client.patch("/api/v1/notifications/read-all")
    assert result.json() == {"matched_count": 2, "modified_count": 2}
    assert (await client.get("/api/v1/notifications")).json()["unread"] == 0

    [first, _] = await store.notifications.find_many({"user_email": "a@x.io"})
    assert (await client.delete(f"/api/v1/notifications/{first['id']}")).json() == {
        "deleted_count": 1,
    }
