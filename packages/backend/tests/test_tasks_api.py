"""Task API tests.

Learn: Tasks are private. Every route needs a token, listing only ever
returns the caller's own tasks, and touching someone else's task is a
403 while a task that doesn't exist is a 404.
"""

import uuid

import pytest

from helpers import bearer


async def _create_task(client, who, **fields):
    body = {"title": "Buy milk", **fields}
    r = await client.post("/api/v1/tasks", json=body, headers=who["headers"])
    assert r.status_code == 201, r.text
    return r.json()


# ═══════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_task_defaults_to_pending(client, ann):
    task = await _create_task(client, ann, description="2 litres")
    assert task["title"] == "Buy milk"
    assert task["description"] == "2 litres"
    assert task["status"] == "PENDING"
    assert task["owner_id"] == ann["user"]["id"]
    assert "created_at" in task


@pytest.mark.asyncio
async def test_create_task_with_status(client, ann):
    task = await _create_task(client, ann, status="IN_PROGRESS")
    assert task["status"] == "IN_PROGRESS"


@pytest.mark.asyncio
async def test_create_task_ignores_owner_in_body(client, ann, bob):
    task = await _create_task(client, ann, owner_id=bob["user"]["id"])
    assert task["owner_id"] == ann["user"]["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"title": ""},
        {"description": "no title"},
        {"title": "Bad status", "status": "ARCHIVED"},
    ],
)
async def test_create_task_invalid_input(client, ann, body):
    r = await client.post("/api/v1/tasks", json=body, headers=ann["headers"])
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_create_task_requires_token(client):
    r = await client.post("/api/v1/tasks", json={"title": "Anonymous"})
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# Read
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_tasks_only_returns_own(client, ann, bob):
    await _create_task(client, ann, title="Ann 1")
    await _create_task(client, ann, title="Ann 2")
    await _create_task(client, bob, title="Bob 1")

    r = await client.get("/api/v1/tasks", headers=ann["headers"])
    assert r.status_code == 200
    assert {t["title"] for t in r.json()} == {"Ann 1", "Ann 2"}
    assert all(t["owner_id"] == ann["user"]["id"] for t in r.json())

    r = await client.get("/api/v1/tasks", headers=bob["headers"])
    assert [t["title"] for t in r.json()] == ["Bob 1"]


@pytest.mark.asyncio
async def test_list_tasks_empty(client, ann):
    r = await client.get("/api/v1/tasks", headers=ann["headers"])
    assert r.status_code == 200
    assert r.json() == []


@pytest.mark.asyncio
async def test_get_own_task(client, ann):
    task = await _create_task(client, ann)
    r = await client.get(f"/api/v1/tasks/{task['id']}", headers=ann["headers"])
    assert r.status_code == 200
    assert r.json()["id"] == task["id"]


@pytest.mark.asyncio
async def test_get_someone_elses_task_is_403(client, ann, bob):
    task = await _create_task(client, ann)
    r = await client.get(f"/api/v1/tasks/{task['id']}", headers=bob["headers"])
    assert r.status_code == 403
    assert r.json()["code"] == "forbidden"


@pytest.mark.asyncio
async def test_get_missing_task_is_404(client, ann):
    r = await client.get(f"/api/v1/tasks/{uuid.uuid4()}", headers=ann["headers"])
    assert r.status_code == 404
    assert r.json()["message"] == "Task not found"


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["get", "patch", "delete"])
async def test_malformed_task_id_is_404(client, ann, method):
    kwargs = {"json": {"title": "X"}} if method == "patch" else {}
    r = await client.request(
        method.upper(), "/api/v1/tasks/not-a-uuid", headers=ann["headers"], **kwargs
    )
    assert r.status_code == 404
    assert r.json()["message"] == "Task not found"


# ═══════════════════════════════════════════════════════════
# Update
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_task_partial(client, ann):
    task = await _create_task(client, ann, description="keep me")
    r = await client.patch(
        f"/api/v1/tasks/{task['id']}", json={"status": "DONE"}, headers=ann["headers"]
    )
    assert r.status_code == 200
    updated = r.json()
    assert updated["status"] == "DONE"
    assert updated["title"] == task["title"]
    assert updated["description"] == "keep me"
    assert updated["owner_id"] == task["owner_id"]


@pytest.mark.asyncio
async def test_update_task_can_clear_description(client, ann):
    task = await _create_task(client, ann, description="temporary")
    r = await client.patch(
        f"/api/v1/tasks/{task['id']}", json={"description": None}, headers=ann["headers"]
    )
    assert r.status_code == 200
    assert r.json()["description"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "patch",
    [{"status": "ARCHIVED"}, {"status": None}, {"title": None}, {"title": ""}],
)
async def test_update_task_invalid_patch(client, ann, patch):
    task = await _create_task(client, ann)
    r = await client.patch(f"/api/v1/tasks/{task['id']}", json=patch, headers=ann["headers"])
    assert r.status_code == 400

    r = await client.get(f"/api/v1/tasks/{task['id']}", headers=ann["headers"])
    assert r.json()["status"] == "PENDING"
    assert r.json()["title"] == task["title"]


@pytest.mark.asyncio
async def test_update_someone_elses_task_is_403(client, ann, bob):
    task = await _create_task(client, ann)
    r = await client.patch(
        f"/api/v1/tasks/{task['id']}", json={"title": "Mine now"}, headers=bob["headers"]
    )
    assert r.status_code == 403

    r = await client.get(f"/api/v1/tasks/{task['id']}", headers=ann["headers"])
    assert r.json()["title"] == "Buy milk"


@pytest.mark.asyncio
async def test_update_missing_task_is_404(client, ann):
    r = await client.patch(
        f"/api/v1/tasks/{uuid.uuid4()}", json={"title": "Ghost"}, headers=ann["headers"]
    )
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_task(client, ann):
    task = await _create_task(client, ann)
    r = await client.delete(f"/api/v1/tasks/{task['id']}", headers=ann["headers"])
    assert r.status_code == 204
    assert r.content == b""

    r = await client.get(f"/api/v1/tasks/{task['id']}", headers=ann["headers"])
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_someone_elses_task_is_403(client, ann, bob):
    task = await _create_task(client, ann)
    r = await client.delete(f"/api/v1/tasks/{task['id']}", headers=bob["headers"])
    assert r.status_code == 403

    r = await client.get(f"/api/v1/tasks/{task['id']}", headers=ann["headers"])
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_delete_missing_task_is_404(client, ann):
    r = await client.delete(f"/api/v1/tasks/{uuid.uuid4()}", headers=ann["headers"])
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Orphaned tokens
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_token_of_deleted_user_gets_user_not_found(client, ann):
    await client.delete(f"/api/v1/users/{ann['user']['id']}", headers=ann["headers"])

    r = await client.get("/api/v1/tasks", headers=ann["headers"])
    assert r.status_code == 404
    assert r.json()["message"] == "User not found"

    r = await client.post("/api/v1/tasks", json={"title": "Too late"}, headers=ann["headers"])
    assert r.status_code == 404
    assert r.json()["message"] == "User not found"


@pytest.mark.asyncio
async def test_token_for_never_registered_user(client, app):
    token = app.state.token_service.issue(uuid.uuid4())
    r = await client.get("/api/v1/tasks", headers=bearer(token))
    assert r.status_code == 404
    assert r.json()["message"] == "User not found"
