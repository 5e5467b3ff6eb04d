"""Task API tests — CRUD, transitive ownership through the parent project.

Learn: Tasks have no owner of their own. These tests check that every
path (create, read, update, delete, list) resolves ownership via the
project, and that a rejected create leaves no row behind.
"""

import pytest
from sqlalchemy import func, select

from tasktracker.db.models import Task


# ═══════════════════════════════════════════════════════════
# Shared fixtures
# ═══════════════════════════════════════════════════════════


@pytest.fixture
async def alice_project(client, alice):
    r = await client.post("/api/projects", json={"name": "Alice's"}, headers=alice)
    return r.json()["data"]["project"]


@pytest.fixture
async def bob_project(client, bob):
    r = await client.post("/api/projects", json={"name": "Bob's"}, headers=bob)
    return r.json()["data"]["project"]


async def _create_task(client, headers, project_id, title="Write docs", **extra):
    r = await client.post(
        "/api/tasks",
        json={"project_id": project_id, "title": title, **extra},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    return r.json()["data"]["task"]


# ═══════════════════════════════════════════════════════════
# CRUD
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_task_starts_pending(client, alice, alice_project):
    task = await _create_task(
        client,
        alice,
        alice_project["id"],
        title="Fix login bug",
        description="Users get logged out",
        due_date="2026-12-01T09:00:00Z",
    )
    assert task["title"] == "Fix login bug"
    assert task["status"] == "Pending"
    assert task["project_id"] == alice_project["id"]
    assert task["due_date"].startswith("2026-12-01")


@pytest.mark.asyncio
async def test_get_own_task(client, alice, alice_project):
    task = await _create_task(client, alice, alice_project["id"])
    r = await client.get(f"/api/tasks/{task['id']}", headers=alice)
    assert r.status_code == 200
    assert r.json()["data"]["task"]["id"] == task["id"]


@pytest.mark.asyncio
async def test_update_task_status_and_title(client, alice, alice_project):
    task = await _create_task(client, alice, alice_project["id"], description="keep")
    r = await client.put(
        f"/api/tasks/{task['id']}",
        json={"status": "InProgress", "title": "Renamed"},
        headers=alice,
    )
    assert r.status_code == 200
    updated = r.json()["data"]["task"]
    assert updated["status"] == "InProgress"
    assert updated["title"] == "Renamed"
    assert updated["description"] == "keep"


@pytest.mark.asyncio
async def test_update_task_rejects_unknown_status(client, alice, alice_project):
    task = await _create_task(client, alice, alice_project["id"])
    r = await client.put(
        f"/api/tasks/{task['id']}", json={"status": "Archived"}, headers=alice
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_delete_task(client, alice, alice_project):
    task = await _create_task(client, alice, alice_project["id"])
    r = await client.delete(f"/api/tasks/{task['id']}", headers=alice)
    assert r.status_code == 200
    assert r.json()["message"] == "Task deleted successfully"

    r = await client.get(f"/api/tasks/{task['id']}", headers=alice)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_deleting_project_removes_its_tasks(client, alice, alice_project, db_session):
    task = await _create_task(client, alice, alice_project["id"])
    r = await client.delete(f"/api/projects/{alice_project['id']}", headers=alice)
    assert r.status_code == 200

    r = await client.get(f"/api/tasks/{task['id']}", headers=alice)
    assert r.status_code == 404
    assert await db_session.scalar(select(func.count(Task.id))) == 0


# ═══════════════════════════════════════════════════════════
# Ownership through the parent project
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_task_in_other_users_project_rejected(
    client, alice, bob_project, db_session
):
    r = await client.post(
        "/api/tasks",
        json={"project_id": bob_project["id"], "title": "Intrusion"},
        headers=alice,
    )
    assert r.status_code == 403
    assert r.json() == {"status": "error", "message": "Forbidden access to project"}
    assert await db_session.scalar(select(func.count(Task.id))) == 0


@pytest.mark.asyncio
async def test_create_task_in_missing_project_is_404(client, alice, db_session):
    r = await client.post(
        "/api/tasks", json={"project_id": 424242, "title": "Orphan"}, headers=alice
    )
    assert r.status_code == 404
    assert r.json() == {"status": "error", "message": "Project not found"}
    assert await db_session.scalar(select(func.count(Task.id))) == 0


@pytest.mark.asyncio
async def test_read_other_users_task_is_403(client, alice, bob, alice_project):
    task = await _create_task(client, alice, alice_project["id"])
    r = await client.get(f"/api/tasks/{task['id']}", headers=bob)
    assert r.status_code == 403
    assert r.json() == {"status": "error", "message": "Forbidden access to task"}


@pytest.mark.asyncio
async def test_read_missing_task_is_404(client, alice):
    r = await client.get("/api/tasks/999999", headers=alice)
    assert r.status_code == 404
    assert r.json() == {"status": "error", "message": "Task not found"}


@pytest.mark.asyncio
async def test_update_other_users_task_is_403_and_unchanged(
    client, alice, bob, alice_project
):
    task = await _create_task(client, alice, alice_project["id"], title="Original")
    r = await client.put(
        f"/api/tasks/{task['id']}",
        json={"title": "Hijacked", "status": "Completed"},
        headers=bob,
    )
    assert r.status_code == 403

    r = await client.get(f"/api/tasks/{task['id']}", headers=alice)
    data = r.json()["data"]["task"]
    assert data["title"] == "Original"
    assert data["status"] == "Pending"


@pytest.mark.asyncio
async def test_delete_other_users_task_is_403_and_kept(client, alice, bob, alice_project):
    task = await _create_task(client, alice, alice_project["id"])
    r = await client.delete(f"/api/tasks/{task['id']}", headers=bob)
    assert r.status_code == 403

    r = await client.get(f"/api/tasks/{task['id']}", headers=alice)
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_mutating_missing_task_is_403(client, alice):
    r = await client.put("/api/tasks/999999", json={"title": "x"}, headers=alice)
    assert r.status_code == 403
    r = await client.delete("/api/tasks/999999", headers=alice)
    assert r.status_code == 403


# ═══════════════════════════════════════════════════════════
# Listing
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_tasks_scoped_to_owner(client, alice, bob, alice_project, bob_project):
    await _create_task(client, alice, alice_project["id"], title="a1")
    await _create_task(client, alice, alice_project["id"], title="a2")
    await _create_task(client, bob, bob_project["id"], title="b1")

    r = await client.get("/api/tasks", headers=alice)
    assert r.status_code == 200
    data = r.json()["data"]
    assert sorted(t["title"] for t in data["tasks"]) == ["a1", "a2"]
    assert data["pagination"]["total"] == 2


@pytest.mark.asyncio
async def test_list_tasks_status_filter(client, alice, alice_project):
    t1 = await _create_task(client, alice, alice_project["id"], title="done")
    await _create_task(client, alice, alice_project["id"], title="todo")
    await client.put(
        f"/api/tasks/{t1['id']}", json={"status": "Completed"}, headers=alice
    )

    r = await client.get("/api/tasks?status=Completed", headers=alice)
    data = r.json()["data"]
    assert [t["title"] for t in data["tasks"]] == ["done"]
    assert data["pagination"]["total"] == 1

    r = await client.get("/api/tasks?status=Pending", headers=alice)
    assert [t["title"] for t in r.json()["data"]["tasks"]] == ["todo"]


@pytest.mark.asyncio
async def test_list_tasks_unknown_status_filter(client, alice):
    r = await client.get("/api/tasks?status=whatever", headers=alice)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_list_tasks_pagination(client, alice, alice_project):
    for i in range(12):
        await _create_task(client, alice, alice_project["id"], title=f"t{i}")

    r = await client.get("/api/tasks?page=2&limit=5", headers=alice)
    data = r.json()["data"]
    assert len(data["tasks"]) == 5
    assert data["pagination"] == {"total": 12, "page": 2, "limit": 5, "total_pages": 3}

    r = await client.get("/api/tasks?page=3&limit=5", headers=alice)
    assert len(r.json()["data"]["tasks"]) == 2


# ═══════════════════════════════════════════════════════════
# Integer bounds
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_task_id_beyond_bigint_rejected(client, alice):
    huge = "99999999999999999999"
    r = await client.get(f"/api/tasks/{huge}", headers=alice)
    assert r.status_code == 422
    r = await client.put(f"/api/tasks/{huge}", json={"title": "x"}, headers=alice)
    assert r.status_code == 422
    r = await client.delete(f"/api/tasks/{huge}", headers=alice)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_create_task_with_project_id_beyond_bigint_rejected(
    client, alice, db_session
):
    r = await client.post(
        "/api/tasks",
        json={"project_id": 99999999999999999999, "title": "Overflow"},
        headers=alice,
    )
    assert r.status_code == 422
    assert await db_session.scalar(select(func.count(Task.id))) == 0


@pytest.mark.asyncio
async def test_task_page_past_bigint_offset_is_bad_request(client, alice):
    r = await client.get("/api/tasks?page=9223372036854775807", headers=alice)
    assert r.status_code == 400
    assert r.json() == {"status": "error", "message": "page out of range"}
