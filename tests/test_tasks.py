from sqlmodel import Session


def _create_user(session: Session, *, email: str, password: str = "StrongPass1!"):
    from app.services.users import UserService

    return UserService.create_user(
        session,
        full_name="Task Owner",
        age=28,
        email=email,
        password=password,
    )


def _auth_headers(client, session: Session, email: str) -> dict:
    _create_user(session, email=email)
    res = client.post("/api/auth/login", json={"email": email, "password": "StrongPass1!"})
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.json()['access_token']}"}


def _create_task(client, headers: dict, **fields) -> dict:
    payload = {"title": "Task", "description": "", "priority": "MEDIUM"}
    payload.update(fields)
    res = client.post("/api/tasks", headers=headers, json=payload)
    assert res.status_code == 201
    return res.json()


def test_create_task_defaults(client, db_session: Session):
    headers = _auth_headers(client, db_session, "create@example.com")

    res = client.post(
        "/api/tasks",
        headers=headers,
        json={"title": "Write report", "description": "Q3 numbers", "priority": "HIGH", "due_date": "2026-11-01T12:00:00Z"},
    )
    assert res.status_code == 201
    task = res.json()
    assert task["title"] == "Write report"
    assert task["priority"] == "HIGH"
    assert task["status"] == "PENDING"
    assert task["completed_at"] is None
    assert task["due_date"].startswith("2026-11-01T12:00:00")


def test_create_task_validation(client, db_session: Session):
    headers = _auth_headers(client, db_session, "invalid@example.com")

    empty_title = client.post("/api/tasks", headers=headers, json={"title": "", "priority": "LOW"})
    assert empty_title.status_code == 400

    long_title = client.post("/api/tasks", headers=headers, json={"title": "x" * 121, "priority": "LOW"})
    assert long_title.status_code == 400

    long_description = client.post(
        "/api/tasks", headers=headers, json={"title": "ok", "description": "d" * 2001, "priority": "LOW"}
    )
    assert long_description.status_code == 400

    bad_priority = client.post("/api/tasks", headers=headers, json={"title": "ok", "priority": "URGENT"})
    assert bad_priority.status_code == 400


def test_tasks_require_authentication(client):
    assert client.get("/api/tasks").status_code == 401
    assert client.post("/api/tasks", json={"title": "x", "priority": "LOW"}).status_code == 401


def test_status_transitions_set_and_clear_completed_at(client, db_session: Session):
    headers = _auth_headers(client, db_session, "status@example.com")
    task = _create_task(client, headers, title="Ship it")

    done = client.patch(f"/api/tasks/{task['id']}/status", headers=headers, json={"status": "DONE"})
    assert done.status_code == 200
    assert done.json()["status"] == "DONE"
    assert done.json()["completed_at"] is not None

    pending = client.patch(f"/api/tasks/{task['id']}/status", headers=headers, json={"status": "PENDING"})
    assert pending.status_code == 200
    assert pending.json()["status"] == "PENDING"
    assert pending.json()["completed_at"] is None

    complete = client.patch(f"/api/tasks/{task['id']}/complete", headers=headers)
    assert complete.status_code == 200
    assert complete.json()["status"] == "DONE"
    assert complete.json()["completed_at"] is not None

    canceled = client.patch(f"/api/tasks/{task['id']}", headers=headers, json={"status": "CANCELED"})
    assert canceled.status_code == 200
    assert canceled.json()["completed_at"] is None

    invalid = client.patch(f"/api/tasks/{task['id']}/status", headers=headers, json={"status": "ARCHIVED"})
    assert invalid.status_code == 400


def test_list_filters_compose_and_are_scoped_to_owner(client, db_session: Session):
    alice = _auth_headers(client, db_session, "alice@example.com")
    bob = _auth_headers(client, db_session, "bob@example.com")

    low = _create_task(client, alice, title="low", priority="LOW")
    high = _create_task(client, alice, title="high", priority="HIGH")
    high_done = _create_task(client, alice, title="high done", priority="HIGH")
    client.patch(f"/api/tasks/{high_done['id']}/complete", headers=alice)
    _create_task(client, bob, title="bob high", priority="HIGH")

    res = client.get("/api/tasks", headers=alice, params={"priority": "HIGH"})
    assert res.status_code == 200
    ids = {t["id"] for t in res.json()}
    assert ids == {high["id"], high_done["id"]}
    assert all(t["user_id"] == high["user_id"] for t in res.json())

    res = client.get("/api/tasks", headers=alice, params={"priority": "HIGH", "status": "PENDING"})
    assert [t["id"] for t in res.json()] == [high["id"]]

    res = client.get("/api/tasks", headers=alice)
    assert {t["id"] for t in res.json()} == {low["id"], high["id"], high_done["id"]}


def test_list_filter_by_due_date_and_sort(client, db_session: Session):
    headers = _auth_headers(client, db_session, "sort@example.com")

    early = _create_task(client, headers, title="early", due_date="2026-10-20T09:00:00")
    late = _create_task(client, headers, title="late", due_date="2026-12-01T09:00:00")
    same_day = _create_task(client, headers, title="same day", due_date="2026-10-20T18:30:00")
    no_due = _create_task(client, headers, title="no due")

    res = client.get("/api/tasks", headers=headers, params={"due_date": "2026-10-20"})
    assert {t["id"] for t in res.json()} == {early["id"], same_day["id"]}

    res = client.get("/api/tasks", headers=headers, params={"sort": "due_date"})
    assert [t["id"] for t in res.json()] == [late["id"], same_day["id"], early["id"], no_due["id"]]

    res = client.get("/api/tasks", headers=headers)
    assert [t["id"] for t in res.json()] == [no_due["id"], same_day["id"], late["id"], early["id"]]

    assert client.get("/api/tasks", headers=headers, params={"sort": "title"}).status_code == 400


def test_other_users_task_is_not_found(client, db_session: Session):
    owner = _auth_headers(client, db_session, "owner@example.com")
    intruder = _auth_headers(client, db_session, "intruder@example.com")
    task = _create_task(client, owner, title="private")
    task_id = task["id"]

    assert client.get(f"/api/tasks/{task_id}", headers=intruder).status_code == 404
    assert client.put(
        f"/api/tasks/{task_id}",
        headers=intruder,
        json={"title": "hijack", "description": "", "priority": "LOW", "due_date": None},
    ).status_code == 404
    assert client.patch(f"/api/tasks/{task_id}", headers=intruder, json={"title": "hijack"}).status_code == 404
    assert client.patch(f"/api/tasks/{task_id}/status", headers=intruder, json={"status": "DONE"}).status_code == 404
    assert client.patch(f"/api/tasks/{task_id}/complete", headers=intruder).status_code == 404

    untouched = client.get(f"/api/tasks/{task_id}", headers=owner)
    assert untouched.status_code == 200
    assert untouched.json()["title"] == "private"
    assert untouched.json()["status"] == "PENDING"

    assert client.get("/api/tasks/999999", headers=owner).status_code == 404


def test_replace_requires_all_core_fields(client, db_session: Session):
    headers = _auth_headers(client, db_session, "replace@example.com")
    task = _create_task(client, headers, title="old", description="old desc", priority="LOW", due_date="2026-10-30T10:00:00")

    partial = client.put(f"/api/tasks/{task['id']}", headers=headers, json={"title": "new"})
    assert partial.status_code == 400

    res = client.put(
        f"/api/tasks/{task['id']}",
        headers=headers,
        json={"title": "new", "description": "new desc", "priority": "HIGH", "due_date": None},
    )
    assert res.status_code == 200
    data = res.json()
    assert data["title"] == "new"
    assert data["description"] == "new desc"
    assert data["priority"] == "HIGH"
    assert data["due_date"] is None


def test_patch_distinguishes_null_from_omitted(client, db_session: Session):
    headers = _auth_headers(client, db_session, "patch@example.com")
    task = _create_task(client, headers, title="keep", description="keep desc", due_date="2026-10-30T10:00:00")

    res = client.patch(f"/api/tasks/{task['id']}", headers=headers, json={"priority": "HIGH"})
    assert res.status_code == 200
    data = res.json()
    assert data["priority"] == "HIGH"
    assert data["title"] == "keep"
    assert data["description"] == "keep desc"
    assert data["due_date"] is not None

    cleared = client.patch(f"/api/tasks/{task['id']}", headers=headers, json={"due_date": None})
    assert cleared.status_code == 200
    assert cleared.json()["due_date"] is None
    assert cleared.json()["priority"] == "HIGH"

    null_title = client.patch(f"/api/tasks/{task['id']}", headers=headers, json={"title": None})
    assert null_title.status_code == 400
