# Rev 0.2.0

"""Backend contract tests: both storages run the same checks."""
from __future__ import annotations

import sqlite3

import pytest

from taskhub.models.types import ActivityType, TaskStatus
from taskhub.repositories.db import Database
from taskhub.utils.paths import MIGRATIONS_DIR


def test_ids_are_monotonic(storage):
    a = storage.projects.create_project(name="a")
    b = storage.projects.create_project(name="b")
    storage.projects.delete_project(b.id)
    c = storage.projects.create_project(name="c")
    assert a.id < b.id < c.id


def test_task_filters(storage):
    p = storage.projects.create_project(name="p")
    t1 = storage.tasks.create_task(title="t1", project_id=p.id)
    t2 = storage.tasks.create_task(title="t2", project_id=p.id, parent_task_id=t1.id)
    storage.tasks.create_task(title="t3")
    assert [t.id for t in storage.tasks.list_tasks(project_id=p.id)] == [t1.id, t2.id]
    assert [t.id for t in storage.tasks.list_tasks(parent_task_id=t1.id)] == [t2.id]
    assert len(storage.tasks.list_tasks()) == 3


def test_update_missing_rows(storage):
    assert storage.tasks.update_task(9, title="x") is None
    assert storage.projects.update_project(9, name="x") is None
    assert storage.users.update_user(9, role="x") is None
    assert storage.tasks.delete_task(9) is False


def test_recent_activities_newest_first(storage, clock):
    first = storage.activities.add_activity(ActivityType.TASK_CREATED, "one")
    clock.advance(seconds=1)
    second = storage.activities.add_activity(ActivityType.TASK_UPDATED, "two")
    third = storage.activities.add_activity(ActivityType.TASK_UPDATED, "three")

    recent = storage.activities.list_recent_activities(10)
    # same timestamp: insertion order
    assert [a.id for a in recent] == [second.id, third.id, first.id]
    assert [a.id for a in storage.activities.list_recent_activities(1)] == [second.id]


def test_transaction_rolls_back(storage):
    storage.projects.create_project(name="kept")
    with pytest.raises(RuntimeError):
        with storage.transaction():
            storage.projects.create_project(name="lost")
            raise RuntimeError("abort")
    assert [p.name for p in storage.projects.list_projects()] == ["kept"]


def test_nested_transaction_failure_keeps_outer_work(storage):
    with storage.transaction():
        storage.projects.create_project(name="outer")
        try:
            with storage.transaction():
                storage.projects.create_project(name="inner")
                raise RuntimeError("inner only")
        except RuntimeError:
            pass
    assert [p.name for p in storage.projects.list_projects()] == ["outer"]


def test_status_round_trips(storage):
    t = storage.tasks.create_task(title="x", status=TaskStatus.FEEDBACK)
    assert storage.tasks.get_task(t.id).status is TaskStatus.FEEDBACK


# --- SQLite specifics ---------------------------------------------------------

def test_migrations_recorded(tmp_path):
    db = Database(tmp_path / "m.db")
    try:
        assert db.pending() == [p.name for p in sorted(MIGRATIONS_DIR.glob("*.sql"))]
        applied = db.run_migrations()
        assert applied and db.pending() == []
        assert db.run_migrations() == []
        assert set(applied) <= db.applied()
    finally:
        db.close()


def test_schema_tables(db_conn):
    names = {r[0] for r in db_conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert {"users", "projects", "tasks", "activities", "schema_migrations"} <= names


def test_activities_are_append_only(sqlite_storage):
    a = sqlite_storage.activities.add_activity(ActivityType.TASK_CREATED, "created")
    conn = sqlite_storage.db.conn
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("UPDATE activities SET description = 'edited' WHERE id = ?", (a.id,))
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("UPDATE activities SET task_id = NULL WHERE id = ?", (a.id,))
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("DELETE FROM activities WHERE id = ?", (a.id,))


def test_schema_rejects_out_of_range_progress(sqlite_storage):
    with pytest.raises(sqlite3.IntegrityError):
        sqlite_storage.tasks.create_task(title="x", progress=101)


def test_task_with_subtasks_cannot_be_deleted_directly(sqlite_storage):
    parent = sqlite_storage.tasks.create_task(title="parent")
    sqlite_storage.tasks.create_task(title="child", parent_task_id=parent.id)
    with pytest.raises(sqlite3.IntegrityError):
        sqlite_storage.tasks.delete_task(parent.id)
