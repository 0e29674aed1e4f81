# Rev 0.2.0
from __future__ import annotations

import sqlite3
from typing import Any, List, Optional

from taskhub.models.entities import TASK_FIELDS, Task
from taskhub.models.types import TaskPriority, TaskStatus
from taskhub.utils.clock import Clock, from_iso, utc_now
from .sqlite_common import SQLiteRepositoryBase


class SQLiteTaskRepository(SQLiteRepositoryBase):
    """
    Task CRUD + filtered listing.
    Deleting a task that still has subtasks fails on the parent_task_id
    foreign key; callers delete bottom-up (see HierarchyService).
    """

    table = "tasks"

    _COLUMNS = """
        id, title, description, status, priority, progress,
        estimated_hours, spent_hours, due_date, start_date,
        project_id, assignee_id, reporter_id, parent_task_id,
        created_at, updated_at
    """

    def __init__(self, db_or_conn, clock: Clock = utc_now):
        super().__init__(db_or_conn)
        self._clock = clock

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            status=TaskStatus(row["status"]),
            priority=TaskPriority(row["priority"]),
            progress=row["progress"],
            estimated_hours=row["estimated_hours"],
            spent_hours=row["spent_hours"],
            due_date=from_iso(row["due_date"]),
            start_date=from_iso(row["start_date"]),
            project_id=row["project_id"],
            assignee_id=row["assignee_id"],
            reporter_id=row["reporter_id"],
            parent_task_id=row["parent_task_id"],
            created_at=from_iso(row["created_at"]),
            updated_at=from_iso(row["updated_at"]),
        )

    # -------------------------
    # Listings
    # -------------------------
    def list_tasks(
        self,
        *,
        project_id: Optional[int] = None,
        parent_task_id: Optional[int] = None,
    ) -> List[Task]:
        where, params = self._where([("project_id", project_id), ("parent_task_id", parent_task_id)])
        rows = self._fetch_all(f"SELECT {self._COLUMNS} FROM tasks{where} ORDER BY id", params)
        return [self._row_to_task(r) for r in rows]

    # -------------------------
    # CRUD
    # -------------------------
    def get_task(self, task_id: int) -> Optional[Task]:
        rows = self._fetch_all(f"SELECT {self._COLUMNS} FROM tasks WHERE id = ? LIMIT 1", (task_id,))
        return self._row_to_task(rows[0]) if rows else None

    def create_task(self, **fields: Any) -> Task:
        now = self._clock()
        values = {k: fields[k] for k in TASK_FIELDS if k in fields}
        values.setdefault("status", TaskStatus.NEW)
        values.setdefault("priority", TaskPriority.MEDIUM)
        values.setdefault("progress", 0)
        values.setdefault("spent_hours", 0)
        values["created_at"] = now
        values["updated_at"] = now
        return self.get_task(self._insert(values))

    def update_task(self, task_id: int, **fields: Any) -> Optional[Task]:
        values = {k: v for k, v in fields.items() if k in TASK_FIELDS}
        values["updated_at"] = self._clock()
        if not self._update(task_id, values):
            return None
        return self.get_task(task_id)

    def delete_task(self, task_id: int) -> bool:
        return self._delete(task_id)

    def clear_user_references(self, user_id: int) -> int:
        con = self._conn()
        a = con.execute("UPDATE tasks SET assignee_id = NULL WHERE assignee_id = ?", (user_id,)).rowcount
        r = con.execute("UPDATE tasks SET reporter_id = NULL WHERE reporter_id = ?", (user_id,)).rowcount
        return a + r
