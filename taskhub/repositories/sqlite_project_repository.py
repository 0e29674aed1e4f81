# Rev 0.2.0
# taskhub – SQLiteProjectRepository (Rev 0.2.0, schema 0001_initial)
from __future__ import annotations
import sqlite3
from typing import Any, List, Optional

from taskhub.models.entities import PROJECT_FIELDS, Project
from taskhub.models.types import ProjectStatus
from taskhub.utils.clock import Clock, from_iso, utc_now
from .sqlite_common import SQLiteRepositoryBase


class SQLiteProjectRepository(SQLiteRepositoryBase):
    """
    Project repository.
    parent_id forms a forest; the schema nulls it when the parent row goes.
    """

    table = "projects"

    _COLUMNS = """
        id, name, description, status, parent_id, is_public, icon,
        created_at, updated_at
    """

    def __init__(self, db_or_conn, clock: Clock = utc_now):
        super().__init__(db_or_conn)
        self._clock = clock

    @staticmethod
    def _row_to_project(row: sqlite3.Row) -> Project:
        return Project(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            status=ProjectStatus(row["status"]),
            parent_id=row["parent_id"],
            is_public=bool(row["is_public"]),
            icon=row["icon"],
            created_at=from_iso(row["created_at"]),
            updated_at=from_iso(row["updated_at"]),
        )

    # ---------- public API ----------

    def list_projects(self) -> List[Project]:
        rows = self._fetch_all(f"SELECT {self._COLUMNS} FROM projects ORDER BY id")
        return [self._row_to_project(r) for r in rows]

    def list_child_projects(self, parent_id: int) -> List[Project]:
        rows = self._fetch_all(
            f"SELECT {self._COLUMNS} FROM projects WHERE parent_id = ? ORDER BY id", (parent_id,)
        )
        return [self._row_to_project(r) for r in rows]

    def get_project(self, project_id: int) -> Optional[Project]:
        """
        Returns a single project by ID.
        """
        rows = self._fetch_all(f"SELECT {self._COLUMNS} FROM projects WHERE id = ?", (project_id,))
        return self._row_to_project(rows[0]) if rows else None

    # ---------- mutations ----------

    def create_project(self, **fields: Any) -> Project:
        now = self._clock()
        values = {k: fields[k] for k in PROJECT_FIELDS if k in fields}
        values.setdefault("status", ProjectStatus.ACTIVE)
        values.setdefault("is_public", True)
        values["created_at"] = now
        values["updated_at"] = now
        return self.get_project(self._insert(values))

    def update_project(self, project_id: int, **fields: Any) -> Optional[Project]:
        values = {k: v for k, v in fields.items() if k in PROJECT_FIELDS}
        values["updated_at"] = self._clock()
        if not self._update(project_id, values):
            return None
        return self.get_project(project_id)

    def delete_project(self, project_id: int) -> bool:
        return self._delete(project_id)
