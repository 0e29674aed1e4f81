# Rev 0.2.0 (schema 0001_initial alignment)
from __future__ import annotations

import sqlite3
from typing import List, Optional

from taskhub.models.entities import Activity
from taskhub.models.types import ActivityType
from taskhub.utils.clock import Clock, from_iso, utc_now
from .sqlite_common import SQLiteRepositoryBase


class SQLiteActivityRepository(SQLiteRepositoryBase):
    """
    Append/read the activity feed.

    Schema expectation:

      activities(
        id INTEGER PRIMARY KEY,
        type TEXT NOT NULL,
        description TEXT NOT NULL,
        user_id INTEGER NULL,
        task_id INTEGER NULL,
        project_id INTEGER NULL,
        created_at TEXT NOT NULL
      )

    Triggers reject UPDATE of type/description/created_at and any DELETE.
    """

    table = "activities"

    _COLUMNS = "id, type, description, user_id, task_id, project_id, created_at"

    def __init__(self, db_or_conn, clock: Clock = utc_now):
        super().__init__(db_or_conn)
        self._clock = clock

    @staticmethod
    def _row_to_activity(row: sqlite3.Row) -> Activity:
        return Activity(
            id=row["id"],
            type=ActivityType(row["type"]),
            description=row["description"],
            user_id=row["user_id"],
            task_id=row["task_id"],
            project_id=row["project_id"],
            created_at=from_iso(row["created_at"]),
        )

    # -------------------------
    # Commands
    # -------------------------
    def add_activity(
        self,
        type: ActivityType,
        description: str,
        *,
        user_id: Optional[int] = None,
        task_id: Optional[int] = None,
        project_id: Optional[int] = None,
    ) -> Activity:
        activity_id = self._insert({
            "type": ActivityType(type),
            "description": description,
            "user_id": user_id,
            "task_id": task_id,
            "project_id": project_id,
            "created_at": self._clock(),
        })
        rows = self._fetch_all(f"SELECT {self._COLUMNS} FROM activities WHERE id = ?", (activity_id,))
        return self._row_to_activity(rows[0])

    # -------------------------
    # Queries
    # -------------------------
    def list_recent_activities(self, limit: int) -> List[Activity]:
        # newest first; equal timestamps keep insertion order
        rows = self._fetch_all(
            f"""
            SELECT {self._COLUMNS}
            FROM activities
            ORDER BY created_at DESC, id ASC
            LIMIT ?
            """,
            (max(limit, 0),),
        )
        return [self._row_to_activity(r) for r in rows]

    def list_activities_for_user(self, user_id: int) -> List[Activity]:
        rows = self._fetch_all(
            f"""
            SELECT {self._COLUMNS}
            FROM activities
            WHERE user_id = ?
            ORDER BY created_at DESC, id ASC
            """,
            (user_id,),
        )
        return [self._row_to_activity(r) for r in rows]
