# Rev 0.2.0
from __future__ import annotations

import sqlite3
from typing import Any, List, Optional

from taskhub.models.entities import USER_FIELDS, User
from .sqlite_common import SQLiteRepositoryBase


class SQLiteUserRepository(SQLiteRepositoryBase):
    table = "users"

    _COLUMNS = "id, username, full_name, role, initials, avatar_color, email"

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            username=row["username"],
            full_name=row["full_name"],
            role=row["role"],
            initials=row["initials"],
            avatar_color=row["avatar_color"],
            email=row["email"],
        )

    def list_users(self) -> List[User]:
        rows = self._fetch_all(f"SELECT {self._COLUMNS} FROM users ORDER BY id")
        return [self._row_to_user(r) for r in rows]

    def get_user(self, user_id: int) -> Optional[User]:
        rows = self._fetch_all(f"SELECT {self._COLUMNS} FROM users WHERE id = ?", (user_id,))
        return self._row_to_user(rows[0]) if rows else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        rows = self._fetch_all(f"SELECT {self._COLUMNS} FROM users WHERE username = ?", (username,))
        return self._row_to_user(rows[0]) if rows else None

    def create_user(self, **fields: Any) -> User:
        values = {k: fields.get(k) for k in USER_FIELDS}
        return self.get_user(self._insert(values))

    def update_user(self, user_id: int, **fields: Any) -> Optional[User]:
        if not self._update(user_id, {k: v for k, v in fields.items() if k in USER_FIELDS}):
            return None
        return self.get_user(user_id)

    def delete_user(self, user_id: int) -> bool:
        return self._delete(user_id)
