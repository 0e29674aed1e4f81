# Rev 0.2.0
from __future__ import annotations

import sqlite3
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple, Union

from taskhub.utils.clock import to_iso


def to_db(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, bool):
        return int(value)
    return value


class SQLiteRepositoryBase:
    """Connection handling shared by the per-entity repositories."""

    table: str = ""

    def __init__(self, db_or_conn: Union[sqlite3.Connection, Any]):
        self._db_or_conn = db_or_conn

    def _conn(self) -> sqlite3.Connection:
        if isinstance(self._db_or_conn, sqlite3.Connection):
            return self._db_or_conn
        if hasattr(self._db_or_conn, "conn") and isinstance(self._db_or_conn.conn, sqlite3.Connection):
            return self._db_or_conn.conn
        raise RuntimeError(
            f"{type(self).__name__}: could not obtain sqlite3.Connection "
            "(expected .conn on wrapper, or a raw Connection)."
        )

    def _insert(self, values: Dict[str, Any]) -> int:
        cols = ", ".join(values.keys())
        placeholders = ", ".join(["?"] * len(values))
        cur = self._conn().execute(
            f"INSERT INTO {self.table}({cols}) VALUES ({placeholders})",
            tuple(to_db(v) for v in values.values()),
        )
        return int(cur.lastrowid)

    def _update(self, row_id: int, values: Dict[str, Any]) -> bool:
        sets: List[str] = []
        params: List[Any] = []
        for col, value in values.items():
            sets.append(f"{col} = ?")
            params.append(to_db(value))
        if not sets:
            row = self._conn().execute(f"SELECT 1 FROM {self.table} WHERE id = ?", (row_id,)).fetchone()
            return row is not None
        params.append(row_id)
        cur = self._conn().execute(f"UPDATE {self.table} SET {', '.join(sets)} WHERE id = ?", params)
        return cur.rowcount > 0

    def _delete(self, row_id: int) -> bool:
        cur = self._conn().execute(f"DELETE FROM {self.table} WHERE id = ?", (row_id,))
        return cur.rowcount > 0

    def _fetch_all(self, sql: str, params: Iterable[Any] = ()) -> List[sqlite3.Row]:
        return self._conn().execute(sql, tuple(params)).fetchall()

    @staticmethod
    def _where(filters: Iterable[Tuple[str, Any]]) -> Tuple[str, List[Any]]:
        where, params = [], []
        for col, value in filters:
            if value is not None:
                where.append(f"{col} = ?")
                params.append(value)
        return (" WHERE " + " AND ".join(where)) if where else "", params
