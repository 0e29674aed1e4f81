# Rev 0.2.0
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from taskhub.utils.clock import Clock, utc_now
from .db import Database
from .sqlite_activity_repository import SQLiteActivityRepository
from .sqlite_project_repository import SQLiteProjectRepository
from .sqlite_task_repository import SQLiteTaskRepository
from .sqlite_user_repository import SQLiteUserRepository


class SQLiteStorage:
    """Storage over one SQLite Database; migrations run on construction."""

    def __init__(self, db: Database, clock: Clock = utc_now, *, migrate: bool = True):
        self.db = db
        if migrate:
            db.run_migrations()
        self.users = SQLiteUserRepository(db)
        self.projects = SQLiteProjectRepository(db, clock)
        self.tasks = SQLiteTaskRepository(db, clock)
        self.activities = SQLiteActivityRepository(db, clock)

    @classmethod
    def open(cls, path: Path | str, clock: Clock = utc_now) -> "SQLiteStorage":
        return cls(Database(path), clock)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self.db.transaction():
            yield

    def close(self) -> None:
        self.db.close()
