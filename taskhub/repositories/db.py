# Rev 0.2.0

"""SQLite connection & migration runner (Rev 0.2.0)
- WAL mode, foreign_keys=ON, autocommit connection
- Applies SQL files in taskhub/data/migrations in lexical order
- Tracks applied files in schema_migrations(filename TEXT PRIMARY KEY, applied_at UTC)
- transaction(): BEGIN/COMMIT at the outermost level, SAVEPOINTs inside
"""
from __future__ import annotations
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from datetime import datetime, timezone
from typing import Iterator, List


from taskhub.utils.logging_setup import get_logger
from taskhub.utils.paths import MIGRATIONS_DIR

log = get_logger("db")


class Database:
    def __init__(self, path: Path | str = ":memory:") -> None:
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.path, isolation_level=None, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL;")
        self.conn.execute("PRAGMA foreign_keys=ON;")
        self.conn.execute(
        "CREATE TABLE IF NOT EXISTS schema_migrations (filename TEXT PRIMARY KEY, applied_at TEXT NOT NULL)"
        )
        self._lock = threading.RLock()
        self._depth = 0
        log.info("SQLite open %s", self.path)


    def close(self) -> None:
        self.conn.close()


    def applied(self) -> set[str]:
        rows = self.conn.execute("SELECT filename FROM schema_migrations").fetchall()
        return {r[0] for r in rows}


    def pending(self, migrations_dir: Path = MIGRATIONS_DIR) -> List[str]:
        applied = self.applied()
        return [p.name for p in sorted(migrations_dir.glob("*.sql")) if p.name not in applied]


    def run_migrations(self, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
        applied = self.applied()
        to_apply = [p for p in sorted(migrations_dir.glob("*.sql")) if p.name not in applied]
        for p in to_apply:
            sql = p.read_text(encoding="utf-8")
            # executescript commits on its own; keep it outside transaction()
            self.conn.executescript(sql)
            self.conn.execute(
                "INSERT INTO schema_migrations(filename, applied_at) VALUES(?, ?)",
                (p.name, datetime.now(timezone.utc).isoformat()),
            )
            log.info("Applied migration %s", p.name)
        return [p.name for p in to_apply]


    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            depth = self._depth
            savepoint = f"sp_{depth}"
            self.conn.execute("BEGIN IMMEDIATE" if depth == 0 else f"SAVEPOINT {savepoint}")
            self._depth = depth + 1
            try:
                yield self.conn
            except BaseException:
                if depth == 0:
                    self.conn.execute("ROLLBACK")
                else:
                    self.conn.execute(f"ROLLBACK TO {savepoint}")
                    self.conn.execute(f"RELEASE {savepoint}")
                raise
            else:
                self.conn.execute("COMMIT" if depth == 0 else f"RELEASE {savepoint}")
            finally:
                self._depth = depth
