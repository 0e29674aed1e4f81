# File: taskhub/tools/manage.py
# Python 3.10+
# Usage examples:
#   taskhub migrate --db /path/to/taskhub.db
#   taskhub status
#   taskhub seed --db /path/to/taskhub.db
#   taskhub serve --port 8080 --seed
#
# Notes:
# - --db defaults to the "database" setting (TASKHUB_DB / settings.json)
# - migrate/status/seed need a SQLite file; ':memory-store:' only makes sense for serve
# - Applies taskhub/data/migrations/*.sql in lexicographic order

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, Optional

from taskhub.errors import ConfigError
from taskhub.repositories.db import Database
from taskhub.repositories.sqlite_storage import SQLiteStorage
from taskhub.utils.config import MEMORY_STORE, load_settings
from taskhub.utils.logging_setup import get_logger, setup_logging
from taskhub.utils.paths import default_db_path, ensure_dirs

log = get_logger("manage")


def _sqlite_path(settings: Dict[str, Any], override: Optional[str]) -> str:
    target = override or settings.get("database")
    if not target or target == MEMORY_STORE:
        return str(default_db_path())
    return target


def cmd_migrate(db_path: str) -> int:
    db = Database(db_path)
    try:
        applied = db.run_migrations()
    finally:
        db.close()
    if applied:
        for name in applied:
            print(f"→ Applied migration: {name}")
        print("✓ Database is up to date.")
    else:
        print("✓ No changes. Database already up to date.")
    return 0


def cmd_status(db_path: str) -> int:
    db = Database(db_path)
    try:
        applied = sorted(db.applied())
        pending = db.pending()
    finally:
        db.close()
    print(f"DB: {db_path}")
    print("Applied:")
    for name in applied:
        print(f"  ✓ {name}")
    print("Pending:")
    for name in pending or ["(none)"]:
        print(f"  • {name}")
    return 0


def cmd_seed(db_path: str) -> int:
    from taskhub.tools.seed import seed_demo

    storage = SQLiteStorage.open(db_path)
    try:
        seeded = seed_demo(storage)
    finally:
        storage.close()
    print("✓ Seeded demo data." if seeded else "ℹ️  Store already has users; nothing seeded.")
    return 0


def cmd_serve(settings: Dict[str, Any], host: str, port: int, seed: bool) -> int:
    import uvicorn

    from taskhub.api.app import create_app
    from taskhub.app_context import AppContext
    from taskhub.tools.seed import seed_demo

    ctx = AppContext.create(settings)
    if seed:
        seed_demo(ctx.storage)
    try:
        uvicorn.run(create_app(ctx), host=host, port=port, log_level=str(settings["log_level"]).lower())
    finally:
        ctx.close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="taskhub", description="taskhub management tool")
    sub = p.add_subparsers(dest="cmd", required=True)

    for name, help_text in (
        ("migrate", "Apply pending migrations"),
        ("status", "Show applied and pending migrations"),
        ("seed", "Load the demo data set into an empty database"),
    ):
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("--db", help="SQLite file (default: database setting)")

    sp = sub.add_parser("serve", help="Run the HTTP API")
    sp.add_argument("--db", help="SQLite file or ':memory-store:'")
    sp.add_argument("--host", help="Bind address (default: server.host setting)")
    sp.add_argument("--port", type=int, help="Port (default: server.port setting)")
    sp.add_argument("--seed", action="store_true", help="Load demo data on start if the store is empty")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 2
    ensure_dirs()
    setup_logging(settings["log_level"])
    log.debug("command=%s args=%s", args.cmd, vars(args))

    if args.cmd == "serve":
        if args.db:
            settings["database"] = args.db
        host = args.host or settings["server"]["host"]
        port = args.port or settings["server"]["port"]
        return cmd_serve(settings, host, port, args.seed)

    db_path = _sqlite_path(settings, args.db)
    if args.cmd == "migrate":
        return cmd_migrate(db_path)
    if args.cmd == "status":
        return cmd_status(db_path)
    if args.cmd == "seed":
        return cmd_seed(db_path)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
