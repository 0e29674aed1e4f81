# Rev 0.2.0

"""Paths and XDG helpers (Rev 0.2.0)
- Uses XDG Base Directory spec for logs/state/config
- SQL migrations ship inside the package under taskhub/data/migrations
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "taskhub"


def _xdg(var: str, fallback: Path) -> Path:
    return Path(os.environ.get(var, fallback)).expanduser()


def data_dir() -> Path:
    return _xdg("XDG_DATA_HOME", Path.home() / ".local" / "share") / APP_NAME


def state_dir() -> Path:
    return _xdg("XDG_STATE_HOME", Path.home() / ".local" / "state") / APP_NAME


def logs_dir() -> Path:
    return state_dir() / "logs"


def config_dir() -> Path:
    return _xdg("XDG_CONFIG_HOME", Path.home() / ".config") / APP_NAME


# Package-relative locations
PACKAGE_ROOT = Path(__file__).resolve().parents[1]
MIGRATIONS_DIR = (PACKAGE_ROOT / "data" / "migrations").resolve()


def default_db_path() -> Path:
    return data_dir() / "taskhub.db"


def ensure_dirs() -> None:
    for p in (data_dir(), state_dir(), logs_dir(), config_dir()):
        p.mkdir(parents=True, exist_ok=True)
