# Rev 0.2.0

"""Pytest fixtures for taskhub (Rev 0.2.0)"""
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from taskhub.app_context import AppContext
from taskhub.repositories.db import Database
from taskhub.repositories.memory_repository import InMemoryStorage
from taskhub.repositories.sqlite_storage import SQLiteStorage
from taskhub.utils.config import load_settings

START = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def db_conn(tmp_path: Path):
    db = Database(path=str(tmp_path / "test.db"))
    try:
        db.run_migrations()
        yield db.conn
    finally:
        db.close()


@pytest.fixture()
def memory_storage(clock):
    return InMemoryStorage(clock)


@pytest.fixture()
def sqlite_storage(tmp_path: Path, clock):
    storage = SQLiteStorage.open(tmp_path / "taskhub.db", clock)
    try:
        yield storage
    finally:
        storage.close()


@pytest.fixture(params=["memory", "sqlite"])
def storage(request, clock, tmp_path: Path):
    if request.param == "memory":
        yield InMemoryStorage(clock)
        return
    st = SQLiteStorage.open(tmp_path / "taskhub.db", clock)
    try:
        yield st
    finally:
        st.close()


@pytest.fixture()
def settings(tmp_path: Path) -> dict:
    # no settings file, no environment: plain defaults
    return load_settings(tmp_path / "missing.json", environ={})


@pytest.fixture()
def make_ctx(storage, clock, settings):
    def _make(**overrides) -> AppContext:
        return AppContext.create({**settings, **overrides}, storage=storage, clock=clock)
    return _make


@pytest.fixture()
def ctx(make_ctx) -> AppContext:
    return make_ctx()


def add_user(ctx: AppContext, username: str = "mwilson", full_name: str = "Margaret Wilson"):
    return ctx.users.create_user(username=username, full_name=full_name)
