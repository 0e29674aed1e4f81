# Rev 0.2.0
from __future__ import annotations

import json
import logging

import pytest

from taskhub.app_context import AppContext, build_storage
from taskhub.errors import ConfigError
from taskhub.repositories.memory_repository import InMemoryStorage
from taskhub.repositories.sqlite_storage import SQLiteStorage
from taskhub.utils.config import MEMORY_STORE, load_settings, save_settings
from taskhub.utils.logging_setup import get_logger, setup_logging


def test_defaults(tmp_path):
    s = load_settings(tmp_path / "none.json", environ={})
    assert s["database"] == MEMORY_STORE
    assert s["status_policy"] == "permissive"
    assert s["activity_logging"] == "transactional"
    assert s["cascade_subprojects"] is False
    assert s["due_soon_days"] == 7
    assert s["server"] == {"host": "127.0.0.1", "port": 8000}


def test_file_then_env(tmp_path):
    path = tmp_path / "settings.json"
    save_settings({"status_policy": "strict", "server": {"port": 9000}}, path)
    env = {"TASKHUB_PORT": "9100", "TASKHUB_CASCADE_SUBPROJECTS": "yes", "TASKHUB_DB": "/tmp/x.db"}
    s = load_settings(path, environ=env)
    assert s["status_policy"] == "strict"
    assert s["server"] == {"host": "127.0.0.1", "port": 9100}
    assert s["cascade_subprojects"] is True
    assert s["database"] == "/tmp/x.db"


@pytest.mark.parametrize(
    "content,env",
    [
        ({"status_policy": "lenient"}, {}),
        ({"activity_logging": "sometimes"}, {}),
        ({"due_soon_days": -1}, {}),
        ({}, {"TASKHUB_PORT": "eighty"}),
    ],
)
def test_invalid_settings(tmp_path, content, env):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(content), encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(path, environ=env)


def test_broken_json(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(path, environ={})


def test_build_storage_picks_backend(tmp_path):
    assert isinstance(build_storage({"database": MEMORY_STORE}), InMemoryStorage)
    st = build_storage({"database": str(tmp_path / "db.sqlite")})
    try:
        assert isinstance(st, SQLiteStorage)
    finally:
        st.close()


def test_context_wires_settings(settings):
    ctx = AppContext.create({**settings, "status_policy": "strict", "cascade_subprojects": True})
    try:
        assert ctx.tasks.policy.name == "strict"
        assert ctx.hierarchy.cascade_subprojects is True
        assert ctx.recorder.mode == "transactional"
    finally:
        ctx.close()


def test_logging_setup_is_idempotent(tmp_path):
    root = logging.getLogger()
    before, level = list(root.handlers), root.level
    try:
        logfile = setup_logging("DEBUG", log_dir=tmp_path)
        setup_logging("DEBUG", log_dir=tmp_path)
        ours = [h for h in root.handlers if getattr(h, "_taskhub_handler", False)]
        assert len(ours) == 2
        get_logger("tests").info("hello")
        for h in ours:
            h.flush()
        assert "taskhub.tests" in logfile.read_text(encoding="utf-8")
    finally:
        for h in list(root.handlers):
            if h not in before:
                root.removeHandler(h)
                h.close()
        root.setLevel(level)
