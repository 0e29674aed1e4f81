# taskhub/utils/config.py
# Rev 0.2.0
import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from taskhub.errors import ConfigError
from .paths import config_dir

MEMORY_STORE = ":memory-store:"

_DEFAULTS: Dict[str, Any] = {
    "database": MEMORY_STORE,
    "log_level": "INFO",
    "api_token": None,
    "status_policy": "permissive",          # permissive | strict
    "activity_logging": "transactional",    # transactional | best_effort
    "cascade_subprojects": False,
    "due_soon_days": 7,
    "server": {
        "host": "127.0.0.1",
        "port": 8000,
    },
}

_CHOICES = {
    "status_policy": ("permissive", "strict"),
    "activity_logging": ("transactional", "best_effort"),
}

# env var -> (key path, parser)
_ENV = {
    "TASKHUB_DB": (("database",), str),
    "TASKHUB_LOG_LEVEL": (("log_level",), str),
    "TASKHUB_API_TOKEN": (("api_token",), str),
    "TASKHUB_STATUS_POLICY": (("status_policy",), str),
    "TASKHUB_ACTIVITY_LOGGING": (("activity_logging",), str),
    "TASKHUB_CASCADE_SUBPROJECTS": (("cascade_subprojects",), lambda v: v.strip().lower() in ("1", "true", "yes", "on")),
    "TASKHUB_HOST": (("server", "host"), str),
    "TASKHUB_PORT": (("server", "port"), int),
}


def settings_file() -> Path:
    return Path(os.environ.get("TASKHUB_SETTINGS", config_dir() / "settings.json"))


def _merge(base: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def _apply_env(data: Dict[str, Any], environ) -> Dict[str, Any]:
    for var, (path, parse) in _ENV.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            value = parse(raw)
        except ValueError as exc:
            raise ConfigError(f"{var}: cannot parse {raw!r}") from exc
        node = data
        for key in path[:-1]:
            node = node.setdefault(key, {})
        node[path[-1]] = value
    return data


def validate_settings(data: Dict[str, Any]) -> Dict[str, Any]:
    for key, allowed in _CHOICES.items():
        if data.get(key) not in allowed:
            raise ConfigError(f"{key} must be one of {', '.join(allowed)}; got {data.get(key)!r}")
    days = data.get("due_soon_days")
    if not isinstance(days, int) or isinstance(days, bool) or days < 0:
        raise ConfigError(f"due_soon_days must be a non-negative integer; got {days!r}")
    return data


def load_settings(path: Optional[Path] = None, environ=None) -> Dict[str, Any]:
    """Defaults <- settings.json <- TASKHUB_* environment."""
    path = path or settings_file()
    environ = os.environ if environ is None else environ
    data = copy.deepcopy(_DEFAULTS)
    if path.exists():
        try:
            data = _merge(data, json.loads(path.read_text(encoding="utf-8")))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"settings file {path} is not valid JSON: {exc}") from exc
    return validate_settings(_apply_env(data, environ))


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or settings_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
