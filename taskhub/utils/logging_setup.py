# Rev 0.2.0

# taskhub – logging setup (Rev 0.2.0)
from __future__ import annotations
import logging, os, sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .paths import logs_dir

APP_NAME = "taskhub"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_TAG = "_taskhub_handler"


def get_logger(name: str) -> logging.Logger:
    """Loggers live under the 'taskhub' namespace so one level knob covers them."""
    if name == APP_NAME or name.startswith(APP_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_NAME}.{name}")


def setup_logging(level_name: Optional[str] = None, *, log_dir: Optional[Path] = None,
                  to_file: bool = True) -> Optional[Path]:
    # Level via arg, then env (DEBUG/INFO/WARNING/ERROR), default INFO
    level_name = (level_name or os.environ.get("TASKHUB_LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Re-running setup replaces our handlers instead of stacking them
    for h in list(root.handlers):
        if getattr(h, _HANDLER_TAG, False):
            root.removeHandler(h)
            h.close()

    fmt = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    logfile: Optional[Path] = None

    if to_file:
        d = log_dir or logs_dir()
        d.mkdir(parents=True, exist_ok=True)
        logfile = d / "taskhub.log"
        # File: rotate at 5MB, keep 7 backups
        fh = RotatingFileHandler(logfile, maxBytes=5_000_000, backupCount=7, encoding="utf-8")
        fh.setFormatter(fmt)
        fh.setLevel(level)
        setattr(fh, _HANDLER_TAG, True)
        root.addHandler(fh)

    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(fmt)
    ch.setLevel(level)
    setattr(ch, _HANDLER_TAG, True)
    root.addHandler(ch)

    # Uncaught exceptions → log as ERROR
    def _excepthook(exctype, value, tb):
        logging.getLogger("unhandled").error("Uncaught exception", exc_info=(exctype, value, tb))
        # keep default behavior
        sys.__excepthook__(exctype, value, tb)
    sys.excepthook = _excepthook

    get_logger("logging").info("Logging initialized at %s; file: %s", level_name, logfile)
    return logfile
