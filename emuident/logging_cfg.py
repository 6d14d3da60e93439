"""Logging setup for emuident.

Library modules only create module loggers and log at DEBUG. Handlers and
formatters are attached here, by the CLI or by an application embedding the
scanners. Every record carries the id of the scan it belongs to, so the
lines of one file can be grouped in a JSON log or in ``_SCAN_LOG.txt``.
"""

from __future__ import annotations

import contextvars
import functools
import json
import logging
import os
import sys
import time
import uuid
from pathlib import Path
from typing import Optional

CONSOLE_HANDLER_NAME = "emuident_console"
FILE_HANDLER_NAME = "emuident_scan_log"
SCAN_LOG_NAME = "_SCAN_LOG.txt"
LOG_FORMAT_ENV = "EMUIDENT_LOG_FORMAT"

_HUMAN_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
_FILE_FORMAT = "%(asctime)s - %(levelname)s - [%(scan_id)s] %(name)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_scan_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("emuident_scan_id", default=None)


def set_scan_id(scan_id: Optional[str] = None) -> str:
    """Start a new scan context; a random id is generated when none is given."""
    if scan_id is None:
        scan_id = uuid.uuid4().hex
    _scan_id.set(scan_id)
    return scan_id


def get_scan_id() -> Optional[str]:
    return _scan_id.get()


class ScanIdFilter(logging.Filter):
    """Adds ``record.scan_id`` ("-" outside a scan)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.scan_id = get_scan_id() or "-"
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, _DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        scan_id = getattr(record, "scan_id", None) or get_scan_id()
        if scan_id and scan_id != "-":
            payload["scan_id"] = scan_id
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def resolve_format(fmt: Optional[str]) -> str:
    """Map ``auto``/``json``/``human`` to the concrete console format.

    ``auto`` honours ``EMUIDENT_LOG_FORMAT`` and otherwise picks human output
    on a terminal and JSON when stderr is redirected.
    """
    chosen = (fmt or "auto").lower()
    if chosen == "auto":
        chosen = os.getenv(LOG_FORMAT_ENV, "auto").lower()
    if chosen in ("json", "human"):
        return chosen
    try:
        return "human" if sys.stderr.isatty() else "json"
    except (AttributeError, ValueError):
        return "json"


def _find_handler(logger: logging.Logger, name: str) -> Optional[logging.Handler]:
    for handler in logger.handlers:
        if handler.name == name:
            return handler
    return None


def configure_logging(
    fmt: Optional[str] = "auto",
    level: int = logging.INFO,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Attach the console handler (and the scan log file) to the root logger.

    Calling it again changes the level but never duplicates handlers.
    """
    root = logging.getLogger()
    root.setLevel(level)

    if _find_handler(root, CONSOLE_HANDLER_NAME) is None:
        console = logging.StreamHandler()
        console.name = CONSOLE_HANDLER_NAME
        console.addFilter(ScanIdFilter())
        if resolve_format(fmt) == "json":
            console.setFormatter(JsonFormatter())
        else:
            console.setFormatter(logging.Formatter(_HUMAN_FORMAT, datefmt=_DATE_FORMAT))
        root.addHandler(console)

    if log_dir is not None and _find_handler(root, FILE_HANDLER_NAME) is None:
        log_dir = Path(log_dir)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_dir / SCAN_LOG_NAME, encoding="utf-8")
        except OSError as e:
            root.warning("Could not open scan log in %s: %s", log_dir, e)
        else:
            fh.name = FILE_HANDLER_NAME
            fh.addFilter(ScanIdFilter())
            fh.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
            root.addHandler(fh)

    return root


def log_call(level: int = logging.DEBUG):
    """Log the arguments, result and duration of each call.

    Exceptions are logged at DEBUG with their traceback and re-raised.
    """

    def decorator(func):
        logger = logging.getLogger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            logger.debug("-> %s args=%r kwargs=%r", func.__qualname__, args, kwargs)
            try:
                result = func(*args, **kwargs)
            except Exception:
                elapsed = (time.perf_counter() - start) * 1000.0
                logger.debug("<- %s raised after %.2fms", func.__qualname__, elapsed, exc_info=True)
                raise
            elapsed = (time.perf_counter() - start) * 1000.0
            logger.log(level, "<- %s %.2fms result=%.100r", func.__qualname__, elapsed, result)
            return result

        return wrapper

    return decorator
