"""Console and structured-file logging for zephyr-cli.

Console output goes to stderr via click so it stays out of the JSON written to
stdout. With ``--log-file`` every record is also written as one JSON object
per line, with rotation (5MB, 3 backups).
"""

from __future__ import annotations

import json
import logging
import os
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import click

LOGGER_NAME = "zephyr_cli"
_setup_lock = threading.Lock()
_MAX_BYTES = 5 * 1024 * 1024  # 5MB
_BACKUP_COUNT = 3


class _JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if hasattr(record, "command"):
            entry["command"] = record.command
        if hasattr(record, "duration_ms"):
            entry["duration_ms"] = record.duration_ms
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, default=str)


class _ClickHandler(logging.Handler):
    """Emit records on stderr through click, resolving the stream at emit time."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(self.format(record), err=True)
        except Exception:
            self.handleError(record)


def _console_level(verbose: int) -> int:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbose: int = 0, log_file: Path | None = None) -> logging.Logger:
    """Configure the ``zephyr_cli`` logger for one CLI invocation.

    The console handler is replaced on every call; the file handler is kept
    when it already targets *log_file* and dropped when *log_file* is None.
    """
    logger = logging.getLogger(LOGGER_NAME)
    console_level = _console_level(verbose)

    with _setup_lock:
        for h in logger.handlers[:]:
            if isinstance(h, _ClickHandler):
                logger.removeHandler(h)

        console = _ClickHandler(level=console_level)
        console.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s", datefmt="%H:%M:%S"))
        logger.addHandler(console)

        if log_file is not None:
            _attach_file_handler(logger, log_file)
        else:
            for h in logger.handlers[:]:
                if isinstance(h, RotatingFileHandler):
                    logger.removeHandler(h)
                    h.close()

        file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        logger.setLevel(logging.DEBUG if file_handlers else console_level)
    return logger


def _attach_file_handler(logger: logging.Logger, log_file: Path) -> None:
    target_filename = os.path.abspath(str(log_file))
    for h in logger.handlers[:]:
        if not isinstance(h, RotatingFileHandler):
            continue
        if h.baseFilename == target_filename:
            return
        # Different path: drop the stale handler.
        logger.removeHandler(h)
        h.close()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        str(log_file),
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
    )
    handler.setFormatter(_JsonFormatter())
    logger.addHandler(handler)
