# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for seqcrf.

Every log line is one JSON object with a timestamp, level, source module and
message. Training runs can be long and chatty, and JSON lines are what lets
you grep a run afterwards for "iterations" or "final_loss" without writing a
parser for free text.

How this works:
  - The standard `logging` module does the routing. JsonFormatter turns each
    record into a single JSON line.
  - A stdout handler is always attached; a file handler is added when a
    log file is given.
  - `get_logger` is the one way to obtain a logger inside the package.

Example line:
  {"ts": "2026-...", "level": "INFO", "module": "seqcrf.training.core", "msg": "Training finished", "iterations": 42}
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Attributes every LogRecord carries. Anything else on the record came in
# through `extra=` and belongs in the JSON entry.
_RECORD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "relativeCreated",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "pathname",
        "filename",
        "module",
        "levelno",
        "levelname",
        "processName",
        "process",
        "threadName",
        "thread",
        "message",
        "msecs",
        "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Mandatory fields:
      ts    : ISO 8601 UTC timestamp
      level : log level name
      module: the logger name
      msg   : the formatted message

    Keys passed through `extra` are merged in as context fields, which is how
    the orchestrator attaches iteration counts, losses, paths and so on.
    Exception info, when present, lands under "exc".
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Create a structured JSON logger.

    Modules call this once at import time with their own __name__ and keep
    the returned instance.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file. If provided, logs go to both
                  stdout and the file.

    Returns:
        A configured logging.Logger that outputs structured JSON.

    Raises:
        ValueError: If log_level isn't a known level name.
    """
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level)
    logger.setLevel(level)

    # Calling get_logger twice for one name must not double every line.
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        _apply_package_settings(logger)
        return logger

    formatter = JsonFormatter()

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.setFormatter(formatter)
    logger.addHandler(stdout_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    _apply_package_settings(logger)

    return logger


# Package name -> (level, log file) from the last set_package_level call.
_PACKAGE_SETTINGS: dict[str, tuple[int, Optional[Path]]] = {}


def _has_file_handler(logger: logging.Logger, log_file: Path) -> bool:
    target = os.path.abspath(log_file)
    return any(
        isinstance(h, logging.FileHandler) and h.baseFilename == target
        for h in logger.handlers
    )


def _configure(logger: logging.Logger, level: int, log_file: Optional[Path]) -> None:
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
    if log_file is not None and not _has_file_handler(logger, log_file):
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)


def _apply_package_settings(logger: logging.Logger) -> None:
    for package, (level, log_file) in _PACKAGE_SETTINGS.items():
        if logger.name == package or logger.name.startswith(package + "."):
            _configure(logger, level, log_file)


def set_package_level(
    log_level: str,
    package: str = "seqcrf",
    log_file: Optional[Path] = None,
) -> None:
    """
    Apply one level, and optionally one log file, to a whole package.

    Module loggers are created at import time with the default level, and
    some modules are only imported once a command runs. The settings are
    applied to every logger that already exists under `package` and
    remembered for the ones get_logger creates later.
    """
    level = _resolve_log_level(log_level)
    _PACKAGE_SETTINGS[package] = (level, log_file)
    for name, candidate in list(logging.Logger.manager.loggerDict.items()):
        if not isinstance(candidate, logging.Logger):
            continue
        if name == package or name.startswith(package + "."):
            _configure(candidate, level, log_file)
