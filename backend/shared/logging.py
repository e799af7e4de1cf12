"""Structured logging configuration with structlog.

Environment variables:
- LOG_FORMAT: "json" for production log aggregation, "console" or unset for
  human-readable colored output.
- LOG_LEVEL: "DEBUG", "INFO" (default), "WARNING", "ERROR", or "CRITICAL".
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from typing import Any

LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
LOG_FILE_PREFIX = "kargo"

_VALID_LOG_FORMATS = {"json", "console", ""}
_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# Library loggers that are too chatty at INFO
_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


def _plain(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


def _serialize_values(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Replace enums and pydantic models with JSON-friendly values."""
    for key, value in event_dict.items():
        event_dict[key] = _plain(value)
    return event_dict


def _is_test() -> bool:
    return "pytest" in sys.modules


def _resolve_json_mode() -> bool:
    value = os.environ.get("LOG_FORMAT", "").lower()
    if value not in _VALID_LOG_FORMATS:
        msg = f"Invalid LOG_FORMAT={value!r}. Must be 'json', 'console', or unset."
        raise ValueError(msg)
    return value == "json"


def _resolve_log_level() -> int:
    value = os.environ.get("LOG_LEVEL", "INFO").upper()
    if value not in _VALID_LOG_LEVELS:
        msg = f"Invalid LOG_LEVEL={value!r}. Must be one of {', '.join(sorted(_VALID_LOG_LEVELS))}."
        raise ValueError(msg)
    return getattr(logging, value)


def _build_formatter(*, json_mode: bool, colors: bool = False) -> logging.Formatter:
    renderer = structlog.processors.JSONRenderer() if json_mode else structlog.dev.ConsoleRenderer(colors=colors)
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def log_file_path(log_dir: Path | str, now: datetime | None = None) -> Path:
    """Path of the timestamped log file for a server started at `now`."""
    stamp = (now or datetime.now(tz=UTC)).strftime(LOG_FILE_TIMESTAMP_FORMAT)
    return Path(log_dir) / f"{LOG_FILE_PREFIX}_{stamp}.log"


def setup_logging(
    log_dir: Path | str | None = None,
    level: int | None = None,
) -> Path | None:
    """Configure structlog with stdout and optional file output.

    Log level is resolved from the LOG_LEVEL env var (default: INFO).
    When log_dir is provided (and not running under pytest) a timestamped
    log file is created inside it and its path returned; otherwise None.
    """
    json_mode = _resolve_json_mode()

    if level is None:
        level = _resolve_log_level()

    # format_exc_info runs in the ProcessorFormatter, not here
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _serialize_values,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(_build_formatter(json_mode=json_mode, colors=sys.stdout.isatty()))
    root_logger.addHandler(stdout_handler)

    if log_dir is None or _is_test():
        return None

    file_path = log_file_path(log_dir)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(file_path)
    file_handler.setFormatter(_build_formatter(json_mode=json_mode))
    root_logger.addHandler(file_handler)
    return file_path
