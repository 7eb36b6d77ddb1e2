"""Structured logging configuration.

Events are rendered as one JSON object per line with an ISO timestamp
and level. The minimum level comes from ``TLESYNC_LOG_LEVEL``. When
``TLESYNC_ERROR_LOG`` names a file, error and critical events are also
appended there.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any, MutableMapping

import structlog

from core.constants import DEFAULT_LOG_LEVEL

_CONFIGURED = False
_ERROR_LEVELS = frozenset({"error", "critical"})


class ErrorFileSink:
    """structlog processor appending error-level events to a JSON-lines file.

    The event dict passes through unchanged so console rendering is
    unaffected. A write failure is reported on the event instead of
    breaking the log call.
    """

    def __init__(self, log_path: Path) -> None:
        self._log_path = log_path
        self._renderer = structlog.processors.JSONRenderer()
        self._lock = threading.Lock()

    @property
    def log_path(self) -> Path:
        return self._log_path

    def __call__(
        self,
        logger: Any,
        method_name: str,
        event_dict: MutableMapping[str, Any],
    ) -> MutableMapping[str, Any]:
        if event_dict.get("level", method_name) not in _ERROR_LEVELS:
            return event_dict
        line = self._renderer(logger, method_name, dict(event_dict))
        try:
            with self._lock:
                self._log_path.parent.mkdir(parents=True, exist_ok=True)
                with self._log_path.open("a", encoding="utf-8") as handle:
                    handle.write(f"{line}\n")
        except OSError as error:
            event_dict["error_log_write_failed"] = str(error)
        return event_dict


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger bound to ``logger=name``.
    """
    _configure_once()
    return structlog.get_logger(name).bind(logger=name)


def _configure_once() -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return
    processors: list[Any] = [
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
    ]
    error_log_path = os.getenv("TLESYNC_ERROR_LOG", "").strip()
    if error_log_path:
        processors.append(ErrorFileSink(Path(error_log_path).expanduser()))
    processors.append(structlog.processors.JSONRenderer())
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level()),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def _resolve_level() -> int:
    """Map ``TLESYNC_LOG_LEVEL`` onto a stdlib level number, INFO when unknown."""
    level_name = os.getenv("TLESYNC_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO
