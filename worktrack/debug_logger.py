#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Structured debug logging for worktrack.

Events are appended to ``<state dir>/debug.log`` as one JSON object per
line. Verbosity is controlled by WORKTRACK_DEBUG (or the
``worktrack.debugLevel`` setting):

    0 - disabled, no file is created
    1 - domain events and errors (default)
    2 - also every command state transition
"""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from worktrack.config import DEFAULT_DEBUG_LEVEL, get_int_setting
from worktrack.paths import PathResolver

LOG_FILE_NAME = "debug.log"


def _resolve_level() -> int:
    env_level = os.environ.get("WORKTRACK_DEBUG")
    if env_level is not None:
        try:
            return int(env_level)
        except ValueError:
            return DEFAULT_DEBUG_LEVEL
    return get_int_setting("worktrack.debugLevel", DEFAULT_DEBUG_LEVEL)


class DebugLogger:
    """JSON-lines event logger.

    Write failures are ignored; the log is diagnostics only.
    """

    def __init__(self, log_path: Optional[Path] = None, level: Optional[int] = None):
        self.level = _resolve_level() if level is None else level
        self.log_path = Path(log_path) if log_path else PathResolver.state_dir() / LOG_FILE_NAME
        self.pid = os.getpid()

    @property
    def enabled(self) -> bool:
        return self.level >= 1

    def _write(self, event: Dict[str, Any], min_level: int = 1) -> None:
        if self.level < min_level:
            return
        entry = {
            "event": event.pop("event"),
            "level": event.pop("level", "info"),
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "pid": self.pid,
            **event,
        }
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")
        except OSError:
            pass

    # -------------------------------------------------------------------------
    # Domain events
    # -------------------------------------------------------------------------

    def session_started(self, description: str, tag: str, start: datetime) -> None:
        self._write({
            "event": "session_started",
            "description": description,
            "tag": tag,
            "start": start.isoformat(),
        })

    def session_ended(self, description: str, tag: str, duration_s: float) -> None:
        self._write({
            "event": "session_ended",
            "description": description,
            "tag": tag,
            "duration_s": duration_s,
        })

    def session_end_capped(self, description: str, requested: datetime, stored: datetime) -> None:
        self._write({
            "event": "session_end_capped",
            "level": "warning",
            "description": description,
            "requested": requested.isoformat(),
            "stored": stored.isoformat(),
        })

    def session_deleted(self, index: int, persisted: bool) -> None:
        self._write({"event": "session_deleted", "index": index, "persisted": persisted})

    def session_edited(self, index: int, changed_fields: list, rewritten: bool) -> None:
        self._write({
            "event": "session_edited",
            "index": index,
            "changed": changed_fields,
            "rewritten": rewritten,
        })

    def tag_added(self, tag: str, total: int) -> None:
        self._write({"event": "tag_added", "tag": tag, "total": total})

    def state_transition(self, key: str, from_state: str, to_state: str) -> None:
        self._write(
            {"event": "state_transition", "key": key, "from": from_state, "to": to_state},
            min_level=2,
        )

    # -------------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------------

    def store_error(self, operation: str, error: str, path: Optional[str] = None) -> None:
        self._write({
            "event": "store_error",
            "level": "error",
            "op": operation,
            "err": error,
            "path": path,
        })

    def error(self, operation: str, error: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._write({
            "event": "error",
            "level": "error",
            "op": operation,
            "err": error,
            "context": context or {},
        })


_logger: Optional[DebugLogger] = None


def get_logger() -> DebugLogger:
    """Return the process-wide logger, creating it on first use."""
    global _logger
    if _logger is None:
        _logger = DebugLogger()
    return _logger


def reset_logger() -> None:
    """Drop the process-wide logger so the next get_logger() re-reads env vars."""
    global _logger
    _logger = None
