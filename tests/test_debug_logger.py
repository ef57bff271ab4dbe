"""Tests for the JSON-lines debug logger."""
import json
from datetime import datetime

import pytest


def _events(log_path):
    if not log_path.exists():
        return []
    return [json.loads(line) for line in log_path.read_text().splitlines() if line]


class TestDebugLogger:
    def test_writes_json_lines_with_common_fields(self, temp_state_dir):
        from worktrack.debug_logger import DebugLogger

        logger = DebugLogger(level=1)
        logger.session_started("write docs", "work", datetime(2024, 3, 15, 9, 0, 0))

        (event,) = _events(temp_state_dir / "debug.log")
        assert event["event"] == "session_started"
        assert event["level"] == "info"
        assert event["tag"] == "work"
        assert event["start"] == "2024-03-15T09:00:00"
        assert "timestamp" in event
        assert "pid" in event

    def test_level_zero_writes_nothing(self, temp_state_dir):
        from worktrack.debug_logger import DebugLogger

        logger = DebugLogger(level=0)
        logger.tag_added("work", 1)
        logger.store_error("append", "disk full")
        assert not (temp_state_dir / "debug.log").exists()

    def test_state_transitions_need_level_two(self, tmp_path):
        from worktrack.debug_logger import DebugLogger

        log_path = tmp_path / "debug.log"
        DebugLogger(log_path, level=1).state_transition("q", "List", "Quitting")
        assert _events(log_path) == []

        DebugLogger(log_path, level=2).state_transition("q", "List", "Quitting")
        (event,) = _events(log_path)
        assert event["from"] == "List"
        assert event["to"] == "Quitting"

    def test_errors_are_marked(self, tmp_path):
        from worktrack.debug_logger import DebugLogger

        log_path = tmp_path / "debug.log"
        DebugLogger(log_path, level=1).store_error("EndRunningSession", "disk full", "/x")
        (event,) = _events(log_path)
        assert event["level"] == "error"
        assert event["op"] == "EndRunningSession"
        assert event["path"] == "/x"

    def test_capped_end_is_a_warning(self, tmp_path):
        from worktrack.debug_logger import DebugLogger

        log_path = tmp_path / "debug.log"
        DebugLogger(log_path, level=1).session_end_capped(
            "write docs", datetime(2024, 3, 16, 10, 0, 0), datetime(2024, 3, 16, 8, 59, 59)
        )
        (event,) = _events(log_path)
        assert event["level"] == "warning"
        assert event["requested"] == "2024-03-16T10:00:00"
        assert event["stored"] == "2024-03-16T08:59:59"

    def test_unwritable_log_is_ignored(self, tmp_path):
        from worktrack.debug_logger import DebugLogger

        blocker = tmp_path / "file"
        blocker.write_text("")
        DebugLogger(blocker / "debug.log", level=1).tag_added("work", 1)

    @pytest.mark.parametrize("env,expected", [("0", 0), ("2", 2), ("noisy", 1)])
    def test_level_from_env(self, monkeypatch, env, expected):
        from worktrack.debug_logger import DebugLogger

        monkeypatch.setenv("WORKTRACK_DEBUG", env)
        assert DebugLogger().level == expected


class TestGlobalLogger:
    def test_get_logger_is_cached(self):
        from worktrack.debug_logger import get_logger

        assert get_logger() is get_logger()

    def test_reset_logger_rereads_env(self, monkeypatch):
        from worktrack.debug_logger import get_logger, reset_logger

        monkeypatch.setenv("WORKTRACK_DEBUG", "2")
        reset_logger()
        first = get_logger()
        reset_logger()
        assert get_logger() is not first
        assert get_logger().level == 2
