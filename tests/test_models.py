"""Tests for the Session model and shared exceptions."""
from datetime import datetime, timedelta

import pytest


class TestSession:
    """Tests for Session."""

    def test_session_without_end_is_running(self):
        from worktrack.models import Session

        session = Session("write docs", "work", datetime(2024, 3, 15, 9, 0, 0))
        assert session.is_running
        assert session.end_time_string() is None

    def test_duration_of_ended_session(self):
        from worktrack.models import Session

        session = Session(
            "write docs", "work",
            datetime(2024, 3, 15, 9, 0, 0),
            datetime(2024, 3, 15, 10, 30, 15),
        )
        assert session.duration() == timedelta(hours=1, minutes=30, seconds=15)
        assert session.duration_string() == "01:30:15"

    def test_running_duration_needs_now(self):
        from worktrack.models import Session

        session = Session("write docs", "work", datetime(2024, 3, 15, 9, 0, 0))
        assert session.duration() is None
        assert session.duration_string(datetime(2024, 3, 15, 9, 0, 42)) == "00:00:42"

    def test_display_strings(self):
        from worktrack.models import Session

        session = Session(
            "write docs", "work",
            datetime(2024, 3, 5, 8, 7, 6),
            datetime(2024, 3, 5, 9, 0, 0),
        )
        assert session.date_string() == "05 Mar 24"
        assert session.start_time_string() == "08:07:06"
        assert session.end_time_string() == "09:00:00"

    def test_copy_is_independent(self):
        from worktrack.models import Session

        session = Session("write docs", "work", datetime(2024, 3, 15, 9, 0, 0))
        clone = session.copy()
        clone.description = "other"
        assert session.description == "write docs"
        assert clone != session

    def test_field_value(self):
        from worktrack.models import Session, SessionField

        start = datetime(2024, 3, 15, 9, 0, 0)
        session = Session("write docs", "work", start)
        assert session.field_value(SessionField.DATE) == start
        assert session.field_value(SessionField.START) == start
        assert session.field_value(SessionField.DESCRIPTION) == "write docs"
        assert session.field_value(SessionField.TAG) == "work"
        assert session.field_value(SessionField.END) is None


class TestFormatDuration:
    """Tests for format_duration."""

    def test_hours_are_not_wrapped(self):
        from worktrack.models import format_duration

        assert format_duration(timedelta(hours=27, minutes=3, seconds=9)) == "27:03:09"

    def test_negative_is_clamped(self):
        from worktrack.models import format_duration

        assert format_duration(timedelta(seconds=-5)) == "00:00:00"


class TestSessionField:
    def test_column_follows_declaration_order(self):
        from worktrack.models import SessionField

        assert [f.column for f in SessionField] == [0, 1, 2, 3, 4]


class TestErrors:
    def test_corrupt_data_error_mentions_line(self):
        from worktrack.models import CorruptDataError, TrackerError

        error = CorruptDataError("Expected 5 fields, got 2", 7, "a;b")
        assert isinstance(error, TrackerError)
        assert error.line_number == 7
        assert "line 7" in str(error)
        assert "'a;b'" in str(error)

    def test_store_error_keeps_path(self, tmp_path):
        from worktrack.models import StoreError

        error = StoreError("boom", tmp_path)
        assert error.path == tmp_path
        assert str(error) == "boom"
