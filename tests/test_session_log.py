"""Tests for SessionLog: running-session bookkeeping and persistence."""
from datetime import datetime

import pytest


def _ended(description, tag, start, end):
    from worktrack.models import Session
    return Session(description, tag, start, end)


class TestStartAndEnd:
    """Scenario A: start, end, persist."""

    def test_start_then_end_persists_one_line(self, session_log, store, clock):
        session = session_log.start_session("write docs", "work")
        assert session is not None
        assert session_log.has_running_session()
        assert store.load_sessions() == []

        clock.advance(minutes=90)
        ended = session_log.end_running_session()

        assert ended is session
        assert not session_log.has_running_session()
        assert store.load_sessions() == ["15-03-2024;write docs;work;09:00:00;10:30:00"]

    def test_start_trims_description(self, session_log):
        session = session_log.start_session("  write docs  ", "work")
        assert session.description == "write docs"

    @pytest.mark.parametrize("description,tag", [
        ("", "work"),
        ("   ", "work"),
        ("write docs", None),
        ("a;b", "work"),
    ])
    def test_invalid_start_is_a_no_op(self, session_log, description, tag):
        assert session_log.start_session(description, tag) is None
        assert len(session_log) == 0

    def test_start_while_running_is_a_no_op(self, session_log):
        session_log.start_session("first", "work")
        assert session_log.start_session("second", "work") is None
        assert len(session_log) == 1

    def test_end_without_running_session(self, session_log, store):
        assert session_log.end_running_session() is None
        assert store.load_sessions() == []

    def test_end_never_precedes_start(self, session_log, store):
        session_log.start_session("write docs", "work")
        ended = session_log.end_running_session(now=datetime(2024, 3, 15, 8, 0, 0))
        assert ended.end == ended.start

    def test_end_is_capped_below_one_day(self, session_log, store, clock):
        from worktrack.session_log import SessionLog

        session_log.start_session("overnight", "work")
        clock.advance(hours=25)
        ended = session_log.end_running_session()

        assert ended.end == datetime(2024, 3, 16, 8, 59, 59)
        assert store.load_sessions() == ["15-03-2024;overnight;work;09:00:00;08:59:59"]
        (reloaded,) = SessionLog.load(store)
        assert reloaded.end == ended.end

    def test_end_just_under_one_day_is_kept(self, session_log, clock):
        session_log.start_session("long day", "work")
        clock.advance(hours=23, minutes=59, seconds=59)
        ended = session_log.end_running_session()
        assert ended.end == datetime(2024, 3, 16, 8, 59, 59)

    def test_failed_append_leaves_session_running(self, session_log, store, clock, monkeypatch):
        from worktrack.models import StoreError

        session_log.start_session("write docs", "work")
        clock.advance(minutes=5)

        def fail(line):
            raise StoreError("disk full", store.sessions_path)

        monkeypatch.setattr(store, "append_session", fail)
        with pytest.raises(StoreError):
            session_log.end_running_session()
        assert session_log.has_running_session()


class TestLoad:
    def test_load_parses_every_line(self, store):
        from worktrack.session_log import SessionLog

        store.append_session("15-03-2024;a;work;09:00:00;10:00:00")
        store.append_session("15-03-2024;b;work;10:00:00;11:00:00;01:00:00")
        log = SessionLog.load(store)
        assert [s.description for s in log] == ["a", "b"]
        assert not log.has_running_session()

    def test_corrupt_line_is_fatal(self, store):
        from worktrack.models import CorruptDataError
        from worktrack.session_log import SessionLog

        store.append_session("15-03-2024;a;work;09:00:00;10:00:00")
        store.append_session("not a session")
        with pytest.raises(CorruptDataError) as exc_info:
            SessionLog.load(store)
        assert exc_info.value.line_number == 2


class TestInvariants:
    def test_running_session_must_be_last(self, store):
        from worktrack.models import InvariantViolation, Session
        from worktrack.session_log import SessionLog

        sessions = [
            Session("running", "work", datetime(2024, 3, 15, 9, 0, 0)),
            _ended("done", "work", datetime(2024, 3, 15, 10, 0, 0), datetime(2024, 3, 15, 11, 0, 0)),
        ]
        with pytest.raises(InvariantViolation):
            SessionLog(store, sessions)

    def test_persisted_lines_skip_running(self, session_log, clock):
        session_log.start_session("a", "work")
        clock.advance(minutes=1)
        session_log.end_running_session()
        session_log.start_session("b", "work")
        assert len(session_log.persisted_lines()) == 1


class TestDelete:
    """Scenario B: delete the middle of three ended sessions."""

    def _three_sessions(self, session_log, clock):
        for name in ("first", "second", "third"):
            session_log.start_session(name, "work")
            clock.advance(minutes=10)
            session_log.end_running_session()
            clock.advance(minutes=1)

    def test_delete_middle(self, session_log, store, clock):
        self._three_sessions(session_log, clock)
        assert session_log.delete(1) is True
        assert [s.description for s in session_log] == ["first", "third"]
        lines = store.load_sessions()
        assert len(lines) == 2
        assert ";first;" in lines[0]
        assert ";third;" in lines[1]

    def test_delete_running_session_is_memory_only(self, session_log, store, clock):
        self._three_sessions(session_log, clock)
        session_log.start_session("fourth", "work")
        assert session_log.delete(3) is True
        assert not session_log.has_running_session()
        assert len(store.load_sessions()) == 3

    def test_delete_bad_index_is_ignored(self, session_log):
        assert session_log.delete(0) is False
        assert session_log.delete(-1) is False

    def test_failed_delete_keeps_memory(self, session_log, store, clock):
        from worktrack.models import StoreError

        self._three_sessions(session_log, clock)
        (store.database_dir / "sessions.txt.temp").write_text("stale")
        with pytest.raises(StoreError):
            session_log.delete(0)
        assert len(session_log) == 3


class TestApplyEdit:
    def test_edit_rewrites_file_in_place(self, session_log, store, clock):
        for name in ("first", "second"):
            session_log.start_session(name, "work")
            clock.advance(minutes=10)
            session_log.end_running_session()

        edited = session_log[0].copy()
        edited.description = "renamed"
        session_log.apply_edit(0, edited)

        assert session_log[0].description == "renamed"
        lines = store.load_sessions()
        assert ";renamed;" in lines[0]
        assert ";second;" in lines[1]

    def test_edit_of_running_session_is_not_persisted(self, session_log, store):
        session_log.start_session("first", "work")
        edited = session_log[0].copy()
        edited.description = "renamed"
        session_log.apply_edit(0, edited)
        assert session_log[0].description == "renamed"
        assert store.load_sessions() == []

    def test_bad_index_raises(self, session_log):
        from worktrack.models import InvariantViolation, Session

        with pytest.raises(InvariantViolation):
            session_log.apply_edit(0, Session("x", "work", datetime(2024, 1, 1)))

    def test_failed_rewrite_restores_session(self, session_log, store, clock):
        from worktrack.models import StoreError

        session_log.start_session("first", "work")
        clock.advance(minutes=10)
        session_log.end_running_session()

        (store.database_dir / "sessions.txt.temp").write_text("stale")
        edited = session_log[0].copy()
        edited.description = "renamed"
        with pytest.raises(StoreError):
            session_log.apply_edit(0, edited)
        assert session_log[0].description == "first"
