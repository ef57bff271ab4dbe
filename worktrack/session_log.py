#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Session log: the in-memory, ordered list of sessions backed by the Store.

Invariants:
- At most one session is running, and if so it is the last element.
- Exactly the ended sessions are persisted, in the same order as in memory.
  Because the running session can only be last, position ``i`` in memory
  and line ``i`` on disk refer to the same session for every ended one.
"""

from datetime import datetime
from typing import Callable, Iterator, List, Optional

from worktrack.debug_logger import get_logger
from worktrack.models import (
    DEFAULT_DATETIME_FORMAT,
    DEFAULT_VALUE_SEPARATOR,
    MAX_SESSION_LENGTH,
    InvariantViolation,
    Session,
    StoreError,
)
from worktrack.parsing import format_session_line, is_storable_text, parse_session_line
from worktrack.store import Store


def current_time() -> datetime:
    """Local wall-clock time truncated to whole seconds (the stored precision)."""
    return datetime.now().replace(microsecond=0)


def load_sessions(store: Store, value_separator: str, datetime_format: str) -> List[Session]:
    """Parse every persisted session line.

    Raises:
        CorruptDataError: Any line fails to parse. No partial list is returned.
    """
    return [
        parse_session_line(line, value_separator, datetime_format, line_number=number)
        for number, line in enumerate(store.load_sessions(), start=1)
    ]


class SessionLog:
    """Ordered sessions with running-session bookkeeping."""

    def __init__(
        self,
        store: Store,
        sessions: Optional[List[Session]] = None,
        value_separator: str = DEFAULT_VALUE_SEPARATOR,
        datetime_format: str = DEFAULT_DATETIME_FORMAT,
        clock: Callable[[], datetime] = current_time,
    ):
        self.store = store
        self.value_separator = value_separator
        self.datetime_format = datetime_format
        self.clock = clock
        self._sessions: List[Session] = list(sessions or [])
        self.check_invariants()

    @classmethod
    def load(
        cls,
        store: Store,
        value_separator: str = DEFAULT_VALUE_SEPARATOR,
        datetime_format: str = DEFAULT_DATETIME_FORMAT,
        clock: Callable[[], datetime] = current_time,
    ) -> "SessionLog":
        sessions = load_sessions(store, value_separator, datetime_format)
        return cls(store, sessions, value_separator, datetime_format, clock)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def sessions(self) -> List[Session]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __getitem__(self, index: int) -> Session:
        return self._sessions[index]

    def __iter__(self) -> Iterator[Session]:
        return iter(self._sessions)

    def last(self) -> Optional[Session]:
        return self._sessions[-1] if self._sessions else None

    def has_running_session(self) -> bool:
        last = self.last()
        return last is not None and last.is_running

    def persisted_lines(self) -> List[str]:
        """Canonical lines for every ended session, in log order."""
        return [
            format_session_line(session, self.value_separator, self.datetime_format)
            for session in self._sessions
            if not session.is_running
        ]

    def check_invariants(self) -> None:
        """Raise InvariantViolation unless only the last session may be running."""
        for index, session in enumerate(self._sessions[:-1]):
            if session.is_running:
                raise InvariantViolation(
                    f"Session {index} is running but is not the most recent session"
                )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def start_session(self, description: str, tag: Optional[str]) -> Optional[Session]:
        """Start a running session at the current time.

        Nothing happens when the description is empty (after trimming), no
        tag is selected, or a session is already running. The new session
        is not persisted until it ends.

        Returns:
            The new session, or None if it was not started.
        """
        description = description.strip()
        if not is_storable_text(description, self.value_separator):
            return None
        if not tag or self.has_running_session():
            return None

        session = Session(description=description, tag=tag, start=self.clock())
        self._sessions.append(session)

        get_logger().session_started(session.description, session.tag, session.start)
        return session

    def end_running_session(self, now: Optional[datetime] = None) -> Optional[Session]:
        """End the running session and append it to the sessions log.

        Raises:
            StoreError: The append failed; the session is left running.

        Returns:
            The ended session, or None if nothing was running.
        """
        if not self.has_running_session():
            return None

        session = self._sessions[-1]
        end = max(now or self.clock(), session.start)
        latest = session.start + MAX_SESSION_LENGTH
        if end > latest:
            get_logger().session_end_capped(session.description, end, latest)
            end = latest
        session.end = end

        try:
            self.store.append_session(
                format_session_line(session, self.value_separator, self.datetime_format)
            )
        except StoreError:
            session.end = None
            raise

        get_logger().session_ended(
            session.description, session.tag, session.duration().total_seconds()
        )
        return session

    def delete(self, index: int) -> bool:
        """Remove the session at ``index`` from memory and, if ended, from disk.

        An index that addresses no session is ignored.

        Raises:
            StoreError: The on-disk delete failed; memory is unchanged.

        Returns:
            True if a session was removed.
        """
        if not 0 <= index < len(self._sessions):
            return False

        persisted = not self._sessions[index].is_running
        if persisted:
            self.store.delete_session_at(index)
        del self._sessions[index]

        get_logger().session_deleted(index, persisted)
        return True

    def apply_edit(self, index: int, edited: Session) -> None:
        """Copy the fields of ``edited`` onto the session at ``index``.

        If the result is ended, the whole sessions log is rewritten.

        Raises:
            InvariantViolation: ``index`` is out of range, or the edit would
                leave a running session that is not the last one.
            StoreError: The rewrite failed; the session keeps its old values.
        """
        if not 0 <= index < len(self._sessions):
            raise InvariantViolation(
                f"Session index {index} out of range for {len(self._sessions)} sessions"
            )
        if edited.is_running and index != len(self._sessions) - 1:
            raise InvariantViolation("Only the most recent session may be running")

        target = self._sessions[index]
        previous = target.copy()
        changed = [
            name for name in ("description", "tag", "start", "end")
            if getattr(previous, name) != getattr(edited, name)
        ]

        target.description = edited.description
        target.tag = edited.tag
        target.start = edited.start
        target.end = edited.end

        rewritten = not target.is_running
        if rewritten:
            try:
                self.store.rewrite_sessions(self.persisted_lines())
            except StoreError:
                target.description = previous.description
                target.tag = previous.tag
                target.start = previous.start
                target.end = previous.end
                raise

        get_logger().session_edited(index, changed, rewritten)
