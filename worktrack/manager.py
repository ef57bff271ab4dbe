#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
TrackerManager - composition root for worktrack.

Loads configuration, opens the store and builds the session log, the tag
registry, the session editor and the command state machine that drives
them.
"""

from typing import Optional

from worktrack.config import TrackerConfig, load_config
from worktrack.debug_logger import get_logger
from worktrack.editor import SessionEditor
from worktrack.machine import CommandStateMachine
from worktrack.models import SESSIONS_FILE_NAME, TAGS_FILE_NAME, CorruptDataError
from worktrack.session_log import SessionLog
from worktrack.store import Store
from worktrack.tags import TagRegistry


class TrackerManager:
    """
    Owns the tracker components for one run.

    Raises on construction:
        CorruptDataError: A persisted line cannot be parsed, or a session
            references a tag missing from the tag log.
        StoreError: The database directory or files cannot be created.
    """

    def __init__(self, config: Optional[TrackerConfig] = None, clock=None):
        self.config = config or load_config()
        self.store = Store(self.config.database_dir, SESSIONS_FILE_NAME, TAGS_FILE_NAME)

        log_kwargs = {"clock": clock} if clock is not None else {}
        try:
            self.sessions = SessionLog.load(
                self.store,
                self.config.value_separator,
                self.config.datetime_format,
                **log_kwargs,
            )
        except CorruptDataError as e:
            get_logger().error("load_sessions", str(e), {"path": str(self.store.sessions_path)})
            raise
        self.tags = TagRegistry.load(self.store, self.config.value_separator)
        self._check_session_tags()
        self._select_initial_tag()

        self.editor = SessionEditor(self.config.value_separator)
        self.machine = CommandStateMachine(self.sessions, self.tags, self.editor)

    def _check_session_tags(self) -> None:
        for number, session in enumerate(self.sessions, start=1):
            if session.tag not in self.tags:
                error = CorruptDataError(f"Unknown tag {session.tag!r}", number)
                get_logger().error("load_sessions", str(error))
                raise error

    def _select_initial_tag(self) -> None:
        # Continue where the last session left off
        last = self.sessions.last()
        if last is not None:
            self.tags.select(self.tags.index_of(last.tag))
