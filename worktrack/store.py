#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Flat-file persistence for the sessions and tags logs.

Both logs are plain text, one record per line. The store knows nothing
about what a record means. Every rewrite goes through a sibling
``<name>.temp`` file followed by an atomic rename, so a failed write leaves
the original file untouched. There is no cross-process locking: callers
must not run two rewrites at the same time.
"""

import os
from pathlib import Path
from typing import Iterable, List

from worktrack.models import (
    SESSIONS_FILE_NAME,
    TAGS_FILE_NAME,
    InvariantViolation,
    StoreError,
)

TEMP_SUFFIX = ".temp"


class Store:
    """Read, append, rewrite and delete-by-index over the two logs."""

    def __init__(
        self,
        database_dir: Path,
        sessions_file_name: str = SESSIONS_FILE_NAME,
        tags_file_name: str = TAGS_FILE_NAME,
    ):
        """
        Initialize the store, creating the directory and empty logs if needed.

        Args:
            database_dir: Directory holding both log files
            sessions_file_name: File name of the sessions log
            tags_file_name: File name of the tags log

        Raises:
            StoreError: The directory or files could not be created.
        """
        self.database_dir = Path(database_dir)
        self.sessions_path = self.database_dir / sessions_file_name
        self.tags_path = self.database_dir / tags_file_name

        try:
            self.database_dir.mkdir(parents=True, exist_ok=True)
            for path in (self.sessions_path, self.tags_path):
                if not path.exists():
                    path.touch()
        except OSError as e:
            raise StoreError(f"Cannot create database in {self.database_dir}: {e}", self.database_dir) from e

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def load_sessions(self) -> List[str]:
        """Return all non-empty session lines in file order."""
        return self._read_lines(self.sessions_path)

    def load_tags(self) -> List[str]:
        """Return all non-empty tag lines in file order."""
        return self._read_lines(self.tags_path)

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def append_session(self, line: str) -> None:
        self._append(self.sessions_path, line)

    def append_tag(self, line: str) -> None:
        self._append(self.tags_path, line)

    def rewrite_sessions(self, lines: Iterable[str]) -> None:
        """Replace the whole sessions log with ``lines``."""
        self._replace_atomically(self.sessions_path, list(lines))

    def delete_session_at(self, index: int) -> None:
        """Remove the session line at ``index`` (0 = first line in the file).

        Raises:
            InvariantViolation: ``index`` does not address a persisted line,
                meaning memory and disk are out of lockstep.
            StoreError: The file could not be read or replaced, including
                when a stale temp file is in the way.
        """
        lines = self._read_lines(self.sessions_path)
        if not 0 <= index < len(lines):
            raise InvariantViolation(
                f"Session index {index} out of range for {len(lines)} persisted sessions"
            )
        del lines[index]
        self._replace_atomically(self.sessions_path, lines)

    def compact(self, path: Path) -> None:
        """Strip blank lines from ``path``. A file without blank lines is left as is."""
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Cannot read {path}: {e}", path) from e

        entries = [line for line in content.splitlines() if line.strip()]
        if content == _render(entries):
            return
        self._replace_atomically(path, entries)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _read_lines(self, path: Path) -> List[str]:
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Cannot read {path}: {e}", path) from e
        return [line for line in content.splitlines() if line.strip()]

    def _append(self, path: Path, line: str) -> None:
        # After compaction the file is empty or ends in a newline, so a
        # failed compaction writes nothing and the append adds no blank line
        self.compact(path)
        try:
            with open(path, "a", encoding="utf-8") as f:
                f.write(f"{line}\n")
        except OSError as e:
            raise StoreError(f"Cannot append to {path}: {e}", path) from e

    def _replace_atomically(self, path: Path, lines: List[str]) -> None:
        temp_path = path.with_name(path.name + TEMP_SUFFIX)
        try:
            temp_file = open(temp_path, "x", encoding="utf-8")
        except FileExistsError as e:
            raise StoreError(
                f"Temp file {temp_path} already exists; another write is in progress "
                "or a previous one was interrupted",
                temp_path,
            ) from e
        except OSError as e:
            raise StoreError(f"Cannot create {temp_path}: {e}", temp_path) from e

        try:
            with temp_file:
                temp_file.write(_render(lines))
                temp_file.flush()
                os.fsync(temp_file.fileno())
            os.replace(temp_path, path)
        except OSError as e:
            # Only our own temp file is removed here, never a stale one
            temp_path.unlink(missing_ok=True)
            raise StoreError(f"Cannot rewrite {path}: {e}", path) from e


def _render(lines: List[str]) -> str:
    return "".join(f"{line}\n" for line in lines)
