#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Data models for the work-session tracker.

Contains the Session dataclass, the editable field enum, constants and the
exception hierarchy shared by the store, the domain model and the UI.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional


# =============================================================================
# Constants
# =============================================================================

DEFAULT_VALUE_SEPARATOR = ";"
DEFAULT_DATETIME_FORMAT = "%d-%m-%Y %H:%M:%S"
SESSIONS_FILE_NAME = "sessions.txt"
TAGS_FILE_NAME = "tags.txt"
DATABASE_DIR_NAME = "database"

# A record stores a single date, so a session ends within a day of its start
MAX_SESSION_LENGTH = timedelta(days=1) - timedelta(seconds=1)

# Display formats for derived strings (never persisted)
DISPLAY_DATE_FORMAT = "%d %b %y"
DISPLAY_TIME_FORMAT = "%H:%M:%S"


# =============================================================================
# Exceptions
# =============================================================================


class TrackerError(Exception):
    """Base class for all tracker errors."""


class CorruptDataError(TrackerError):
    """A persisted log cannot be parsed.

    Fatal: the tracker refuses to run on partial data.
    """

    def __init__(self, message: str, line_number: Optional[int] = None, line: str = ""):
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"{message} (line {line_number}: {line!r})"
        super().__init__(message)


class StoreError(TrackerError):
    """Reading or writing a log file failed.

    Does not imply corrupted data; the caller may retry.
    """

    def __init__(self, message: str, path: Optional[object] = None):
        self.path = path
        super().__init__(message)


class InvariantViolation(TrackerError):
    """A programming error: the in-memory model and its invariants disagree."""


# =============================================================================
# Enums
# =============================================================================


class SessionField(str, Enum):
    """Field of a session selected in the edit form."""
    DATE = "date"
    DESCRIPTION = "description"
    TAG = "tag"
    START = "start"
    END = "end"

    @property
    def column(self) -> int:
        """Position of the field in the edit form."""
        return list(SessionField).index(self)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class Session:
    """A single work session.

    A session without an end is running. It lives only in memory until it
    is ended.
    """
    description: str
    tag: str
    start: datetime
    end: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self.end is None

    def copy(self) -> "Session":
        return replace(self)

    def duration(self, now: Optional[datetime] = None) -> Optional[timedelta]:
        """Elapsed time of the session.

        Ended sessions return end - start. Running sessions return the time
        elapsed up to ``now`` when given, otherwise None.
        """
        if self.end is not None:
            return self.end - self.start
        if now is not None:
            return now - self.start
        return None

    def date_string(self) -> str:
        return self.start.strftime(DISPLAY_DATE_FORMAT)

    def start_time_string(self) -> str:
        return self.start.strftime(DISPLAY_TIME_FORMAT)

    def end_time_string(self) -> Optional[str]:
        if self.end is None:
            return None
        return self.end.strftime(DISPLAY_TIME_FORMAT)

    def duration_string(self, now: Optional[datetime] = None) -> Optional[str]:
        """Format the duration as HH:MM:SS (hours are not wrapped at 24)."""
        duration = self.duration(now)
        if duration is None:
            return None
        return format_duration(duration)

    def field_value(self, field: SessionField):
        """Return the raw value backing an edit-form field."""
        if field in (SessionField.DATE, SessionField.START):
            return self.start
        if field == SessionField.DESCRIPTION:
            return self.description
        if field == SessionField.TAG:
            return self.tag
        return self.end


def format_duration(duration: timedelta) -> str:
    """Format a timedelta as HH:MM:SS, clamping negative values to zero."""
    total = max(int(duration.total_seconds()), 0)
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
