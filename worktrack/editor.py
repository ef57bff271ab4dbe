#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Session editor: a staging copy of one session plus a field cursor.

The edit buffer is a clone. Nothing touches the original session until
``commit`` hands the buffer to ``SessionLog.apply_edit``.

Field cursor order is fixed and does not wrap:

    Date -> Description -> Tag -> Start -> End

While a field is being edited its value lives in ``field_value`` and only
reaches the buffer through ``commit_field`` / ``apply_field_edit``.
"""

from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from worktrack.keys import (
    KEY_BACKSPACE,
    KEY_DOWN,
    KEY_LEFT,
    KEY_RIGHT,
    KEY_UP,
    is_printable,
)
from worktrack.models import (
    DEFAULT_VALUE_SEPARATOR,
    MAX_SESSION_LENGTH,
    Session,
    SessionField,
)
from worktrack.parsing import is_storable_text
from worktrack.session_log import SessionLog
from worktrack.tags import TagRegistry

FIELD_ORDER = [
    SessionField.DATE,
    SessionField.DESCRIPTION,
    SessionField.TAG,
    SessionField.START,
    SessionField.END,
]

# Steppable segments of the datetime fields, left to right
DATE_SEGMENTS = ("day", "month", "year")
TIME_SEGMENTS = ("hour", "minute", "second")


def _step_date(value: datetime, segment: str, step: int) -> datetime:
    # relativedelta clamps the day, so 31 Jan + 1 month is 28/29 Feb
    if segment == "day":
        return value + relativedelta(days=step)
    if segment == "month":
        return value + relativedelta(months=step)
    return value + relativedelta(years=step)


def _valid_span(start: datetime, end: Optional[datetime]) -> bool:
    return end is None or start <= end <= start + MAX_SESSION_LENGTH


def _step_time(value: datetime, segment: str, step: int) -> datetime:
    if segment == "hour":
        return value + timedelta(hours=step)
    if segment == "minute":
        return value + timedelta(minutes=step)
    return value + timedelta(seconds=step)


class SessionEditor:
    """Edit buffer for one session with field-level staging."""

    def __init__(self, value_separator: str = DEFAULT_VALUE_SEPARATOR):
        self.value_separator = value_separator
        self.buffer: Optional[Session] = None
        self.original: Optional[Session] = None
        self.field: Optional[SessionField] = None
        self.field_value = None
        self.segment = 0
        self.tag_index = 0

    @property
    def active(self) -> bool:
        return self.buffer is not None

    @property
    def editing_field(self) -> bool:
        """True between begin_field_edit and commit_field/revert_field."""
        return self.active and self.field_value is not None

    def begin(self, session: Session, tags: Optional[TagRegistry] = None) -> None:
        """Clone ``session`` into the buffer and put the cursor on Date."""
        self.buffer = session.copy()
        self.original = session.copy()
        self.field = SessionField.DATE
        self.field_value = None
        self.segment = 0
        if tags is not None:
            self.tag_index = tags.index_of(session.tag)

    def discard(self) -> None:
        """Drop the buffer without touching the domain model."""
        self.buffer = None
        self.original = None
        self.field = None
        self.field_value = None
        self.segment = 0

    # -------------------------------------------------------------------------
    # Field cursor
    # -------------------------------------------------------------------------

    def cycle_forward(self, tags: Optional[TagRegistry] = None) -> None:
        self._move_cursor(1, tags)

    def cycle_backward(self, tags: Optional[TagRegistry] = None) -> None:
        self._move_cursor(-1, tags)

    def _move_cursor(self, step: int, tags: Optional[TagRegistry]) -> None:
        if not self.active or self.field is None:
            return
        position = FIELD_ORDER.index(self.field) + step
        position = max(0, min(position, len(FIELD_ORDER) - 1))
        self.field = FIELD_ORDER[position]

        # The tag dropdown starts on the buffer's current tag
        if self.field == SessionField.TAG and tags is not None:
            self.tag_index = tags.index_of(self.buffer.tag)

    # -------------------------------------------------------------------------
    # Editing a single field
    # -------------------------------------------------------------------------

    def begin_field_edit(self) -> None:
        """Seed the pending value from the buffer for the field under the cursor."""
        if not self.active or self.field is None:
            return
        value = self.buffer.field_value(self.field)
        # A running session has no end to edit; keep a sentinel so the
        # editing state is still visible
        self.field_value = value if value is not None else ""
        self.segment = 0

    def handle_key(self, key: str, tags: Optional[TagRegistry] = None) -> None:
        """Apply one key to the pending field value. Unknown keys are ignored."""
        if not self.editing_field:
            return

        if self.field == SessionField.DESCRIPTION:
            if key == KEY_BACKSPACE:
                self.field_value = self.field_value[:-1]
            elif is_printable(key):
                self.field_value += key

        elif self.field == SessionField.TAG:
            if tags is None or len(tags) == 0:
                return
            if key == KEY_UP:
                self.tag_index = max(self.tag_index - 1, 0)
            elif key == KEY_DOWN:
                self.tag_index = min(self.tag_index + 1, len(tags) - 1)
            else:
                return
            self.field_value = tags[self.tag_index]

        elif self.field == SessionField.DATE:
            self._handle_datetime_key(key, DATE_SEGMENTS, _step_date)

        else:
            self._handle_datetime_key(key, TIME_SEGMENTS, _step_time)

    def _handle_datetime_key(self, key, segments, stepper) -> None:
        if not isinstance(self.field_value, datetime):
            return
        if key == KEY_LEFT:
            self.segment = max(self.segment - 1, 0)
        elif key == KEY_RIGHT:
            self.segment = min(self.segment + 1, len(segments) - 1)
        elif key == KEY_UP:
            self.field_value = stepper(self.field_value, segments[self.segment], 1)
        elif key == KEY_DOWN:
            self.field_value = stepper(self.field_value, segments[self.segment], -1)

    def commit_field(self) -> None:
        """Apply the pending value to the buffer and leave field editing."""
        if not self.editing_field:
            return
        value = self.field_value
        self.field_value = None
        self.apply_field_edit(value)

    def revert_field(self, tags: Optional[TagRegistry] = None) -> None:
        """Leave field editing without touching the buffer."""
        self.field_value = None
        if self.active and tags is not None and self.buffer.tag in tags:
            self.tag_index = tags.index_of(self.buffer.tag)

    def apply_field_edit(self, new_value) -> None:
        """Write a new value for the field under the cursor into the buffer.

        Date shifts start and end by the same delta so the duration is kept.
        Description and Tag are trimmed; empty results are ignored.
        Start and End are replaced as given, unless the session would end
        before it starts or last a day or more.
        """
        if not self.active or self.field is None:
            return
        buffer = self.buffer

        if self.field == SessionField.DATE:
            if not isinstance(new_value, datetime):
                return
            delta = new_value - buffer.start
            buffer.start = buffer.start + delta
            if buffer.end is not None:
                buffer.end = buffer.end + delta

        elif self.field in (SessionField.DESCRIPTION, SessionField.TAG):
            text = str(new_value).strip()
            if not is_storable_text(text, self.value_separator):
                return
            if self.field == SessionField.DESCRIPTION:
                buffer.description = text
            else:
                buffer.tag = text

        elif self.field == SessionField.START:
            if isinstance(new_value, datetime) and _valid_span(new_value, buffer.end):
                buffer.start = new_value

        elif self.field == SessionField.END:
            if isinstance(new_value, datetime) and _valid_span(buffer.start, new_value):
                buffer.end = new_value

    # -------------------------------------------------------------------------
    # Whole-buffer operations
    # -------------------------------------------------------------------------

    def pending_changes(self, original: Optional[Session] = None) -> bool:
        """True when the buffer differs from ``original`` (default: the session it was cloned from)."""
        if not self.active:
            return False
        reference = original if original is not None else self.original
        return self.buffer != reference

    def commit(self, log: SessionLog, index: int) -> None:
        """Write the buffer back onto ``log[index]``."""
        if not self.active:
            return
        log.apply_edit(index, self.buffer)
