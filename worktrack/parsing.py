#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Line codec for the sessions log.

Canonical record (one per line, separator configurable):

    date;description;tag;start;end

A sixth trailing field is tolerated on read and ignored. Older files carry
either an empty field (trailing separator) or a cached duration there; the
duration is always recomputed from start and end.
"""

from datetime import datetime, timedelta
from typing import Tuple

from worktrack.models import CorruptDataError, InvariantViolation, Session

CANONICAL_FIELD_COUNT = 5
LEGACY_FIELD_COUNT = 6


def split_datetime_format(datetime_format: str) -> Tuple[str, str]:
    """Split a combined "<date> <time>" format into its two halves."""
    date_format, sep, time_format = datetime_format.partition(" ")
    if not sep or not date_format or not time_format:
        raise ValueError(
            f"Datetime format must be '<date format> <time format>': {datetime_format!r}"
        )
    return date_format, time_format.strip()


def is_storable_text(text: str, separator: str) -> bool:
    """True when text is non-empty after trimming and fits on one record line."""
    text = text.strip()
    return bool(text) and separator not in text and "\n" not in text


def format_session_line(session: Session, separator: str, datetime_format: str) -> str:
    """Serialize an ended session to its canonical line."""
    if session.end is None:
        raise InvariantViolation("Cannot export a running session")

    date_format, time_format = split_datetime_format(datetime_format)
    fields = [
        session.start.strftime(date_format),
        session.description,
        session.tag,
        session.start.strftime(time_format),
        session.end.strftime(time_format),
    ]
    return separator.join(fields)


def parse_session_line(
    line: str,
    separator: str,
    datetime_format: str,
    line_number: int = 0,
) -> Session:
    """Parse one persisted line into an ended Session.

    Raises:
        CorruptDataError: wrong field count, empty text fields or an
            unparsable timestamp.
    """
    fields = line.split(separator)
    if len(fields) not in (CANONICAL_FIELD_COUNT, LEGACY_FIELD_COUNT):
        raise CorruptDataError(
            f"Expected {CANONICAL_FIELD_COUNT} fields, got {len(fields)}",
            line_number,
            line,
        )

    date, description, tag, start, end = fields[:CANONICAL_FIELD_COUNT]
    if not description.strip() or not tag.strip():
        raise CorruptDataError("Empty description or tag", line_number, line)

    try:
        start_dt = datetime.strptime(f"{date} {start}", datetime_format)
        end_dt = datetime.strptime(f"{date} {end}", datetime_format)
    except ValueError as e:
        raise CorruptDataError(f"Unparsable timestamp: {e}", line_number, line) from e

    # Only one date is stored; an end before the start crossed midnight
    if end_dt < start_dt:
        end_dt += timedelta(days=1)

    return Session(description=description, tag=tag, start=start_dt, end=end_dt)
