# SPDX-License-Identifier: MIT
"""worktrack - keyboard-driven work-session tracker backed by flat files."""

from worktrack._version import __version__
from worktrack.models import (
    CorruptDataError,
    InvariantViolation,
    Session,
    SessionField,
    StoreError,
    TrackerError,
)

__all__ = [
    "__version__",
    "CorruptDataError",
    "InvariantViolation",
    "Session",
    "SessionField",
    "StoreError",
    "TrackerError",
]
