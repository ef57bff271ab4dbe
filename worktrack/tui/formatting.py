#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Formatting helpers for the tracker TUI.

Everything here returns plain strings or Rich markup; nothing touches
widgets, so the helpers are testable without a running app.
"""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from rich.markup import escape

from worktrack.editor import FIELD_ORDER, SessionEditor
from worktrack.keys import Control
from worktrack.models import DISPLAY_DATE_FORMAT, DISPLAY_TIME_FORMAT, Session, SessionField

SESSION_COLUMNS = ("Date", "Description", "Tag", "Start", "End", "Duration")

FIELD_LABELS = {
    SessionField.DATE: "Date",
    SessionField.DESCRIPTION: "Description",
    SessionField.TAG: "Tag",
    SessionField.START: "Start",
    SessionField.END: "End",
}

RUNNING_LABEL = "running"


def row_for_index(count: int, index: int) -> int:
    """Table row of session ``index``. The newest session is on top."""
    return count - 1 - index


def session_row(session: Session, now: Optional[datetime] = None) -> Tuple[str, ...]:
    """Cells for one session. A running session shows its elapsed time up to ``now``."""
    now = now or datetime.now()
    end = session.end_time_string()
    return (
        session.date_string(),
        escape(session.description),
        escape(session.tag),
        session.start_time_string(),
        end if end is not None else f"[green]{RUNNING_LABEL}[/green]",
        session.duration_string(now) or "",
    )


def _highlight_segment(text: str, separator: str, segment: int) -> str:
    parts = text.split(separator)
    if 0 <= segment < len(parts):
        parts[segment] = f"[reverse]{parts[segment]}[/reverse]"
    return separator.join(parts)


def format_field_value(field: SessionField, value, segment: Optional[int] = None) -> str:
    """Display a raw field value, optionally highlighting the segment being stepped."""
    if isinstance(value, datetime):
        if field == SessionField.DATE:
            text = value.strftime(DISPLAY_DATE_FORMAT)
            separator = " "
        else:
            text = value.strftime(DISPLAY_TIME_FORMAT)
            separator = ":"
        if segment is None:
            return text
        return _highlight_segment(text, separator, segment)
    if value is None or value == "":
        return f"[dim]{RUNNING_LABEL}[/dim]" if field == SessionField.END else ""
    return escape(str(value))


def render_edit_form(editor: SessionEditor) -> str:
    """Edit buffer as one line per field, cursor field marked."""
    if not editor.active:
        return ""

    lines = ["[bold]Edit session[/bold]"]
    for field in FIELD_ORDER:
        label = f"{FIELD_LABELS[field]:<12}"
        if field == editor.field and editor.editing_field:
            segment = editor.segment if field in (
                SessionField.DATE, SessionField.START, SessionField.END
            ) else None
            value = format_field_value(field, editor.field_value, segment)
            if field == SessionField.DESCRIPTION:
                value += "[blink]_[/blink]"
            lines.append(f"[bold yellow]> {label}[/bold yellow] {value}")
        elif field == editor.field:
            value = format_field_value(field, editor.buffer.field_value(field))
            lines.append(f"[bold]> {label}[/bold] {value}")
        else:
            value = format_field_value(field, editor.buffer.field_value(field))
            lines.append(f"  {label} {value}")
    return "\n".join(lines)


def render_description_input(description: str, tag: Optional[str]) -> str:
    tag_text = escape(tag) if tag else "[dim]no tag, press TAB[/dim]"
    return "\n".join([
        "[bold]New session[/bold]",
        f"Description  {escape(description)}[blink]_[/blink]",
        f"Tag          {tag_text}",
    ])


def render_tag_dropdown(tags: Sequence[str], highlighted: int) -> str:
    if not tags:
        return "[bold]Select tag[/bold]\n[dim]no tags yet, press N to add one[/dim]"
    lines = ["[bold]Select tag[/bold]"]
    for index, tag in enumerate(tags):
        if index == highlighted:
            lines.append(f"[reverse]> {escape(tag)}[/reverse]")
        else:
            lines.append(f"  {escape(tag)}")
    return "\n".join(lines)


def render_tag_input(tag_text: str) -> str:
    return f"[bold]New tag[/bold]\n{escape(tag_text)}[blink]_[/blink]"


def render_controls(controls: List[Control]) -> str:
    return "  ".join(escape(control.label) for control in controls)
