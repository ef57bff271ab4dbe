#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Tests for the TUI formatting helpers.

These run without a Textual app; every helper returns plain text or Rich
markup.
"""

from datetime import datetime

import pytest

from worktrack.models import Session, SessionField
from worktrack.tui.formatting import (
    format_field_value,
    render_controls,
    render_description_input,
    render_edit_form,
    render_tag_dropdown,
    row_for_index,
    session_row,
)


@pytest.fixture
def ended():
    return Session(
        "write docs", "work",
        datetime(2024, 3, 15, 9, 0, 0),
        datetime(2024, 3, 15, 10, 15, 30),
    )


class TestSessionRow:
    def test_ended_session(self, ended):
        assert session_row(ended) == (
            "15 Mar 24", "write docs", "work", "09:00:00", "10:15:30", "01:15:30",
        )

    def test_running_session_shows_elapsed(self):
        running = Session("debug", "work", datetime(2024, 3, 15, 9, 0, 0))
        row = session_row(running, now=datetime(2024, 3, 15, 9, 2, 5))
        assert "running" in row[4]
        assert row[5] == "00:02:05"

    def test_markup_in_text_is_escaped(self):
        session = Session(
            "[bold]x", "work",
            datetime(2024, 3, 15, 9, 0, 0),
            datetime(2024, 3, 15, 9, 1, 0),
        )
        assert session_row(session)[1] == "\\[bold]x"

    def test_newest_session_is_top_row(self):
        assert row_for_index(3, 2) == 0
        assert row_for_index(3, 0) == 2


class TestFieldValues:
    def test_date_segment_highlight(self):
        value = datetime(2024, 3, 15, 9, 0, 0)
        assert format_field_value(SessionField.DATE, value, segment=1) == "15 [reverse]Mar[/reverse] 24"

    def test_time_segment_highlight(self):
        value = datetime(2024, 3, 15, 9, 5, 7)
        assert format_field_value(SessionField.START, value, segment=2) == "09:05:[reverse]07[/reverse]"

    def test_missing_end(self):
        assert "running" in format_field_value(SessionField.END, None)


class TestPanels:
    def test_edit_form_marks_cursor(self, ended):
        from worktrack.editor import SessionEditor

        editor = SessionEditor()
        assert render_edit_form(editor) == ""

        editor.begin(ended)
        editor.cycle_forward()
        lines = render_edit_form(editor).splitlines()
        assert lines[0] == "[bold]Edit session[/bold]"
        assert lines[2].startswith("[bold]> Description")
        assert lines[1].startswith("  Date")

    def test_edit_form_shows_pending_value(self, ended):
        from worktrack.editor import SessionEditor

        editor = SessionEditor()
        editor.begin(ended)
        editor.cycle_forward()
        editor.begin_field_edit()
        editor.handle_key("!")
        assert "write docs!" in render_edit_form(editor)

    def test_description_input_without_tag(self):
        text = render_description_input("fix", None)
        assert "fix" in text
        assert "no tag" in text

    def test_tag_dropdown_highlight(self):
        lines = render_tag_dropdown(["work", "admin"], 1).splitlines()
        assert lines[1] == "  work"
        assert lines[2] == "[reverse]> admin[/reverse]"

    def test_empty_tag_dropdown(self):
        assert "no tags yet" in render_tag_dropdown([], 0)

    def test_controls_escape_brackets(self):
        from worktrack.keys import IDLE_CONTROLS

        text = render_controls(IDLE_CONTROLS)
        assert "\\[n] new" in text
        assert "[SPACE] end" in text
