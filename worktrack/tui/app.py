#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Main TUI application for worktrack.

The session table is the only focusable widget. It forwards every key to
the command state machine, and the app redraws the table, the input panel,
the confirmation popup and the control panel from the machine's state
after each key.
"""

from datetime import datetime
from typing import Callable, Optional

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import DataTable, Header, Static

from worktrack.keys import KEY_FORCE_QUIT
from worktrack.manager import TrackerManager
from worktrack.states import (
    DescriptionInput,
    Edit,
    EditBrowse,
    Modify,
    New,
    TagInputState,
)
from worktrack.tui.formatting import (
    SESSION_COLUMNS,
    render_controls,
    render_description_input,
    render_edit_form,
    render_tag_dropdown,
    render_tag_input,
    row_for_index,
    session_row,
)


class SessionTable(DataTable):
    """Session list that hands raw keys to the app instead of handling them."""

    class KeyPressed(Message):
        """A key the state machine should see."""

        def __init__(self, key: str) -> None:
            super().__init__()
            self.key = key

    def on_key(self, event: events.Key) -> None:
        # Keep DataTable and app bindings from acting on the key
        event.prevent_default()
        event.stop()
        key = event.character if event.is_printable and event.character else event.key
        self.post_message(self.KeyPressed(key))


class WorktrackApp(App):
    """
    Keyboard-driven work-session tracker.

    Sessions are listed newest first. All behaviour lives in the command
    state machine owned by the TrackerManager; the app only renders it.
    """

    TITLE = "worktrack"
    CSS_PATH = "styles/app.tcss"

    # Replaces App's quit keys so quitting goes through the confirmation
    BINDINGS = [
        Binding("ctrl+q", "request_quit", "Quit", priority=True, show=False),
        Binding("ctrl+c", "request_quit", "Quit", priority=True, show=False),
    ]

    def __init__(
        self,
        manager: TrackerManager,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Initialize the app.

        Args:
            manager: Loaded tracker components
            clock: Source of "now" for elapsed-time display (optional)
        """
        super().__init__()
        self.manager = manager
        self.machine = manager.machine
        self._clock = clock or datetime.now
        self._refresh_timer = None

    def compose(self) -> ComposeResult:
        """Compose the app layout."""
        yield Header()
        yield SessionTable(id="session-list")
        yield Static("", id="input-panel")
        yield Static("", id="confirm-popup")
        yield Static("", id="control-panel")

    def on_mount(self) -> None:
        table = self.query_one("#session-list", SessionTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        for column in SESSION_COLUMNS:
            table.add_column(column, key=column.lower())
        table.focus()

        self._refresh_view()
        self._refresh_timer = self.set_interval(1.0, self._refresh_running_row)

    def on_session_table_key_pressed(self, message: SessionTable.KeyPressed) -> None:
        self._handle_key(message.key)

    def action_request_quit(self) -> None:
        self._handle_key(KEY_FORCE_QUIT)

    def _handle_key(self, key: str) -> None:
        self.machine.handle(key)

        if self.machine.last_error:
            self.notify(f"Error: {self.machine.last_error}", severity="error")
        if not self.machine.running:
            self.exit()
            return
        self._refresh_view()

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _refresh_view(self) -> None:
        self.sub_title = str(self.machine.state)
        self._refresh_table()
        self._refresh_input_panel()
        self._refresh_confirm_popup()
        self.query_one("#control-panel", Static).update(
            render_controls(self.machine.controls())
        )

    def _refresh_table(self) -> None:
        table = self.query_one("#session-list", SessionTable)
        sessions = self.manager.sessions
        now = self._clock()

        table.clear()
        for index in reversed(range(len(sessions))):
            table.add_row(*session_row(sessions[index], now), key=str(index))

        state = self.machine.state
        browsing = isinstance(state, Modify) and len(sessions) > 0
        table.show_cursor = browsing
        if browsing:
            selected = self.machine.buffers.selected_session
            table.move_cursor(row=row_for_index(len(sessions), selected))

    def _refresh_input_panel(self) -> None:
        panel = self.query_one("#input-panel", Static)
        state = self.machine.state
        buffers = self.machine.buffers
        tags = self.manager.tags
        content = ""

        if isinstance(state, New):
            if isinstance(state.input, DescriptionInput):
                content = render_description_input(buffers.description, tags.selected_tag())
            elif state.input.mode == TagInputState.NEW:
                content = render_tag_input(buffers.tag_text)
            else:
                content = render_tag_dropdown(tags.tags, buffers.temp_tag_index)
        elif isinstance(state, Modify) and isinstance(state.action, Edit):
            if not isinstance(state.action.stage, EditBrowse):
                content = render_edit_form(self.machine.editor)

        panel.update(content)
        panel.display = bool(content)

    def _refresh_confirm_popup(self) -> None:
        popup = self.query_one("#confirm-popup", Static)
        title = self.machine.confirm_title()
        if title is None:
            popup.display = False
            return
        popup.update(f"[bold]{title}[/bold]\n\\[y] yes   \\[n] no")
        popup.display = True

    def _refresh_running_row(self) -> None:
        """Tick the elapsed time of the running session."""
        sessions = self.manager.sessions
        if not sessions.has_running_session():
            return
        index = len(sessions) - 1
        table = self.query_one("#session-list", SessionTable)
        cells = session_row(sessions[index], self._clock())
        table.update_cell(str(index), "duration", cells[-1])
