#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Key names understood by the command state machine.

Keys arrive as Textual key names ("enter", "up", ...), except printable
keys, which arrive as the character itself ("n", " ", "Ä").
"""

from dataclasses import dataclass
from typing import List

KEY_NEW = "n"
KEY_EDIT = "e"
KEY_COPY = "c"
KEY_DELETE = "d"
KEY_END = " "
KEY_QUIT = "q"
# Reaches the quit confirmation from any state, including text input
KEY_FORCE_QUIT = "ctrl+q"
KEY_YES = "y"
KEY_NO = "n"
KEY_ENTER = "enter"
KEY_TAB = "tab"
KEY_ESCAPE = "escape"
KEY_UP = "up"
KEY_DOWN = "down"
KEY_LEFT = "left"
KEY_RIGHT = "right"
KEY_BACKSPACE = "backspace"


def is_printable(key: str) -> bool:
    """True for keys that insert text (a single printable character)."""
    return len(key) == 1 and key.isprintable()


def key_label(key: str) -> str:
    """Short label for a key in the control panel."""
    if key == " ":
        return "SPACE"
    if key == KEY_ESCAPE:
        return "ESC"
    if key in (KEY_UP, KEY_DOWN, KEY_LEFT, KEY_RIGHT):
        return {"up": "↑", "down": "↓", "left": "←", "right": "→"}[key]
    return key.upper() if len(key) > 1 else key


@dataclass(frozen=True)
class Control:
    """A key and what it does, shown in the control panel."""
    key: str
    description: str

    @property
    def label(self) -> str:
        return f"[{key_label(self.key)}] {self.description}"


IDLE_CONTROLS: List[Control] = [
    Control(KEY_NEW, "new"),
    Control(KEY_EDIT, "edit"),
    Control(KEY_DELETE, "delete"),
    Control(KEY_COPY, "copy"),
    Control(KEY_END, "end"),
    Control(KEY_QUIT, "quit"),
]

CONFIRM_CONTROLS: List[Control] = [
    Control(KEY_YES, "yes"),
    Control(KEY_NO, "no"),
    Control(KEY_ESCAPE, "cancel"),
]

BROWSE_CONTROLS: List[Control] = [
    Control(KEY_UP, "newer"),
    Control(KEY_DOWN, "older"),
    Control(KEY_ENTER, "select"),
    Control(KEY_ESCAPE, "back"),
]

DESCRIPTION_CONTROLS: List[Control] = [
    Control(KEY_ENTER, "start"),
    Control(KEY_TAB, "tag"),
    Control(KEY_ESCAPE, "back"),
]

TAG_SELECT_CONTROLS: List[Control] = [
    Control(KEY_UP, "previous"),
    Control(KEY_DOWN, "next"),
    Control(KEY_ENTER, "choose"),
    Control(KEY_NEW, "new tag"),
    Control(KEY_ESCAPE, "back"),
]

TAG_NEW_CONTROLS: List[Control] = [
    Control(KEY_ENTER, "add"),
    Control(KEY_ESCAPE, "back"),
]

FIELD_BROWSE_CONTROLS: List[Control] = [
    Control(KEY_LEFT, "previous field"),
    Control(KEY_RIGHT, "next field"),
    Control(KEY_ENTER, "edit field"),
    Control(KEY_ESCAPE, "done"),
]

FIELD_EDIT_CONTROLS: List[Control] = [
    Control(KEY_LEFT, "segment"),
    Control(KEY_RIGHT, "segment"),
    Control(KEY_UP, "increase"),
    Control(KEY_DOWN, "decrease"),
    Control(KEY_ENTER, "apply"),
    Control(KEY_ESCAPE, "cancel"),
]
