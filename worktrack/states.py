#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Command state for the tracker UI.

Every UI mode is one immutable value of the ``CommandState`` union. The
variants nest the same way the modes do:

- Idle: browsing the session list
- New(DescriptionInput | TagInput): composing a new session
- Modify(Edit(EditBrowse | EditFields | EditConfirm) | Continue | Delete):
  acting on an existing session
- End: confirming the end of the running session
- Quitting: confirming exit

A transition always builds a new value; states are never mutated. Text
being typed and transient indices live in ``InputBuffers``.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class ConfirmOpen(str, Enum):
    """Whether a yes/no confirmation is showing."""

    YES = "yes"
    NO = "no"


class TagInputState(str, Enum):
    SELECT = "select"
    NEW = "new"


class FieldEditState(str, Enum):
    BROWSE = "browse"
    EDITING = "editing"


@dataclass(frozen=True)
class Idle:
    def __str__(self) -> str:
        return "List"


@dataclass(frozen=True)
class DescriptionInput:
    """Typing the description. ``confirm`` is YES while asking to end the running session."""

    confirm: ConfirmOpen = ConfirmOpen.NO

    def __str__(self) -> str:
        return "Description"


@dataclass(frozen=True)
class TagInput:
    mode: TagInputState = TagInputState.SELECT

    def __str__(self) -> str:
        return f"Tag: {self.mode.value.title()}"


SessionInputState = Union[DescriptionInput, TagInput]


@dataclass(frozen=True)
class New:
    input: SessionInputState = field(default_factory=DescriptionInput)

    def __str__(self) -> str:
        return f"Input: {self.input}"


@dataclass(frozen=True)
class EditBrowse:
    """Choosing which session to edit."""

    def __str__(self) -> str:
        return "Browse"


@dataclass(frozen=True)
class EditFields:
    """Moving between (BROWSE) or changing (EDITING) fields of the edit buffer."""

    mode: FieldEditState = FieldEditState.BROWSE

    def __str__(self) -> str:
        return f"Fields: {self.mode.value.title()}"


@dataclass(frozen=True)
class EditConfirm:
    """Asking whether to keep pending changes."""

    def __str__(self) -> str:
        return "Confirm"


SessionEditState = Union[EditBrowse, EditFields, EditConfirm]


@dataclass(frozen=True)
class Edit:
    stage: SessionEditState = field(default_factory=EditBrowse)

    def __str__(self) -> str:
        return f"Edit: {self.stage}"


@dataclass(frozen=True)
class Continue:
    confirm: ConfirmOpen = ConfirmOpen.NO

    def __str__(self) -> str:
        return "Continue"


@dataclass(frozen=True)
class Delete:
    confirm: ConfirmOpen = ConfirmOpen.NO

    def __str__(self) -> str:
        return "Delete"


SessionModifyState = Union[Edit, Continue, Delete]


@dataclass(frozen=True)
class Modify:
    action: SessionModifyState

    def __str__(self) -> str:
        return f"Modify: {self.action}"


@dataclass(frozen=True)
class End:
    def __str__(self) -> str:
        return "End"


@dataclass(frozen=True)
class Quitting:
    def __str__(self) -> str:
        return "Quitting"


CommandState = Union[Idle, New, Modify, End, Quitting]


@dataclass(frozen=True)
class InputBuffers:
    """Transient input owned by the state machine.

    - description: text of the session being composed
    - tag_text: text of the tag being created
    - temp_tag_index: highlighted entry of the tag dropdown
    - selected_session: index into the session log while browsing
    """

    description: str = ""
    tag_text: str = ""
    temp_tag_index: int = 0
    selected_session: int = 0
