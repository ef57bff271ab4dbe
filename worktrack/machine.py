#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Command state machine.

``transition`` is pure: given the current state, one key, the input
buffers and a read-only snapshot of the domain, it returns the next state,
the next buffers and a list of effects. It never touches the session log,
the tag registry or the editor.

``CommandStateMachine`` owns those components and applies the effects.
Keys that no rule matches leave everything unchanged.
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from worktrack.debug_logger import get_logger
from worktrack.editor import SessionEditor
from worktrack.keys import (
    BROWSE_CONTROLS,
    CONFIRM_CONTROLS,
    DESCRIPTION_CONTROLS,
    FIELD_BROWSE_CONTROLS,
    FIELD_EDIT_CONTROLS,
    IDLE_CONTROLS,
    KEY_BACKSPACE,
    KEY_COPY,
    KEY_DELETE,
    KEY_DOWN,
    KEY_EDIT,
    KEY_END,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_FORCE_QUIT,
    KEY_LEFT,
    KEY_NEW,
    KEY_NO,
    KEY_QUIT,
    KEY_RIGHT,
    KEY_TAB,
    KEY_UP,
    KEY_YES,
    TAG_NEW_CONTROLS,
    TAG_SELECT_CONTROLS,
    Control,
    is_printable,
)
from worktrack.models import StoreError
from worktrack.session_log import SessionLog
from worktrack.states import (
    CommandState,
    ConfirmOpen,
    Continue,
    Delete,
    DescriptionInput,
    Edit,
    EditBrowse,
    EditConfirm,
    EditFields,
    End,
    FieldEditState,
    Idle,
    InputBuffers,
    Modify,
    New,
    Quitting,
    TagInput,
    TagInputState,
)
from worktrack.tags import TagRegistry


# =============================================================================
# Effects
# =============================================================================


@dataclass(frozen=True)
class StartSession:
    description: str


@dataclass(frozen=True)
class EndRunningSession:
    pass


@dataclass(frozen=True)
class SelectTag:
    index: int


@dataclass(frozen=True)
class StoreTag:
    candidate: str


@dataclass(frozen=True)
class BeginEdit:
    index: int


@dataclass(frozen=True)
class CycleField:
    forward: bool


@dataclass(frozen=True)
class BeginFieldEdit:
    pass


@dataclass(frozen=True)
class EditorKey:
    key: str


@dataclass(frozen=True)
class CommitField:
    pass


@dataclass(frozen=True)
class RevertField:
    pass


@dataclass(frozen=True)
class CommitEdit:
    index: int


@dataclass(frozen=True)
class DiscardEdit:
    pass


@dataclass(frozen=True)
class ContinueSession:
    index: int


@dataclass(frozen=True)
class DeleteSession:
    index: int


@dataclass(frozen=True)
class Stop:
    pass


@dataclass(frozen=True)
class DomainSnapshot:
    """What the transition rules may read from the domain."""

    session_count: int = 0
    running: bool = False
    tag_count: int = 0
    selected_tag: Optional[int] = None
    pending_changes: bool = False


@dataclass(frozen=True)
class Transition:
    state: CommandState
    buffers: InputBuffers
    effects: Tuple = field(default_factory=tuple)


# =============================================================================
# Transition rules
# =============================================================================


def transition(
    state: CommandState, key: str, buffers: InputBuffers, snapshot: DomainSnapshot
) -> Transition:
    """Compute the result of pressing ``key`` in ``state``."""
    if key == KEY_FORCE_QUIT and not isinstance(state, Quitting):
        effects = (DiscardEdit(),) if isinstance(state, Modify) else ()
        return Transition(Quitting(), buffers, effects)
    if isinstance(state, Idle):
        return _from_idle(state, key, buffers, snapshot)
    if isinstance(state, New):
        if isinstance(state.input, DescriptionInput):
            return _from_description(state, key, buffers, snapshot)
        return _from_tag_input(state, key, buffers, snapshot)
    if isinstance(state, Modify):
        if isinstance(state.action, Edit):
            return _from_edit(state, key, buffers, snapshot)
        return _from_continue_or_delete(state, key, buffers, snapshot)
    if isinstance(state, End):
        if key == KEY_YES:
            return Transition(Idle(), buffers, (EndRunningSession(),))
        if key in (KEY_NO, KEY_ESCAPE):
            return Transition(Idle(), buffers)
        return Transition(state, buffers)
    if isinstance(state, Quitting):
        if key == KEY_YES:
            effects = (EndRunningSession(), Stop()) if snapshot.running else (Stop(),)
            return Transition(state, buffers, effects)
        if key in (KEY_NO, KEY_ESCAPE):
            return Transition(Idle(), buffers)
        return Transition(state, buffers)
    return Transition(state, buffers)


def _from_idle(state, key, buffers, snapshot) -> Transition:
    if key == KEY_NEW:
        return Transition(New(DescriptionInput()), buffers)

    if key in (KEY_EDIT, KEY_COPY, KEY_DELETE):
        if snapshot.session_count == 0:
            return Transition(state, buffers)
        buffers = replace(buffers, selected_session=snapshot.session_count - 1)
        if key == KEY_EDIT:
            action = Edit(EditBrowse())
        elif key == KEY_COPY:
            action = Continue()
        else:
            action = Delete()
        return Transition(Modify(action), buffers)

    if key == KEY_END and snapshot.running:
        return Transition(End(), buffers)
    if key == KEY_QUIT:
        return Transition(Quitting(), buffers)
    return Transition(state, buffers)


def _startable(description: str, snapshot: DomainSnapshot) -> bool:
    return bool(description.strip()) and snapshot.selected_tag is not None


def _from_description(state, key, buffers, snapshot) -> Transition:
    if state.input.confirm == ConfirmOpen.YES:
        if key == KEY_YES:
            effects = (EndRunningSession(), StartSession(buffers.description))
            return Transition(Idle(), replace(buffers, description=""), effects)
        if key in (KEY_NO, KEY_ESCAPE):
            return Transition(New(DescriptionInput()), buffers)
        return Transition(state, buffers)

    if key == KEY_ENTER:
        # Nothing can be started without text and a tag
        if not _startable(buffers.description, snapshot):
            return Transition(Idle(), buffers)
        if snapshot.running:
            return Transition(New(DescriptionInput(ConfirmOpen.YES)), buffers)
        effects = (StartSession(buffers.description),)
        return Transition(Idle(), replace(buffers, description=""), effects)
    if key == KEY_TAB:
        seed = snapshot.selected_tag if snapshot.selected_tag is not None else 0
        return Transition(New(TagInput()), replace(buffers, temp_tag_index=seed))
    if key == KEY_ESCAPE:
        return Transition(Idle(), buffers)
    if key == KEY_BACKSPACE:
        return Transition(state, replace(buffers, description=buffers.description[:-1]))
    if is_printable(key):
        return Transition(state, replace(buffers, description=buffers.description + key))
    return Transition(state, buffers)


def _from_tag_input(state, key, buffers, snapshot) -> Transition:
    if state.input.mode == TagInputState.NEW:
        if key == KEY_ENTER:
            effects = (StoreTag(buffers.tag_text),)
            return Transition(New(DescriptionInput()), replace(buffers, tag_text=""), effects)
        if key == KEY_ESCAPE:
            return Transition(New(TagInput()), buffers)
        if key == KEY_BACKSPACE:
            return Transition(state, replace(buffers, tag_text=buffers.tag_text[:-1]))
        if is_printable(key):
            return Transition(state, replace(buffers, tag_text=buffers.tag_text + key))
        return Transition(state, buffers)

    if key == KEY_UP:
        index = max(buffers.temp_tag_index - 1, 0)
        return Transition(state, replace(buffers, temp_tag_index=index))
    if key == KEY_DOWN:
        index = min(buffers.temp_tag_index + 1, max(snapshot.tag_count - 1, 0))
        return Transition(state, replace(buffers, temp_tag_index=index))
    if key == KEY_ENTER:
        if snapshot.tag_count == 0:
            return Transition(New(DescriptionInput()), buffers)
        effects = (SelectTag(buffers.temp_tag_index),)
        return Transition(New(DescriptionInput()), buffers, effects)
    if key == KEY_NEW:
        return Transition(New(TagInput(TagInputState.NEW)), buffers)
    if key == KEY_ESCAPE:
        return Transition(New(DescriptionInput()), buffers)
    return Transition(state, buffers)


def _browse(key: str, buffers: InputBuffers, snapshot: DomainSnapshot) -> Optional[InputBuffers]:
    """Move the session selection. Up is towards newer sessions (higher index)."""
    if key == KEY_UP:
        index = min(buffers.selected_session + 1, max(snapshot.session_count - 1, 0))
    elif key == KEY_DOWN:
        index = max(buffers.selected_session - 1, 0)
    else:
        return None
    return replace(buffers, selected_session=index)


def _from_edit(state, key, buffers, snapshot) -> Transition:
    stage = state.action.stage

    if isinstance(stage, EditBrowse):
        moved = _browse(key, buffers, snapshot)
        if moved is not None:
            return Transition(state, moved)
        if key == KEY_ENTER:
            effects = (BeginEdit(buffers.selected_session),)
            return Transition(Modify(Edit(EditFields())), buffers, effects)
        if key == KEY_ESCAPE:
            return Transition(Idle(), buffers)
        return Transition(state, buffers)

    if isinstance(stage, EditFields) and stage.mode == FieldEditState.BROWSE:
        if key in (KEY_LEFT, KEY_RIGHT):
            return Transition(state, buffers, (CycleField(forward=key == KEY_RIGHT),))
        if key == KEY_ENTER:
            effects = (BeginFieldEdit(),)
            return Transition(Modify(Edit(EditFields(FieldEditState.EDITING))), buffers, effects)
        if key == KEY_ESCAPE:
            if snapshot.pending_changes:
                return Transition(Modify(Edit(EditConfirm())), buffers)
            return Transition(Modify(Edit(EditBrowse())), buffers, (DiscardEdit(),))
        return Transition(state, buffers)

    if isinstance(stage, EditFields):
        browse_fields = Modify(Edit(EditFields()))
        if key == KEY_ENTER:
            return Transition(browse_fields, buffers, (CommitField(),))
        if key == KEY_ESCAPE:
            return Transition(browse_fields, buffers, (RevertField(),))
        return Transition(state, buffers, (EditorKey(key),))

    # EditConfirm
    if key == KEY_YES:
        effects = (CommitEdit(buffers.selected_session), DiscardEdit())
        return Transition(Idle(), buffers, effects)
    if key == KEY_NO:
        return Transition(Idle(), buffers, (DiscardEdit(),))
    if key == KEY_ESCAPE:
        return Transition(Modify(Edit(EditFields())), buffers)
    return Transition(state, buffers)


def _from_continue_or_delete(state, key, buffers, snapshot) -> Transition:
    action = state.action
    if action.confirm == ConfirmOpen.NO:
        moved = _browse(key, buffers, snapshot)
        if moved is not None:
            return Transition(state, moved)
        if key == KEY_ENTER:
            return Transition(Modify(replace(action, confirm=ConfirmOpen.YES)), buffers)
        if key == KEY_ESCAPE:
            return Transition(Idle(), buffers)
        return Transition(state, buffers)

    if key == KEY_YES:
        index = buffers.selected_session
        effect = ContinueSession(index) if isinstance(action, Continue) else DeleteSession(index)
        return Transition(Idle(), buffers, (effect,))
    if key in (KEY_NO, KEY_ESCAPE):
        return Transition(Idle(), buffers)
    return Transition(state, buffers)


# =============================================================================
# Presentation helpers
# =============================================================================


def confirm_title(state: CommandState) -> Optional[str]:
    """Title of the yes/no popup for ``state``, or None if no popup is open."""
    if isinstance(state, New) and isinstance(state.input, DescriptionInput):
        if state.input.confirm == ConfirmOpen.YES:
            return "END RUNNING SESSION?"
    elif isinstance(state, Modify):
        action = state.action
        if isinstance(action, Edit) and isinstance(action.stage, EditConfirm):
            return "ACCEPT CHANGES?"
        if isinstance(action, Continue) and action.confirm == ConfirmOpen.YES:
            return "COPY AND START SESSION?"
        if isinstance(action, Delete) and action.confirm == ConfirmOpen.YES:
            return "CONFIRM DELETE"
    elif isinstance(state, End):
        return "END SESSION?"
    elif isinstance(state, Quitting):
        return "REALLY QUIT?"
    return None


def controls_for(state: CommandState) -> List[Control]:
    """Keys the control panel offers in ``state``."""
    if confirm_title(state) is not None:
        return CONFIRM_CONTROLS
    if isinstance(state, New):
        if isinstance(state.input, DescriptionInput):
            return DESCRIPTION_CONTROLS
        if state.input.mode == TagInputState.NEW:
            return TAG_NEW_CONTROLS
        return TAG_SELECT_CONTROLS
    if isinstance(state, Modify):
        stage = getattr(state.action, "stage", None)
        if isinstance(stage, EditFields):
            if stage.mode == FieldEditState.EDITING:
                return FIELD_EDIT_CONTROLS
            return FIELD_BROWSE_CONTROLS
        return BROWSE_CONTROLS
    return IDLE_CONTROLS


# =============================================================================
# Executor
# =============================================================================


class CommandStateMachine:
    """Runs ``transition`` and applies its effects to the domain components."""

    def __init__(
        self,
        sessions: SessionLog,
        tags: TagRegistry,
        editor: Optional[SessionEditor] = None,
    ):
        self.sessions = sessions
        self.tags = tags
        self.editor = editor or SessionEditor(sessions.value_separator)
        self.state: CommandState = Idle()
        self.buffers = InputBuffers()
        self.running = True
        self.last_error: Optional[str] = None

    def snapshot(self) -> DomainSnapshot:
        return DomainSnapshot(
            session_count=len(self.sessions),
            running=self.sessions.has_running_session(),
            tag_count=len(self.tags),
            selected_tag=self.tags.selected(),
            pending_changes=self.editor.pending_changes(),
        )

    def controls(self) -> List[Control]:
        return controls_for(self.state)

    def confirm_title(self) -> Optional[str]:
        return confirm_title(self.state)

    def handle(self, key: str) -> CommandState:
        """Process one key.

        A StoreError raised by an effect leaves state and buffers where they
        were and is reported through ``last_error``; the domain components
        roll back their own partial changes.

        Returns:
            The state after the key.
        """
        result = transition(self.state, key, self.buffers, self.snapshot())
        self.last_error = None

        effect = None
        try:
            for effect in result.effects:
                self._apply(effect)
        except StoreError as e:
            path = str(e.path) if e.path is not None else None
            get_logger().store_error(type(effect).__name__, str(e), path)
            self.last_error = str(e)
            return self.state

        if result.state != self.state:
            get_logger().state_transition(key, str(self.state), str(result.state))
        self.state = result.state
        self.buffers = result.buffers
        return self.state

    def _apply(self, effect) -> None:
        if isinstance(effect, StartSession):
            self.sessions.start_session(effect.description, self.tags.selected_tag())
        elif isinstance(effect, EndRunningSession):
            self.sessions.end_running_session()
        elif isinstance(effect, SelectTag):
            self.tags.select(effect.index)
        elif isinstance(effect, StoreTag):
            self.tags.store_tag(effect.candidate)
        elif isinstance(effect, BeginEdit):
            self.editor.begin(self.sessions[effect.index], self.tags)
        elif isinstance(effect, CycleField):
            if effect.forward:
                self.editor.cycle_forward(self.tags)
            else:
                self.editor.cycle_backward(self.tags)
        elif isinstance(effect, BeginFieldEdit):
            self.editor.begin_field_edit()
        elif isinstance(effect, EditorKey):
            self.editor.handle_key(effect.key, self.tags)
        elif isinstance(effect, CommitField):
            self.editor.commit_field()
        elif isinstance(effect, RevertField):
            self.editor.revert_field(self.tags)
        elif isinstance(effect, CommitEdit):
            self.editor.commit(self.sessions, effect.index)
        elif isinstance(effect, DiscardEdit):
            self.editor.discard()
        elif isinstance(effect, ContinueSession):
            self._continue_session(effect.index)
        elif isinstance(effect, DeleteSession):
            self.sessions.delete(effect.index)
        elif isinstance(effect, Stop):
            self.running = False

    def _continue_session(self, index: int) -> None:
        """Start a copy of session ``index``, ending whatever is running first."""
        if not 0 <= index < len(self.sessions):
            return
        source = self.sessions[index]
        if source.is_running:
            return

        tag_index = self.tags.index_of(source.tag)
        if self.sessions.has_running_session():
            self.sessions.end_running_session()
        self.tags.select(tag_index)
        self.sessions.start_session(source.description, source.tag)
