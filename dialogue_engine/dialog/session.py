"""
Dialogue session - plays one dialogue's lines in order.

A session is a cursor over a record's lines. Each line that becomes current
applies its checkpoint side effects and records resume progress in the
checkpoint store; reaching the end marks the dialogue completed.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Callable, Optional

from dialogue_engine.core.errors import InvalidSessionStateError
from dialogue_engine.core.events import DialogueEvent, Event, EventBus, EventHandler
from dialogue_engine.dialog.models import DialogueLine, DialogueRecord
from dialogue_engine.save.store import CheckpointStore

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of a dialogue session."""
    NOT_STARTED = auto()
    ACTIVE = auto()
    COMPLETED = auto()


class DialogueSession:
    """
    Active playback of one dialogue.

    Notifications are published on ``events``:
    - DIALOGUE_STARTED once, from ``start()``
    - LINE_CHANGED once per line that becomes current, including the first
    - DIALOGUE_ENDED once, when the last line is left

    Every event carries ``session``; LINE_CHANGED also carries ``line``.

    Usage:
        session = manager.start_next_dialogue("wood", "wizard")
        if session:
            session.on_line_changed(lambda s, line: print(line.get_text("en")))
            session.start()
            while session.advance():
                ...
    """

    def __init__(
        self,
        record: DialogueRecord,
        start_line_index: int,
        scene_id: str,
        speaker_id: str,
        checkpoint_store: CheckpointStore,
        event_bus: Optional[EventBus] = None,
    ):
        if record is None:
            raise ValueError("record is required")
        if checkpoint_store is None:
            raise ValueError("checkpoint_store is required")

        self._record = record
        self._store = checkpoint_store
        self._scene_id = scene_id
        self._speaker_id = speaker_id
        self.events = event_bus if event_bus is not None else EventBus()

        self._started = False
        self._completion_saved = False
        self._subscriptions: list[tuple[DialogueEvent, EventHandler]] = []

        if record.line_count == 0:
            # Nothing to show: terminal from the start.
            self._current_index = -1
            self._completed = True
        else:
            self._current_index = max(0, min(start_line_index, record.line_count - 1))
            self._completed = False

    # Properties

    @property
    def record(self) -> DialogueRecord:
        return self._record

    @property
    def scene_id(self) -> str:
        return self._scene_id

    @property
    def speaker_id(self) -> str:
        return self._speaker_id

    @property
    def current_index(self) -> int:
        """Position of the current line, -1 for an empty dialogue."""
        return self._current_index

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_completed(self) -> bool:
        return self._completed

    @property
    def state(self) -> SessionState:
        if not self._started:
            return SessionState.NOT_STARTED
        if self._completed:
            return SessionState.COMPLETED
        return SessionState.ACTIVE

    @property
    def current_line(self) -> DialogueLine:
        return self.get_current_line()

    # Playback

    def start(self) -> None:
        """
        Begin playback.

        Publishes DIALOGUE_STARTED, then either applies the first line and
        publishes LINE_CHANGED, or, for an empty dialogue, marks it completed
        and publishes DIALOGUE_ENDED. Calling it again does nothing.
        """
        if self._started:
            return
        self._started = True

        logger.debug("Dialogue %s started at line %d", self._record.key, self._current_index)
        self.events.publish(DialogueEvent.DIALOGUE_STARTED, session=self)

        if self._record.line_count == 0:
            self._finish()
            return

        self._enter_current_line()

    def get_current_line(self) -> DialogueLine:
        """
        The active line.

        Raises:
            InvalidSessionStateError: Before ``start()`` or after completion
        """
        if not self._started:
            raise InvalidSessionStateError("Dialogue not started. Call start() first.")

        if self._completed or not 0 <= self._current_index < self._record.line_count:
            raise InvalidSessionStateError("Dialogue has no current line (it is completed or empty).")

        return self._record.lines[self._current_index]

    def advance(self) -> bool:
        """
        Move to the next line.

        Returns:
            True if a new current line exists, False once the dialogue is
            over (DIALOGUE_ENDED is published the first time only)

        Raises:
            InvalidSessionStateError: If called before ``start()``
        """
        if not self._started:
            raise InvalidSessionStateError("Dialogue not started. Call start() first.")

        if self._completed:
            return False

        self._current_index += 1

        if self._current_index >= self._record.line_count:
            self._finish()
            return False

        self._enter_current_line()
        return True

    def _mark_completed(self) -> None:
        """Persist completion of this dialogue, once."""
        self._completed = True

        if self._completion_saved:
            return
        self._completion_saved = True

        progress = self._store.get_dialogue_progress(
            self._scene_id, self._speaker_id, self._record.dialogue_id,
        )
        progress.is_completed = True
        self._store.save_dialogue_progress(progress)

    def _finish(self) -> None:
        self._mark_completed()
        logger.debug("Dialogue %s ended", self._record.key)
        self.events.publish(DialogueEvent.DIALOGUE_ENDED, session=self)

    def _enter_current_line(self) -> None:
        line = self._record.lines[self._current_index]
        self._apply_line_side_effects(line)
        logger.debug("Dialogue %s line %d", self._record.key, line.line_index)
        self.events.publish(DialogueEvent.LINE_CHANGED, session=self, line=line)

    def _apply_line_side_effects(self, line: DialogueLine) -> None:
        """Set the line's checkpoints and record its resume point."""
        if line.global_checkpoint_to_set:
            self._store.set_global_checkpoint(self._scene_id, line.global_checkpoint_to_set)

        if line.local_checkpoint_to_set:
            self._store.set_local_checkpoint(
                self._scene_id, self._speaker_id, line.local_checkpoint_to_set,
            )

        progress = self._store.get_dialogue_progress(
            self._scene_id, self._speaker_id, self._record.dialogue_id,
        )

        if line.resume_checkpoint_id:
            progress.last_resume_checkpoint_id = line.resume_checkpoint_id

        self._store.save_dialogue_progress(progress)

    # Observers

    def on_start(self, callback: Callable[[DialogueSession], None]) -> None:
        """Call ``callback(session)`` when this session starts."""
        self._observe(DialogueEvent.DIALOGUE_STARTED, lambda event: callback(self))

    def on_line_changed(self, callback: Callable[[DialogueSession, DialogueLine], None]) -> None:
        """Call ``callback(session, line)`` for every line that becomes current."""
        self._observe(DialogueEvent.LINE_CHANGED, lambda event: callback(self, event['line']))

    def on_end(self, callback: Callable[[DialogueSession], None]) -> None:
        """Call ``callback(session)`` when this session ends."""
        self._observe(DialogueEvent.DIALOGUE_ENDED, lambda event: callback(self))

    def close(self) -> None:
        """
        Detach every callback registered through the ``on_*`` helpers.

        Happens automatically once DIALOGUE_ENDED has been delivered.
        """
        for event_type, handler in self._subscriptions:
            self.events.unsubscribe(event_type, handler)
        self._subscriptions.clear()

    def _observe(self, event_type: DialogueEvent, handler: EventHandler) -> None:
        if self.state is SessionState.COMPLETED:
            return

        if not self._subscriptions:
            # Lowest priority: runs after this session's own end callbacks.
            self._subscribe_filtered(
                DialogueEvent.DIALOGUE_ENDED, lambda event: self.close(), priority=-1,
            )
        self._subscribe_filtered(event_type, handler)

    def _subscribe_filtered(self, event_type: DialogueEvent, handler: EventHandler, priority: int = 0) -> None:
        def filtered(event: Event) -> None:
            if event.get('session') is self:
                handler(event)

        # Strong reference: the wrapper has no other owner.
        self.events.subscribe(event_type, filtered, priority=priority, weak=False)
        self._subscriptions.append((event_type, filtered))

    def __repr__(self) -> str:
        return (
            f"DialogueSession({self._record.dialogue_id!r}, scene={self._scene_id!r}, "
            f"speaker={self._speaker_id!r}, state={self.state.name}, index={self._current_index})"
        )
