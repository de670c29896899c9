"""
Dialogue manager - picks which dialogue a speaker has to say and creates
a session positioned at its resume point.
"""

from __future__ import annotations

import logging
from typing import Optional

from dialogue_engine.core.events import EventBus
from dialogue_engine.dialog.collection import DialogueCollection
from dialogue_engine.dialog.models import DialogueRecord
from dialogue_engine.dialog.session import DialogueSession
from dialogue_engine.save.store import CheckpointStore

logger = logging.getLogger(__name__)


class DialogueManager:
    """
    Selects dialogues by checkpoint requirements and saved progress.

    Handles:
    - Availability checks against global and local checkpoints
    - Skipping completed dialogues
    - Resuming from the last reached resume checkpoint

    Usage:
        manager = DialogueManager(collection, store)
        session = manager.start_next_dialogue("wood", "wizard")
        if session:
            session.start()
    """

    def __init__(
        self,
        collection: DialogueCollection,
        checkpoint_store: CheckpointStore,
        event_bus: Optional[EventBus] = None,
    ):
        if collection is None:
            raise ValueError("collection is required")
        if checkpoint_store is None:
            raise ValueError("checkpoint_store is required")

        self.collection = collection
        self.checkpoint_store = checkpoint_store
        # Shared with every session when set, so one subscriber sees them all.
        self.event_bus = event_bus

    def start_next_dialogue(self, scene_id: str, speaker_id: str) -> Optional[DialogueSession]:
        """
        Create a session for the first available, unfinished dialogue.

        Candidates are tried in ascending ``order``. Returns None when the
        speaker has nothing to say. The session is not started: subscribe to
        its events, then call ``start()``.
        """
        for record in self.collection.get_dialogues(scene_id, speaker_id):
            if not self.is_dialogue_available(record, scene_id, speaker_id):
                continue

            progress = self.checkpoint_store.get_dialogue_progress(
                scene_id, speaker_id, record.dialogue_id,
            )
            if progress.is_completed:
                continue

            return self._create_session(record, scene_id, speaker_id, progress.last_resume_checkpoint_id)

        logger.debug("No dialogue available for %s/%s", scene_id, speaker_id)
        return None

    def start_dialogue_by_id(self, scene_id: str, speaker_id: str, dialogue_id: str) -> Optional[DialogueSession]:
        """
        Create a session for a specific dialogue (e.g. from a script).

        Returns None if the id is unknown or its requirements are not met.
        Unlike ``start_next_dialogue`` a completed dialogue is not skipped,
        so it can be replayed on purpose.
        """
        record = self.collection.get_dialogue(scene_id, speaker_id, dialogue_id)
        if record is None:
            logger.debug("Dialogue %s not found for %s/%s", dialogue_id, scene_id, speaker_id)
            return None

        if not self.is_dialogue_available(record, scene_id, speaker_id):
            return None

        progress = self.checkpoint_store.get_dialogue_progress(scene_id, speaker_id, dialogue_id)
        return self._create_session(record, scene_id, speaker_id, progress.last_resume_checkpoint_id)

    def has_pending_dialogue(self, scene_id: str, speaker_id: str) -> bool:
        """Whether ``start_next_dialogue`` would return a session."""
        for record in self.collection.get_dialogues(scene_id, speaker_id):
            if not self.is_dialogue_available(record, scene_id, speaker_id):
                continue
            progress = self.checkpoint_store.get_dialogue_progress(
                scene_id, speaker_id, record.dialogue_id,
            )
            if not progress.is_completed:
                return True
        return False

    def is_dialogue_available(self, record: DialogueRecord, scene_id: str, speaker_id: str) -> bool:
        """Check the record's checkpoint requirements."""
        store = self.checkpoint_store

        if record.required_global_checkpoint:
            if not store.has_global_checkpoint(scene_id, record.required_global_checkpoint):
                logger.debug(
                    "Dialogue %s needs global checkpoint %s",
                    record.dialogue_id, record.required_global_checkpoint,
                )
                return False

        if record.required_local_checkpoint:
            if not store.has_local_checkpoint(scene_id, speaker_id, record.required_local_checkpoint):
                logger.debug(
                    "Dialogue %s needs local checkpoint %s",
                    record.dialogue_id, record.required_local_checkpoint,
                )
                return False

        # Story and idle dialogues are selected the same way.
        return True

    def _create_session(
        self,
        record: DialogueRecord,
        scene_id: str,
        speaker_id: str,
        resume_checkpoint_id: str,
    ) -> DialogueSession:
        start_index = record.find_resume_index(resume_checkpoint_id)
        if start_index is None:
            start_index = 0

        logger.debug("Selected dialogue %s for %s/%s at line %d",
                     record.dialogue_id, scene_id, speaker_id, start_index)

        return DialogueSession(
            record,
            start_index,
            scene_id,
            speaker_id,
            self.checkpoint_store,
            event_bus=self.event_bus,
        )
