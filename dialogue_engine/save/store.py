"""
Checkpoint store contract consumed by the dialogue manager and sessions.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from dialogue_engine.save.progress import DialogueProgress


@runtime_checkable
class CheckpointStore(Protocol):
    """
    Persistence boundary for story checkpoints and dialogue progress.

    Global checkpoints are shared by every speaker in a scene; local
    checkpoints belong to one speaker. Checkpoints are never unset.
    """

    def has_global_checkpoint(self, scene_id: str, checkpoint_id: str) -> bool: ...

    def set_global_checkpoint(self, scene_id: str, checkpoint_id: str) -> None:
        """Set a scene checkpoint. Empty ids are ignored."""
        ...

    def has_local_checkpoint(self, scene_id: str, speaker_id: str, checkpoint_id: str) -> bool: ...

    def set_local_checkpoint(self, scene_id: str, speaker_id: str, checkpoint_id: str) -> None:
        """Set a speaker checkpoint. Empty ids are ignored."""
        ...

    def get_dialogue_progress(self, scene_id: str, speaker_id: str, dialogue_id: str) -> DialogueProgress:
        """Stored progress, or a fresh zero-value record. Never fails."""
        ...

    def save_dialogue_progress(self, progress: DialogueProgress) -> None:
        """Insert or replace progress by its identity key."""
        ...
