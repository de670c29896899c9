"""
In-memory checkpoint store for tests, prototypes and as the state holder of
the JSON file store.
"""

from __future__ import annotations

from typing import Any

from dialogue_engine.save.progress import DialogueProgress

SNAPSHOT_VERSION = "1.0"


class InMemoryCheckpointStore:
    """
    Checkpoint store backed by sets and a dict.

    Progress records are copied on the way in and out, so a caller mutating
    a record it fetched does not change the store until it saves it.
    """

    def __init__(self):
        self._global: set[tuple[str, str]] = set()
        self._local: set[tuple[str, str, str]] = set()
        self._progress: dict[tuple[str, str, str], DialogueProgress] = {}

    # Global checkpoints

    def has_global_checkpoint(self, scene_id: str, checkpoint_id: str) -> bool:
        return (scene_id, checkpoint_id) in self._global

    def set_global_checkpoint(self, scene_id: str, checkpoint_id: str) -> None:
        if not checkpoint_id:
            return
        self._global.add((scene_id, checkpoint_id))

    # Local checkpoints

    def has_local_checkpoint(self, scene_id: str, speaker_id: str, checkpoint_id: str) -> bool:
        return (scene_id, speaker_id, checkpoint_id) in self._local

    def set_local_checkpoint(self, scene_id: str, speaker_id: str, checkpoint_id: str) -> None:
        if not checkpoint_id:
            return
        self._local.add((scene_id, speaker_id, checkpoint_id))

    # Dialogue progress

    def get_dialogue_progress(self, scene_id: str, speaker_id: str, dialogue_id: str) -> DialogueProgress:
        stored = self._progress.get((scene_id, speaker_id, dialogue_id))
        if stored is not None:
            return stored.clone()

        return DialogueProgress(
            scene_id=scene_id,
            speaker_id=speaker_id,
            dialogue_id=dialogue_id,
        )

    def save_dialogue_progress(self, progress: DialogueProgress) -> None:
        self._progress[progress.key] = progress.clone()

    # Snapshots

    def clear(self) -> None:
        """Forget every checkpoint and progress record."""
        self._global.clear()
        self._local.clear()
        self._progress.clear()

    def to_dict(self) -> dict[str, Any]:
        """Serialize the store to a JSON-compatible dictionary."""
        return {
            'version': SNAPSHOT_VERSION,
            'global': [list(key) for key in sorted(self._global)],
            'local': [list(key) for key in sorted(self._local)],
            'progress': [
                self._progress[key].model_dump()
                for key in sorted(self._progress)
            ],
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        """Replace the store contents with a snapshot from ``to_dict``."""
        self._global = {
            (scene_id, checkpoint_id)
            for scene_id, checkpoint_id in data.get('global', [])
            if checkpoint_id
        }
        self._local = {
            (scene_id, speaker_id, checkpoint_id)
            for scene_id, speaker_id, checkpoint_id in data.get('local', [])
            if checkpoint_id
        }
        self._progress = {}
        for record in data.get('progress', []):
            progress = DialogueProgress(**record)
            self._progress[progress.key] = progress
