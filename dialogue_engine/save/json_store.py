"""
JSON save-file checkpoint store.

Provides:
- Persistence of checkpoints and dialogue progress to one JSON file
- Schema validation of the file on load
- Save integrity validation (checksum)
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import jsonschema

from dialogue_engine.core.errors import CheckpointStoreError
from dialogue_engine.save.memory import InMemoryCheckpointStore
from dialogue_engine.save.progress import DialogueProgress

logger = logging.getLogger(__name__)

SAVE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["version", "global", "local", "progress"],
    "properties": {
        "version": {"type": "string"},
        "checksum": {"type": "string"},
        "global": {
            "type": "array",
            "items": {
                "type": "array",
                "items": {"type": "string"},
                "minItems": 2,
                "maxItems": 2,
            },
        },
        "local": {
            "type": "array",
            "items": {
                "type": "array",
                "items": {"type": "string"},
                "minItems": 3,
                "maxItems": 3,
            },
        },
        "progress": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["scene_id", "speaker_id", "dialogue_id"],
                "properties": {
                    "scene_id": {"type": "string"},
                    "speaker_id": {"type": "string"},
                    "dialogue_id": {"type": "string"},
                    "last_resume_checkpoint_id": {"type": "string"},
                    "is_completed": {"type": "boolean"},
                },
                "additionalProperties": False,
            },
        },
    },
}


class JsonCheckpointStore(InMemoryCheckpointStore):
    """
    Checkpoint store persisted to a JSON file.

    State lives in memory; with ``autosave`` every mutation rewrites the file,
    otherwise the owner calls ``save()`` at its own save points.

    Usage:
        store = JsonCheckpointStore("saves/checkpoints.json")
        manager = DialogueManager(collection, store)
    """

    def __init__(self, path: str | Path, autosave: bool = True):
        super().__init__()
        self.path = Path(path)
        self.autosave = autosave

        if self.path.exists():
            self.load()

    def set_global_checkpoint(self, scene_id: str, checkpoint_id: str) -> None:
        super().set_global_checkpoint(scene_id, checkpoint_id)
        if checkpoint_id:
            self._autosave()

    def set_local_checkpoint(self, scene_id: str, speaker_id: str, checkpoint_id: str) -> None:
        super().set_local_checkpoint(scene_id, speaker_id, checkpoint_id)
        if checkpoint_id:
            self._autosave()

    def save_dialogue_progress(self, progress: DialogueProgress) -> None:
        super().save_dialogue_progress(progress)
        self._autosave()

    def save(self) -> None:
        """Write the current state to disk."""
        data = self.to_dict()
        data['checksum'] = self._calculate_checksum(data)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise CheckpointStoreError(f"Failed to write {self.path}: {e}") from e

        logger.debug("Saved checkpoints to %s", self.path)

    def load(self) -> None:
        """Replace the in-memory state with the file contents."""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CheckpointStoreError(f"Failed to read {self.path}: {e}") from e

        try:
            jsonschema.validate(instance=data, schema=SAVE_SCHEMA)
        except jsonschema.ValidationError as e:
            raise CheckpointStoreError(f"Invalid save file {self.path}: {e.message}") from e

        checksum = data.get('checksum')
        if checksum and not self._verify_checksum(data, checksum):
            raise CheckpointStoreError(f"Save file corrupted: checksum mismatch in {self.path}")

        super().load_dict(data)
        logger.info(
            "Loaded %d global, %d local checkpoints and %d progress records from %s",
            len(data['global']), len(data['local']), len(data['progress']), self.path,
        )

    def validate(self) -> bool:
        """
        Validate the save file's integrity.

        Returns:
            True if the file is valid, False if corrupted or missing
        """
        if not self.path.exists():
            return False

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            jsonschema.validate(instance=data, schema=SAVE_SCHEMA)
        except (OSError, json.JSONDecodeError, jsonschema.ValidationError):
            return False

        checksum = data.get('checksum')
        if not checksum:
            return True
        return self._verify_checksum(data, checksum)

    def _autosave(self) -> None:
        if self.autosave:
            self.save()

    # Checksum validation

    def _calculate_checksum(self, data: dict) -> str:
        json_str = json.dumps(data, sort_keys=True, separators=(',', ':'))
        hash_bytes = hashlib.sha256(json_str.encode('utf-8')).digest()
        return base64.b64encode(hash_bytes).decode('ascii')

    def _verify_checksum(self, data: dict, expected_checksum: str) -> bool:
        data_copy = data.copy()
        data_copy.pop('checksum', None)
        return self._calculate_checksum(data_copy) == expected_checksum
