"""
Save module - checkpoint and dialogue progress persistence.

Provides:
- CheckpointStore protocol consumed by dialogue selection and sessions
- In-memory store for tests and prototypes
- JSON save-file store with checksum validation
"""

from dialogue_engine.save.progress import DialogueProgress
from dialogue_engine.save.store import CheckpointStore
from dialogue_engine.save.memory import InMemoryCheckpointStore
from dialogue_engine.save.json_store import JsonCheckpointStore, SAVE_SCHEMA

__all__ = [
    "DialogueProgress",
    "CheckpointStore",
    "InMemoryCheckpointStore",
    "JsonCheckpointStore",
    "SAVE_SCHEMA",
]
