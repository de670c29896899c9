"""
Dialogue Engine

Linear NPC dialogues driven by story checkpoints, with resumable progress.

Quick Start:
    from dialogue_engine import (
        DialogueCollection, DialogueManager, InMemoryCheckpointStore,
    )

    collection = DialogueCollection()
    collection.load_from_csv_text("wood", "wizard", csv_text)

    manager = DialogueManager(collection, InMemoryCheckpointStore())
    session = manager.start_next_dialogue("wood", "wizard")
    if session:
        session.on_line_changed(lambda s, line: print(line.get_text("en")))
        session.start()
        while session.advance():
            pass
"""

__version__ = "0.1.0"

from dialogue_engine.core import (
    EngineConfig,
    EventBus,
    Event,
    DialogueEvent,
    DialogueEngineError,
    DialogueSourceError,
    CheckpointStoreError,
    InvalidSessionStateError,
)
from dialogue_engine.dialog import (
    DialogueKind,
    DialogueLine,
    DialogueRecord,
    DialogueCsvParser,
    DialogueCollection,
    DialogueSession,
    SessionState,
    DialogueManager,
)
from dialogue_engine.save import (
    DialogueProgress,
    CheckpointStore,
    InMemoryCheckpointStore,
    JsonCheckpointStore,
)
from dialogue_engine.resources import DialogueDatabase

__all__ = [
    # Core
    "EngineConfig",
    "EventBus",
    "Event",
    "DialogueEvent",
    # Errors
    "DialogueEngineError",
    "DialogueSourceError",
    "CheckpointStoreError",
    "InvalidSessionStateError",
    # Dialog
    "DialogueKind",
    "DialogueLine",
    "DialogueRecord",
    "DialogueCsvParser",
    "DialogueCollection",
    "DialogueSession",
    "SessionState",
    "DialogueManager",
    # Save
    "DialogueProgress",
    "CheckpointStore",
    "InMemoryCheckpointStore",
    "JsonCheckpointStore",
    # Resources
    "DialogueDatabase",
]
