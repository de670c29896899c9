"""
Core module.

Exports:
- EventBus, Event, DialogueEvent: Event system
- EngineConfig: Configuration
- DialogueEngineError and subclasses: Error hierarchy
"""

from dialogue_engine.core.config import EngineConfig, DEFAULT_LANGUAGES
from dialogue_engine.core.errors import (
    DialogueEngineError,
    DialogueSourceError,
    CheckpointStoreError,
    InvalidSessionStateError,
)
from dialogue_engine.core.events import EventBus, Event, DialogueEvent, EventHandler

__all__ = [
    # Config
    "EngineConfig",
    "DEFAULT_LANGUAGES",
    # Errors
    "DialogueEngineError",
    "DialogueSourceError",
    "CheckpointStoreError",
    "InvalidSessionStateError",
    # Events
    "EventBus",
    "Event",
    "DialogueEvent",
    "EventHandler",
]
