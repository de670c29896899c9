"""
Exception hierarchy for the dialogue engine.
"""

from __future__ import annotations


class DialogueEngineError(Exception):
    """Base class for all dialogue engine errors."""


class DialogueSourceError(DialogueEngineError):
    """A dialogue source was rejected (strict grouping or schema validation)."""


class CheckpointStoreError(DialogueEngineError):
    """Checkpoint persistence failed or a save file is corrupted."""


class InvalidSessionStateError(DialogueEngineError, RuntimeError):
    """
    A session operation was called in a state that does not allow it.

    This is a programmer error: the session was used before ``start()`` or a
    current line was requested after the dialogue ended.
    """
