"""
Dialog module - linear dialogues for NPCs.

Provides:
- Dialogue records and localized lines
- Delimited text and JSON loading
- Dialogue selection by checkpoints and saved progress
- Resumable playback sessions with lifecycle events
"""

from dialogue_engine.dialog.models import DialogueKind, DialogueLine, DialogueRecord
from dialogue_engine.dialog.parser import DialogueCsvParser, ParsedRow, compile_dialogue_file
from dialogue_engine.dialog.collection import DialogueCollection
from dialogue_engine.dialog.session import DialogueSession, SessionState
from dialogue_engine.dialog.manager import DialogueManager

__all__ = [
    "DialogueKind",
    "DialogueLine",
    "DialogueRecord",
    "DialogueCsvParser",
    "ParsedRow",
    "compile_dialogue_file",
    "DialogueCollection",
    "DialogueSession",
    "SessionState",
    "DialogueManager",
]
