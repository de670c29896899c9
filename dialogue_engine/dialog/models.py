"""
Dialogue data types - kinds, lines and records.

Records are built once at load time and never modified afterwards, so the
models are frozen Pydantic models.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class DialogueKind(Enum):
    """Authored category of a dialogue."""
    STORY = "story"   # Plot dialogue, usually gated by checkpoints
    IDLE = "idle"     # Repeatable small talk

    @classmethod
    def parse(cls, value: Any) -> DialogueKind:
        """
        Lenient parse used by loaders.

        Accepts member names or values in any case; anything else is IDLE.
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for kind in cls:
            if text in (kind.value, kind.name.lower()):
                return kind
        return cls.IDLE


class DialogueLine(BaseModel):
    """
    One step of a dialogue.

    Attributes:
        line_index: Authored position inside the dialogue (0-based)
        speaker: Display name, may be empty
        text_by_language: Localized text keyed by language code (read-only)
        resume_checkpoint_id: Resume point recorded when the line is reached
        global_checkpoint_to_set: Scene checkpoint set when the line is reached
        local_checkpoint_to_set: Speaker checkpoint set when the line is reached
    """

    model_config = ConfigDict(frozen=True, extra='forbid')

    line_index: int = 0
    speaker: str = ""
    text_by_language: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    resume_checkpoint_id: str = ""
    global_checkpoint_to_set: str = ""
    local_checkpoint_to_set: str = ""

    @field_validator('text_by_language')
    @classmethod
    def _freeze_texts(cls, texts: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(texts))

    @field_serializer('text_by_language')
    def _dump_texts(self, texts: Mapping[str, str]) -> dict[str, str]:
        return dict(texts)

    @property
    def languages(self) -> list[str]:
        """Language codes that carry non-empty text."""
        return [code for code, text in self.text_by_language.items() if text]

    def get_text(self, language_code: str, fallback_language_code: str = "en") -> str:
        """
        Get text in the requested language.

        Lookup order: primary code, fallback code, first available
        language, empty string.
        """
        if language_code:
            localized = self.text_by_language.get(language_code)
            if localized:
                return localized

        if fallback_language_code:
            fallback = self.text_by_language.get(fallback_language_code)
            if fallback:
                return fallback

        for text in self.text_by_language.values():
            if text:
                return text

        return ""


class DialogueRecord(BaseModel):
    """A complete linear dialogue for one scene and speaker."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    scene_id: str
    speaker_id: str
    dialogue_id: str
    order: int = 0
    kind: DialogueKind = DialogueKind.IDLE
    required_global_checkpoint: str = ""
    required_local_checkpoint: str = ""
    lines: tuple[DialogueLine, ...] = ()

    @field_validator('kind', mode='before')
    @classmethod
    def _parse_kind(cls, value: Any) -> DialogueKind:
        return DialogueKind.parse(value)

    @field_validator('lines')
    @classmethod
    def _check_line_order(cls, lines: tuple[DialogueLine, ...]) -> tuple[DialogueLine, ...]:
        indices = [line.line_index for line in lines]
        if any(a >= b for a, b in zip(indices, indices[1:])):
            raise ValueError("lines must be in strictly ascending line_index order")
        return lines

    @property
    def key(self) -> tuple[str, str, str]:
        """Identity of the dialogue."""
        return (self.scene_id, self.speaker_id, self.dialogue_id)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def find_resume_index(self, checkpoint_id: str) -> Optional[int]:
        """Position of the first line carrying this resume checkpoint."""
        if not checkpoint_id:
            return None
        for position, line in enumerate(self.lines):
            if line.resume_checkpoint_id == checkpoint_id:
                return position
        return None
