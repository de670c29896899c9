"""
Engine configuration.
"""

from __future__ import annotations

from typing import Any, Iterable

DEFAULT_LANGUAGES = ("ru", "en", "fr", "es")


class EngineConfig:
    """Configuration for loading and presenting dialogues."""

    def __init__(
        self,
        language: str = "en",
        fallback_language: str = "en",
        separator: str = ";",
        languages: Iterable[str] = DEFAULT_LANGUAGES,
        strict_groups: bool = False,
        save_path: str = "saves/checkpoints.json",
    ):
        self.language = language
        self.fallback_language = fallback_language
        self.separator = separator
        self.languages = tuple(languages)
        self.strict_groups = strict_groups
        self.save_path = save_path

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EngineConfig:
        """Build a config from a mapping, ignoring unknown keys."""
        known = ("language", "fallback_language", "separator",
                 "languages", "strict_groups", "save_path")
        return cls(**{key: data[key] for key in known if key in data})

    def to_dict(self) -> dict[str, Any]:
        return {
            'language': self.language,
            'fallback_language': self.fallback_language,
            'separator': self.separator,
            'languages': list(self.languages),
            'strict_groups': self.strict_groups,
            'save_path': self.save_path,
        }
