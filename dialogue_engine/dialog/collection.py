"""
In-memory store of loaded dialogue records.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from dialogue_engine.dialog.models import DialogueRecord
from dialogue_engine.dialog.parser import DialogueCsvParser

logger = logging.getLogger(__name__)


class DialogueCollection:
    """
    All dialogue records known to the game, queryable by scene and speaker.

    No uniqueness check is made when adding: duplicate identities are kept
    and both are returned by queries.
    """

    def __init__(self, records: Iterable[DialogueRecord] = ()):
        self._dialogues: list[DialogueRecord] = list(records)

    def add_dialogue(self, record: DialogueRecord) -> None:
        """Append a record."""
        self._dialogues.append(record)

    def extend(self, records: Iterable[DialogueRecord]) -> None:
        """Append several records in order."""
        for record in records:
            self.add_dialogue(record)

    def get_dialogues(self, scene_id: str, speaker_id: str) -> list[DialogueRecord]:
        """
        Records for exactly this scene and speaker, ascending by ``order``.

        Equal orders keep insertion order. Each call returns a new list.
        """
        matching = [
            d for d in self._dialogues
            if d.scene_id == scene_id and d.speaker_id == speaker_id
        ]
        return sorted(matching, key=lambda d: d.order)

    def get_dialogue(self, scene_id: str, speaker_id: str, dialogue_id: str) -> Optional[DialogueRecord]:
        """First record with this id in ``order`` sequence."""
        for record in self.get_dialogues(scene_id, speaker_id):
            if record.dialogue_id == dialogue_id:
                return record
        return None

    def load_from_csv_text(
        self,
        scene_id: str,
        speaker_id: str,
        csv_text: str,
        parser: Optional[DialogueCsvParser] = None,
    ) -> list[DialogueRecord]:
        """Parse delimited text for one scene and speaker and add the result."""
        parser = parser or DialogueCsvParser()
        records = parser.parse_string(scene_id, speaker_id, csv_text)
        self.extend(records)
        logger.debug("Added %d dialogues for %s/%s", len(records), scene_id, speaker_id)
        return records

    def clear(self) -> None:
        self._dialogues.clear()

    def __len__(self) -> int:
        return len(self._dialogues)

    def __iter__(self) -> Iterator[DialogueRecord]:
        return iter(list(self._dialogues))
