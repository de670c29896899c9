"""
Dialogue database.

Loads every dialogue file in a data directory. The scene and speaker come
from the file name: ``scene-<scene>_npc-<speaker>[-anything].csv|json``,
e.g. ``scene-wood_npc-wizard-dialog1.csv``.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from dialogue_engine.core.config import EngineConfig
from dialogue_engine.core.errors import DialogueSourceError
from dialogue_engine.dialog.collection import DialogueCollection
from dialogue_engine.dialog.parser import DialogueCsvParser

FILE_NAME_PATTERN = re.compile(r'^scene-(?P<scene>[^_]+)_npc-(?P<speaker>[^-]+)(?:-.*)?$')


def parse_source_name(path: Path | str) -> Optional[tuple[str, str]]:
    """Return (scene_id, speaker_id) encoded in a file name, or None."""
    match = FILE_NAME_PATTERN.match(Path(path).stem)
    if not match:
        return None
    return match.group('scene'), match.group('speaker')


class DialogueDatabase:
    """
    Central storage for authored dialogues.
    """

    SUFFIXES = ('.csv', '.json')

    def __init__(self, data_path: Path | str, config: Optional[EngineConfig] = None):
        self._data_path = Path(data_path)
        self.config = config or EngineConfig()
        self.parser = DialogueCsvParser.from_config(self.config)
        self.collection = DialogueCollection()
        self.loaded_files: list[Path] = []

        self.logger = logging.getLogger(__name__)

    def load_all(self) -> DialogueCollection:
        """Load all dialogue files from disk into ``collection``."""
        if not self._data_path.exists():
            self.logger.warning(f"Dialogue directory not found: {self._data_path}")
            return self.collection

        for file_path in sorted(self._data_path.iterdir()):
            if file_path.suffix.lower() in self.SUFFIXES:
                self.load_file(file_path)

        self.logger.info(
            f"Loaded {len(self.collection)} dialogues "
            f"from {len(self.loaded_files)} files in {self._data_path}."
        )
        return self.collection

    def load_file(self, file_path: Path | str) -> int:
        """
        Load one dialogue file.

        Returns:
            Number of dialogues added (0 if the file was skipped)
        """
        file_path = Path(file_path)
        names = parse_source_name(file_path)
        if names is None:
            self.logger.warning(f"Skipping {file_path}: expected scene-<scene>_npc-<speaker> file name")
            return 0

        scene_id, speaker_id = names
        try:
            if file_path.suffix.lower() == '.json':
                records = self.parser.parse_json_file(scene_id, speaker_id, file_path)
            else:
                records = self.parser.parse_file(scene_id, speaker_id, file_path)
        except DialogueSourceError as e:
            self.logger.error(f"Rejected {file_path}: {e}")
            return 0
        except UnicodeDecodeError as e:
            self.logger.error(f"Rejected {file_path}: not UTF-8 encoded ({e})")
            return 0
        except OSError as e:
            self.logger.error(f"Failed to load {file_path}: {e}")
            return 0

        self.collection.extend(records)
        self.loaded_files.append(file_path)
        return len(records)
