"""
Dialogue parser - converts delimited text and JSON sources to records.

Delimited text has one row per dialogue line:

```
dialogueId;dialogueOrder;lineIndex;kind;requiredGlobal;requiredLocal;resumeCheckpoint;setGlobal;setLocal;speaker;ru;en;fr;es
intro;0;0;Story;;;;;;Wizard;Привет;Hello;;
intro;0;1;Story;;;mid;met_wizard;;Wizard;;Where to?;;
```

Rows sharing a dialogue id form one dialogue. Parsing is lenient: short
rows, bad numbers and unknown kinds fall back to defaults instead of
failing.
"""

from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

import jsonschema

from dialogue_engine.core.config import DEFAULT_LANGUAGES
from dialogue_engine.core.errors import DialogueSourceError
from dialogue_engine.dialog.models import DialogueKind, DialogueLine, DialogueRecord

logger = logging.getLogger(__name__)

LINE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["index"],
    "properties": {
        "index": {"type": "integer"},
        "speaker": {"type": "string"},
        "text": {"type": "object", "additionalProperties": {"type": "string"}},
        "resume": {"type": "string"},
        "set_global": {"type": "string"},
        "set_local": {"type": "string"},
    },
}

DIALOGUE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["id", "lines"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "order": {"type": "integer"},
        "kind": {"type": "string"},
        "required_global": {"type": "string"},
        "required_local": {"type": "string"},
        "lines": {"type": "array", "items": LINE_SCHEMA},
    },
}


@dataclass
class ParsedRow:
    """One source row: a single line plus its dialogue's scalar fields."""
    dialogue_id: str = ""
    dialogue_order: int = 0
    line_index: int = 0
    kind: DialogueKind = DialogueKind.IDLE
    required_global: str = ""
    required_local: str = ""
    resume_checkpoint: str = ""
    set_global: str = ""
    set_local: str = ""
    speaker: str = ""
    text_by_language: dict[str, str] = field(default_factory=dict)

    def group_fields(self) -> tuple[int, DialogueKind, str, str]:
        """Fields that every row of one dialogue should agree on."""
        return (self.dialogue_order, self.kind, self.required_global, self.required_local)


def _to_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


class DialogueCsvParser:
    """
    Parses dialogue records from delimited text and JSON.

    When rows of one dialogue disagree on order, kind or requirements, the
    first row wins and a warning is logged; with ``strict=True`` a
    ``DialogueSourceError`` is raised instead. Duplicate line indices keep
    the last row.
    """

    # Column positions of the fixed fields
    DIALOGUE_ID = 0
    DIALOGUE_ORDER = 1
    LINE_INDEX = 2
    KIND = 3
    REQUIRED_GLOBAL = 4
    REQUIRED_LOCAL = 5
    RESUME_CHECKPOINT = 6
    SET_GLOBAL = 7
    SET_LOCAL = 8
    SPEAKER = 9
    FIRST_LANGUAGE = 10

    def __init__(
        self,
        separator: str = ";",
        languages: Iterable[str] = DEFAULT_LANGUAGES,
        strict: bool = False,
    ):
        self.separator = separator
        self.languages = tuple(languages)
        self.strict = strict

    @classmethod
    def from_config(cls, config) -> DialogueCsvParser:
        """Create a parser from an EngineConfig."""
        return cls(
            separator=config.separator,
            languages=config.languages,
            strict=config.strict_groups,
        )

    # Delimited text

    def parse_file(self, scene_id: str, speaker_id: str, path: str | Path) -> list[DialogueRecord]:
        """Parse a delimited text file."""
        path = Path(path)
        with open(path, 'r', encoding='utf-8-sig') as f:
            content = f.read()
        return self.parse_string(scene_id, speaker_id, content)

    def parse_string(self, scene_id: str, speaker_id: str, content: str) -> list[DialogueRecord]:
        """Parse delimited text for one scene and speaker."""
        lines = content.splitlines()
        if not lines:
            return []

        languages = self._languages_from_header(lines[0])

        rows = []
        for line in lines[1:]:
            if not line.strip():
                continue
            rows.append(self.parse_row(line, languages))

        return self.build_records(scene_id, speaker_id, rows)

    def parse_row(self, line: str, languages: Optional[tuple[str, ...]] = None) -> ParsedRow:
        """Parse one data row. Missing fields default to empty values."""
        languages = languages if languages is not None else self.languages
        parts = self._split(line)

        def get(index: int) -> str:
            return parts[index].strip() if index < len(parts) else ""

        row = ParsedRow(
            dialogue_id=get(self.DIALOGUE_ID),
            dialogue_order=_to_int(get(self.DIALOGUE_ORDER)),
            line_index=_to_int(get(self.LINE_INDEX)),
            kind=DialogueKind.parse(get(self.KIND)),
            required_global=get(self.REQUIRED_GLOBAL),
            required_local=get(self.REQUIRED_LOCAL),
            resume_checkpoint=get(self.RESUME_CHECKPOINT),
            set_global=get(self.SET_GLOBAL),
            set_local=get(self.SET_LOCAL),
            speaker=get(self.SPEAKER),
        )

        for offset, code in enumerate(languages):
            text = get(self.FIRST_LANGUAGE + offset)
            if text:
                row.text_by_language[code] = text

        return row

    def _split(self, line: str) -> list[str]:
        return next(csv.reader([line], delimiter=self.separator))

    def _languages_from_header(self, header: str) -> tuple[str, ...]:
        codes = tuple(
            part.strip() for part in self._split(header)[self.FIRST_LANGUAGE:]
        )
        if codes and all(codes):
            return codes
        return self.languages

    # Record building

    def build_records(self, scene_id: str, speaker_id: str, rows: Iterable[ParsedRow]) -> list[DialogueRecord]:
        """Group rows by dialogue id (first-seen order) into records."""
        groups: dict[str, list[ParsedRow]] = {}
        for row in rows:
            groups.setdefault(row.dialogue_id, []).append(row)

        return [
            self._build_record(scene_id, speaker_id, dialogue_id, group)
            for dialogue_id, group in groups.items()
        ]

    def _build_record(
        self,
        scene_id: str,
        speaker_id: str,
        dialogue_id: str,
        group: list[ParsedRow],
    ) -> DialogueRecord:
        sample = group[0]

        for row in group[1:]:
            if row.group_fields() != sample.group_fields():
                message = (
                    f"Dialogue '{dialogue_id}' ({scene_id}/{speaker_id}) line "
                    f"{row.line_index} disagrees with its first row on "
                    f"order/kind/requirements"
                )
                if self.strict:
                    raise DialogueSourceError(message)
                logger.warning("%s; keeping the first row's values", message)

        by_index: dict[int, ParsedRow] = {}
        for row in group:
            if row.line_index in by_index:
                logger.warning(
                    "Dialogue '%s' (%s/%s) repeats line index %d; keeping the last row",
                    dialogue_id, scene_id, speaker_id, row.line_index,
                )
            by_index[row.line_index] = row

        lines = [
            DialogueLine(
                line_index=row.line_index,
                speaker=row.speaker,
                text_by_language=dict(row.text_by_language),
                resume_checkpoint_id=row.resume_checkpoint,
                global_checkpoint_to_set=row.set_global,
                local_checkpoint_to_set=row.set_local,
            )
            for _, row in sorted(by_index.items())
        ]

        return DialogueRecord(
            scene_id=scene_id,
            speaker_id=speaker_id,
            dialogue_id=dialogue_id,
            order=sample.dialogue_order,
            kind=sample.kind,
            required_global_checkpoint=sample.required_global,
            required_local_checkpoint=sample.required_local,
            lines=lines,
        )

    # JSON

    def parse_json_file(self, scene_id: str, speaker_id: str, path: str | Path) -> list[DialogueRecord]:
        """Parse a JSON dialogue file."""
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DialogueSourceError(f"Invalid JSON in {path}: {e}") from e
        return self.parse_json(scene_id, speaker_id, data)

    def parse_json(self, scene_id: str, speaker_id: str, data: Any) -> list[DialogueRecord]:
        """
        Parse JSON dialogue data.

        Args:
            data: A dialogue object or a list of them, matching DIALOGUE_SCHEMA

        Raises:
            DialogueSourceError: If the data does not match the schema
        """
        items = data if isinstance(data, list) else [data]

        rows = []
        for item in items:
            try:
                jsonschema.validate(instance=item, schema=DIALOGUE_SCHEMA)
            except jsonschema.ValidationError as e:
                raise DialogueSourceError(f"Invalid dialogue for {scene_id}/{speaker_id}: {e.message}") from e

            for line_data in item['lines']:
                rows.append(ParsedRow(
                    dialogue_id=item['id'],
                    dialogue_order=item.get('order', 0),
                    line_index=line_data['index'],
                    kind=DialogueKind.parse(item.get('kind')),
                    required_global=item.get('required_global', ''),
                    required_local=item.get('required_local', ''),
                    resume_checkpoint=line_data.get('resume', ''),
                    set_global=line_data.get('set_global', ''),
                    set_local=line_data.get('set_local', ''),
                    speaker=line_data.get('speaker', ''),
                    text_by_language={
                        code: text for code, text in line_data.get('text', {}).items() if text
                    },
                ))

        records = self.build_records(scene_id, speaker_id, rows)

        # Dialogues declared without lines still exist.
        seen = {record.dialogue_id for record in records}
        for item in items:
            if item['id'] not in seen:
                seen.add(item['id'])
                records.append(DialogueRecord(
                    scene_id=scene_id,
                    speaker_id=speaker_id,
                    dialogue_id=item['id'],
                    order=item.get('order', 0),
                    kind=item.get('kind'),
                    required_global_checkpoint=item.get('required_global', ''),
                    required_local_checkpoint=item.get('required_local', ''),
                ))

        return records

    def to_json(self, records: Iterable[DialogueRecord]) -> list[dict[str, Any]]:
        """Convert records to the JSON format read by ``parse_json``."""
        return [
            {
                'id': record.dialogue_id,
                'order': record.order,
                'kind': record.kind.value,
                'required_global': record.required_global_checkpoint,
                'required_local': record.required_local_checkpoint,
                'lines': [
                    {
                        'index': line.line_index,
                        'speaker': line.speaker,
                        'text': dict(line.text_by_language),
                        'resume': line.resume_checkpoint_id,
                        'set_global': line.global_checkpoint_to_set,
                        'set_local': line.local_checkpoint_to_set,
                    }
                    for line in record.lines
                ],
            }
            for record in records
        ]


def compile_dialogue_file(
    scene_id: str,
    speaker_id: str,
    input_path: str | Path,
    output_path: Optional[str | Path] = None,
    separator: str = ";",
) -> Path:
    """
    Compile a delimited dialogue file to JSON.

    Args:
        input_path: Path to the delimited text file
        output_path: Path to output .json file (default: same name with .json)
    """
    input_path = Path(input_path)
    output_path = Path(output_path) if output_path else input_path.with_suffix('.json')

    parser = DialogueCsvParser(separator=separator)
    records = parser.parse_file(scene_id, speaker_id, input_path)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(parser.to_json(records), f, indent=2, ensure_ascii=False)

    logger.info("Compiled %s -> %s", input_path, output_path)
    return output_path
