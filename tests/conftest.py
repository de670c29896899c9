import os
import sys

import pytest

# Ensure dialogue_engine can be imported without installation
sys.path.append(os.getcwd())

from dialogue_engine.core.events import EventBus
from dialogue_engine.dialog.collection import DialogueCollection
from dialogue_engine.dialog.manager import DialogueManager
from dialogue_engine.dialog.models import DialogueLine, DialogueRecord
from dialogue_engine.save.memory import InMemoryCheckpointStore


SAMPLE_CSV = """dialogueId;dialogueOrder;lineIndex;kind;requiredGlobal;requiredLocal;resumeCheckpoint;setGlobal;setLocal;speaker;ru;en;fr;es
intro;0;0;Story;;;;;;Wizard;Привет;Hello;Salut;Hola
intro;0;1;Story;;;mid;;;Wizard;;Where to?;;
intro;0;2;Story;;;;met_wizard;;Wizard;;Go north.;;
quest;1;0;Story;met_wizard;;;;;Wizard;;You again!;;
quest;1;1;Story;met_wizard;;;;got_quest;Wizard;;Bring me a staff.;;
idle;2;0;Idle;;;;;;Wizard;;Nice weather.;;
"""


def make_line(index, text="", resume="", set_global="", set_local="", speaker="NPC"):
    """Build a line with English text."""
    return DialogueLine(
        line_index=index,
        speaker=speaker,
        text_by_language={"en": text or f"line {index}"},
        resume_checkpoint_id=resume,
        global_checkpoint_to_set=set_global,
        local_checkpoint_to_set=set_local,
    )


def make_record(dialogue_id, lines=(), order=0, scene="wood", speaker="wizard",
                required_global="", required_local="", kind="story"):
    return DialogueRecord(
        scene_id=scene,
        speaker_id=speaker,
        dialogue_id=dialogue_id,
        order=order,
        kind=kind,
        required_global_checkpoint=required_global,
        required_local_checkpoint=required_local,
        lines=lines,
    )


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    return EventBus()


@pytest.fixture
def store():
    """Empty in-memory checkpoint store."""
    return InMemoryCheckpointStore()


@pytest.fixture
def collection():
    """Collection loaded with SAMPLE_CSV for wood/wizard."""
    collection = DialogueCollection()
    collection.load_from_csv_text("wood", "wizard", SAMPLE_CSV)
    return collection


@pytest.fixture
def manager(collection, store):
    return DialogueManager(collection, store)
