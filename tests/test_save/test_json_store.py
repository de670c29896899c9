import json

import pytest

from dialogue_engine.core.errors import CheckpointStoreError
from dialogue_engine.dialog.manager import DialogueManager
from dialogue_engine.save.json_store import JsonCheckpointStore


@pytest.fixture
def save_path(tmp_path):
    return tmp_path / "saves" / "checkpoints.json"


def test_new_store_has_no_file(save_path):
    store = JsonCheckpointStore(save_path)
    assert not save_path.exists()
    assert not store.validate()

def test_autosave_and_reload(save_path):
    store = JsonCheckpointStore(save_path)
    store.set_global_checkpoint("wood", "gate")
    store.set_local_checkpoint("wood", "wizard", "met")
    progress = store.get_dialogue_progress("wood", "wizard", "intro")
    progress.last_resume_checkpoint_id = "mid"
    store.save_dialogue_progress(progress)

    assert save_path.exists()
    assert store.validate()

    reloaded = JsonCheckpointStore(save_path)
    assert reloaded.has_global_checkpoint("wood", "gate")
    assert reloaded.has_local_checkpoint("wood", "wizard", "met")
    assert reloaded.get_dialogue_progress("wood", "wizard", "intro").last_resume_checkpoint_id == "mid"

def test_manual_save(save_path):
    store = JsonCheckpointStore(save_path, autosave=False)
    store.set_global_checkpoint("wood", "gate")
    assert not save_path.exists()

    store.save()
    assert JsonCheckpointStore(save_path).has_global_checkpoint("wood", "gate")

def test_checksum_mismatch_is_rejected(save_path):
    store = JsonCheckpointStore(save_path)
    store.set_global_checkpoint("wood", "gate")

    data = json.loads(save_path.read_text(encoding="utf-8"))
    data["global"].append(["wood", "cheat"])
    save_path.write_text(json.dumps(data), encoding="utf-8")

    assert not store.validate()
    with pytest.raises(CheckpointStoreError):
        JsonCheckpointStore(save_path)

def test_schema_violation_is_rejected(save_path):
    save_path.parent.mkdir(parents=True)
    save_path.write_text(json.dumps({"version": "1.0", "global": "nope"}), encoding="utf-8")

    with pytest.raises(CheckpointStoreError):
        JsonCheckpointStore(save_path)

def test_invalid_json_is_rejected(save_path):
    save_path.parent.mkdir(parents=True)
    save_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(CheckpointStoreError):
        JsonCheckpointStore(save_path)

def test_file_without_checksum_is_accepted(save_path):
    save_path.parent.mkdir(parents=True)
    save_path.write_text(json.dumps({
        "version": "1.0",
        "global": [["wood", "gate"]],
        "local": [],
        "progress": [],
    }), encoding="utf-8")

    assert JsonCheckpointStore(save_path).has_global_checkpoint("wood", "gate")

def test_progress_survives_restart(collection, save_path):
    manager = DialogueManager(collection, JsonCheckpointStore(save_path))
    session = manager.start_next_dialogue("wood", "wizard")
    session.start()
    session.advance()

    restarted = DialogueManager(collection, JsonCheckpointStore(save_path))
    resumed = restarted.start_next_dialogue("wood", "wizard")

    assert resumed.record.dialogue_id == "intro"
    assert resumed.current_index == 1
