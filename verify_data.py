import sys
import logging
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent))

from dialogue_engine import DialogueDatabase, DialogueManager, InMemoryCheckpointStore


def main():
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("DataVerification")

    try:
        db = DialogueDatabase(Path(__file__).parent / "demos" / "data")

        logger.info("Loading dialogues...")
        collection = db.load_all()

        dialogues = collection.get_dialogues("wood", "wizard")
        assert [d.dialogue_id for d in dialogues] == ["intro", "bridge", "idle"], "Unexpected wizard dialogues"

        for record in collection:
            for line in record.lines:
                assert line.get_text("en"), f"Missing text in {record.key} line {line.line_index}"

        # Every story gate must be set by some line in the same scene.
        for record in collection:
            gate = record.required_global_checkpoint
            if gate:
                setters = [
                    other for other in collection
                    if other.scene_id == record.scene_id
                    and any(line.global_checkpoint_to_set == gate for line in other.lines)
                ]
                if not setters:
                    logger.warning(f"{record.key} waits for '{gate}', which no dialogue sets")

        manager = DialogueManager(collection, InMemoryCheckpointStore())
        assert manager.start_next_dialogue("wood", "wizard").record.dialogue_id == "intro"

        logger.info("VERIFICATION SUCCESSFUL: All dialogues loaded and validated.")

    except Exception as e:
        logger.error(f"VERIFICATION FAILED: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
