"""
Console Demo: Dialogue Engine

Demonstrates:
- Loading dialogues from a data directory
- Selecting the next dialogue for an NPC
- Resuming from saved progress
- Line-by-line playback with lifecycle events

Controls:
- Enter: Next line
- q + Enter or Ctrl-D: Leave the conversation (progress is kept)
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dialogue_engine import (
    DialogueDatabase,
    DialogueManager,
    EngineConfig,
    JsonCheckpointStore,
)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Talk to an NPC from the console.")
    parser.add_argument("--data", default=str(Path(__file__).parent / "data"))
    parser.add_argument("--scene", default="wood")
    parser.add_argument("--npc", default="wizard")
    parser.add_argument("--lang", default="en")
    parser.add_argument("--save", default="saves/checkpoints.json")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    config = EngineConfig(language=args.lang, save_path=args.save)
    database = DialogueDatabase(args.data, config)
    collection = database.load_all()

    store = JsonCheckpointStore(config.save_path)
    manager = DialogueManager(collection, store)

    session = manager.start_next_dialogue(args.scene, args.npc)
    if session is None:
        print(f"{args.npc} has nothing to say.")
        return 0

    session.on_start(lambda s: print(f"--- {s.record.dialogue_id} ---"))
    session.on_line_changed(
        lambda s, line: print(f"{line.speaker}: {line.get_text(config.language, config.fallback_language)}")
    )
    session.on_end(lambda s: print("--- end ---"))

    session.start()
    while not session.is_completed:
        try:
            command = input()
        except EOFError:
            break
        if command.strip().lower() == "q":
            break
        session.advance()

    return 0


if __name__ == "__main__":
    sys.exit(main())
