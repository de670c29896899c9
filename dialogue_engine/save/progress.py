"""
Per-dialogue resume progress.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class DialogueProgress(BaseModel):
    """
    Resume state of one dialogue.

    Attributes:
        last_resume_checkpoint_id: Last resume point reached, or "" if none
        is_completed: True once every line has been shown
    """

    model_config = ConfigDict(validate_assignment=True, extra='forbid')

    scene_id: str = ""
    speaker_id: str = ""
    dialogue_id: str = ""
    last_resume_checkpoint_id: str = ""
    is_completed: bool = False

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.scene_id, self.speaker_id, self.dialogue_id)

    def clone(self) -> DialogueProgress:
        """Create a deep copy of this record."""
        return self.model_copy(deep=True)
