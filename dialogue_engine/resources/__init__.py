"""
Resources module - loading authored dialogue data from disk.
"""

from dialogue_engine.resources.database import DialogueDatabase, parse_source_name

__all__ = [
    "DialogueDatabase",
    "parse_source_name",
]
