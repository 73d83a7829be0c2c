"""Sequence package."""

from .model import (
    Step,
    Loop,
    Unit,
    FlatStep,
    Sequence,
    new_id,
    make_step,
    make_loop,
)
from .flatten import flatten, step_count, total_duration
from .editor import SequenceEditor, insert, remove, find_unit, contains
from .codec import (
    sequence_to_dict,
    sequence_from_payload,
    migrate_payload,
)

__all__ = [
    "Step",
    "Loop",
    "Unit",
    "FlatStep",
    "Sequence",
    "new_id",
    "make_step",
    "make_loop",
    "flatten",
    "step_count",
    "total_duration",
    "SequenceEditor",
    "insert",
    "remove",
    "find_unit",
    "contains",
    "sequence_to_dict",
    "sequence_from_payload",
    "migrate_payload",
]
