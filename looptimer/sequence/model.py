"""Sequence tree types for LoopTimer.

A sequence is an ordered tuple of *units*.  Each unit is either a
``Step`` (a timed leaf) or a ``Loop`` (a container that repeats its
children).  The two are tagged by their ``type`` field, which is also
the key used in the persisted JSON.

Trees are immutable: every edit builds a new tuple (see
:mod:`looptimer.sequence.editor`), so a snapshot handed to the
playback engine or to storage can never change underneath it.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from typing import Literal, Union


# ── units ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Step:
    """A timed leaf.  ``time`` is the duration in seconds."""

    id: str
    time: int
    label: str | None = None
    type: Literal["step"] = field(default="step", init=False)


@dataclass(frozen=True)
class Loop:
    """Repeats ``children`` ``repetitions`` times.  May be empty."""

    id: str
    repetitions: int = 1
    children: tuple["Unit", ...] = ()
    label: str | None = None
    type: Literal["loop"] = field(default="loop", init=False)


Unit = Union[Step, Loop]


@dataclass(frozen=True)
class FlatStep:
    """One entry of the flattened playback list."""

    time: int
    label: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class Sequence:
    """Persisted form of a sequence tree."""

    id: str
    name: str
    items: tuple[Unit, ...] = ()
    created_at: int = 0  # epoch millis
    description: str | None = None


# ── ids ──────────────────────────────────────────────────────────────────

_last_id: int = 0


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def new_id() -> str:
    """Return a process-unique id derived from the millisecond clock.

    Two calls in the same millisecond would collide, so the counter is
    bumped past the previous value.
    """
    global _last_id
    candidate = now_millis()
    if candidate <= _last_id:
        candidate = _last_id + 1
    _last_id = candidate
    return str(candidate)


# ── factories ────────────────────────────────────────────────────────────

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def coerce_int(value: object, default: int = 0) -> int:
    """Lenient integer parse for text-field input.

    Takes the leading integer of a string, so ``"12"`` and ``"12abc"``
    → 12 and ``"1.5"`` → 1.  ``""`` / ``"abc"`` / ``None`` → *default*.
    Floats are truncated.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match is None:
            return default
        return int(match.group(1))
    return default


def make_step(
    minutes: object, seconds: object, label: str | None = None
) -> Step | None:
    """Build a step from separately entered minutes and seconds.

    Returns ``None`` when the total is not positive.
    """
    total = coerce_int(minutes) * 60 + coerce_int(seconds)
    if total <= 0:
        return None
    return Step(id=new_id(), time=total, label=label or None)


def make_loop(repetitions: object, label: str | None = None) -> Loop:
    """Build an empty loop.  Bad or non-positive counts become 1."""
    count = coerce_int(repetitions, default=1)
    if count < 1:
        count = 1
    return Loop(id=new_id(), repetitions=count, label=label or None)
