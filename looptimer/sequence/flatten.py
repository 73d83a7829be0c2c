"""Expand a sequence tree into the linear list the engine plays.

A loop with ``repetitions`` R plays its whole (flattened) body R times
back to back: ``Loop(2, [a, b])`` → ``a b a b``, never ``a a b b``.
A count of zero or less, which can only come from damaged stored data,
plays nothing.
"""

from __future__ import annotations

from collections.abc import Iterable

from .model import FlatStep, Loop, Step, Unit


def flatten(units: Iterable[Unit]) -> list[FlatStep]:
    """Return the playback order of *units* with every loop unrolled."""
    result: list[FlatStep] = []
    _expand(units, result)
    return result


def _expand(units: Iterable[Unit], out: list[FlatStep]) -> None:
    for unit in units:
        if unit.type == "step":
            out.append(FlatStep(time=unit.time, label=unit.label, id=unit.id))
        elif unit.type == "loop":
            body: list[FlatStep] = []
            _expand(unit.children, body)
            for _ in range(max(0, unit.repetitions)):
                out.extend(body)


def step_count(units: Iterable[Unit]) -> int:
    """Length of ``flatten(units)`` without building the list."""
    count = 0
    for unit in units:
        if isinstance(unit, Step):
            count += 1
        elif isinstance(unit, Loop):
            count += max(0, unit.repetitions) * step_count(unit.children)
    return count


def total_duration(units: Iterable[Unit]) -> int:
    """Seconds needed to play *units* once from start to finish."""
    total = 0
    for unit in units:
        if isinstance(unit, Step):
            total += unit.time
        elif isinstance(unit, Loop):
            total += max(0, unit.repetitions) * total_duration(unit.children)
    return total
