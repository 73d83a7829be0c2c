"""Display strings for durations and units."""

from __future__ import annotations

from .sequence.model import Unit

EMPTY_CLOCK = "--:--"


def format_clock(seconds: int) -> str:
    """Countdown display, ``MM:SS``."""
    seconds = max(0, seconds)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def format_total(seconds: int) -> str:
    """Library listing, ``7m 05s``."""
    seconds = max(0, seconds)
    return f"{seconds // 60}m {seconds % 60:02d}s"


def describe_unit(unit: Unit) -> str:
    if unit.type == "step":
        text = f"Step {format_clock(unit.time)}"
    else:
        text = f"Loop x{unit.repetitions}"
    if unit.label:
        text += f" ({unit.label})"
    return text
