"""Timer package."""

from .engine import (
    PlaybackEngine,
    PlaybackStatus,
    PlaybackState,
    StepAdvance,
    TICK_INTERVAL_MS,
    FALLBACK_DISPLAY_SECONDS,
)

__all__ = [
    "PlaybackEngine",
    "PlaybackStatus",
    "PlaybackState",
    "StepAdvance",
    "TICK_INTERVAL_MS",
    "FALLBACK_DISPLAY_SECONDS",
]
