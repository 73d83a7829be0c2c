"""Audio package."""

from .sounds import CuePlayer, generate_beep

__all__ = ["CuePlayer", "generate_beep"]
