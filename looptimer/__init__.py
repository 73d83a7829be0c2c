"""LoopTimer: interval timer with nested, repeatable step loops."""

__version__ = "0.1.0"
