"""Exception types for LoopTimer.

Only storage problems are exceptions.  Bad user input is ignored and
stale ids degrade to a sensible default, so neither has a type here.
"""


class LoopTimerError(Exception):
    """Base class for LoopTimer errors."""


class StorageError(LoopTimerError):
    """Reading or writing the local store failed."""


class PayloadError(StorageError):
    """Stored data exists but is not a sequence we can read."""
