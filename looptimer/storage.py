"""Persistence gateway: the working sequence and the saved library.

Both live as JSON text in the key-value store (``database.db``):

- ``@current_sequence``  the sequence last opened or saved for editing
- ``savedSequences``     the library, an ordered JSON array

Every call runs the blocking SQLite work in a worker thread, so
awaiting it from the UI loop never stalls the countdown.  Any failure,
whether database, JSON or an unreadable payload, is raised as
:class:`~looptimer.errors.StorageError`; the caller decides how to tell
the user.  One unreadable library entry is skipped rather than
failing the whole library.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError

from .database import db
from .errors import PayloadError, StorageError
from .sequence.codec import sequence_from_payload, sequence_to_dict
from .sequence.model import Sequence

logger = logging.getLogger(__name__)

CURRENT_SEQUENCE_KEY = "@current_sequence"
LIBRARY_KEY = "savedSequences"


class PersistenceGateway:
    """Async load/save of sequences on top of the key-value store."""

    def __init__(
        self,
        *,
        current_key: str = CURRENT_SEQUENCE_KEY,
        library_key: str = LIBRARY_KEY,
    ) -> None:
        self._current_key = current_key
        self._library_key = library_key
        self.skipped_entries = 0

    # ── working sequence ──────────────────────────────────────────────

    async def load_working_sequence(self) -> Sequence | None:
        raw = await self._read(self._current_key)
        if raw is None:
            return None
        return sequence_from_payload(_decode(raw, self._current_key))

    async def save_working_sequence(self, sequence: Sequence) -> None:
        await self._write(self._current_key, json.dumps(sequence_to_dict(sequence)))

    # ── library ───────────────────────────────────────────────────────

    async def load_library(self) -> list[Sequence]:
        """Decode the library, skipping entries that cannot be read.

        The number skipped is left in :attr:`skipped_entries`.
        """
        sequences: list[Sequence] = []
        skipped = 0
        for position, entry in enumerate(await self.load_library_entries()):
            try:
                sequences.append(sequence_from_payload(entry))
            except PayloadError:
                skipped += 1
                logger.warning("Skipping unreadable library entry %d", position, exc_info=True)
        self.skipped_entries = skipped
        return sequences

    async def save_library(self, sequences: Iterable[Sequence]) -> None:
        await self.save_library_entries([sequence_to_dict(s) for s in sequences])

    async def load_library_entries(self) -> list:
        """The stored library array as-is, unreadable entries included."""
        raw = await self._read(self._library_key)
        if raw is None:
            return []
        entries = _decode(raw, self._library_key)
        if not isinstance(entries, list):
            raise PayloadError(f"{self._library_key} is not a list")
        return entries

    async def save_library_entries(self, entries: list) -> None:
        await self._write(self._library_key, json.dumps(entries))

    # ── internal ──────────────────────────────────────────────────────

    async def _read(self, key: str) -> str | None:
        try:
            return await asyncio.to_thread(db.get_item, key)
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError(f"could not read {key}") from exc

    async def _write(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(db.set_item, key, value)
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError(f"could not write {key}") from exc
        logger.debug("Stored %s (%d bytes)", key, len(value))


def _decode(raw: str, key: str):
    try:
        return json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise PayloadError(f"{key} is not valid JSON") from exc
