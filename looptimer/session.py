"""The object the UI talks to.

``SequenceSession`` ties the pieces together:

    SequenceEditor ──units_changed──▶ flatten() ──▶ PlaybackEngine
          ▲                                              │
          └──── PersistenceGateway (load / save) ◀───────┘ cue ▶ CuePlayer

Every edit re-flattens synchronously before returning, so the engine
never plays a stale list.  Storage calls are coroutines; a failure is
logged, reported once through ``notice`` and leaves the draft alone.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, pyqtSignal

from .audio.sounds import CuePlayer
from .errors import StorageError
from .sequence.codec import sequence_to_dict
from .sequence.editor import SequenceEditor
from .sequence.flatten import flatten
from .sequence.model import FlatStep, Loop, Sequence, Step, Unit, new_id, now_millis
from .settings import Settings
from .storage import PersistenceGateway
from .timer.engine import PlaybackEngine, PlaybackState, PlaybackStatus

logger = logging.getLogger(__name__)


class SequenceSession(QObject):
    """Editing + playback + storage for one screen.

    Signals
    -------
    units_changed(units: tuple)
        The draft tree changed.
    steps_changed(steps: tuple)
        The flattened list was recomputed.
    notice(message: str)
        A storage problem the user should see (dismissible).
    """

    units_changed = pyqtSignal(object)
    steps_changed = pyqtSignal(object)
    notice = pyqtSignal(str)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings: Settings | None = None,
        gateway: PersistenceGateway | None = None,
        cue: CuePlayer | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or Settings()
        self._gateway = gateway or PersistenceGateway()

        if cue is None:
            cue = CuePlayer(parent=self)
            cue.set_volume(self._settings.sound_volume)
            cue.set_enabled(self._settings.sound_enabled)
        self._cue = cue

        self._editor = SequenceEditor(parent=self)
        self._engine = PlaybackEngine(
            parent=self,
            cue=self._cue,
            tick_interval_ms=self._settings.tick_interval_ms,
            fallback_seconds=self._settings.fallback_display_seconds,
        )
        self._flattened: tuple[FlatStep, ...] = ()

        self._editor.units_changed.connect(self._on_units_changed)

    # ══════════════════════════════════════════════════════════════════
    #  PRESENTATION SURFACE
    # ══════════════════════════════════════════════════════════════════

    @property
    def editor(self) -> SequenceEditor:
        return self._editor

    @property
    def engine(self) -> PlaybackEngine:
        return self._engine

    @property
    def current_units(self) -> tuple[Unit, ...]:
        return self._editor.units

    @property
    def flattened_steps(self) -> tuple[FlatStep, ...]:
        return self._flattened

    @property
    def playback_state(self) -> PlaybackState:
        return self._engine.playback_state

    @property
    def status(self) -> PlaybackStatus:
        return self._engine.status

    @property
    def current_parent_id(self) -> str | None:
        return self._editor.current_parent_id

    # ── editing ───────────────────────────────────────────────────────

    def add_step(self, minutes: object, seconds: object, label: str | None = None) -> Step | None:
        return self._editor.add_step(minutes, seconds, label)

    def add_loop(self, repetitions: object, label: str | None = None) -> Loop:
        return self._editor.add_loop(repetitions, label)

    def remove_unit(self, unit_id: str) -> None:
        self._editor.remove_unit(unit_id)

    def select_parent(self, unit_id: str | None) -> None:
        self._editor.select_parent(unit_id)

    # ── playback ──────────────────────────────────────────────────────

    def start(self) -> None:
        self._engine.start()

    def pause(self) -> None:
        self._engine.pause()

    def reset(self) -> None:
        self._engine.reset()

    # ══════════════════════════════════════════════════════════════════
    #  STORAGE
    # ══════════════════════════════════════════════════════════════════

    async def load_working(self) -> bool:
        """Replace the draft with the stored working sequence."""
        try:
            sequence = await self._gateway.load_working_sequence()
        except StorageError:
            return self._fail("Could not load the sequence.")
        if sequence is not None:
            self._load_tree(sequence.items)
        return True

    async def save_working(self) -> bool:
        sequence = Sequence(
            id=new_id(),
            name=self._settings.working_sequence_name,
            items=self._editor.units,
            created_at=now_millis(),
        )
        try:
            await self._gateway.save_working_sequence(sequence)
        except StorageError:
            return self._fail("Could not save the current sequence.")
        return True

    async def load_library(self) -> list[Sequence]:
        try:
            library = await self._gateway.load_library()
        except StorageError:
            self._fail("Could not load saved sequences.")
            return []
        if self._gateway.skipped_entries:
            self.notice.emit(
                f"{self._gateway.skipped_entries} saved sequence(s) could not be read."
            )
        return library

    async def save_to_library(self, name: str = "", description: str = "") -> bool:
        """Append the draft to the library and keep it as the working copy."""
        if self._editor.is_empty:
            self.notice.emit("Cannot save an empty sequence.")
            return False
        try:
            # Works on the stored entries, so one unreadable entry
            # neither blocks the save nor gets dropped by it.
            entries = await self._gateway.load_library_entries()
            entries.append(sequence_to_dict(Sequence(
                id=new_id(),
                name=name.strip() or f"{self._settings.library_name_prefix} {len(entries) + 1}",
                items=self._editor.units,
                created_at=now_millis(),
                description=description.strip() or None,
            )))
            await self._gateway.save_library_entries(entries)
        except StorageError:
            return self._fail("Saving failed.")
        return await self.save_working()

    async def delete_from_library(self, sequence_id: str) -> bool:
        try:
            entries = await self._gateway.load_library_entries()
            remaining = [
                e for e in entries
                if not (isinstance(e, dict) and str(e.get("id")) == sequence_id)
            ]
            if len(remaining) != len(entries):
                await self._gateway.save_library_entries(remaining)
        except StorageError:
            return self._fail("Could not delete the sequence.")
        return True

    async def open_from_library(self, sequence: Sequence) -> bool:
        """Make a saved sequence the working one and load it for editing."""
        try:
            await self._gateway.save_working_sequence(sequence)
        except StorageError:
            return self._fail("Could not load the sequence.")
        self._load_tree(sequence.items)
        return True

    # ══════════════════════════════════════════════════════════════════
    #  LIFECYCLE
    # ══════════════════════════════════════════════════════════════════

    def teardown(self) -> None:
        """Stop playback and let go of the audio handle."""
        self._engine.reset()
        self._cue.release()

    # ── internal ──────────────────────────────────────────────────────

    def _load_tree(self, units) -> None:
        self._editor.replace(units)
        self._engine.reset()

    def _on_units_changed(self, units: tuple[Unit, ...]) -> None:
        self._flattened = tuple(flatten(units))
        self._engine.set_steps(self._flattened)
        self.units_changed.emit(units)
        self.steps_changed.emit(self._flattened)

    def _fail(self, message: str) -> bool:
        logger.error(message, exc_info=True)
        self.notice.emit(message)
        return False
