"""Playback state machine for LoopTimer.

States
------
IDLE      Nothing to play, or the sequence played through to the end.
READY     Steps loaded (or just reset), positioned on the first step.
RUNNING   Active step counting down.
PAUSED    Countdown frozen, position kept.

Transitions
-----------
IDLE | READY → RUNNING      (start; index 0, cue)
RUNNING → PAUSED            (pause)
PAUSED → RUNNING            (resume, or start again; same index, no cue)
RUNNING → RUNNING           (step countdown hits 0, more steps; cue)
RUNNING → IDLE              (last step countdown hits 0)
Any → READY | IDLE          (reset)

The engine plays a flattened list (see :func:`looptimer.sequence.flatten`)
and has to be handed a fresh one through :meth:`PlaybackEngine.set_steps`
after every edit.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Protocol

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..sequence.model import FlatStep

logger = logging.getLogger(__name__)


# ── types ─────────────────────────────────────────────────────────────────


class PlaybackStatus(Enum):
    IDLE = "idle"
    READY = "ready"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class PlaybackState:
    """What the countdown display needs to know."""

    index: int = 0
    is_running: bool = False
    reset_token: int = 0


class StepAdvance(NamedTuple):
    """Outcome of a step finishing: keep counting, and for how long."""

    should_repeat: bool
    duration: int = 0


class Cue(Protocol):
    def play(self) -> None: ...


# ── constants ─────────────────────────────────────────────────────────────

TICK_INTERVAL_MS = 1000
FALLBACK_DISPLAY_SECONDS = 10  # countdown shown with nothing to play


# ── engine ────────────────────────────────────────────────────────────────


class PlaybackEngine(QObject):
    """Qt-based step sequencer countdown.

    Signals
    -------
    tick(remaining_seconds: int)
        Emitted every tick while running.
    status_changed(new_status: PlaybackStatus)
        Emitted on every status transition.
    step_changed(index: int)
        Emitted when playback moves to another step.
    sequence_finished()
        Emitted after the last step's countdown reaches zero.
    reset_token_changed(token: int)
        Emitted when the countdown display should restart from scratch.
    """

    tick = pyqtSignal(int)
    status_changed = pyqtSignal(object)
    step_changed = pyqtSignal(int)
    sequence_finished = pyqtSignal()
    reset_token_changed = pyqtSignal(int)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        cue: Cue | None = None,
        tick_interval_ms: int = TICK_INTERVAL_MS,
        fallback_seconds: int = FALLBACK_DISPLAY_SECONDS,
    ) -> None:
        super().__init__(parent)

        self._cue = cue
        self._fallback_seconds = fallback_seconds

        # ── playback state ────────────────────────────────────────────
        self._steps: tuple[FlatStep, ...] = ()
        self._status: PlaybackStatus = PlaybackStatus.IDLE
        self._index: int = 0
        self._reset_token: int = 0
        self._remaining: int = fallback_seconds

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(tick_interval_ms)
        self._qt_timer.timeout.connect(self._on_tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def steps(self) -> tuple[FlatStep, ...]:
        return self._steps

    @property
    def index(self) -> int:
        return self._index

    @property
    def is_running(self) -> bool:
        return self._status == PlaybackStatus.RUNNING

    @property
    def reset_token(self) -> int:
        return self._reset_token

    @property
    def playback_state(self) -> PlaybackState:
        return PlaybackState(
            index=self._index,
            is_running=self.is_running,
            reset_token=self._reset_token,
        )

    @property
    def active_step(self) -> FlatStep | None:
        if not self._steps:
            return None
        return self._steps[self._index]

    @property
    def active_duration(self) -> int:
        """Countdown length for the active step (fallback when empty)."""
        step = self.active_step
        return step.time if step is not None else self._fallback_seconds

    @property
    def remaining(self) -> int:
        """Seconds left on the active step."""
        return self._remaining

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the active step."""
        duration = self.active_duration
        if not self._steps or duration <= 0:
            return 0.0
        elapsed = duration - self._remaining
        return max(0.0, min(1.0, elapsed / duration))

    @property
    def tick_interval_ms(self) -> int:
        return self._qt_timer.interval()

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def set_steps(self, steps: Iterable[FlatStep]) -> None:
        """Replace the playback list after the tree changed."""
        self._steps = tuple(steps)

        if not self._steps:
            self._qt_timer.stop()
            self._index = 0
            self._remaining = self._fallback_seconds
            self._set_status(PlaybackStatus.IDLE)
            return

        if self._index >= len(self._steps):
            self.reset()
            return

        if self._status in (PlaybackStatus.IDLE, PlaybackStatus.READY):
            self._remaining = self.active_duration
            self._set_status(PlaybackStatus.READY)

    def start(self) -> None:
        """Play from the first step.  Resumes instead when paused."""
        if not self._steps or self._status == PlaybackStatus.RUNNING:
            return
        if self._status == PlaybackStatus.PAUSED:
            self.resume()
            return
        self._index = 0
        self._remaining = self.active_duration
        self._set_status(PlaybackStatus.RUNNING)
        self.step_changed.emit(self._index)
        self._qt_timer.start()
        self._play_cue()

    def pause(self) -> None:
        if self._status != PlaybackStatus.RUNNING:
            return
        self._qt_timer.stop()
        self._set_status(PlaybackStatus.PAUSED)

    def resume(self) -> None:
        """Continue the paused step where it stopped.  No cue."""
        if self._status != PlaybackStatus.PAUSED:
            return
        self._set_status(PlaybackStatus.RUNNING)
        self._qt_timer.start()

    def reset(self) -> None:
        """Stop and rewind to the first step, from any state."""
        self._qt_timer.stop()
        self._index = 0
        self._remaining = self.active_duration
        self._bump_reset_token()
        self._set_status(PlaybackStatus.READY if self._steps else PlaybackStatus.IDLE)

    def complete_step(self) -> StepAdvance:
        """The active step's countdown reached zero.

        Moves on and cues the next step, or stops after the last one.
        The whole transition is applied before this returns.  Ignored
        unless running.
        """
        if not self._steps or self._status != PlaybackStatus.RUNNING:
            return StepAdvance(should_repeat=False)

        if self._index < len(self._steps) - 1:
            self._index += 1
            self._remaining = self.active_duration
            self.step_changed.emit(self._index)
            self._play_cue()
            return StepAdvance(should_repeat=True, duration=self._remaining)

        self._qt_timer.stop()
        self._index = 0
        self._remaining = self.active_duration
        self._bump_reset_token()
        self._set_status(PlaybackStatus.IDLE)
        self.sequence_finished.emit()
        return StepAdvance(should_repeat=False)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self) -> None:
        if self._status != PlaybackStatus.RUNNING:
            return
        self._remaining = max(0, self._remaining - 1)
        self.tick.emit(self._remaining)
        if self._remaining <= 0:
            self.complete_step()

    def _play_cue(self) -> None:
        if self._cue is None:
            return
        try:
            self._cue.play()
        except Exception:
            logger.warning("Transition cue failed", exc_info=True)

    def _bump_reset_token(self) -> None:
        self._reset_token += 1
        self.reset_token_changed.emit(self._reset_token)

    def _set_status(self, new_status: PlaybackStatus) -> None:
        if new_status == self._status:
            return
        self._status = new_status
        self.status_changed.emit(new_status)
