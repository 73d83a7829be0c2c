"""Shared test helpers for LoopTimer."""

from looptimer.sequence.model import FlatStep, Loop, Step
from looptimer.timer.engine import PlaybackEngine


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeCue:
    """Stands in for CuePlayer; counts plays instead of making noise."""

    def __init__(self, fail: bool = False):
        self.plays = 0
        self.releases = 0
        self.fail = fail

    def play(self):
        self.plays += 1
        if self.fail:
            raise RuntimeError("audio device unavailable")

    def release(self):
        self.releases += 1


def flat(*durations: int) -> list[FlatStep]:
    return [FlatStep(time=d, id=str(i)) for i, d in enumerate(durations)]


def step(unit_id: str, seconds: int, label=None) -> Step:
    return Step(id=unit_id, time=seconds, label=label)


def loop(unit_id: str, repetitions: int, *children, label=None) -> Loop:
    return Loop(id=unit_id, repetitions=repetitions, children=tuple(children), label=label)


def finish_step(engine: PlaybackEngine) -> None:
    """Fast-complete the active step by jumping to the last tick."""
    engine._remaining = 1
    engine._on_tick()
