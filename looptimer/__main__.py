"""Allow running LoopTimer as a module: python -m looptimer.

Plays the stored working sequence without a window, printing each
step as it starts.
"""

import asyncio
import logging
import sys

from PyQt6.QtCore import QCoreApplication

from .database.db import init_db
from .formatting import format_clock, format_total
from .sequence.flatten import total_duration
from .session import SequenceSession
from .settings import load_settings


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    init_db()

    app = QCoreApplication(sys.argv)
    app.setApplicationName("LoopTimer")
    app.setOrganizationName("LoopTimer")

    session = SequenceSession(settings=load_settings())
    session.notice.connect(lambda msg: print(f"! {msg}"))

    if not asyncio.run(session.load_working()):
        sys.exit(1)
    steps = session.flattened_steps
    if not steps:
        print("No sequence to play. Save one first.")
        return

    print(f"Playing {len(steps)} steps, {format_total(total_duration(session.current_units))} total")

    def _announce(index: int) -> None:
        step = steps[index]
        label = f"  {step.label}" if step.label else ""
        print(f"[{index + 1}/{len(steps)}] {format_clock(step.time)}{label}")

    session.engine.step_changed.connect(_announce)
    session.engine.sequence_finished.connect(app.quit)
    session.start()

    code = app.exec()
    session.teardown()
    sys.exit(code)


if __name__ == "__main__":
    main()
