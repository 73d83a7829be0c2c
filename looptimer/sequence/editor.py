"""Id-addressed editing of a sequence tree.

The module-level functions are pure: they take a tuple of units and
return a new one, rebuilding only the path that changed.
:class:`SequenceEditor` wraps them into the stateful editing session
used by the app (working draft + "add into" selection).

Stale references never raise
----------------------------
- Inserting under a parent id that is gone (or is a step) appends to
  the top level instead.
- Removing an id that is not in the tree returns the tree unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace as dc_replace

from PyQt6.QtCore import QObject, pyqtSignal

from .model import Loop, Step, Unit, make_loop, make_step

logger = logging.getLogger(__name__)


# ── lookup ───────────────────────────────────────────────────────────────


def find_unit(units: Iterable[Unit], unit_id: str) -> Unit | None:
    """Depth-first search for the unit with *unit_id*."""
    for unit in units:
        if unit.id == unit_id:
            return unit
        if unit.type == "loop":
            found = find_unit(unit.children, unit_id)
            if found is not None:
                return found
    return None


def contains(units: Iterable[Unit], unit_id: str) -> bool:
    return find_unit(units, unit_id) is not None


def find_loop(units: Iterable[Unit], loop_id: str) -> Loop | None:
    unit = find_unit(units, loop_id)
    return unit if isinstance(unit, Loop) else None


# ── mutation ─────────────────────────────────────────────────────────────


def insert(
    units: tuple[Unit, ...], parent_id: str | None, unit: Unit
) -> tuple[Unit, ...]:
    """Append *unit* to the loop *parent_id*, or to the top level."""
    if parent_id is None or find_loop(units, parent_id) is None:
        return tuple(units) + (unit,)
    return _insert_into(units, parent_id, unit)


def _insert_into(
    units: tuple[Unit, ...], parent_id: str, unit: Unit
) -> tuple[Unit, ...]:
    rebuilt: list[Unit] = []
    for item in units:
        if item.type == "loop":
            if item.id == parent_id:
                item = dc_replace(item, children=item.children + (unit,))
            else:
                item = dc_replace(
                    item, children=_insert_into(item.children, parent_id, unit)
                )
        rebuilt.append(item)
    return tuple(rebuilt)


def remove(units: tuple[Unit, ...], target_id: str) -> tuple[Unit, ...]:
    """Drop the unit *target_id* (and its subtree) wherever it sits."""
    rebuilt: list[Unit] = []
    for item in units:
        if item.id == target_id:
            continue
        if item.type == "loop":
            item = dc_replace(item, children=remove(item.children, target_id))
        rebuilt.append(item)
    return tuple(rebuilt)


# ── editing session ──────────────────────────────────────────────────────


class SequenceEditor(QObject):
    """The working draft plus the "add into this loop" selection.

    Signals
    -------
    units_changed(units: tuple)
        Emitted after every change to the draft.
    parent_changed(parent_id: str | None)
        Emitted when the insertion target changes.
    """

    units_changed = pyqtSignal(object)
    parent_changed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        units: Iterable[Unit] = (),
    ) -> None:
        super().__init__(parent)
        self._units: tuple[Unit, ...] = tuple(units)
        self._current_parent_id: str | None = None

    @property
    def units(self) -> tuple[Unit, ...]:
        return self._units

    @property
    def current_parent_id(self) -> str | None:
        return self._current_parent_id

    @property
    def is_empty(self) -> bool:
        return not self._units

    # ── commands ──────────────────────────────────────────────────────

    def add_step(
        self, minutes: object, seconds: object, label: str | None = None
    ) -> Step | None:
        """Add a step at the current parent.  Zero-length input is ignored."""
        step = make_step(minutes, seconds, label)
        if step is None:
            return None
        self.add_unit(step)
        return step

    def add_loop(self, repetitions: object, label: str | None = None) -> Loop:
        loop = make_loop(repetitions, label)
        self.add_unit(loop)
        return loop

    def add_unit(self, unit: Unit) -> None:
        # The selection may point at a loop removed since it was chosen,
        # so it is checked against the tree as it is now.
        self._set_units(insert(self._units, self._current_parent_id, unit))

    def remove_unit(self, unit_id: str) -> None:
        new_units = remove(self._units, unit_id)
        if new_units == self._units:
            return
        self._set_units(new_units)
        selected = self._current_parent_id
        if selected is not None and (
            selected == unit_id or not contains(new_units, selected)
        ):
            self.select_parent(None)

    def select_parent(self, unit_id: str | None) -> None:
        if unit_id == self._current_parent_id:
            return
        self._current_parent_id = unit_id
        self.parent_changed.emit(unit_id)

    def replace(self, units: Iterable[Unit]) -> None:
        """Swap in a whole new tree (e.g. after loading from storage)."""
        self.select_parent(None)
        self._set_units(tuple(units))

    def clear(self) -> None:
        self.replace(())

    # ── internal ──────────────────────────────────────────────────────

    def _set_units(self, units: tuple[Unit, ...]) -> None:
        self._units = units
        logger.debug("Sequence tree now has %d top-level units", len(units))
        self.units_changed.emit(units)
