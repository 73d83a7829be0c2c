"""JSON-shaped payloads for sequences, including legacy migration.

Current shape::

    {"id": "...", "name": "...", "description": "...",
     "items": [Unit, ...], "createdAt": 1700000000000}

    Unit = {"type": "step", "id": ..., "time": 30, "label": ...}
         | {"type": "loop", "id": ..., "repetitions": 2,
            "children": [Unit, ...], "label": ...}

Older releases stored a flat list of steps, either as a bare array
(``[{"time": 20, "id": "a"}, ...]``) or under a ``steps`` key with no
``items``.  :func:`migrate_payload` lifts both into the current shape.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import PayloadError
from .model import Loop, Sequence, Step, Unit, coerce_int, new_id, now_millis

logger = logging.getLogger(__name__)

DEFAULT_SEQUENCE_NAME = "Current Sequence"


# ── encode ───────────────────────────────────────────────────────────────


def unit_to_dict(unit: Unit) -> dict[str, Any]:
    if isinstance(unit, Step):
        data: dict[str, Any] = {"type": "step", "id": unit.id, "time": unit.time}
    else:
        data = {
            "type": "loop",
            "id": unit.id,
            "repetitions": unit.repetitions,
            "children": [unit_to_dict(c) for c in unit.children],
        }
    if unit.label:
        data["label"] = unit.label
    return data


def sequence_to_dict(sequence: Sequence) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": sequence.id,
        "name": sequence.name,
        "items": [unit_to_dict(u) for u in sequence.items],
        "createdAt": sequence.created_at,
    }
    if sequence.description:
        data["description"] = sequence.description
    return data


# ── migration ────────────────────────────────────────────────────────────


def _legacy_step(record: Any) -> dict[str, Any]:
    if not isinstance(record, dict):
        raise PayloadError(f"legacy step is not an object: {record!r}")
    step = dict(record)
    step["type"] = "step"
    if not step.get("id"):
        step["id"] = new_id()
    return step


def migrate_payload(payload: Any) -> dict[str, Any]:
    """Return *payload* in the current ``items`` shape.

    Idempotent: a current payload comes back as an equal dict.
    """
    if isinstance(payload, list):
        logger.info("Migrating bare-array sequence (%d steps)", len(payload))
        return {
            "id": new_id(),
            "name": DEFAULT_SEQUENCE_NAME,
            "items": [_legacy_step(r) for r in payload],
            "createdAt": now_millis(),
        }
    if not isinstance(payload, dict):
        raise PayloadError(f"unexpected sequence payload: {type(payload).__name__}")

    if "items" not in payload and isinstance(payload.get("steps"), list):
        logger.info("Migrating steps-based sequence %r", payload.get("id"))
        migrated = {k: v for k, v in payload.items() if k != "steps"}
        migrated["items"] = [_legacy_step(r) for r in payload["steps"]]
        return migrated

    return dict(payload)


# ── decode ───────────────────────────────────────────────────────────────


def unit_from_dict(data: Any) -> Unit | None:
    """Decode one unit.  Returns ``None`` for a step that cannot play."""
    if not isinstance(data, dict):
        raise PayloadError(f"unit is not an object: {data!r}")

    kind = data.get("type", "step")
    unit_id = str(data.get("id") or new_id())
    label = data.get("label") or None

    if kind == "step":
        seconds = coerce_int(data.get("time"), default=0)
        if seconds <= 0:
            logger.warning("Dropping step %s with duration %r", unit_id, data.get("time"))
            return None
        return Step(id=unit_id, time=seconds, label=label)

    if kind == "loop":
        children = data.get("children", [])
        if not isinstance(children, list):
            raise PayloadError(f"loop {unit_id} children is not a list")
        # A zero count is kept as-is; flatten() plays it zero times.
        repetitions = coerce_int(data.get("repetitions"), default=1)
        return Loop(
            id=unit_id,
            repetitions=repetitions,
            children=units_from_list(children),
            label=label,
        )

    raise PayloadError(f"unknown unit type {kind!r}")


def units_from_list(records: Any) -> tuple[Unit, ...]:
    if not isinstance(records, list):
        raise PayloadError("items is not a list")
    units = (unit_from_dict(r) for r in records)
    return tuple(u for u in units if u is not None)


def sequence_from_payload(payload: Any) -> Sequence:
    """Migrate and decode a stored sequence.

    Raises :class:`PayloadError` if the data cannot be understood.
    """
    data = migrate_payload(payload)
    try:
        items = units_from_list(data.get("items"))
    except RecursionError as exc:
        raise PayloadError("sequence is nested too deeply") from exc
    return Sequence(
        id=str(data.get("id") or new_id()),
        name=str(data.get("name") or DEFAULT_SEQUENCE_NAME),
        items=items,
        created_at=coerce_int(data.get("createdAt"), default=0),
        description=data.get("description") or None,
    )
