"""Per-page statistics over normalized ledger movements."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Iterable

from ..config import settings
from ..schemas import CenterRollup, Movement, Summary


def center_label(movement: Movement, center_names: Mapping[str, str] | None = None) -> str:
    if movement.center_name:
        return movement.center_name
    if movement.center_id:
        if center_names and center_names.get(movement.center_id):
            return center_names[movement.center_id]
        return movement.center_id
    return settings.UNKNOWN_CENTER_LABEL


def aggregate(
    movements: Iterable[Movement],
    *,
    total_elements: int | None = None,
    center_names: Mapping[str, str] | None = None,
) -> Summary:
    """Count movements by direction, reason and center.

    `total_elements` is the server-declared size of the whole query; it is
    reported as-is and never reconciled with the page count.
    """
    by_direction: dict[str, int] = {}
    by_reason: dict[str, int] = {}
    by_center: dict[str, dict[str, int]] = {}
    page_total = 0

    for movement in movements:
        page_total += 1
        direction = (movement.direction or "").upper()
        if direction:
            by_direction[direction] = by_direction.get(direction, 0) + 1
        if movement.reason:
            by_reason[movement.reason] = by_reason.get(movement.reason, 0) + 1

        bucket = by_center.setdefault(center_label(movement, center_names), {"total": 0, "in": 0, "out": 0})
        bucket["total"] += 1
        if direction == "IN":
            bucket["in"] += 1
        elif direction == "OUT":
            bucket["out"] += 1

    return Summary(
        total=page_total if total_elements is None else total_elements,
        page_total=page_total,
        by_direction=by_direction,
        by_reason=by_reason,
        by_center={label: CenterRollup(**counts) for label, counts in by_center.items()},
    )
