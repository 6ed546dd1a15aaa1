"""Ledger filter helpers: upstream search params and local filtering."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from ..schemas import LedgerFilter, Movement
from .lot_resolver import LOT_ALIASES
from .movement_normalizer import DIRECTIONS, REASONS, as_utc


_SEARCH_PARAM_NAMES: dict[str, str] = {
    "center_id": "centerId",
    "appointment_id": "appointmentId",
    "part_lot_id": "partLotId",
    "direction": "direction",
    "reason": "reason",
    "start_date": "startDate",
    "end_date": "endDate",
}


def normalize_filter(filters: LedgerFilter) -> LedgerFilter:
    """Uppercase enum filters and validate them; raises ValueError."""
    direction = (filters.direction or "").strip().upper() or None
    reason = (filters.reason or "").strip().upper() or None
    if direction is not None and direction not in DIRECTIONS:
        raise ValueError(f"Unsupported direction filter: {direction}")
    if reason is not None and reason not in REASONS:
        raise ValueError(f"Unsupported reason filter: {reason}")
    if filters.start_date and filters.end_date and as_utc(filters.start_date) > as_utc(filters.end_date):
        raise ValueError("startDate must not be after endDate")
    return filters.model_copy(update={"direction": direction, "reason": reason})


def build_search_params(filters: LedgerFilter, *, default_size: int) -> dict[str, Any]:
    """Query params for the upstream search endpoint, empty values dropped."""
    params: dict[str, Any] = {}
    for field, name in _SEARCH_PARAM_NAMES.items():
        value = getattr(filters, field)
        if value is None or value == "":
            continue
        params[name] = value.isoformat() if isinstance(value, datetime) else value
    params["page"] = filters.page or 0
    params["size"] = filters.size or default_size
    return params


def matches_filter(movement: Movement, filters: LedgerFilter) -> bool:
    if filters.center_id and movement.center_id != filters.center_id:
        return False
    if filters.appointment_id and movement.appointment_id != filters.appointment_id:
        return False
    if filters.part_lot_id and movement.part_lot_id != filters.part_lot_id:
        if not any(_raw_lot_id(lot) == filters.part_lot_id for lot in movement.part_lots):
            return False
    if filters.direction and movement.direction != filters.direction:
        return False
    if filters.reason and movement.reason != filters.reason:
        return False
    if filters.start_date or filters.end_date:
        # Movements without a timestamp never fall inside a date range.
        if movement.moved_at is None:
            return False
        if filters.start_date and movement.moved_at < as_utc(filters.start_date):
            return False
        if filters.end_date and movement.moved_at > as_utc(filters.end_date):
            return False
    return True


def _raw_lot_id(raw_lot: Any) -> str | None:
    value = LOT_ALIASES.resolve(raw_lot, "part_lot_id")
    return None if value is None else str(value)


def filter_movements(movements: Iterable[Movement], filters: LedgerFilter) -> list[Movement]:
    return [movement for movement in movements if matches_filter(movement, filters)]


def sort_by_moved_at(movements: Iterable[Movement], *, descending: bool = True) -> list[Movement]:
    """Newest first; undated movements always sort last."""
    items = list(movements)
    dated = [m for m in items if m.moved_at is not None]
    undated = [m for m in items if m.moved_at is None]
    dated.sort(key=lambda m: m.moved_at, reverse=descending)
    return dated + undated
