"""Group VIN-scoped movements into per-part traceability records."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Iterable

from ..schemas import Lot, Movement, PartTraceRecord, TraceMovement
from .display import display_value
from .field_resolver import is_present
from .lot_resolver import resolve_lots

logger = logging.getLogger(__name__)


def part_key(movement: Movement) -> str | None:
    """`partId` when present, else `partNo`; None means unattributable."""
    if is_present(movement.part_id):
        return movement.part_id
    if is_present(movement.part_no):
        return movement.part_no
    return None


def project_movement(movement: Movement, center_names: Mapping[str, str] | None = None) -> TraceMovement:
    center = movement.center_name
    if not center and movement.center_id:
        center = (center_names or {}).get(movement.center_id) or movement.center_id
    return TraceMovement(
        date=movement.moved_at,
        direction=movement.direction,
        reason=movement.reason,
        center_name=display_value(center),
        note=movement.note,
        appointment_note=movement.appointment_note,
    )


@dataclass
class _PartTraceBuilder:
    key: str
    seed: Movement
    first_lot: Lot | None
    part_lots: list[Lot] = field(default_factory=list)
    movements: list[TraceMovement] = field(default_factory=list)

    def build(self) -> PartTraceRecord:
        return PartTraceRecord(
            part_key=self.key,
            part_id=self.seed.part_id,
            part_no=self.seed.part_no,
            part_name=self.seed.part_name,
            production_date=self.first_lot.mfg_date if self.first_lot else None,
            serial_no=self.first_lot.serial_no if self.first_lot else None,
            batch_no=self.first_lot.batch_no if self.first_lot else None,
            part_lots=self.part_lots,
            movements=self.movements,
        )


def group_by_vin(
    movements: Iterable[Movement],
    center_names: Mapping[str, str] | None = None,
) -> list[PartTraceRecord]:
    """Partition movements by part key, in first-encounter order."""
    builders: dict[str, _PartTraceBuilder] = {}
    skipped = 0

    for movement in movements:
        key = part_key(movement)
        if key is None:
            skipped += 1
            continue

        lots = resolve_lots(movement)
        builder = builders.get(key)
        if builder is None:
            builder = _PartTraceBuilder(key=key, seed=movement, first_lot=lots[0] if lots else None)
            builders[key] = builder

        builder.movements.append(project_movement(movement, center_names))
        builder.part_lots.extend(lots)

    if skipped:
        logger.debug("traceability.unattributed_movements count=%s", skipped)
    return [builder.build() for builder in builders.values()]
