"""Resolve the part-lot line items a movement carries.

Two branches:

* itemized movements (non-empty ``partLots``) resolve every element on its
  own, borrowing part identity from the parent movement when missing;
* legacy movements without itemized lots get exactly one implied lot built
  from their top-level part / serial / batch / quantity fields.

Lots that only reference a ``partLotId`` can be completed from the center
stock (``inventory_lot_lookup``).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..schemas import Lot, Movement, Quantity
from .envelope import unwrap
from .field_resolver import AliasTable, is_present, resolve_text
from .movement_normalizer import LOT_QUANTITY_PATHS, coerce_quantity, normalize, parse_date, sum_lot_quantities


LOT_ALIASES = AliasTable(
    {
        "part_lot_id": ("id", "partLotId", "partLot_id", "partLot.id"),
        "part_no": ("partNo", "part.partNo", "partLot.partNo"),
        "part_name": ("partName", "part.partName", "part.name", "partLot.partName"),
        "serial_no": (
            "serialNo",
            "serial_no",
            "serialNumber",
            "serial",
            "sn",
            "partLotSerialNo",
            "partLotSerial_no",
            "partLot.serialNo",
            "partLot.serial_no",
            "partLot.serial",
            "part.serialNo",
            "part.serial_no",
        ),
        "batch_no": (
            "batchNo",
            "batch_no",
            "batchNumber",
            "batch",
            "lotNo",
            "partLotBatchNo",
            "partLotBatch_no",
            "partLot.batchNo",
            "partLot.batch_no",
            "partLot.lotNo",
            "part.batchNo",
            "part.batch_no",
        ),
        "mfg_date": (
            "mfgDate",
            "mfg_date",
            "manufactureDate",
            "manufacturingDate",
            "mfg",
            "partLot.mfgDate",
            "partLot.manufacturingDate",
        ),
        "quantity": LOT_QUANTITY_PATHS,
    }
)


def resolve_lot(raw_lot: Any, parent: Movement) -> Lot:
    def text(field: str) -> str | None:
        return resolve_text(raw_lot, LOT_ALIASES, field)

    return Lot(
        part_lot_id=text("part_lot_id"),
        part_no=text("part_no") or parent.part_no,
        part_name=text("part_name") or parent.part_name,
        serial_no=text("serial_no"),
        batch_no=text("batch_no"),
        mfg_date=parse_date(LOT_ALIASES.resolve(raw_lot, "mfg_date")),
        quantity=coerce_quantity(LOT_ALIASES.resolve(raw_lot, "quantity")) or 0,
    )


def has_lot_evidence(movement: Movement) -> bool:
    """Whether a movement without itemized lots still describes one."""
    identity = (movement.part_no, movement.part_name, movement.serial_no, movement.batch_no)
    if any(is_present(value) for value in identity):
        return True
    # Upstream-supplied quantities describe a line item even without identity.
    return movement.quantity is not None or not movement.total_quantity_derived


def synthesized_quantity(movement: Movement) -> Quantity:
    """`totalQuantity ?? quantity ?? sum(partLots) ?? 0`."""
    if not movement.total_quantity_derived:
        return movement.total_quantity
    if movement.quantity is not None:
        return movement.quantity
    if movement.part_lots:
        return sum_lot_quantities(movement.part_lots)
    return movement.total_quantity or 0


def resolve_lots(
    movement: Movement | Mapping[str, Any],
    inventory_lots: Mapping[str, StockedLot] | None = None,
) -> list[Lot]:
    """Lots of a normalized movement, or of a raw detail record.

    `inventory_lots` backfills serial and batch numbers that itemized lots
    only reference through their `partLotId`.
    """
    if not isinstance(movement, Movement):
        movement = normalize(movement)

    if movement.part_lots:
        lots = [resolve_lot(raw_lot, movement) for raw_lot in movement.part_lots]
    elif has_lot_evidence(movement):
        lots = [
            Lot(
                part_lot_id=movement.part_lot_id,
                part_no=movement.part_no,
                part_name=movement.part_name,
                serial_no=movement.serial_no,
                batch_no=movement.batch_no,
                mfg_date=movement.mfg_date,
                quantity=synthesized_quantity(movement),
            )
        ]
    else:
        return []

    if not inventory_lots:
        return lots
    return [backfill_lot(lot, inventory_lots) for lot in lots]


# Center stock
@dataclass(frozen=True)
class StockedLot:
    serial_no: str | None = None
    batch_no: str | None = None


INVENTORY_LOT_ALIASES = AliasTable(
    {
        "part_lot_id": ("partLotId", "partLot_id", "partLot.id"),
        "serial_no": ("serialNo", "serial_no", "serialNumber"),
        "batch_no": ("batchNo", "batch_no", "batchNumber"),
    }
)


def inventory_lot_lookup(body: Any) -> dict[str, StockedLot]:
    """`partLotId -> StockedLot` from a center inventory-lot payload; first entry wins."""
    if isinstance(body, Mapping) and isinstance(body.get("inventoryLots"), list):
        records = body["inventoryLots"]
    else:
        records = unwrap(body).items

    lookup: dict[str, StockedLot] = {}
    for record in records:
        part_lot_id = resolve_text(record, INVENTORY_LOT_ALIASES, "part_lot_id")
        if part_lot_id is None or part_lot_id in lookup:
            continue
        lookup[part_lot_id] = StockedLot(
            serial_no=resolve_text(record, INVENTORY_LOT_ALIASES, "serial_no"),
            batch_no=resolve_text(record, INVENTORY_LOT_ALIASES, "batch_no"),
        )
    return lookup


def needs_backfill(lots: Iterable[Lot]) -> bool:
    return any(lot.part_lot_id and not (lot.serial_no and lot.batch_no) for lot in lots)


def backfill_lot(lot: Lot, inventory_lots: Mapping[str, StockedLot]) -> Lot:
    # Values carried by the movement itself are never overwritten.
    stocked = inventory_lots.get(lot.part_lot_id) if lot.part_lot_id else None
    if stocked is None:
        return lot
    return lot.model_copy(
        update={
            "serial_no": lot.serial_no or stocked.serial_no,
            "batch_no": lot.batch_no or stocked.batch_no,
        }
    )
