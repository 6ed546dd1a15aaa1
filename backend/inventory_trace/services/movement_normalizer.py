"""Map raw movement / shipment-item records onto the canonical Movement."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any, Iterable

from ..schemas import Movement, Quantity
from .field_resolver import AliasTable, resolve, resolve_text

logger = logging.getLogger(__name__)


DIRECTIONS: tuple[str, ...] = ("IN", "OUT")
REASONS: tuple[str, ...] = ("SHIPMENT_IN", "SHIPMENT_OUT", "SERVICE_USE", "RETURN", "ADJUSTMENT")

# Shipment status (`status`, `shipmentStatus`) is lifecycle state, never a direction.
MOVEMENT_ALIASES = AliasTable(
    {
        "id": ("id", "movementId", "inventoryMovementId", "shipmentItemId"),
        "direction": ("direction", "movementDirection", "movement.direction"),
        "reason": ("reason", "movementReason", "reasonCode", "movement.reason"),
        "center_id": ("centerId", "center.id", "center.centerId", "serviceCenterId", "serviceCenter.id"),
        "center_name": (
            "centerName",
            "center.name",
            "center.centerName",
            "serviceCenterName",
            "serviceCenter.name",
        ),
        "moved_at": ("movedAt", "movementDate", "createdAt", "created_at", "createdDate"),
        "part_id": ("partId", "part.id", "part.partId", "partLot.partId", "partLot.part.id"),
        "part_no": ("partNo", "part.partNo", "partLot.partNo", "partLot.part.partNo"),
        "part_name": ("partName", "part.partName", "part.name", "partLot.partName", "name"),
        "part_lot_id": ("partLotId", "partLot.id"),
        "serial_no": (
            "serialNo",
            "serial",
            "sn",
            "serialNumber",
            "serial_no",
            "partLotSerialNo",
            "partLot.serialNo",
            "partLot.serial",
        ),
        "batch_no": (
            "batchNo",
            "batch",
            "lotNo",
            "batchNumber",
            "batch_no",
            "partLotBatchNo",
            "partLot.batchNo",
            "partLot.lotNo",
        ),
        "mfg_date": (
            "mfgDate",
            "mfg_date",
            "manufactureDate",
            "mfg",
            "partLot.mfgDate",
            "partLot.manufacturingDate",
        ),
        "part_lots": ("partLots", "lots", "lotList"),
        "total_quantity": ("totalQuantity", "total_quantity"),
        "quantity": ("quantity", "qty"),
        "appointment_id": ("appointmentId", "appointment.id"),
        "appointment_note": ("appointmentNote", "appointment.note"),
        "shipment_code": ("shipmentCode", "shipment.code", "shipment.shipmentCode"),
        "vin": ("vin", "vehicleVin", "vehicle.vin", "appointment.vin", "appointment.vehicle.vin"),
        "note": ("note", "notes", "description"),
    }
)

# Lot quantities share one alias list so derived totals and resolved lots agree.
LOT_QUANTITY_PATHS: tuple[str, ...] = ("quantity", "qty")


def coerce_quantity(value: Any) -> Quantity | None:
    """Non-negative number from upstream, or None when absent or unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number) or number < 0:
        return None
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def sum_lot_quantities(part_lots: Iterable[Any]) -> Quantity:
    total: Quantity = 0
    for lot in part_lots:
        total += coerce_quantity(resolve(lot, LOT_QUANTITY_PATHS)) or 0
    return total


def derive_total_quantity(
    *,
    explicit_total: Quantity | None,
    part_lots: tuple[Any, ...],
    quantity: Quantity | None,
) -> tuple[Quantity, bool]:
    """Return `(total, derived)`; an explicit upstream total always wins."""
    if explicit_total is not None:
        return explicit_total, False
    if part_lots:
        return sum_lot_quantities(part_lots), True
    if quantity is not None:
        return quantity, True
    return 0, True


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, (int, float)):
        # Epoch milliseconds, as serialized by Jackson without a date module.
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(text))
        except ValueError:
            logger.debug("normalizer.unparseable_timestamp value=%r", value)
            return None
    return None


def parse_date(value: Any) -> date | None:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    parsed = parse_timestamp(value)
    return parsed.date() if parsed else None


def _upper(value: str | None) -> str:
    return value.strip().upper() if value else ""


def _fallback_id(center_id: str | None, moved_at: Any) -> str | None:
    parts = [str(part) for part in (center_id, moved_at) if part is not None and part != ""]
    if not parts:
        return None
    return "@".join(parts)


def _part_lots(raw: Any) -> tuple[Any, ...]:
    value = MOVEMENT_ALIASES.resolve(raw, "part_lots")
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return ()


def normalize(raw: Any, center_names: Mapping[str, str] | None = None) -> Movement:
    """Build a Movement from any raw record; missing data never raises."""
    def text(field: str) -> str | None:
        return resolve_text(raw, MOVEMENT_ALIASES, field)

    center_id = text("center_id")
    center_name = text("center_name")
    if center_name is None and center_id is not None and center_names:
        center_name = center_names.get(center_id)

    moved_at_raw = MOVEMENT_ALIASES.resolve(raw, "moved_at")
    part_lots = _part_lots(raw)
    quantity = coerce_quantity(MOVEMENT_ALIASES.resolve(raw, "quantity"))
    total_quantity, derived = derive_total_quantity(
        explicit_total=coerce_quantity(MOVEMENT_ALIASES.resolve(raw, "total_quantity")),
        part_lots=part_lots,
        quantity=quantity,
    )

    return Movement(
        id=text("id") or _fallback_id(center_id, moved_at_raw),
        direction=_upper(text("direction")),
        reason=_upper(text("reason")),
        center_id=center_id,
        center_name=center_name,
        moved_at=parse_timestamp(moved_at_raw),
        part_id=text("part_id"),
        part_no=text("part_no"),
        part_name=text("part_name"),
        part_lot_id=text("part_lot_id"),
        serial_no=text("serial_no"),
        batch_no=text("batch_no"),
        mfg_date=parse_date(MOVEMENT_ALIASES.resolve(raw, "mfg_date")),
        part_lots=part_lots,
        quantity=quantity,
        total_quantity=total_quantity,
        total_quantity_derived=derived,
        appointment_id=text("appointment_id"),
        appointment_note=text("appointment_note"),
        shipment_code=text("shipment_code"),
        vin=text("vin"),
        note=text("note"),
    )


def normalize_many(records: Iterable[Any], center_names: Mapping[str, str] | None = None) -> list[Movement]:
    return [normalize(record, center_names) for record in records]
