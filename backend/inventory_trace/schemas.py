"""Pydantic schemas for the canonical movement shapes and API responses."""
from pydantic import BaseModel, Field, ConfigDict, computed_field
from pydantic.alias_generators import to_camel
from typing import Any, Optional, Union
from datetime import date, datetime

from .services import display


Quantity = Union[int, float]


class CanonicalModel(BaseModel):
    """Read-only projection; camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# Envelope
class PageMeta(CanonicalModel):
    total_pages: int = 0
    total_elements: int = 0
    number: int = 0


# Movements
class Movement(CanonicalModel):
    """One inventory transaction normalized from any upstream record shape."""

    id: Optional[str] = None
    direction: str = ""
    reason: str = ""
    center_id: Optional[str] = None
    center_name: Optional[str] = None
    moved_at: Optional[datetime] = None

    part_id: Optional[str] = None
    part_no: Optional[str] = None
    part_name: Optional[str] = None

    # Top-level lot evidence for records that predate itemized lots
    part_lot_id: Optional[str] = None
    serial_no: Optional[str] = None
    batch_no: Optional[str] = None
    mfg_date: Optional[date] = None

    part_lots: tuple[Any, ...] = ()
    quantity: Optional[Quantity] = None
    total_quantity: Quantity = 0
    total_quantity_derived: bool = True

    appointment_id: Optional[str] = None
    appointment_note: Optional[str] = None
    shipment_code: Optional[str] = None
    vin: Optional[str] = None
    note: Optional[str] = None

    @computed_field(alias="directionLabel")
    @property
    def direction_label(self) -> str:
        return display.direction_label(self.direction)

    @computed_field(alias="reasonLabel")
    @property
    def reason_label(self) -> str:
        return display.reason_label(self.reason)


class Lot(CanonicalModel):
    """Part lot line item resolved for display."""

    part_lot_id: Optional[str] = None
    part_no: Optional[str] = None
    part_name: Optional[str] = None
    serial_no: Optional[str] = None
    batch_no: Optional[str] = None
    mfg_date: Optional[date] = None
    quantity: Quantity = Field(default=0, ge=0)


class MovementLot(Lot):
    """Lot line item together with the movement that carried it."""

    movement_id: Optional[str] = None
    moved_at: Optional[datetime] = None


class MovementDetail(CanonicalModel):
    movement: Movement
    lots: list[Lot]


# Ledger aggregation
class CenterRollup(CanonicalModel):
    total: int = 0
    inbound: int = Field(default=0, alias="in")
    outbound: int = Field(default=0, alias="out")


class Summary(CanonicalModel):
    """Statistics over the loaded ledger page.

    `total` is what the server declared for the whole query, `page_total`
    is how many movements were actually aggregated.
    """

    total: int = 0
    page_total: int = 0
    by_direction: dict[str, int] = Field(default_factory=dict)
    by_reason: dict[str, int] = Field(default_factory=dict)
    by_center: dict[str, CenterRollup] = Field(default_factory=dict)


class LedgerFilter(CanonicalModel):
    """Search filters forwarded to the upstream movement search."""

    center_id: Optional[str] = None
    appointment_id: Optional[str] = None
    part_lot_id: Optional[str] = None
    direction: Optional[str] = None
    reason: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    page: int = Field(default=0, ge=0)
    size: Optional[int] = Field(default=None, ge=1)


class LedgerPage(CanonicalModel):
    items: list[Movement]
    page: PageMeta
    summary: Summary


# Traceability
class TraceMovement(CanonicalModel):
    date: Optional[datetime] = None
    direction: str = ""
    reason: str = ""
    center_name: Optional[str] = None
    note: Optional[str] = None
    appointment_note: Optional[str] = None

    @computed_field(alias="directionLabel")
    @property
    def direction_label(self) -> str:
        return display.direction_label(self.direction)

    @computed_field(alias="reasonLabel")
    @property
    def reason_label(self) -> str:
        return display.reason_label(self.reason)


class PartTraceRecord(CanonicalModel):
    """All lot evidence and movement history of one part for a VIN."""

    part_key: str
    part_id: Optional[str] = None
    part_no: Optional[str] = None
    part_name: Optional[str] = None
    production_date: Optional[date] = None
    serial_no: Optional[str] = None
    batch_no: Optional[str] = None
    part_lots: list[Lot] = Field(default_factory=list)
    movements: list[TraceMovement] = Field(default_factory=list)


class TraceabilityReport(CanonicalModel):
    vin: str
    parts: list[PartTraceRecord]


class HealthResponse(BaseModel):
    status: str
    version: str
    upstream: str
