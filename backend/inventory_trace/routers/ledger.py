"""Inventory movement ledger endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..schemas import LedgerFilter, LedgerPage, MovementDetail, MovementLot
from ..upstream import InventoryMovementClient, get_client
from ..use_cases.ledger import (
    get_movement_detail_use_case,
    list_appointment_history_use_case,
    list_center_lots_use_case,
    list_center_movements_use_case,
    load_ledger_page_use_case,
)

router = APIRouter(prefix="/inventory-movements", tags=["inventory-movements"])


def ledger_filter_params(
    filter_center_id: Optional[str] = Query(None, alias="centerId"),
    filter_appointment_id: Optional[str] = Query(None, alias="appointmentId"),
    part_lot_id: Optional[str] = Query(None, alias="partLotId"),
    direction: Optional[str] = Query(None),
    reason: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    page: int = Query(0, ge=0),
    size: Optional[int] = Query(None, ge=1),
) -> LedgerFilter:
    return LedgerFilter(
        center_id=filter_center_id or None,
        appointment_id=filter_appointment_id or None,
        part_lot_id=part_lot_id or None,
        direction=direction or None,
        reason=reason or None,
        start_date=start_date,
        end_date=end_date,
        page=page,
        size=size,
    )


@router.get("/ledger", response_model=LedgerPage)
def get_ledger_page(
    filters: LedgerFilter = Depends(ledger_filter_params),
    client: InventoryMovementClient = Depends(get_client),
):
    return load_ledger_page_use_case(client=client, filters=filters)


@router.get("/by-appointment/{appointment_id}", response_model=LedgerPage)
def get_appointment_history(
    appointment_id: str,
    filters: LedgerFilter = Depends(ledger_filter_params),
    client: InventoryMovementClient = Depends(get_client),
):
    return list_appointment_history_use_case(client=client, appointment_id=appointment_id, filters=filters)


@router.get("/by-center/{center_id}", response_model=LedgerPage)
def get_center_movements(
    center_id: str,
    filters: LedgerFilter = Depends(ledger_filter_params),
    client: InventoryMovementClient = Depends(get_client),
):
    return list_center_movements_use_case(client=client, center_id=center_id, filters=filters)


@router.get("/by-center/{center_id}/lots", response_model=list[MovementLot])
def get_center_lots(
    center_id: str,
    filters: LedgerFilter = Depends(ledger_filter_params),
    client: InventoryMovementClient = Depends(get_client),
):
    return list_center_lots_use_case(client=client, center_id=center_id, filters=filters)


@router.get("/{movement_id}", response_model=MovementDetail)
def get_movement_detail(
    movement_id: str,
    client: InventoryMovementClient = Depends(get_client),
):
    return get_movement_detail_use_case(client=client, movement_id=movement_id)
