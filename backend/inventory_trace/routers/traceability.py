"""Part traceability endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..schemas import TraceabilityReport
from ..upstream import InventoryMovementClient, get_client
from ..use_cases.traceability import trace_parts_by_vin_use_case

router = APIRouter(prefix="/traceability", tags=["traceability"])


@router.get("/vin/{vin}", response_model=TraceabilityReport)
def get_parts_by_vin(
    vin: str,
    client: InventoryMovementClient = Depends(get_client),
):
    return trace_parts_by_vin_use_case(client=client, vin=vin)
