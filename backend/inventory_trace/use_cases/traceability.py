"""VIN traceability use-case."""
from __future__ import annotations

import logging
from typing import Any, Protocol

from ..domain_errors import DomainError
from ..schemas import TraceabilityReport
from ..services.envelope import unwrap
from ..services.movement_normalizer import normalize_many
from ..services.traceability import group_by_vin

logger = logging.getLogger(__name__)

VIN_MAX_LENGTH = 17


class TraceabilitySource(Protocol):
    def traceability_by_vin(self, vin: str) -> Any: ...


def normalize_vin(vin: str | None) -> str:
    value = (vin or "").strip().upper()
    if not value:
        raise DomainError(
            code="TRACE_VIN_REQUIRED",
            http_status=400,
            message="VIN is required for traceability lookup",
        )
    if len(value) > VIN_MAX_LENGTH:
        raise DomainError(
            code="TRACE_VIN_INVALID",
            http_status=400,
            message=f"VIN must be at most {VIN_MAX_LENGTH} characters",
            details={"vin": value},
        )
    return value


def trace_parts_by_vin_use_case(*, client: TraceabilitySource, vin: str | None) -> TraceabilityReport:
    """Group every movement linked to a VIN into per-part records.

    No movements is a normal empty report, not an error.
    """
    normalized_vin = normalize_vin(vin)
    envelope = unwrap(client.traceability_by_vin(normalized_vin))
    movements = normalize_many(envelope.items)
    parts = group_by_vin(movements)

    logger.info(
        "traceability.vin vin=%s movements=%s parts=%s",
        normalized_vin,
        len(movements),
        len(parts),
    )
    return TraceabilityReport(vin=normalized_vin, parts=parts)
