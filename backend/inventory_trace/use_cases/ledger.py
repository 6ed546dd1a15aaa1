"""Movement ledger use-cases: paged search, appointment history, center listing, detail."""
from __future__ import annotations

import logging
import time
from typing import Any, Protocol

from ..config import settings
from ..domain_errors import DomainError, UpstreamError
from ..schemas import LedgerFilter, LedgerPage, Movement, MovementDetail, MovementLot, PageMeta
from ..services.aggregator import aggregate
from ..services.envelope import unwrap
from ..services.ledger_filter import build_search_params, filter_movements, normalize_filter, sort_by_moved_at
from ..services.lot_resolver import StockedLot, backfill_lot, inventory_lot_lookup, needs_backfill, resolve_lots
from ..services.movement_normalizer import normalize, normalize_many
from ..upstream import center_lookup

logger = logging.getLogger(__name__)


class MovementSource(Protocol):
    def search(self, params: dict[str, Any]) -> Any: ...

    def get_by_id(self, movement_id: str) -> Any: ...

    def list_by_center(self, center_id: str) -> Any: ...

    def list_by_appointment(self, appointment_id: str) -> Any: ...

    def list_inventory_lots_by_center(self, center_id: str) -> Any: ...

    def list_centers(self) -> Any: ...


def _validated_filter(filters: LedgerFilter) -> LedgerFilter:
    try:
        filters = normalize_filter(filters)
    except ValueError as error:
        raise DomainError(
            code="LEDGER_INVALID_FILTER",
            http_status=400,
            message=str(error),
        ) from error
    if filters.size is not None and filters.size > settings.MAX_PAGE_SIZE:
        filters = filters.model_copy(update={"size": settings.MAX_PAGE_SIZE})
    return filters


def load_center_names(client: MovementSource) -> dict[str, str]:
    """Center display names; an unavailable lookup degrades to raw ids."""
    try:
        body = client.list_centers()
    except UpstreamError:
        logger.exception("Failed to load center lookup; falling back to center ids")
        return {}
    return center_lookup(unwrap(body).items)


def load_inventory_lots(client: MovementSource, center_id: str) -> dict[str, StockedLot]:
    """Center stock keyed by part lot; an unavailable listing means no backfill."""
    try:
        body = client.list_inventory_lots_by_center(center_id)
    except UpstreamError:
        logger.exception("Failed to load inventory lots for center %s; lots keep their own serial/batch", center_id)
        return {}
    return inventory_lot_lookup(body)


def _ledger_page(
    *,
    movements: list[Movement],
    page: PageMeta,
    center_names: dict[str, str],
) -> LedgerPage:
    return LedgerPage(
        items=movements,
        page=page,
        summary=aggregate(movements, total_elements=page.total_elements, center_names=center_names),
    )


def load_ledger_page_use_case(*, client: MovementSource, filters: LedgerFilter) -> LedgerPage:
    """Run the upstream search and derive the ledger page with its statistics."""
    started = time.perf_counter()
    filters = _validated_filter(filters)
    params = build_search_params(filters, default_size=settings.DEFAULT_PAGE_SIZE)

    envelope = unwrap(client.search(params), requested_page=filters.page)
    center_names = load_center_names(client)
    movements = normalize_many(envelope.items, center_names)

    result = _ledger_page(movements=movements, page=envelope.page, center_names=center_names)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "ledger.search page=%s items=%s total=%s ms=%.0f",
        envelope.page.number,
        len(movements),
        envelope.page.total_elements,
        elapsed_ms,
    )
    return result


def list_appointment_history_use_case(
    *,
    client: MovementSource,
    appointment_id: str,
    filters: LedgerFilter | None = None,
) -> LedgerPage:
    """Prefer the appointment listing; fall back to a filtered search."""
    filters = _validated_filter((filters or LedgerFilter()).model_copy(update={"appointment_id": appointment_id}))
    try:
        body = client.list_by_appointment(appointment_id)
    except UpstreamError as exc:
        logger.warning(
            "ledger.appointment_listing_failed appointment=%s code=%s; falling back to search",
            appointment_id,
            exc.code,
        )
        return load_ledger_page_use_case(client=client, filters=filters)

    envelope = unwrap(body, requested_page=filters.page)
    center_names = load_center_names(client)
    movements = normalize_many(envelope.items, center_names)
    return _ledger_page(movements=movements, page=envelope.page, center_names=center_names)


def list_center_movements_use_case(
    *,
    client: MovementSource,
    center_id: str,
    filters: LedgerFilter | None = None,
) -> LedgerPage:
    """Center listing is unfiltered upstream, so filters apply locally.

    Records from this endpoint often omit their own center, so the center
    is not re-checked locally.
    """
    filters = _validated_filter((filters or LedgerFilter()).model_copy(update={"center_id": None}))
    envelope = unwrap(client.list_by_center(center_id))
    center_names = load_center_names(client)

    movements = sort_by_moved_at(filter_movements(normalize_many(envelope.items, center_names), filters))
    page = PageMeta(total_pages=1, total_elements=len(movements), number=0)
    return _ledger_page(movements=movements, page=page, center_names=center_names)


def get_movement_detail_use_case(*, client: MovementSource, movement_id: str) -> MovementDetail:
    envelope = unwrap(client.get_by_id(movement_id))
    if not envelope.items:
        raise DomainError(
            code="MOVEMENT_NOT_FOUND",
            http_status=404,
            message="Movement not found",
            details={"movement_id": movement_id},
        )

    movement = normalize(envelope.items[0], load_center_names(client))
    lots = resolve_lots(movement)
    if movement.center_id and needs_backfill(lots):
        lots = resolve_lots(movement, load_inventory_lots(client, movement.center_id))
    return MovementDetail(movement=movement, lots=lots)


def list_center_lots_use_case(
    *,
    client: MovementSource,
    center_id: str,
    filters: LedgerFilter | None = None,
) -> list[MovementLot]:
    """Part lots moved through a center, newest movement first."""
    page = list_center_movements_use_case(client=client, center_id=center_id, filters=filters)
    resolved = [(movement, resolve_lots(movement)) for movement in page.items]

    inventory_lots: dict[str, StockedLot] = {}
    if needs_backfill(lot for _, lots in resolved for lot in lots):
        inventory_lots = load_inventory_lots(client, center_id)

    result = [
        MovementLot(
            **backfill_lot(lot, inventory_lots).model_dump(),
            movement_id=movement.id,
            moved_at=movement.moved_at,
        )
        for movement, lots in resolved
        for lot in lots
    ]
    logger.info("ledger.center_lots center=%s movements=%s lots=%s", center_id, len(resolved), len(result))
    return result
