"""Response envelope detection: bare array, Spring page object or single entity."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..schemas import PageMeta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Envelope:
    items: list[Any]
    page: PageMeta


def coerce_page_int(value: Any) -> int | None:
    """Integer page metadata or None when the value is not an integer."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _page_field(body: Mapping[str, Any], key: str, *, default: int, malformed: int) -> int:
    raw = body.get(key)
    if raw is None:
        return default
    coerced = coerce_page_int(raw)
    if coerced is None:
        logger.debug("envelope.malformed_page_meta key=%s value=%r", key, raw)
        return malformed
    return coerced


def unwrap(body: Any, requested_page: int = 0) -> Envelope:
    if isinstance(body, list):
        return Envelope(
            items=body,
            page=PageMeta(total_pages=1, total_elements=len(body), number=0),
        )

    if body is None:
        return Envelope(items=[], page=PageMeta(total_pages=0, total_elements=0, number=0))

    if isinstance(body, Mapping) and isinstance(body.get("content"), list):
        items = body["content"]
        return Envelope(
            items=items,
            page=PageMeta(
                total_pages=_page_field(body, "totalPages", default=1, malformed=0),
                total_elements=_page_field(body, "totalElements", default=len(items), malformed=len(items)),
                number=_page_field(body, "number", default=requested_page, malformed=requested_page),
            ),
        )

    if not isinstance(body, Mapping):
        logger.debug("envelope.unexpected_body type=%s", type(body).__name__)
    return Envelope(items=[body], page=PageMeta(total_pages=1, total_elements=1, number=0))
