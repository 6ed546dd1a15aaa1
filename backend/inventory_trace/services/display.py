"""Display labels and placeholders for movement fields."""

from __future__ import annotations

from typing import Any

from ..config import settings


DIRECTION_LABELS_VI: dict[str, str] = {
    "IN": "Nhập kho",
    "OUT": "Xuất kho",
}


REASON_LABELS_VI: dict[str, str] = {
    "SHIPMENT_IN": "Nhận hàng vận chuyển",
    "SHIPMENT_OUT": "Xuất hàng vận chuyển",
    "SERVICE_USE": "Sử dụng cho dịch vụ",
    "RETURN": "Trả linh kiện",
    "ADJUSTMENT": "Điều chỉnh tồn kho",
}


def display_value(value: Any, placeholder: str | None = None) -> Any:
    """Absent values render as the placeholder, zero stays zero."""
    if value is None or value == "":
        return settings.DISPLAY_PLACEHOLDER if placeholder is None else placeholder
    return value


def direction_label(direction: str | None) -> str:
    # Unknown directions are shown raw and never borrow the IN/OUT labels.
    if not direction:
        return settings.DISPLAY_PLACEHOLDER
    return DIRECTION_LABELS_VI.get(direction, direction)


def reason_label(reason: str | None) -> str:
    if not reason:
        return settings.DISPLAY_PLACEHOLDER
    return REASON_LABELS_VI.get(reason, reason)
