from __future__ import annotations

from inventory_trace.config import settings
from inventory_trace.schemas import CenterRollup
from inventory_trace.services.aggregator import aggregate, center_label
from inventory_trace.services.movement_normalizer import normalize_many


def test_empty_aggregate_is_all_zeros() -> None:
    summary = aggregate([])

    assert summary.model_dump(by_alias=True) == {
        "total": 0,
        "pageTotal": 0,
        "byDirection": {},
        "byReason": {},
        "byCenter": {},
    }


def test_counts_by_direction_reason_and_center() -> None:
    movements = normalize_many(
        [
            {"direction": "IN", "reason": "SHIPMENT_IN", "centerId": "C1", "centerName": "Hà Nội"},
            {"direction": "out", "reason": "SERVICE_USE", "centerId": "C1", "centerName": "Hà Nội"},
            {"direction": "OUT", "reason": "SERVICE_USE", "centerId": "C2"},
            {"direction": "SIDEWAYS", "centerId": "C3"},
            {"reason": "ADJUSTMENT"},
        ]
    )

    summary = aggregate(movements, total_elements=42, center_names={"C2": "Đà Nẵng"})

    assert summary.total == 42
    assert summary.page_total == 5
    assert summary.by_direction == {"IN": 1, "OUT": 2, "SIDEWAYS": 1}
    assert summary.by_reason == {"SHIPMENT_IN": 1, "SERVICE_USE": 2, "ADJUSTMENT": 1}
    assert summary.by_center["Hà Nội"] == CenterRollup(total=2, inbound=1, outbound=1)
    assert summary.by_center["Đà Nẵng"] == CenterRollup(total=1, inbound=0, outbound=1)
    assert summary.by_center["C3"] == CenterRollup(total=1, inbound=0, outbound=0)
    assert summary.by_center[settings.UNKNOWN_CENTER_LABEL].total == 1


def test_total_falls_back_to_page_count_without_server_total() -> None:
    summary = aggregate(normalize_many([{"direction": "IN"}, {"direction": "IN"}]))
    assert summary.total == 2
    assert summary.page_total == 2


def test_directional_counts_never_exceed_movement_count() -> None:
    movements = normalize_many(
        [{"direction": d, "centerId": "C1"} for d in ("IN", "OUT", "", "RETURNED", "in", "OUT")]
    )

    summary = aggregate(movements)

    for rollup in summary.by_center.values():
        assert rollup.inbound + rollup.outbound <= rollup.total
    assert sum(rollup.total for rollup in summary.by_center.values()) == len(movements)


def test_center_rollup_serializes_in_and_out_keys() -> None:
    rollup = CenterRollup(**{"total": 3, "in": 2, "out": 1})
    assert rollup.model_dump(by_alias=True) == {"total": 3, "in": 2, "out": 1}


def test_center_label_precedence() -> None:
    named, bare, anonymous = normalize_many([{"centerId": "C1", "centerName": "HN"}, {"centerId": "C9"}, {}])

    assert center_label(named, {"C1": "Other"}) == "HN"
    assert center_label(bare, {"C9": "Cần Thơ"}) == "Cần Thơ"
    assert center_label(bare) == "C9"
    assert center_label(anonymous) == settings.UNKNOWN_CENTER_LABEL
