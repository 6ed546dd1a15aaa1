from __future__ import annotations

from datetime import date, datetime, timezone

from inventory_trace.services.movement_normalizer import (
    coerce_quantity,
    derive_total_quantity,
    normalize,
    normalize_many,
    parse_timestamp,
)


def test_direction_and_reason_are_uppercased() -> None:
    movement = normalize({"direction": "in", "reason": "shipment_in", "quantity": 5})

    assert movement.direction == "IN"
    assert movement.reason == "SHIPMENT_IN"
    assert movement.quantity == 5
    assert movement.total_quantity == 5
    assert movement.total_quantity_derived is True


def test_nested_aliases_are_resolved() -> None:
    raw = {
        "movementId": "m-1",
        "center": {"id": "C1", "name": "Hà Nội"},
        "part": {"id": "P1", "partNo": "BAT-01", "name": "Battery pack"},
        "movedAt": "2025-01-05T10:00:00Z",
        "appointment": {"id": "A1", "note": "Thay pin", "vehicle": {"vin": "VF8ABC"}},
        "shipment": {"code": "SHP-9"},
        "notes": "checked",
    }

    movement = normalize(raw)

    assert movement.id == "m-1"
    assert movement.center_id == "C1"
    assert movement.center_name == "Hà Nội"
    assert movement.part_id == "P1"
    assert movement.part_no == "BAT-01"
    assert movement.part_name == "Battery pack"
    assert movement.moved_at == datetime(2025, 1, 5, 10, 0, tzinfo=timezone.utc)
    assert movement.appointment_id == "A1"
    assert movement.appointment_note == "Thay pin"
    assert movement.vin == "VF8ABC"
    assert movement.shipment_code == "SHP-9"
    assert movement.note == "checked"


def test_shipment_status_is_never_read_as_direction() -> None:
    movement = normalize({"shipmentStatus": "IN_TRANSIT", "status": "RECEIVED"})
    assert movement.direction == ""


def test_unknown_direction_passes_through_uppercased() -> None:
    assert normalize({"direction": " sideways "}).direction == "SIDEWAYS"


def test_empty_record_yields_blank_movement() -> None:
    for raw in ({}, None, "garbage"):
        movement = normalize(raw)
        assert movement.id is None
        assert movement.direction == ""
        assert movement.reason == ""
        assert movement.moved_at is None
        assert movement.part_lots == ()
        assert movement.total_quantity == 0


def test_missing_id_falls_back_to_center_and_timestamp() -> None:
    movement = normalize({"centerId": "C1", "movedAt": "2025-01-05T10:00:00"})
    assert movement.id == "C1@2025-01-05T10:00:00"
    assert normalize({"centerId": "C1"}).id == "C1"


def test_missing_timestamp_stays_undefined() -> None:
    assert normalize({"id": "m1"}).moved_at is None
    assert normalize({"movedAt": "not a date"}).moved_at is None


def test_total_quantity_is_derived_from_lots() -> None:
    movement = normalize({"partLots": [{"quantity": 2}, {"qty": "3"}, {"quantity": None}], "quantity": 99})

    assert movement.total_quantity == 5
    assert movement.total_quantity_derived is True
    assert len(movement.part_lots) == 3


def test_explicit_total_quantity_wins_over_lot_sum() -> None:
    movement = normalize({"totalQuantity": 7, "partLots": [{"quantity": 2}]})

    assert movement.total_quantity == 7
    assert movement.total_quantity_derived is False


def test_explicit_zero_total_is_not_treated_as_absent() -> None:
    movement = normalize({"totalQuantity": 0, "quantity": 4})

    assert movement.total_quantity == 0
    assert movement.total_quantity_derived is False


def test_derive_total_quantity_priority() -> None:
    assert derive_total_quantity(explicit_total=None, part_lots=(), quantity=None) == (0, True)
    assert derive_total_quantity(explicit_total=None, part_lots=(), quantity=4) == (4, True)
    assert derive_total_quantity(explicit_total=None, part_lots=({"qty": 1},), quantity=4) == (1, True)
    assert derive_total_quantity(explicit_total=2, part_lots=({"qty": 1},), quantity=4) == (2, False)


def test_coerce_quantity_rejects_negative_and_non_numeric() -> None:
    assert coerce_quantity(-3) is None
    assert coerce_quantity("abc") is None
    assert coerce_quantity(True) is None
    assert coerce_quantity(float("nan")) is None
    assert coerce_quantity("2.0") == 2
    assert coerce_quantity(1.5) == 1.5


def test_center_lookup_fills_missing_center_name() -> None:
    movement = normalize({"centerId": "C1"}, {"C1": "Đà Nẵng"})
    assert movement.center_name == "Đà Nẵng"

    named = normalize({"centerId": "C1", "centerName": "Upstream name"}, {"C1": "Đà Nẵng"})
    assert named.center_name == "Upstream name"


def test_top_level_lot_evidence_is_captured() -> None:
    movement = normalize(
        {
            "partLot": {"id": "L1", "serialNo": "SN-1", "lotNo": "B-7", "mfgDate": "2024-11-20T08:00:00"},
        }
    )

    assert movement.part_lot_id == "L1"
    assert movement.serial_no == "SN-1"
    assert movement.batch_no == "B-7"
    assert movement.mfg_date == date(2024, 11, 20)


def test_epoch_millisecond_timestamps_are_parsed() -> None:
    assert parse_timestamp(1736071200000) == datetime(2025, 1, 5, 10, 0, tzinfo=timezone.utc)


def test_normalization_is_deterministic() -> None:
    raw = {"id": "m1", "direction": "out", "partLots": [{"quantity": 1, "serialNo": "S"}], "movedAt": "2025-01-05"}

    first = normalize(raw)
    second = normalize(raw)

    assert first == second
    assert first.model_dump() == second.model_dump()


def test_normalize_many_preserves_order() -> None:
    movements = normalize_many([{"id": "b"}, {"id": "a"}])
    assert [m.id for m in movements] == ["b", "a"]


def test_amount_is_not_read_as_a_quantity() -> None:
    movement = normalize({"partNo": "BAT-01", "amount": 1250000, "partLots": [{"amount": 99000, "qty": 1}]})

    assert movement.quantity is None
    assert movement.total_quantity == 1
