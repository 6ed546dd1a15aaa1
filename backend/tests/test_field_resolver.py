from __future__ import annotations

import pytest

from inventory_trace.services.field_resolver import AliasTable, parse_path, resolve, resolve_text


def test_first_present_candidate_wins_and_zero_is_present() -> None:
    record = {"a": None, "b": "", "c": 0, "d": 5}
    assert resolve(record, ["a", "b", "c", "d"]) == 0


def test_nested_paths_resolve_up_to_three_levels() -> None:
    record = {"part": {"partNo": "BAT-01"}, "partLot": {"part": {"id": "P1"}}}
    assert resolve(record, ["partNo", "part.partNo"]) == "BAT-01"
    assert resolve(record, ["partId", "partLot.part.id"]) == "P1"


def test_missing_intermediate_short_circuits_to_next_candidate() -> None:
    record = {"part": "not-an-object", "partLot": None, "partNo": "X"}
    assert resolve(record, ["part.partNo", "partLot.partNo", "partNo"]) == "X"


def test_non_mapping_records_resolve_to_none() -> None:
    assert resolve(None, ["a"]) is None
    assert resolve(["a"], ["a"]) is None
    assert resolve("text", ["a.b"]) is None


def test_returns_none_when_nothing_matches() -> None:
    assert resolve({"a": ""}, ["a", "b.c"]) is None


@pytest.mark.parametrize("path", ["", "a..b", ".a", "a.b.c.d"])
def test_invalid_candidate_path_is_a_programmer_error(path: str) -> None:
    with pytest.raises(ValueError, match="Invalid candidate path"):
        resolve({"a": 1}, [path])


def test_parse_path_splits_keys() -> None:
    assert parse_path("partLot.part.partNo") == ("partLot", "part", "partNo")


def test_alias_table_validates_paths_up_front() -> None:
    with pytest.raises(ValueError, match="Invalid candidate path"):
        AliasTable({"broken": ("a.b.c.d",)})


def test_alias_table_resolves_by_field_name_in_priority_order() -> None:
    table = AliasTable({"center": ("centerName", "center.name", "centerId")})
    assert table.paths("center") == ("centerName", "center.name", "centerId")
    assert table.resolve({"center": {"name": "HN"}, "centerId": "C1"}, "center") == "HN"
    assert resolve_text({"centerId": 12}, table, "center") == "12"
    assert resolve_text({}, table, "center") is None
