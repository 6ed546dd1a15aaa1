"""Alias-driven field lookup over loosely typed upstream records."""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Iterable


MAX_PATH_DEPTH = 3


@lru_cache(maxsize=512)
def parse_path(path: str) -> tuple[str, ...]:
    """Split `"part.partNo"` into keys; malformed paths are caller defects."""
    if not isinstance(path, str) or not path:
        raise ValueError(f"Invalid candidate path: {path!r}")
    keys = tuple(path.split("."))
    if len(keys) > MAX_PATH_DEPTH or any(not key for key in keys):
        raise ValueError(f"Invalid candidate path: {path!r}")
    return keys


def is_present(value: Any) -> bool:
    return value is not None and value != ""


def _walk(record: Any, keys: tuple[str, ...]) -> Any:
    current = record
    for key in keys:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def resolve(record: Any, candidate_paths: Iterable[str]) -> Any:
    """Return the first present value among `candidate_paths`, else None."""
    for path in candidate_paths:
        value = _walk(record, parse_path(path))
        if is_present(value):
            return value
    return None


class AliasTable:
    """Ordered candidate paths per canonical field name."""

    def __init__(self, aliases: Mapping[str, Iterable[str]]) -> None:
        self._aliases: dict[str, tuple[str, ...]] = {}
        for field, paths in aliases.items():
            parsed = tuple(paths)
            for path in parsed:
                parse_path(path)
            self._aliases[field] = parsed

    def paths(self, field: str) -> tuple[str, ...]:
        return self._aliases[field]

    def fields(self) -> tuple[str, ...]:
        return tuple(self._aliases)

    def resolve(self, record: Any, field: str) -> Any:
        return resolve(record, self._aliases[field])


def resolve_text(record: Any, table: AliasTable, field: str) -> str | None:
    value = table.resolve(record, field)
    if value is None:
        return None
    return str(value)
