"""Shared pure helpers for the engine (one-pass index construction)."""

from __future__ import annotations

from typing import Callable, Hashable, Iterable, Mapping, TypeVar

from league_results.constants import NO_DIVISION_NAME, UNKNOWN_DIVISION_NAME
from league_results.models.round import Division

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def index_by(items: Iterable[T], key: Callable[[T], K]) -> dict[K, T]:
    """Build a key -> item map in one pass; the first item wins on duplicate keys."""
    index: dict[K, T] = {}
    for item in items:
        index.setdefault(key(item), item)
    return index


def group_by(items: Iterable[T], key: Callable[[T], K]) -> dict[K, list[T]]:
    """Group items by key, keeping first-appearance order of keys and items."""
    groups: dict[K, list[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def division_names(divisions: Iterable[Division]) -> dict[int | None, str]:
    """Division id -> display name, including the no-division bucket."""
    names: dict[int | None, str] = {None: NO_DIVISION_NAME}
    for division in divisions:
        names[division.id] = division.name
    return names


def division_label(names: Mapping[int | None, str], division_id: int | None) -> str:
    return names.get(division_id, UNKNOWN_DIVISION_NAME)
