from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar


K = TypeVar("K", bound=Hashable)
T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class KeyedDiff(Generic[K]):
    entered: tuple[K, ...]
    updated: tuple[K, ...]
    exited: tuple[K, ...]


def diff_keys(old_keys: Iterable[K], new_keys: Iterable[K]) -> KeyedDiff[K]:
    """Set difference of two key sequences, each part in its source order."""
    old = list(old_keys)
    new = list(new_keys)
    if len(set(new)) != len(new):
        raise ValueError("new keys must be unique")
    old_set = set(old)
    new_set = set(new)
    return KeyedDiff(
        entered=tuple(k for k in new if k not in old_set),
        updated=tuple(k for k in new if k in old_set),
        exited=tuple(k for k in old if k not in new_set),
    )


def reconcile(
    current: Mapping[K, E],
    items: Iterable[T],
    *,
    key: Callable[[T], K],
    create: Callable[[T], E],
    update: Callable[[E, T], None],
) -> tuple[dict[K, E], KeyedDiff[K]]:
    """Keyed enter/update/exit join.

    Returns a new mapping in ``items`` order. Elements for surviving keys are
    the same objects as in ``current``, updated in place.
    """
    ordered = list(items)
    by_key = {key(item): item for item in ordered}
    diff = diff_keys(current.keys(), [key(item) for item in ordered])
    out: dict[K, E] = {}
    entered = set(diff.entered)
    for k, item in by_key.items():
        if k in entered:
            out[k] = create(item)
        else:
            element = current[k]
            update(element, item)
            out[k] = element
    return out, diff
