"""Smallest-free-integer allocation for ids and default names."""

from typing import Iterable


def smallest_free_id(used_ids: Iterable[int]) -> int:
    used = set(used_ids)
    # one of 1..len(used)+1 is always free
    for candidate in range(1, len(used) + 2):
        if candidate not in used:
            return candidate
    raise AssertionError("unreachable")


def smallest_free_name(prefix: str, used_names: Iterable[str]) -> str:
    used = set(used_names)
    for candidate in range(1, len(used) + 2):
        name = f"{prefix}{candidate}"
        if name not in used:
            return name
    raise AssertionError("unreachable")
