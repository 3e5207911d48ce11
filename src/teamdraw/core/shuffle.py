"""Unbiased permutation helper."""

from __future__ import annotations

import random
import secrets
from collections.abc import Iterable
from typing import TypeVar

__all__ = ["default_rng", "shuffled"]

T = TypeVar("T")

_SYSTEM_RNG = secrets.SystemRandom()


def default_rng() -> random.Random:
    return _SYSTEM_RNG


def shuffled(items: Iterable[T], rng: random.Random | None = None) -> list[T]:
    """Return a uniformly random permutation of *items* as a new list.

    Fisher–Yates: walk ``i`` from the last index down to 1 and swap with a
    uniformly chosen ``j`` in ``[0, i]``.  The input is never modified.
    """

    arr = list(items)
    source = rng or _SYSTEM_RNG
    for i in range(len(arr) - 1, 0, -1):
        j = source.randrange(i + 1)
        arr[i], arr[j] = arr[j], arr[i]
    return arr
