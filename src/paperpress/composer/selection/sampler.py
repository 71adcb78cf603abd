"""
Module: composer.selection.sampler

Purpose:
    Uniform random sampling without replacement. This is the only place
    the composer draws random numbers, and the source of those numbers is
    injected so tests can script exact permutations.

Key Functions:
    - shuffle(): Fisher-Yates permutation into a new list
    - sample(): First min(count, len(pool)) elements of a shuffle

Key Classes:
    - RandomSource: Protocol with a single next() -> float in [0, 1)
    - SeededRandomSource: random.Random-backed production source

Dependencies:
    - random (std)
"""

from __future__ import annotations

import random
from typing import List, Optional, Protocol, Sequence, TypeVar


T = TypeVar("T")


class RandomSource(Protocol):
    """Source of floats uniformly distributed in [0, 1)."""

    def next(self) -> float:
        ...


class SeededRandomSource:
    """
    RandomSource backed by random.Random.

    Args:
        seed: Seed for reproducible draws; None seeds from the system
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def next(self) -> float:
        return self._rng.random()

    def __repr__(self) -> str:
        return f"SeededRandomSource(seed={self.seed!r})"


def shuffle(pool: Sequence[T], source: RandomSource) -> List[T]:
    """
    Return a uniformly random permutation of pool.

    Walks from the end, swapping each slot i with a slot j drawn from
    [0, i]. The input is copied first and never modified.
    """
    items = list(pool)
    for i in range(len(items) - 1, 0, -1):
        j = int(source.next() * (i + 1))
        # Guard a source that returns exactly 1.0
        j = min(j, i)
        items[i], items[j] = items[j], items[i]
    return items


def sample(pool: Sequence[T], count: int, source: RandomSource) -> List[T]:
    """
    Draw up to count distinct elements from pool.

    Under-supply is not an error: the result is simply shorter.

    Args:
        pool: Elements to draw from
        count: Number wanted; zero or negative draws nothing
        source: Random source

    Returns:
        List of length min(max(count, 0), len(pool))

    Example:
        >>> sample(["a", "b", "c"], 5, SeededRandomSource(1)).__len__()
        3
    """
    if count <= 0 or not pool:
        return []
    return shuffle(pool, source)[:count]
