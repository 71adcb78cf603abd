"""
Module: composer.selection

Purpose:
    Question selection: difficulty filtering, seeded sampling and the
    composition engine that turns a CompositionRequest into a Selection.

Key Functions:
    - compose(): One-shot composition
    - top_up(): Extend an id list without discarding prior picks
    - sample(): Uniform sampling without replacement

Key Classes:
    - CompositionEngine: Composition with concurrent pool fetching
    - CompositionRequest: Explicit request value object
    - SeededRandomSource: Production random source
"""

from .config import CompositionRequest
from .difficulty import filter_by_difficulty, normalise_difficulty
from .sampler import RandomSource, SeededRandomSource, sample, shuffle
from .engine import CompositionEngine, compose, top_up, shortfalls

__all__ = [
    "CompositionRequest",
    "filter_by_difficulty",
    "normalise_difficulty",
    "RandomSource",
    "SeededRandomSource",
    "sample",
    "shuffle",
    "CompositionEngine",
    "compose",
    "top_up",
    "shortfalls",
]
