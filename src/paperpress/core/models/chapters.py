"""
Module: chapters

Purpose:
    Chapter summary as shown in chapter pickers. Counts are snapshots
    taken when the bank file was parsed and are hints only; the size of
    a pool returned by the bank is what sampling relies on.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Chapter:
    """
    Chapter within a class+subject (immutable).

    Attributes:
        id: Chapter id unique within class+subject, e.g. "9_chem_ch1"
        number: Chapter number (1-based)
        name: Display name
        mcq_count: Number of MCQs at load time (advisory)
        short_count: Number of short questions at load time (advisory)
        long_count: Number of long questions at load time (advisory)
    """

    id: str
    number: int
    name: str
    mcq_count: int = 0
    short_count: int = 0
    long_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "name": self.name,
            "mcqCount": self.mcq_count,
            "shortCount": self.short_count,
            "longCount": self.long_count,
        }
