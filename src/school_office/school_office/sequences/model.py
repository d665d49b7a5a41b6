from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SequenceCounter:
    """A named counter; `seq` is the last value issued."""

    name: str
    seq: int
