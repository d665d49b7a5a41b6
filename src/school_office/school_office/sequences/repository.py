from __future__ import annotations

from typing import Optional, Protocol

from .model import SequenceCounter


class SequenceRepository(Protocol):
    def increment(self, name: str, *, default_start: int) -> int:
        """Atomically create-or-increment the counter and return the new value.

        A missing counter is created holding `default_start + 1`. The new value
        must be durable before this returns.
        """

        raise NotImplementedError

    def get(self, name: str) -> Optional[SequenceCounter]:
        raise NotImplementedError

    def raise_to(self, name: str, value: int) -> int:
        """Move the counter up to `value`, never down, and return the stored value.

        A stored value above `value` is left untouched and returned as is.
        """

        raise NotImplementedError
