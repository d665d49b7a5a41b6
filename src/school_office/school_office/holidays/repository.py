from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Holiday


class HolidayRepository(Protocol):
    def get_by_date(self, holiday_date: date) -> Optional[Holiday]:
        raise NotImplementedError

    def create(self, *, holiday_date: date, description: str) -> int:
        """Insert a holiday; raises DuplicateKeyConflict if the date exists."""

        raise NotImplementedError

    def delete(self, *, holiday_id: int) -> bool:
        raise NotImplementedError

    def list_recent(self, *, limit: int) -> Sequence[Holiday]:
        raise NotImplementedError

    def list_range(self, *, start: date, end: date) -> Sequence[Holiday]:
        raise NotImplementedError
