from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    holiday_date: date
    description: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class HolidayCheck:
    is_holiday: bool
    reason: Optional[str] = None
