from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceEntry, AttendanceSheet


class AttendanceRepository(Protocol):
    def get_sheet(self, *, attendance_date: date, class_id: int, section: str) -> Optional[AttendanceSheet]:
        raise NotImplementedError

    def upsert_sheet(
        self,
        *,
        attendance_date: date,
        class_id: int,
        section: str,
        records: Sequence[AttendanceEntry],
        marked_by: Optional[int],
        is_holiday: bool,
        holiday_reason: Optional[str],
        now: datetime,
    ) -> AttendanceSheet:
        """Insert the sheet for the key, or replace records/marked_by/updated_at in place.

        Must be one atomic write against the unique key. Implementations that
        cannot upsert natively and lose an insert race raise
        DuplicateKeyConflict instead of writing a second sheet.
        """

        raise NotImplementedError

    def list_range(self, *, start: date, end: date, class_id: Optional[int] = None) -> Sequence[AttendanceSheet]:
        """Sheets with start <= date <= end, newest date first."""

        raise NotImplementedError
