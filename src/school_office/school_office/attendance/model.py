from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceEntry:
    """One student's line on a sheet."""

    student_id: int
    status: AttendanceStatus = AttendanceStatus.PRESENT
    remarks: Optional[str] = None

    def to_dict(self) -> dict:
        return {"student_id": self.student_id, "status": self.status.value, "remarks": self.remarks}

    @classmethod
    def from_dict(cls, data: dict) -> "AttendanceEntry":
        return cls(
            student_id=int(data["student_id"]),
            status=AttendanceStatus(data.get("status") or AttendanceStatus.PRESENT.value),
            remarks=data.get("remarks"),
        )


@dataclass(frozen=True)
class AttendanceSheet:
    """Domain entity: attendance of one class/section on one day.

    (attendance_date, class_id, section) is unique across sheets and
    student_id is unique within `records`.
    """

    sheet_id: int
    attendance_date: date
    class_id: int
    section: str
    records: tuple[AttendanceEntry, ...]
    marked_by: Optional[int]
    created_at: datetime
    updated_at: datetime
    is_holiday: bool = False
    holiday_reason: Optional[str] = None

    @property
    def key(self) -> tuple[date, int, str]:
        return (self.attendance_date, self.class_id, self.section)

    def status_for(self, student_id: int) -> Optional[AttendanceEntry]:
        for entry in self.records:
            if entry.student_id == student_id:
                return entry
        return None


@dataclass(frozen=True)
class RosterLine:
    """Read-model for the attendance-taking screen."""

    student_id: int
    name: str
    registration_number: str
    roll_number: str
    father_name: str
    current_status: Optional[AttendanceStatus]
    remarks: str = ""


@dataclass(frozen=True)
class AttendanceDay:
    attendance_date: date
    class_id: int
    section: str
    students: list[RosterLine]
    is_holiday: bool
    holiday_reason: Optional[str] = None
