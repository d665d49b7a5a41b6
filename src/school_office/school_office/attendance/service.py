from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..classes.model import SchoolClass
from ..classes.repository import ClassRepository
from ..common.datetime_utils import normalize_day, utc_now
from ..core.constants import SECTIONS
from ..core.enums import AttendanceStatus, HolidayPolicy
from ..core.exceptions import HolidayConflict, InvalidRecord
from ..holidays.service import HolidayService
from ..students.repository import StudentRepository
from .model import AttendanceDay, AttendanceEntry, AttendanceSheet, RosterLine
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_STATUS_LOOKUP = {s.value.lower(): s for s in AttendanceStatus}


def parse_status(value: Any) -> AttendanceStatus:
    """Missing status means Present; anything outside the three values is rejected."""

    if value is None or value == "":
        return AttendanceStatus.PRESENT
    if isinstance(value, AttendanceStatus):
        return value
    status = _STATUS_LOOKUP.get(str(value).strip().lower())
    if status is None:
        raise InvalidRecord(f"Invalid attendance status: {value!r}")
    return status


def parse_entry(raw: Any) -> AttendanceEntry:
    """Accept an AttendanceEntry, a mapping or a (student_id, status[, remarks]) tuple."""

    if isinstance(raw, AttendanceEntry):
        return AttendanceEntry(student_id=raw.student_id, status=parse_status(raw.status), remarks=raw.remarks)

    if isinstance(raw, Mapping):
        student_id = raw.get("student_id", raw.get("studentId"))
        status = raw.get("status")
        remarks = raw.get("remarks")
    elif isinstance(raw, (tuple, list)) and 1 <= len(raw) <= 3:
        student_id = raw[0]
        status = raw[1] if len(raw) > 1 else None
        remarks = raw[2] if len(raw) > 2 else None
    else:
        raise InvalidRecord(f"Malformed attendance record: {raw!r}")

    if isinstance(student_id, bool):
        raise InvalidRecord(f"Invalid student id: {student_id!r}")
    try:
        student_id = int(student_id)
    except (TypeError, ValueError):
        raise InvalidRecord(f"Invalid student id: {student_id!r}")

    remarks = str(remarks).strip() if remarks is not None else None
    return AttendanceEntry(student_id=student_id, status=parse_status(status), remarks=remarks or None)


class AttendanceService:
    """Attendance register: at most one sheet per (date, class, section).

    Submissions are validated in full before anything is written, then stored
    with one atomic upsert on that key.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        classes: ClassRepository,
        holidays: HolidayService,
        *,
        holiday_policy: HolidayPolicy | str = HolidayPolicy.REJECT,
        sections: Sequence[str] = SECTIONS,
    ):
        self._attendance = attendance
        self._students = students
        self._classes = classes
        self._holidays = holidays
        self._holiday_policy = HolidayPolicy(holiday_policy)
        self._sections = tuple(sections)

    @property
    def holiday_policy(self) -> HolidayPolicy:
        return self._holiday_policy

    def _normalize_key(self, attendance_date, class_id, section) -> tuple[date, int, str]:
        try:
            day = normalize_day(attendance_date)
        except (TypeError, ValueError):
            raise InvalidRecord(f"Invalid attendance date: {attendance_date!r}")

        try:
            class_id = int(class_id)
        except (TypeError, ValueError):
            raise InvalidRecord(f"Invalid class id: {class_id!r}")

        section = (section or "").strip().upper()
        if section not in self._sections:
            raise InvalidRecord(f"Invalid section: {section!r}")
        return day, class_id, section

    def _require_class(self, class_id: int) -> SchoolClass:
        school_class = self._classes.get_by_id(class_id)
        if not school_class:
            raise InvalidRecord(f"Class {class_id} does not exist")
        if not school_class.is_active:
            raise InvalidRecord(f"Class {class_id} is not active")
        return school_class

    def _validate_entries(self, *, class_id: int, section: str, records: Iterable[Any]) -> list[AttendanceEntry]:
        entries = [parse_entry(r) for r in records or []]

        seen: set[int] = set()
        for e in entries:
            if e.student_id in seen:
                raise InvalidRecord(f"Student {e.student_id} appears more than once")
            seen.add(e.student_id)

        roster = {s.student_id for s in self._students.list_roster(class_id=class_id, section=section)}
        unknown = sorted(seen - roster)
        if unknown:
            raise InvalidRecord(
                f"Students not enrolled in class {class_id} section {section}: {', '.join(str(i) for i in unknown)}"
            )
        return entries

    def submit_attendance(
        self,
        attendance_date: date | datetime | str,
        class_id: int,
        section: str,
        marked_by: Optional[int],
        records: Iterable[Any],
        *,
        override_holiday: bool = False,
        now: Optional[datetime] = None,
    ) -> AttendanceSheet:
        """Create or overwrite the sheet for (date, class, section).

        Raises InvalidRecord (nothing written) for an unknown class or
        section, a bad status, a repeated student or a student outside the
        roster. On a holiday the configured policy applies unless
        `override_holiday` is set.
        """

        day, class_id, section = self._normalize_key(attendance_date, class_id, section)
        self._require_class(class_id)
        entries = self._validate_entries(class_id=class_id, section=section, records=records)

        holiday = self._holidays.check(day)
        if holiday.is_holiday and not override_holiday:
            if self._holiday_policy == HolidayPolicy.REJECT:
                raise HolidayConflict(
                    f"{day.isoformat()} is a holiday ({holiday.reason}); confirm to record attendance anyway",
                    reason=holiday.reason,
                )
            if self._holiday_policy == HolidayPolicy.COERCE:
                entries = [
                    AttendanceEntry(student_id=e.student_id, status=AttendanceStatus.HOLIDAY, remarks=e.remarks)
                    for e in entries
                ]

        sheet = self._attendance.upsert_sheet(
            attendance_date=day,
            class_id=class_id,
            section=section,
            records=entries,
            marked_by=int(marked_by) if marked_by is not None else None,
            is_holiday=holiday.is_holiday,
            holiday_reason=holiday.reason if holiday.is_holiday else None,
            now=now or utc_now(),
        )
        logger.info(
            "attendance saved: date=%s class=%d section=%s records=%d by=%s",
            day.isoformat(), class_id, section, len(entries), marked_by,
        )
        return sheet

    def get_sheet(self, attendance_date: date | datetime | str, class_id: int, section: str) -> Optional[AttendanceSheet]:
        day, class_id, section = self._normalize_key(attendance_date, class_id, section)
        return self._attendance.get_sheet(attendance_date=day, class_id=class_id, section=section)

    def get_classes_for_attendance(self) -> Sequence[SchoolClass]:
        return self._classes.list_active()

    def get_students_for_attendance(self, class_id: int, section: str, attendance_date: date | datetime | str) -> AttendanceDay:
        """Roster for the screen, pre-filled from the stored sheet or the holiday calendar."""

        day, class_id, section = self._normalize_key(attendance_date, class_id, section)
        self._require_class(class_id)

        students = self._students.list_roster(class_id=class_id, section=section)
        sheet = self._attendance.get_sheet(attendance_date=day, class_id=class_id, section=section)
        holiday = self._holidays.check(day)

        is_holiday = sheet.is_holiday if sheet else holiday.is_holiday
        reason = (sheet.holiday_reason if sheet else holiday.reason) if is_holiday else None

        lines: list[RosterLine] = []
        for s in students:
            status: Optional[AttendanceStatus] = AttendanceStatus.HOLIDAY if is_holiday else None
            remarks = ""
            entry = sheet.status_for(s.student_id) if sheet else None
            if entry:
                status = entry.status
                remarks = entry.remarks or ""
            lines.append(
                RosterLine(
                    student_id=s.student_id,
                    name=s.name,
                    registration_number=s.registration_number,
                    roll_number=s.roll_number or "",
                    father_name=s.father.name or "",
                    current_status=status,
                    remarks=remarks,
                )
            )

        return AttendanceDay(
            attendance_date=day,
            class_id=class_id,
            section=section,
            students=lines,
            is_holiday=is_holiday,
            holiday_reason=reason,
        )
