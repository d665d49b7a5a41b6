from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..classes.repository import ClassRepository
from ..core.exceptions import ValidationError
from ..students.repository import StudentRepository


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class AttendanceReportService:
    """Flattens stored sheets into per-student rows for a date range."""

    def __init__(self, attendance: AttendanceRepository, students: StudentRepository, classes: ClassRepository):
        self._attendance = attendance
        self._students = students
        self._classes = classes

    def build(
        self,
        *,
        start: date,
        end: date,
        class_id: Optional[int] = None,
        student_id: Optional[int] = None,
    ) -> ReportData:
        if end < start:
            raise ValidationError("End date must not be before start date")

        sheets = self._attendance.list_range(start=start, end=end, class_id=class_id)

        student_ids = {e.student_id for s in sheets for e in s.records}
        students = {s.student_id: s for s in self._students.get_many(sorted(student_ids))}
        class_names = {c.class_id: c.name for c in self._classes.list_all()}

        rows: list[dict] = []
        summary_map: dict[int, dict] = {}

        for sheet in sheets:
            for e in sheet.records:
                if student_id is not None and e.student_id != int(student_id):
                    continue

                st = students.get(e.student_id)
                rows.append(
                    {
                        "sheet_id": sheet.sheet_id,
                        "date": sheet.attendance_date.strftime("%Y-%m-%d"),
                        "class_name": class_names.get(sheet.class_id, "Unknown"),
                        "section": sheet.section,
                        "student_id": e.student_id,
                        "student_name": st.name if st else "Unknown",
                        "registration_number": st.registration_number if st else "",
                        "status": e.status.value,
                        "remarks": e.remarks or "",
                        "updated_at": sheet.updated_at.isoformat(),
                    }
                )

                s = summary_map.get(e.student_id)
                if not s:
                    s = {
                        "student_id": e.student_id,
                        "student_name": st.name if st else "Unknown",
                        "registration_number": st.registration_number if st else "",
                        "present": 0,
                        "absent": 0,
                        "holiday": 0,
                    }
                    summary_map[e.student_id] = s
                s[e.status.value.lower()] += 1

        summary = []
        for s in summary_map.values():
            # holidays are not working days
            working_days = s["present"] + s["absent"]
            s["percentage"] = round(100.0 * s["present"] / working_days, 1) if working_days else 0.0
            summary.append(s)

        summary.sort(key=lambda x: (-x["percentage"], x["student_name"]))
        return ReportData(rows=rows, summary=summary)
