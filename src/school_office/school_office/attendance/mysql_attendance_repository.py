from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import AttendanceEntry, AttendanceSheet
from .repository import AttendanceRepository

_COLUMNS = """
    sheet_id, attendance_date, class_id, section, records, marked_by,
    is_holiday, holiday_reason, created_at, updated_at
"""


def _to_sheet(r: dict) -> AttendanceSheet:
    return AttendanceSheet(
        sheet_id=int(r["sheet_id"]),
        attendance_date=r["attendance_date"],
        class_id=int(r["class_id"]),
        section=r["section"],
        records=tuple(AttendanceEntry.from_dict(d) for d in load_json(r.get("records"), [])),
        marked_by=int(r["marked_by"]) if r.get("marked_by") is not None else None,
        is_holiday=bool(r.get("is_holiday")),
        holiday_reason=r.get("holiday_reason"),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_sheet(self, *, attendance_date: date, class_id: int, section: str) -> Optional[AttendanceSheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sheets
                WHERE attendance_date=%s AND class_id=%s AND section=%s
                """,
                (attendance_date, int(class_id), section),
            )
            r = fetchone(cur)
            return _to_sheet(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            # The unique key (attendance_date, class_id, section) makes this a
            # single-row upsert; concurrent writers serialize on the row lock.
            cur.execute(
                """
                INSERT INTO attendance_sheets(
                    attendance_date, class_id, section, records, marked_by,
                    is_holiday, holiday_reason, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    records=VALUES(records),
                    marked_by=VALUES(marked_by),
                    is_holiday=VALUES(is_holiday),
                    holiday_reason=VALUES(holiday_reason),
                    updated_at=VALUES(updated_at)
                """,
                (
                    attendance_date,
                    int(class_id),
                    section,
                    dump_json([e.to_dict() for e in records]),
                    marked_by,
                    1 if is_holiday else 0,
                    holiday_reason,
                    now,
                    now,
                ),
            )

            # Same transaction: read back what this statement wrote.
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sheets
                WHERE attendance_date=%s AND class_id=%s AND section=%s
                """,
                (attendance_date, int(class_id), section),
            )
            return _to_sheet(fetchone(cur))

    def list_range(self, *, start: date, end: date, class_id: Optional[int] = None) -> Sequence[AttendanceSheet]:
        clauses = ["attendance_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(int(class_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sheets
                WHERE {where}
                ORDER BY attendance_date DESC, class_id ASC, section ASC
                """,
                tuple(params),
            )
            return [_to_sheet(r) for r in fetchall(cur)]
