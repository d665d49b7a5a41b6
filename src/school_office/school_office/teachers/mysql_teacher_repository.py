from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, like_pattern
from .model import Teacher
from .repository import TeacherRepository

_COLUMNS = """
    teacher_id, teacher_code, name, phone, aadhaar, joining_date, email, father_name, mother_name,
    government_teacher_id, salary_amount, salary_effective_date, total_experience
"""


def _to_teacher(r: dict) -> Teacher:
    return Teacher(
        teacher_id=int(r["teacher_id"]),
        teacher_code=r["teacher_code"],
        name=r["name"],
        phone=r["phone"],
        aadhaar=r["aadhaar"],
        joining_date=r["joining_date"],
        email=r.get("email"),
        father_name=r.get("father_name"),
        mother_name=r.get("mother_name"),
        government_teacher_id=r.get("government_teacher_id"),
        salary_amount=Decimal(str(r.get("salary_amount") or 0)),
        salary_effective_date=r.get("salary_effective_date"),
        total_experience=Decimal(str(r.get("total_experience") or 0)),
    )


def _params(t: Teacher) -> tuple:
    return (
        t.name,
        t.phone,
        t.aadhaar,
        t.joining_date,
        t.email,
        t.father_name,
        t.mother_name,
        t.government_teacher_id,
        t.salary_amount,
        t.salary_effective_date,
        t.total_experience,
    )


class MySQLTeacherRepository(TeacherRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teachers WHERE teacher_id=%s", (int(teacher_id),))
            r = fetchone(cur)
            return _to_teacher(r) if r else None

    def get_by_code(self, teacher_code: str) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teachers WHERE teacher_code=%s", (teacher_code,))
            r = fetchone(cur)
            return _to_teacher(r) if r else None

    def create(self, teacher: Teacher) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teachers(
                    teacher_code, name, phone, aadhaar, joining_date, email, father_name, mother_name,
                    government_teacher_id, salary_amount, salary_effective_date, total_experience
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (teacher.teacher_code, *_params(teacher)),
            )
            return int(cur.lastrowid)

    def update(self, teacher: Teacher) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE teachers SET
                    name=%s, phone=%s, aadhaar=%s, joining_date=%s, email=%s, father_name=%s,
                    mother_name=%s, government_teacher_id=%s, salary_amount=%s,
                    salary_effective_date=%s, total_experience=%s
                WHERE teacher_id=%s
                """,
                (*_params(teacher), int(teacher.teacher_id)),
            )
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM teachers WHERE teacher_id=%s", (int(teacher.teacher_id),))
            return fetchone(cur) is not None

    def delete(self, teacher_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teachers WHERE teacher_id=%s", (int(teacher_id),))
            return cur.rowcount > 0

    def search(self, query: Optional[str] = None) -> Sequence[Teacher]:
        where = ""
        params: tuple = ()
        if query:
            pattern = like_pattern(query)
            where = """
                WHERE name LIKE %s OR teacher_code LIKE %s OR email LIKE %s
                   OR phone LIKE %s OR aadhaar LIKE %s
            """
            params = (pattern,) * 5

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teachers {where} ORDER BY created_at DESC, teacher_id DESC", params)
            return [_to_teacher(r) for r in fetchall(cur)]
