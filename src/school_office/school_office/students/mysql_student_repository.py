from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Gender
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, like_pattern, load_json
from .model import ParentInfo, Student
from .repository import StudentRepository

_COLUMNS = """
    student_id, registration_number, name, class_id, section, roll_number, date_of_birth, gender,
    father_name, father_aadhaar, mother_name, mother_aadhaar, address, mobiles, emails,
    pen, date_of_admission, last_institution, tc_number, is_active
"""


def _to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        registration_number=r["registration_number"],
        name=r["name"],
        class_id=int(r["class_id"]),
        section=r["section"],
        roll_number=r.get("roll_number"),
        date_of_birth=r["date_of_birth"],
        gender=Gender(r["gender"]) if r.get("gender") else None,
        father=ParentInfo(name=r.get("father_name"), aadhaar_number=r.get("father_aadhaar")),
        mother=ParentInfo(name=r.get("mother_name"), aadhaar_number=r.get("mother_aadhaar")),
        address=r["address"],
        mobiles=tuple(load_json(r.get("mobiles"), [])),
        emails=tuple(load_json(r.get("emails"), [])),
        pen=r.get("pen"),
        date_of_admission=r["date_of_admission"],
        last_institution=r.get("last_institution"),
        tc_number=r.get("tc_number"),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_by_registration_number(self, registration_number: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE registration_number=%s", (registration_number,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def create(self, student: Student) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(
                    registration_number, name, class_id, section, roll_number, date_of_birth, gender,
                    father_name, father_aadhaar, mother_name, mother_aadhaar, address, mobiles, emails,
                    pen, date_of_admission, last_institution, tc_number, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    student.registration_number,
                    student.name,
                    int(student.class_id),
                    student.section,
                    student.roll_number,
                    student.date_of_birth,
                    student.gender.value if student.gender else None,
                    student.father.name,
                    student.father.aadhaar_number,
                    student.mother.name,
                    student.mother.aadhaar_number,
                    student.address,
                    dump_json(list(student.mobiles)),
                    dump_json(list(student.emails)),
                    student.pen,
                    student.date_of_admission,
                    student.last_institution,
                    student.tc_number,
                    1 if student.is_active else 0,
                ),
            )
            return int(cur.lastrowid)

    def update(self, student: Student) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students SET
                    registration_number=%s, name=%s, class_id=%s, section=%s, roll_number=%s,
                    date_of_birth=%s, gender=%s, father_name=%s, father_aadhaar=%s,
                    mother_name=%s, mother_aadhaar=%s, address=%s, mobiles=%s, emails=%s,
                    pen=%s, date_of_admission=%s, last_institution=%s, tc_number=%s
                WHERE student_id=%s
                """,
                (
                    student.registration_number,
                    student.name,
                    int(student.class_id),
                    student.section,
                    student.roll_number,
                    student.date_of_birth,
                    student.gender.value if student.gender else None,
                    student.father.name,
                    student.father.aadhaar_number,
                    student.mother.name,
                    student.mother.aadhaar_number,
                    student.address,
                    dump_json(list(student.mobiles)),
                    dump_json(list(student.emails)),
                    student.pen,
                    student.date_of_admission,
                    student.last_institution,
                    student.tc_number,
                    int(student.student_id),
                ),
            )
            # rowcount is 0 for an unchanged row too
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM students WHERE student_id=%s", (int(student.student_id),))
            return fetchone(cur) is not None

    def set_active(self, student_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET is_active=%s WHERE student_id=%s",
                (1 if is_active else 0, int(student_id)),
            )
            return cur.rowcount > 0

    def list_roster(self, *, class_id: int, section: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM students
                WHERE class_id=%s AND section=%s AND is_active=1
                ORDER BY name ASC
                """,
                (int(class_id), section),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def list_by_class(
        self,
        *,
        class_id: Optional[int] = None,
        section: Optional[str] = None,
        active_only: bool = True,
        search: Optional[str] = None,
    ) -> Sequence[Student]:
        clauses: list[str] = []
        params: list[object] = []
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(int(class_id))
        if section:
            clauses.append("section=%s")
            params.append(section)
        if active_only:
            clauses.append("is_active=1")
        if search:
            pattern = like_pattern(search)
            clauses.append("(name LIKE %s OR registration_number LIKE %s)")
            params.extend([pattern, pattern])

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students {where} ORDER BY name ASC", tuple(params))
            return [_to_student(r) for r in fetchall(cur)]

    def get_many(self, student_ids: Sequence[int]) -> Sequence[Student]:
        ids = sorted({int(i) for i in student_ids})
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id IN ({placeholders})", tuple(ids))
            return [_to_student(r) for r in fetchall(cur)]
