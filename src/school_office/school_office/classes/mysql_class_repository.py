from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import FeeType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import ClassFee, SchoolClass
from .repository import ClassFeeRepository, ClassRepository


def _to_class(r: dict) -> SchoolClass:
    return SchoolClass(
        class_id=int(r["class_id"]),
        name=r["name"],
        exams=tuple(load_json(r.get("exams"), [])),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, name, exams, is_active FROM classes WHERE class_id=%s", (int(class_id),))
            r = fetchone(cur)
            return _to_class(r) if r else None

    def get_by_name(self, name: str) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, name, exams, is_active FROM classes WHERE name=%s", (name,))
            r = fetchone(cur)
            return _to_class(r) if r else None

    def create(self, *, name: str, exams: Sequence[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO classes(name, exams, is_active) VALUES(%s,%s,1)",
                (name, dump_json(list(exams))),
            )
            return int(cur.lastrowid)

    def update_exams(self, *, class_id: int, exams: Sequence[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE classes SET exams=%s WHERE class_id=%s",
                (dump_json(list(exams)), int(class_id)),
            )
            return cur.rowcount > 0

    def list_active(self) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, name, exams, is_active FROM classes WHERE is_active=1 ORDER BY name")
            return [_to_class(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT class_id, name, exams, is_active FROM classes ORDER BY name")
            return [_to_class(r) for r in fetchall(cur)]


class MySQLClassFeeRepository(ClassFeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, *, class_id: int, fee_type: FeeType, amount: Decimal, effective_from: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO class_fees(class_id, fee_type, amount, effective_from, is_active)
                VALUES(%s,%s,%s,%s,1)
                """,
                (int(class_id), fee_type.value, amount, effective_from),
            )
            return int(cur.lastrowid)

    def list_active_for_class(self, class_id: int) -> Sequence[ClassFee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT fee_id, class_id, fee_type, amount, effective_from, effective_to, is_active
                FROM class_fees
                WHERE class_id=%s AND is_active=1
                ORDER BY effective_from DESC, fee_id DESC
                """,
                (int(class_id),),
            )
            return [
                ClassFee(
                    fee_id=int(r["fee_id"]),
                    class_id=int(r["class_id"]),
                    fee_type=FeeType(r["fee_type"]),
                    amount=Decimal(r["amount"]),
                    effective_from=r["effective_from"],
                    effective_to=r.get("effective_to"),
                    is_active=bool(r.get("is_active", True)),
                )
                for r in fetchall(cur)
            ]
