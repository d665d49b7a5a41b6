from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import SequenceCounter
from .repository import SequenceRepository


class MySQLSequenceRepository(SequenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def increment(self, name: str, *, default_start: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # Single statement: insert path seeds default_start + 1, duplicate
            # path bumps the locked row. LAST_INSERT_ID(expr) keeps the result
            # on this connection so no second read of the row is needed.
            cur.execute(
                """
                INSERT INTO sequence_counters(name, seq)
                VALUES(%s, LAST_INSERT_ID(%s))
                ON DUPLICATE KEY UPDATE seq = LAST_INSERT_ID(seq + 1)
                """,
                (name, int(default_start) + 1),
            )
            cur.execute("SELECT LAST_INSERT_ID() AS seq")
            row = fetchone(cur)
            return int(row["seq"])

    def get(self, name: str) -> Optional[SequenceCounter]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT name, seq FROM sequence_counters WHERE name=%s", (name,))
            row = fetchone(cur)
            if not row:
                return None
            return SequenceCounter(name=row["name"], seq=int(row["seq"]))

    def raise_to(self, name: str, value: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # GREATEST keeps a higher counter; LAST_INSERT_ID carries the
            # stored value back on either path.
            cur.execute(
                """
                INSERT INTO sequence_counters(name, seq)
                VALUES(%s, LAST_INSERT_ID(%s))
                ON DUPLICATE KEY UPDATE seq = LAST_INSERT_ID(GREATEST(seq, VALUES(seq)))
                """,
                (name, int(value)),
            )
            cur.execute("SELECT LAST_INSERT_ID() AS seq")
            row = fetchone(cur)
            return int(row["seq"])
