from __future__ import annotations

from datetime import date, datetime

import pytest
from mysql.connector import errors as mysql_errors

from src.school_office.school_office.attendance.model import AttendanceEntry
from src.school_office.school_office.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.school_office.school_office.core.enums import AttendanceStatus, Role
from src.school_office.school_office.core.exceptions import DuplicateKeyConflict, StoreUnavailable, ValidationError
from src.school_office.school_office.database.connection import DBConfig
from src.school_office.school_office.database.mysql_base import db_cursor, load_json, translate_errors
from src.school_office.school_office.sequences.mysql_sequence_repository import MySQLSequenceRepository
from src.school_office.school_office.sequences.service import SequenceService


class FakeCursor:
    def __init__(self, rows=None, error=None):
        self.executed: list[tuple[str, tuple]] = []
        self.rows = list(rows or [])
        self.error = error
        self.closed = False

    def execute(self, sql, params=()):
        if self.error:
            raise self.error
        self.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor: FakeCursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=False):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, conn=None, error=None):
        self.conn = conn
        self.error = error

    def connect(self):
        if self.error:
            raise self.error
        return self.conn


def test_duplicate_entry_becomes_conflict():
    with pytest.raises(DuplicateKeyConflict):
        with translate_errors():
            raise mysql_errors.IntegrityError(msg="Duplicate entry '2025-01-06-1-A'", errno=1062)


def test_other_integrity_errors_propagate():
    with pytest.raises(mysql_errors.IntegrityError):
        with translate_errors():
            raise mysql_errors.IntegrityError(msg="Cannot add or update a child row", errno=1452)


@pytest.mark.parametrize("error", [mysql_errors.InterfaceError, mysql_errors.OperationalError])
def test_connectivity_errors_become_store_unavailable(error):
    with pytest.raises(StoreUnavailable):
        with db_cursor(FakeFactory(error=error(msg="Lost connection"))):
            pass


def test_cursor_commits_and_closes():
    conn = FakeConnection(FakeCursor())
    with db_cursor(FakeFactory(conn)) as (_, cur):
        cur.execute("SELECT 1")

    assert conn.committed and conn.closed
    assert not conn.rolled_back


def test_cursor_rolls_back_on_error():
    conn = FakeConnection(FakeCursor())
    with pytest.raises(RuntimeError):
        with db_cursor(FakeFactory(conn)):
            raise RuntimeError("boom")

    assert conn.rolled_back and conn.closed
    assert not conn.committed


def test_load_json_accepts_driver_variants():
    assert load_json(b'[{"student_id": 1}]') == [{"student_id": 1}]
    assert load_json('["Annual"]') == ["Annual"]
    assert load_json(None, []) == []
    assert load_json("", []) == []


def test_sequence_increment_is_one_upsert():
    cursor = FakeCursor(rows=[{"seq": 215}])
    conn = FakeConnection(cursor)

    value = MySQLSequenceRepository(FakeFactory(conn)).increment("registrationNumber", default_start=214)

    assert value == 215
    upsert, select = cursor.executed
    assert "ON DUPLICATE KEY UPDATE seq = LAST_INSERT_ID(seq + 1)" in upsert[0]
    assert upsert[1] == ("registrationNumber", 215)
    assert select[0] == "SELECT LAST_INSERT_ID() AS seq"
    assert conn.committed


def test_db_config_from_settings_dict():
    config = DBConfig.from_dict({"host": "db", "port": "3307", "user": "office", "password": "pw", "database": "school"})

    assert config.connect_kwargs()["port"] == 3307
    assert "database" not in config.connect_kwargs(with_database=False)


def test_sequence_raise_to_never_lowers():
    cursor = FakeCursor(rows=[{"seq": 217}])
    conn = FakeConnection(cursor)
    svc = SequenceService(MySQLSequenceRepository(FakeFactory(conn)))

    with pytest.raises(ValidationError):
        svc.reset(current_role=Role.ADMIN, sequence_name="registrationNumber", value=214)

    upsert, _ = cursor.executed
    assert "seq = LAST_INSERT_ID(GREATEST(seq, VALUES(seq)))" in upsert[0]
    assert upsert[1] == ("registrationNumber", 214)


def test_issue_next_with_store_down_raises_and_keeps_counter():
    cursor = FakeCursor(rows=[{"seq": 215}])
    factory = FakeFactory(FakeConnection(cursor), error=mysql_errors.InterfaceError(msg="Connection refused"))
    svc = SequenceService(MySQLSequenceRepository(factory))

    with pytest.raises(StoreUnavailable):
        svc.issue_next("registrationNumber")
    assert cursor.executed == []

    factory.error = None
    assert svc.issue_next("registrationNumber") == 215
    assert len(cursor.executed) == 2


def _sheet_row(**overrides):
    now = datetime(2025, 1, 6, 9, 30)
    row = {
        "sheet_id": 7,
        "attendance_date": date(2025, 1, 6),
        "class_id": 1,
        "section": "A",
        "records": '[{"student_id":1,"status":"Present","remarks":null},'
        '{"student_id":2,"status":"Absent","remarks":"fever"}]',
        "marked_by": 3,
        "is_holiday": 0,
        "holiday_reason": None,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


def _upsert(repo):
    return repo.upsert_sheet(
        attendance_date=date(2025, 1, 6),
        class_id=1,
        section="A",
        records=[
            AttendanceEntry(student_id=1),
            AttendanceEntry(student_id=2, status=AttendanceStatus.ABSENT, remarks="fever"),
        ],
        marked_by=3,
        is_holiday=False,
        holiday_reason=None,
        now=datetime(2025, 1, 6, 9, 30),
    )


def test_attendance_upsert_writes_once_and_reads_back_same_key():
    cursor = FakeCursor(rows=[_sheet_row()])
    conn = FakeConnection(cursor)

    sheet = _upsert(MySQLAttendanceRepository(FakeFactory(conn)))

    upsert, readback = cursor.executed
    assert upsert[0].startswith("INSERT INTO attendance_sheets(")
    assert "ON DUPLICATE KEY UPDATE records=VALUES(records)" in upsert[0]
    assert upsert[1][:3] == (date(2025, 1, 6), 1, "A")
    assert '"status":"Absent"' in upsert[1][3]
    assert readback[0].startswith("SELECT")
    assert "WHERE attendance_date=%s AND class_id=%s AND section=%s" in readback[0]
    assert readback[1] == (date(2025, 1, 6), 1, "A")
    assert conn.committed and conn.closed

    assert sheet.key == (date(2025, 1, 6), 1, "A")
    assert sheet.status_for(2).status is AttendanceStatus.ABSENT


def test_attendance_upsert_duplicate_key_reaches_caller_as_conflict():
    cursor = FakeCursor(
        error=mysql_errors.IntegrityError(
            msg="Duplicate entry '2025-01-06-1-A' for key 'uq_attendance_day_class_section'", errno=1062
        )
    )
    conn = FakeConnection(cursor)

    with pytest.raises(DuplicateKeyConflict):
        _upsert(MySQLAttendanceRepository(FakeFactory(conn)))

    assert conn.rolled_back and not conn.committed
