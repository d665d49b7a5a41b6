from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

import pytest
from werkzeug.security import generate_password_hash

from src.school_office.school_office.attendance.model import AttendanceEntry, AttendanceSheet
from src.school_office.school_office.classes.model import ClassFee, SchoolClass
from src.school_office.school_office.container import Container, wire_container
from src.school_office.school_office.core.enums import FeeType, Role
from src.school_office.school_office.core.exceptions import DuplicateKeyConflict
from src.school_office.school_office.holidays.model import Holiday
from src.school_office.school_office.sequences.model import SequenceCounter
from src.school_office.school_office.students.model import ParentInfo, Student
from src.school_office.school_office.teachers.model import Teacher
from src.school_office.school_office.users.model import User


class InMemorySequences:
    def __init__(self):
        # stands in for the single-statement upsert on the counter row
        self._lock = threading.Lock()
        self.counters: dict[str, int] = {}
        self.increments = 0

    def increment(self, name: str, *, default_start: int) -> int:
        with self._lock:
            value = self.counters.get(name, default_start) + 1
            self.counters[name] = value
            self.increments += 1
            return value

    def get(self, name: str) -> Optional[SequenceCounter]:
        if name not in self.counters:
            return None
        return SequenceCounter(name=name, seq=self.counters[name])

    def raise_to(self, name: str, value: int) -> int:
        with self._lock:
            stored = max(self.counters.get(name, value), int(value))
            self.counters[name] = stored
            return stored


class InMemoryAttendance:
    def __init__(self):
        self._lock = threading.Lock()
        self.sheets: dict[tuple[date, int, str], AttendanceSheet] = {}
        self.writes = 0
        self._id = 0

    def get_sheet(self, *, attendance_date: date, class_id: int, section: str) -> Optional[AttendanceSheet]:
        return self.sheets.get((attendance_date, class_id, section))

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
        key = (attendance_date, class_id, section)
        with self._lock:
            self.writes += 1
            existing = self.sheets.get(key)
            if existing:
                sheet = replace(
                    existing,
                    records=tuple(records),
                    marked_by=marked_by,
                    is_holiday=is_holiday,
                    holiday_reason=holiday_reason,
                    updated_at=now,
                )
            else:
                self._id += 1
                sheet = AttendanceSheet(
                    sheet_id=self._id,
                    attendance_date=attendance_date,
                    class_id=class_id,
                    section=section,
                    records=tuple(records),
                    marked_by=marked_by,
                    created_at=now,
                    updated_at=now,
                    is_holiday=is_holiday,
                    holiday_reason=holiday_reason,
                )
            self.sheets[key] = sheet
            return sheet

    def list_range(self, *, start: date, end: date, class_id: Optional[int] = None) -> Sequence[AttendanceSheet]:
        items = [
            s
            for s in self.sheets.values()
            if start <= s.attendance_date <= end and (class_id is None or s.class_id == class_id)
        ]
        items.sort(key=lambda s: (s.attendance_date, s.class_id, s.section), reverse=True)
        return items


class RacingAttendance(InMemoryAttendance):
    """Behaves as if another writer inserted the same key first."""

    def upsert_sheet(self, **kwargs) -> AttendanceSheet:
        self.writes += 1
        raise DuplicateKeyConflict("Duplicate entry for key 'uq_attendance_day_class_section'")


class InMemoryClasses:
    def __init__(self):
        self.classes: dict[int, SchoolClass] = {}

    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        return self.classes.get(class_id)

    def get_by_name(self, name: str) -> Optional[SchoolClass]:
        return next((c for c in self.classes.values() if c.name.lower() == name.lower()), None)

    def create(self, *, name: str, exams: Sequence[str]) -> int:
        class_id = len(self.classes) + 1
        self.classes[class_id] = SchoolClass(class_id=class_id, name=name, exams=tuple(exams))
        return class_id

    def update_exams(self, *, class_id: int, exams: Sequence[str]) -> bool:
        c = self.classes.get(class_id)
        if not c:
            return False
        self.classes[class_id] = replace(c, exams=tuple(exams))
        return True

    def list_active(self) -> Sequence[SchoolClass]:
        return sorted((c for c in self.classes.values() if c.is_active), key=lambda c: c.name)

    def list_all(self) -> Sequence[SchoolClass]:
        return sorted(self.classes.values(), key=lambda c: c.name)


class InMemoryFees:
    def __init__(self):
        self.fees: list[ClassFee] = []

    def add(self, *, class_id: int, fee_type: FeeType, amount: Decimal, effective_from: date) -> int:
        fee_id = len(self.fees) + 1
        self.fees.append(
            ClassFee(fee_id=fee_id, class_id=class_id, fee_type=fee_type, amount=amount, effective_from=effective_from)
        )
        return fee_id

    def list_active_for_class(self, class_id: int) -> Sequence[ClassFee]:
        items = [f for f in self.fees if f.class_id == class_id and f.is_active]
        items.sort(key=lambda f: (f.effective_from, f.fee_id), reverse=True)
        return items


class InMemoryStudents:
    def __init__(self):
        self.students: dict[int, Student] = {}

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.students.get(student_id)

    def get_by_registration_number(self, registration_number: str) -> Optional[Student]:
        return next((s for s in self.students.values() if s.registration_number == registration_number), None)

    def create(self, student: Student) -> int:
        for s in self.students.values():
            if s.registration_number == student.registration_number:
                raise DuplicateKeyConflict("registration number")
            if (
                student.roll_number
                and (s.class_id, s.section, s.roll_number) == (student.class_id, student.section, student.roll_number)
            ):
                raise DuplicateKeyConflict("roll number")
        student_id = len(self.students) + 1
        self.students[student_id] = replace(student, student_id=student_id)
        return student_id

    def update(self, student: Student) -> bool:
        if student.student_id not in self.students:
            return False
        for s in self.students.values():
            if s.student_id == student.student_id:
                continue
            if s.registration_number == student.registration_number:
                raise DuplicateKeyConflict("registration number")
            if (
                student.roll_number
                and (s.class_id, s.section, s.roll_number) == (student.class_id, student.section, student.roll_number)
            ):
                raise DuplicateKeyConflict("roll number")
        self.students[student.student_id] = replace(student, is_active=self.students[student.student_id].is_active)
        return True

    def set_active(self, student_id: int, *, is_active: bool) -> bool:
        s = self.students.get(student_id)
        if not s:
            return False
        self.students[student_id] = replace(s, is_active=is_active)
        return True

    def list_roster(self, *, class_id: int, section: str) -> Sequence[Student]:
        return self.list_by_class(class_id=class_id, section=section, active_only=True)

    def list_by_class(
        self,
        *,
        class_id: Optional[int] = None,
        section: Optional[str] = None,
        active_only: bool = True,
        search: Optional[str] = None,
    ) -> Sequence[Student]:
        term = (search or "").lower()
        items = [
            s
            for s in self.students.values()
            if (class_id is None or s.class_id == class_id)
            and (section is None or s.section == section)
            and (s.is_active or not active_only)
            and (term in s.name.lower() or term in s.registration_number.lower())
        ]
        return sorted(items, key=lambda s: s.name)

    def get_many(self, student_ids: Sequence[int]) -> Sequence[Student]:
        return [self.students[i] for i in student_ids if i in self.students]


class InMemoryHolidays:
    def __init__(self):
        self.holidays: dict[int, Holiday] = {}

    def get_by_date(self, holiday_date: date) -> Optional[Holiday]:
        return next((h for h in self.holidays.values() if h.holiday_date == holiday_date), None)

    def create(self, *, holiday_date: date, description: str) -> int:
        if self.get_by_date(holiday_date):
            raise DuplicateKeyConflict("holiday date")
        holiday_id = len(self.holidays) + 1
        self.holidays[holiday_id] = Holiday(holiday_id=holiday_id, holiday_date=holiday_date, description=description)
        return holiday_id

    def delete(self, *, holiday_id: int) -> bool:
        return self.holidays.pop(holiday_id, None) is not None

    def list_recent(self, *, limit: int) -> Sequence[Holiday]:
        return sorted(self.holidays.values(), key=lambda h: h.holiday_date, reverse=True)[:limit]

    def list_range(self, *, start: date, end: date) -> Sequence[Holiday]:
        return sorted(
            (h for h in self.holidays.values() if start <= h.holiday_date <= end), key=lambda h: h.holiday_date
        )


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.username == username), None)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(
        self,
        *,
        full_name: str,
        username: Optional[str],
        email: Optional[str],
        password_hash: str,
        role: Role,
        requires_password_change: bool = False,
    ) -> int:
        user_id = len(self.users) + 1
        self.users[user_id] = User(
            user_id=user_id,
            full_name=full_name,
            username=username,
            email=email,
            password_hash=password_hash,
            role=role,
            is_active=True,
            requires_password_change=requires_password_change,
        )
        return user_id

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        u = self.users.get(user_id)
        if not u:
            return False
        self.users[user_id] = replace(u, is_active=is_active)
        return True

    def update_password(self, user_id: int, *, password_hash: str, requires_password_change: bool) -> bool:
        u = self.users.get(user_id)
        if not u:
            return False
        self.users[user_id] = replace(u, password_hash=password_hash, requires_password_change=requires_password_change)
        return True

    def list_all(self) -> Sequence[User]:
        return list(self.users.values())


class InMemoryTeachers:
    def __init__(self):
        self.teachers: dict[int, Teacher] = {}
        self._id = 0

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        return self.teachers.get(teacher_id)

    def get_by_code(self, teacher_code: str) -> Optional[Teacher]:
        return next((t for t in self.teachers.values() if t.teacher_code == teacher_code), None)

    def create(self, teacher: Teacher) -> int:
        if self.get_by_code(teacher.teacher_code):
            raise DuplicateKeyConflict("teacher code")
        self._id += 1
        self.teachers[self._id] = replace(teacher, teacher_id=self._id)
        return self._id

    def update(self, teacher: Teacher) -> bool:
        if teacher.teacher_id not in self.teachers:
            return False
        self.teachers[teacher.teacher_id] = teacher
        return True

    def delete(self, teacher_id: int) -> bool:
        return self.teachers.pop(teacher_id, None) is not None

    def search(self, query: Optional[str] = None) -> Sequence[Teacher]:
        term = (query or "").lower()
        items = [
            t
            for t in self.teachers.values()
            if any(term in (v or "").lower() for v in (t.name, t.teacher_code, t.email, t.phone, t.aadhaar))
        ]
        return sorted(items, key=lambda t: t.teacher_id, reverse=True)


def make_student(student_id: int, name: str, *, class_id: int = 1, section: str = "A", **overrides) -> Student:
    fields = dict(
        student_id=student_id,
        registration_number=str(student_id).zfill(4),
        name=name,
        class_id=class_id,
        section=section,
        date_of_birth=date(2021, 3, 14),
        address="12 Station Road",
        date_of_admission=date(2024, 4, 1),
        father=ParentInfo(name=f"{name} Sr"),
        mobiles=("9876543210",),
    )
    fields.update(overrides)
    return Student(**fields)


def build_fake_container(*, attendance=None, **options) -> Container:
    return wire_container(
        users_repo=InMemoryUsers(),
        sequences_repo=InMemorySequences(),
        classes_repo=InMemoryClasses(),
        fees_repo=InMemoryFees(),
        students_repo=InMemoryStudents(),
        holidays_repo=InMemoryHolidays(),
        attendance_repo=attendance or InMemoryAttendance(),
        teachers_repo=InMemoryTeachers(),
        **options,
    )


def seed_school(container: Container) -> Container:
    """Nursery (id 1) with Asha and Bilal in A and Chen in B; LKG (id 2) empty."""

    container.classes_repo.create(name="Nursery", exams=["Annual", "Half Yearly"])
    container.classes_repo.create(name="LKG", exams=["Annual", "Half Yearly"])
    for s in (
        make_student(1, "Asha"),
        make_student(2, "Bilal"),
        make_student(3, "Chen", section="B"),
    ):
        container.students_repo.students[s.student_id] = s
    return container


@pytest.fixture
def container() -> Container:
    return build_fake_container()


@pytest.fixture
def make_school():
    """Seeded container with custom wiring, e.g. make_school(holiday_policy="coerce")."""

    def _make(**options) -> Container:
        return seed_school(build_fake_container(**options))

    return _make


@pytest.fixture
def racing_school() -> Container:
    return seed_school(build_fake_container(attendance=RacingAttendance()))


@pytest.fixture
def student_factory():
    return make_student


@pytest.fixture
def school() -> Container:
    return seed_school(build_fake_container())


@pytest.fixture
def admin_user(school: Container) -> int:
    return school.users_repo.create_user(
        full_name="Office Admin",
        username="admin",
        email=None,
        password_hash=generate_password_hash("admin123"),
        role=Role.ADMIN,
    )
