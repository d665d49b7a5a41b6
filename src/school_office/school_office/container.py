from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassFeeRepository, MySQLClassRepository
from .classes.repository import ClassFeeRepository, ClassRepository
from .classes.service import ClassService
from .core.constants import DEFAULT_SEQUENCE_START, DEFAULT_WEEKLY_OFF_DAYS
from .core.enums import HolidayPolicy
from .database.connection import DBConfig, DatabaseConnection
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.repository import HolidayRepository
from .holidays.service import HolidayService
from .id_cards.service import IdCardService
from .reports.service import AttendanceReportService
from .sequences.mysql_sequence_repository import MySQLSequenceRepository
from .sequences.repository import SequenceRepository
from .sequences.service import SequenceService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .teachers.mysql_teacher_repository import MySQLTeacherRepository
from .teachers.repository import TeacherRepository
from .teachers.service import TeacherService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    sequences_repo: SequenceRepository
    classes_repo: ClassRepository
    fees_repo: ClassFeeRepository
    students_repo: StudentRepository
    holidays_repo: HolidayRepository
    attendance_repo: AttendanceRepository
    teachers_repo: TeacherRepository

    auth_service: AuthService
    user_service: UserService
    sequence_service: SequenceService
    class_service: ClassService
    student_service: StudentService
    holiday_service: HolidayService
    attendance_service: AttendanceService
    report_service: AttendanceReportService
    id_card_service: IdCardService
    teacher_service: TeacherService


def wire_container(
    *,
    users_repo: UserRepository,
    sequences_repo: SequenceRepository,
    classes_repo: ClassRepository,
    fees_repo: ClassFeeRepository,
    students_repo: StudentRepository,
    holidays_repo: HolidayRepository,
    attendance_repo: AttendanceRepository,
    teachers_repo: TeacherRepository,
    sequence_default_start: int = DEFAULT_SEQUENCE_START,
    holiday_policy: HolidayPolicy | str = HolidayPolicy.REJECT,
    weekly_off_days: Iterable[int] = DEFAULT_WEEKLY_OFF_DAYS,
) -> Container:
    """Build services on top of any repository implementations (MySQL or in-memory)."""

    sequence_service = SequenceService(sequences_repo, default_start=sequence_default_start)
    holiday_service = HolidayService(holidays_repo, weekly_off_days=weekly_off_days)

    return Container(
        users_repo=users_repo,
        sequences_repo=sequences_repo,
        classes_repo=classes_repo,
        fees_repo=fees_repo,
        students_repo=students_repo,
        holidays_repo=holidays_repo,
        attendance_repo=attendance_repo,
        teachers_repo=teachers_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        sequence_service=sequence_service,
        class_service=ClassService(classes_repo, fees_repo),
        student_service=StudentService(students_repo, classes_repo, sequence_service),
        holiday_service=holiday_service,
        attendance_service=AttendanceService(
            attendance_repo,
            students_repo,
            classes_repo,
            holiday_service,
            holiday_policy=holiday_policy,
        ),
        report_service=AttendanceReportService(attendance_repo, students_repo, classes_repo),
        id_card_service=IdCardService(students_repo, classes_repo),
        teacher_service=TeacherService(teachers_repo),
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        users_repo=MySQLUserRepository(conn),
        sequences_repo=MySQLSequenceRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        fees_repo=MySQLClassFeeRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        holidays_repo=MySQLHolidayRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        teachers_repo=MySQLTeacherRepository(conn),
        sequence_default_start=int(getattr(settings, "SEQUENCE_DEFAULT_START", DEFAULT_SEQUENCE_START)),
        holiday_policy=getattr(settings, "ATTENDANCE_HOLIDAY_POLICY", HolidayPolicy.REJECT.value),
        weekly_off_days=getattr(settings, "WEEKLY_OFF_DAYS", DEFAULT_WEEKLY_OFF_DAYS),
    )
