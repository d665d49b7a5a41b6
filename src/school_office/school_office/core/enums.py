from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Session roles used for access control."""

    ADMIN = "admin"
    STAFF = "staff"
    ATTENDANCE_STAFF = "attendance_staff"


class AttendanceStatus(str, Enum):
    """Per-student status stored on an attendance sheet."""

    PRESENT = "Present"
    ABSENT = "Absent"
    HOLIDAY = "Holiday"


class HolidayPolicy(str, Enum):
    """What to do when attendance is submitted for a holiday."""

    REJECT = "reject"
    COERCE = "coerce"
    ALLOW = "allow"


class FeeType(str, Enum):
    MONTHLY = "monthly"
    EXAMINATION = "examination"
    ADMISSION = "admission"
    ADMISSION_FEES = "admissionFees"
    REGISTRATION_FEES = "registrationFees"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"
