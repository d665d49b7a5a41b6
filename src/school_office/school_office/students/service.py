from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.datetime_utils import normalize_day
from ..common.validators import optional_aadhaar, require_choice, require_email, require_non_empty
from ..core.constants import DEFAULT_SECTION, REGISTRATION_SEQUENCE, SECTIONS
from ..core.enums import Gender, Role
from ..core.exceptions import AuthorizationError, DuplicateKeyConflict, NotFoundError, ValidationError
from ..sequences.service import SequenceService, format_registration_number
from .model import AdmissionForm, ParentInfo, Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)

_ADMISSION_ROLES = {Role.ADMIN, Role.STAFF}


def _opt(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class StudentService:
    """Use case: admission and student records."""

    def __init__(self, students: StudentRepository, classes: ClassRepository, sequences: SequenceService):
        self._students = students
        self._classes = classes
        self._sequences = sequences

    def _validate(self, form: AdmissionForm, *, today: date) -> Student:
        name = require_non_empty(form.name, "Name")
        address = require_non_empty(form.address, "Address")
        section = require_choice((form.section or DEFAULT_SECTION).strip().upper(), "Section", SECTIONS)

        if not self._classes.get_by_id(int(form.class_id)):
            raise ValidationError("Class not found")

        try:
            date_of_birth = normalize_day(form.date_of_birth)
        except (TypeError, ValueError):
            raise ValidationError("Date of birth is invalid")

        try:
            date_of_admission = normalize_day(form.date_of_admission) if form.date_of_admission else today
        except (TypeError, ValueError):
            raise ValidationError("Date of admission is invalid")
        if date_of_admission > today:
            raise ValidationError("Date of admission cannot be in the future")

        mobiles = [m.strip() for m in form.mobiles or [] if m and m.strip()]
        if not mobiles:
            raise ValidationError("At least one mobile number is required")
        for m in mobiles:
            if len(m) < 10:
                raise ValidationError("Valid mobile number is required")

        emails = [require_email(e, "Email") for e in form.emails or [] if e and e.strip()]

        gender = None
        if form.gender:
            try:
                gender = Gender(form.gender)
            except ValueError:
                raise ValidationError("Gender is invalid")

        return Student(
            student_id=0,
            registration_number=_opt(form.registration_number) or "",
            name=name,
            class_id=int(form.class_id),
            section=section,
            roll_number=_opt(form.roll_number),
            date_of_birth=date_of_birth,
            gender=gender,
            father=ParentInfo(
                name=_opt(form.father_name),
                aadhaar_number=optional_aadhaar(form.father_aadhaar, "Father's Aadhaar number"),
            ),
            mother=ParentInfo(
                name=_opt(form.mother_name),
                aadhaar_number=optional_aadhaar(form.mother_aadhaar, "Mother's Aadhaar number"),
            ),
            address=address,
            mobiles=tuple(mobiles),
            emails=tuple(emails),
            pen=_opt(form.pen),
            date_of_admission=date_of_admission,
            last_institution=_opt(form.last_institution),
            tc_number=_opt(form.tc_number),
            is_active=True,
        )

    def admit(self, *, current_role: Role, form: AdmissionForm, today: Optional[date] = None) -> Student:
        """Validate and persist a new student.

        Without a manual registration number the next number is issued from
        the registration sequence before the student is written.
        """

        if current_role not in _ADMISSION_ROLES:
            raise AuthorizationError("You are not allowed to admit students")

        student = self._validate(form, today=today or date.today())

        if student.registration_number:
            if self._students.get_by_registration_number(student.registration_number):
                raise ValidationError("Registration Number already exists")
        else:
            number = self._sequences.issue_next(REGISTRATION_SEQUENCE)
            student = replace(student, registration_number=format_registration_number(number))

        try:
            student_id = self._students.create(student)
        except DuplicateKeyConflict:
            raise ValidationError("Registration number or roll number already exists")

        logger.info("admitted student %s (id=%d)", student.registration_number, student_id)
        return replace(student, student_id=student_id)

    def update(self, *, current_role: Role, student_id: int, form: AdmissionForm, today: Optional[date] = None) -> Student:
        """Validate and overwrite an existing student's record.

        An empty registration number keeps the current one; a new one must not
        belong to another student. Nothing is issued from the sequence here.
        """

        if current_role not in _ADMISSION_ROLES:
            raise AuthorizationError("You are not allowed to edit students")

        existing = self.get(student_id)
        student = self._validate(form, today=today or date.today())

        number = student.registration_number or existing.registration_number
        if number != existing.registration_number:
            other = self._students.get_by_registration_number(number)
            if other and other.student_id != existing.student_id:
                raise ValidationError("Registration Number already exists")

        student = replace(
            student,
            student_id=existing.student_id,
            registration_number=number,
            is_active=existing.is_active,
        )
        try:
            if not self._students.update(student):
                raise NotFoundError("Student not found")
        except DuplicateKeyConflict:
            raise ValidationError("Registration number or roll number already exists")

        logger.info("updated student %s (id=%d)", number, student.student_id)
        return student

    def next_registration_number(self) -> str:
        return format_registration_number(self._sequences.peek_next(REGISTRATION_SEQUENCE))

    def get(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        return student

    def list_students(
        self,
        *,
        class_id: Optional[int] = None,
        section: Optional[str] = None,
        active_only: bool = True,
        search: Optional[str] = None,
    ) -> Sequence[Student]:
        return self._students.list_by_class(
            class_id=class_id,
            section=section,
            active_only=active_only,
            search=(search or "").strip() or None,
        )

    def roster(self, *, class_id: int, section: str) -> Sequence[Student]:
        return self._students.list_roster(class_id=int(class_id), section=section)

    def set_active(self, *, current_role: Role, student_id: int, is_active: bool) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can change a student's status")
        if not self._students.set_active(int(student_id), is_active=is_active):
            raise NotFoundError("Student not found")
