from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

from ..common.datetime_utils import normalize_day
from ..common.validators import require_email, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DuplicateKeyConflict, NotFoundError, ValidationError
from .model import Teacher, TeacherForm, teacher_code_for
from .repository import TeacherRepository

logger = logging.getLogger(__name__)

_OFFICE_ROLES = {Role.ADMIN, Role.STAFF}


def _opt(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _non_negative(value: Any, field_name: str) -> Decimal:
    try:
        amount = Decimal(str(value).strip() or "0")
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return amount


class TeacherService:
    """Use case: teaching staff records."""

    def __init__(self, teachers: TeacherRepository):
        self._teachers = teachers

    def _check_identity(self, *, name: Any, phone: Any, aadhaar: Any) -> tuple[str, str, str]:
        name = require_non_empty(name, "Name")
        phone = require_non_empty(phone, "Phone")
        if len(phone) < 10:
            raise ValidationError("Valid phone number is required")
        aadhaar = require_non_empty(aadhaar, "Aadhaar number")
        if len(aadhaar) != 12 or not aadhaar.isdigit():
            raise ValidationError("Aadhaar number must be 12 digits")
        return name, phone, aadhaar

    @staticmethod
    def _joining_date(value: Any) -> date:
        try:
            return normalize_day(value)
        except (TypeError, ValueError):
            raise ValidationError("Joining date is invalid")

    def create(self, *, current_role: Role, form: TeacherForm, today: Optional[date] = None) -> Teacher:
        """Validate and persist a new teacher.

        The teacher code is derived from name, Aadhaar and phone, so the same
        person cannot be registered twice.
        """

        if current_role not in _OFFICE_ROLES:
            raise AuthorizationError("You are not allowed to manage teachers")

        name, phone, aadhaar = self._check_identity(name=form.name, phone=form.phone, aadhaar=form.aadhaar)
        email = _opt(form.email)
        teacher = Teacher(
            teacher_id=0,
            teacher_code=teacher_code_for(name, aadhaar, phone),
            name=name,
            phone=phone,
            aadhaar=aadhaar,
            joining_date=self._joining_date(form.joining_date),
            email=require_email(email, "Email") if email else None,
            father_name=_opt(form.father_name),
            mother_name=_opt(form.mother_name),
            government_teacher_id=_opt(form.government_teacher_id),
            salary_amount=_non_negative(form.salary_amount or 0, "Salary"),
            salary_effective_date=today or date.today(),
            total_experience=_non_negative(form.total_experience or 0, "Experience"),
        )

        if self._teachers.get_by_code(teacher.teacher_code):
            raise ValidationError("Teacher with these details likely already exists")
        try:
            teacher_id = self._teachers.create(teacher)
        except DuplicateKeyConflict:
            raise ValidationError("Teacher with these details likely already exists")

        logger.info("teacher %s created (id=%d)", teacher.teacher_code, teacher_id)
        return replace(teacher, teacher_id=teacher_id)

    def update(self, *, current_role: Role, teacher_id: int, form: TeacherForm, today: Optional[date] = None) -> Teacher:
        if current_role not in _OFFICE_ROLES:
            raise AuthorizationError("You are not allowed to manage teachers")

        existing = self.get(teacher_id)
        name, phone, aadhaar = self._check_identity(
            name=existing.name if form.name is None else form.name,
            phone=existing.phone if form.phone is None else form.phone,
            aadhaar=existing.aadhaar if form.aadhaar is None else form.aadhaar,
        )

        changes: dict[str, Any] = {"name": name, "phone": phone, "aadhaar": aadhaar}
        if form.joining_date is not None:
            changes["joining_date"] = self._joining_date(form.joining_date)
        if form.email is not None:
            email = _opt(form.email)
            changes["email"] = require_email(email, "Email") if email else None
        for field_name in ("father_name", "mother_name", "government_teacher_id"):
            value = getattr(form, field_name)
            if value is not None:
                changes[field_name] = _opt(value)
        if form.salary_amount is not None:
            salary = _non_negative(form.salary_amount, "Salary")
            if salary != existing.salary_amount:
                changes["salary_amount"] = salary
                changes["salary_effective_date"] = today or date.today()
        if form.total_experience is not None:
            changes["total_experience"] = _non_negative(form.total_experience, "Experience")

        teacher = replace(existing, **changes)
        if not self._teachers.update(teacher):
            raise NotFoundError("Teacher not found")

        logger.info("teacher %s updated", teacher.teacher_code)
        return teacher

    def delete(self, *, current_role: Role, teacher_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can delete teachers")
        if not self._teachers.delete(int(teacher_id)):
            raise NotFoundError("Teacher not found")
        logger.info("teacher %d deleted", int(teacher_id))

    def get(self, teacher_id: int) -> Teacher:
        teacher = self._teachers.get_by_id(int(teacher_id))
        if not teacher:
            raise NotFoundError("Teacher not found")
        return teacher

    def list_teachers(self, query: Optional[str] = None) -> Sequence[Teacher]:
        return self._teachers.search((query or "").strip() or None)
