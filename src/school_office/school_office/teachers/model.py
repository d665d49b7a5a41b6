from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


def teacher_code_for(name: str, aadhaar: str, phone: str) -> str:
    """8-character staff code derived from identity fields, e.g. '3F9A01BC'."""

    raw = f"{name.strip().lower()}{aadhaar.strip()}{phone.strip()}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:8].upper()


@dataclass(frozen=True)
class Teacher:
    """Domain entity: a member of the teaching staff."""

    teacher_id: int
    teacher_code: str
    name: str
    phone: str
    aadhaar: str
    joining_date: date
    email: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    government_teacher_id: Optional[str] = None
    salary_amount: Decimal = Decimal("0")
    salary_effective_date: Optional[date] = None
    total_experience: Decimal = Decimal("0")


@dataclass
class TeacherForm:
    """Input of the teacher screen.

    On update, fields left as None keep their stored value.
    """

    name: Optional[str] = None
    phone: Optional[str] = None
    aadhaar: Optional[str] = None
    joining_date: Optional[date | str] = None
    email: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    government_teacher_id: Optional[str] = None
    salary_amount: Optional[Decimal | str | int | float] = None
    total_experience: Optional[Decimal | str | int | float] = None
