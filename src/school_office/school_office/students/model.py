from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.constants import DEFAULT_SECTION
from ..core.enums import Gender


@dataclass(frozen=True)
class ParentInfo:
    name: Optional[str] = None
    aadhaar_number: Optional[str] = None


@dataclass(frozen=True)
class Student:
    """Domain entity: an admitted student."""

    student_id: int
    registration_number: str
    name: str
    class_id: int
    section: str
    date_of_birth: date
    address: str
    date_of_admission: date
    roll_number: Optional[str] = None
    gender: Optional[Gender] = None
    father: ParentInfo = field(default_factory=ParentInfo)
    mother: ParentInfo = field(default_factory=ParentInfo)
    mobiles: tuple[str, ...] = ()
    emails: tuple[str, ...] = ()
    pen: Optional[str] = None
    last_institution: Optional[str] = None
    tc_number: Optional[str] = None
    is_active: bool = True


@dataclass
class AdmissionForm:
    """Input of the admission screen, before validation.

    registration_number is optional; when empty the next number of the
    registration sequence is issued.
    """

    name: str
    class_id: int
    date_of_birth: date | str
    address: str
    mobiles: list[str]
    section: str = DEFAULT_SECTION
    registration_number: Optional[str] = None
    roll_number: Optional[str] = None
    date_of_admission: Optional[date | str] = None
    gender: Optional[str] = None
    father_name: Optional[str] = None
    father_aadhaar: Optional[str] = None
    mother_name: Optional[str] = None
    mother_aadhaar: Optional[str] = None
    emails: list[str] = field(default_factory=list)
    pen: Optional[str] = None
    last_institution: Optional[str] = None
    tc_number: Optional[str] = None
