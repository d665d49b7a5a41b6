from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class IdCard:
    student_id: int
    name: str
    registration_number: str
    class_name: str
    section: str
    father_name: str
    date_of_birth: date
    address: str
    mobile: str
