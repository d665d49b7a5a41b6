from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import FeeType


@dataclass(frozen=True)
class SchoolClass:
    class_id: int
    name: str
    exams: tuple[str, ...] = ()
    is_active: bool = True


@dataclass(frozen=True)
class ClassFee:
    fee_id: int
    class_id: int
    fee_type: FeeType
    amount: Decimal
    effective_from: date
    effective_to: Optional[date] = None
    is_active: bool = True


@dataclass(frozen=True)
class ClassWithFees:
    """Read-model for the class configuration screen."""

    class_id: int
    name: str
    exams: tuple[str, ...]
    monthly_fee: Decimal = Decimal("0")
    exam_fee: Decimal = Decimal("0")
    admission_fee: Decimal = Decimal("0")
    registration_fee: Decimal = Decimal("0")
    fees: dict[str, Decimal] = field(default_factory=dict)
