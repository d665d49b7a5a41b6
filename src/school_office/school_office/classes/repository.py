from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import FeeType
from .model import ClassFee, SchoolClass


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[SchoolClass]:
        raise NotImplementedError

    def create(self, *, name: str, exams: Sequence[str]) -> int:
        raise NotImplementedError

    def update_exams(self, *, class_id: int, exams: Sequence[str]) -> bool:
        raise NotImplementedError

    def list_active(self) -> Sequence[SchoolClass]:
        """Active classes ordered by name."""

        raise NotImplementedError

    def list_all(self) -> Sequence[SchoolClass]:
        raise NotImplementedError


class ClassFeeRepository(Protocol):
    def add(self, *, class_id: int, fee_type: FeeType, amount: Decimal, effective_from: date) -> int:
        raise NotImplementedError

    def list_active_for_class(self, class_id: int) -> Sequence[ClassFee]:
        """Active fees for a class, newest effective_from first."""

        raise NotImplementedError
