from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from ..common.datetime_utils import normalize_day
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_EXAMS
from ..core.enums import FeeType, Role
from ..core.exceptions import AuthorizationError, DuplicateKeyConflict, NotFoundError, ValidationError
from .model import ClassWithFees, SchoolClass
from .repository import ClassFeeRepository, ClassRepository

logger = logging.getLogger(__name__)


def _clean_exams(exams: Optional[Sequence[str]]) -> list[str]:
    return [e.strip() for e in (exams or []) if e and e.strip()]


class ClassService:
    """Use case: class and fee configuration (admin)."""

    def __init__(self, classes: ClassRepository, fees: ClassFeeRepository):
        self._classes = classes
        self._fees = fees

    def create_class(self, *, current_role: Role, name: str, exams: Optional[Sequence[str]] = None) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can create classes")

        name = require_non_empty(name, "Name")
        if self._classes.get_by_name(name):
            raise ValidationError("Class already exists")

        exam_names = _clean_exams(exams) or list(DEFAULT_EXAMS)
        try:
            class_id = self._classes.create(name=name, exams=exam_names)
        except DuplicateKeyConflict:
            raise ValidationError("Class already exists")
        logger.info("class created: %s (id=%d)", name, class_id)
        return class_id

    def update_exams(self, *, current_role: Role, class_id: int, exams: Sequence[str]) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can change exams")

        exam_names = _clean_exams(exams)
        if not exam_names:
            raise ValidationError("At least one exam is required")
        if not self._classes.get_by_id(int(class_id)):
            raise NotFoundError("Class not found")
        self._classes.update_exams(class_id=int(class_id), exams=exam_names)

    def add_fee(
        self,
        *,
        current_role: Role,
        class_id: int,
        fee_type: FeeType | str,
        amount: Decimal | float | int | str,
        effective_from: date | str,
    ) -> int:
        """Record a new fee; the latest effective fee per type wins, history is kept."""

        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can change fees")

        try:
            fee_type = FeeType(fee_type)
        except ValueError:
            raise ValidationError("Unknown fee type")

        try:
            value = Decimal(str(amount))
        except (InvalidOperation, ValueError):
            raise ValidationError("Amount must be a number")
        if value < 0:
            raise ValidationError("Amount must be positive")

        if not self._classes.get_by_id(int(class_id)):
            raise NotFoundError("Class not found")

        return self._fees.add(
            class_id=int(class_id),
            fee_type=fee_type,
            amount=value,
            effective_from=normalize_day(effective_from),
        )

    def get(self, class_id: int) -> Optional[SchoolClass]:
        return self._classes.get_by_id(int(class_id))

    def list_active(self) -> Sequence[SchoolClass]:
        return self._classes.list_active()

    def list_with_fees(self) -> list[ClassWithFees]:
        out: list[ClassWithFees] = []
        for c in self._classes.list_active():
            latest: dict[str, Decimal] = {}
            # newest first, so the first fee seen per type is the current one
            for fee in self._fees.list_active_for_class(c.class_id):
                latest.setdefault(fee.fee_type.value, fee.amount)

            zero = Decimal("0")
            out.append(
                ClassWithFees(
                    class_id=c.class_id,
                    name=c.name,
                    exams=c.exams,
                    monthly_fee=latest.get(FeeType.MONTHLY.value, zero),
                    exam_fee=latest.get(FeeType.EXAMINATION.value, zero),
                    admission_fee=latest.get(FeeType.ADMISSION_FEES.value, latest.get(FeeType.ADMISSION.value, zero)),
                    registration_fee=latest.get(FeeType.REGISTRATION_FEES.value, zero),
                    fees=latest,
                )
            )
        return out
