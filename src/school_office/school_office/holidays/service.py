from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Sequence

from ..common.datetime_utils import normalize_day
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HOLIDAY_LIST_LIMIT, DEFAULT_WEEKLY_OFF_DAYS
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DuplicateKeyConflict, NotFoundError, ValidationError
from .model import Holiday, HolidayCheck
from .repository import HolidayRepository

logger = logging.getLogger(__name__)

_WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_MANAGER_ROLES = {Role.ADMIN, Role.ATTENDANCE_STAFF}


class HolidayService:
    """Registered holidays plus weekly off days (Sunday by default)."""

    def __init__(self, holidays: HolidayRepository, *, weekly_off_days: Iterable[int] = DEFAULT_WEEKLY_OFF_DAYS):
        self._holidays = holidays
        self._weekly_off_days = frozenset(int(d) for d in weekly_off_days)

    def check(self, value: date | datetime | str) -> HolidayCheck:
        day = normalize_day(value)
        if day.weekday() in self._weekly_off_days:
            return HolidayCheck(is_holiday=True, reason=_WEEKDAY_NAMES[day.weekday()])

        holiday = self._holidays.get_by_date(day)
        if holiday:
            return HolidayCheck(is_holiday=True, reason=holiday.description)
        return HolidayCheck(is_holiday=False)

    def is_holiday(self, value: date | datetime | str) -> bool:
        return self.check(value).is_holiday

    def add(self, *, current_role: Role, holiday_date: date | datetime | str, description: str) -> int:
        if current_role not in _MANAGER_ROLES:
            raise AuthorizationError("You are not allowed to manage holidays")

        description = require_non_empty(description, "Description")
        day = normalize_day(holiday_date)

        if self._holidays.get_by_date(day):
            raise ValidationError("Holiday already exists for this date")
        try:
            holiday_id = self._holidays.create(holiday_date=day, description=description)
        except DuplicateKeyConflict:
            raise ValidationError("Holiday already exists for this date")

        logger.info("holiday added: %s (%s)", day.isoformat(), description)
        return holiday_id

    def delete(self, *, current_role: Role, holiday_id: int) -> None:
        if current_role not in _MANAGER_ROLES:
            raise AuthorizationError("You are not allowed to manage holidays")

        if not self._holidays.delete(holiday_id=int(holiday_id)):
            raise NotFoundError("Holiday not found")
        logger.info("holiday %d deleted", int(holiday_id))

    def list_recent(self, *, limit: int = DEFAULT_HOLIDAY_LIST_LIMIT) -> Sequence[Holiday]:
        return self._holidays.list_recent(limit=int(limit))

    def list_range(self, *, start: date, end: date) -> Sequence[Holiday]:
        return self._holidays.list_range(start=start, end=end)
