from __future__ import annotations

from datetime import date, datetime, timezone


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def normalize_day(value: date | datetime | str) -> date:
    """Reduce a date-like value to its calendar day.

    Timezone-aware datetimes are converted to UTC first, naive ones are taken
    as-is. Strings accept YYYY-MM-DD or an ISO timestamp.
    """

    if isinstance(value, str):
        value = value.strip()
        try:
            return parse_iso_date(value)
        except ValueError:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()

    if isinstance(value, date):
        return value

    raise TypeError(f"Unsupported date value: {value!r}")


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
