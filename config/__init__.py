import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; anything unrecognised falls back to development
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def parse_weekdays(value: str) -> tuple[int, ...]:
    """'6' or '5,6' -> weekday numbers (Monday=0 ... Sunday=6)."""
    days = []
    for part in (value or "").split(","):
        part = part.strip()
        if part:
            day = int(part)
            if not 0 <= day <= 6:
                raise ValueError(f"Weekday out of range: {day}")
            days.append(day)
    return tuple(days)
