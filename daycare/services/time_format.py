"""Conversions between 12-hour labeled times ("09:15 AM") and 24-hour times ("09:15")."""
from datetime import date, datetime, time, timedelta


def to_24_hour(value: str | None) -> str:
    """Convert a labeled 12-hour time to zero-padded 24-hour ``HH:MM``.

    A value without a space separator is taken to be 24-hour already and is
    returned as is. Empty or unparseable input gives an empty string.
    """
    if not value:
        return ""
    normalized = str(value).strip()
    if " " not in normalized:
        return normalized

    parts = normalized.split(" ")
    clock, modifier = parts[0], parts[1]
    if not modifier:
        return normalized

    hours, sep, minutes = clock.partition(":")
    if not sep:
        return ""
    try:
        hour = int(hours)
    except ValueError:
        return ""

    suffix = modifier.upper()
    if suffix == "PM" and hour != 12:
        hour += 12
    if suffix == "AM" and hour == 12:
        hour = 0

    return f"{hour:02d}:{minutes}"


def to_12_hour(value: str | None) -> str:
    """Convert a 24-hour ``HH:MM`` to zero-padded ``hh:mm AM/PM``."""
    if not value:
        return ""
    normalized = str(value).strip()
    if " " in normalized:
        normalized = to_24_hour(normalized)

    hours, sep, minutes = normalized.partition(":")
    if not sep:
        return ""
    try:
        hour = int(hours)
        minute = int(minutes)
    except ValueError:
        return ""

    suffix = "PM" if hour >= 12 else "AM"
    hour = hour % 12 or 12
    return f"{hour:02d}:{minute:02d} {suffix}"


def format_clock_time(now: datetime) -> str:
    return f"{now.hour:02d}:{now.minute:02d}"


def format_out_time(now: datetime) -> str:
    """Out-time stamp, e.g. ``3:05 PM``."""
    suffix = "PM" if now.hour >= 12 else "AM"
    return f"{now.hour % 12 or 12}:{now.minute:02d} {suffix}"


def format_marked_at(now: datetime) -> str:
    """Display timestamp for an attendance mark, e.g. ``10/19/2026, 9:15 AM``."""
    return f"{now.month}/{now.day}/{now.year}, {format_out_time(now)}"


def day_stamp(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """The day bucket: ``[start of today, start of tomorrow)`` in local time."""
    start = datetime.combine(now.date(), time.min)
    return start, start + timedelta(days=1)
