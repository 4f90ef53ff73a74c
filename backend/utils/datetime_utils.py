import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


_CLOCK_RE = re.compile(r"^(\d{2}):(\d{2})$")


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


WEEKDAYS: tuple[Weekday, ...] = tuple(Weekday)


@dataclass(frozen=True)
class ClockTime:
    """Wall-clock time of day with no date or timezone attached.

    Parsed values always fall inside 00:00-23:59. Values produced by
    ``offset_earlier`` may carry a negative hour because the offset is not
    wrapped across midnight.
    """

    hour: int
    minute: int

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def parse_clock_time(raw: str) -> ClockTime:
    """Parse an ``HH:MM`` string, raising ``ValueError`` when malformed."""
    match = _CLOCK_RE.match((raw or "").strip())
    if not match:
        raise ValueError(f"Time must be in HH:MM format, got {raw!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Time out of range: {raw!r}")
    return ClockTime(hour=hour, minute=minute)


def coerce_clock_time(raw: "str | ClockTime | None", fallback: ClockTime) -> ClockTime:
    """Return ``raw`` as a ClockTime, or ``fallback`` when missing or malformed."""
    if isinstance(raw, ClockTime):
        return raw
    if not raw:
        return fallback
    try:
        return parse_clock_time(raw)
    except ValueError:
        return fallback


def offset_earlier(time: ClockTime, minutes_before: int) -> ClockTime:
    """Move ``time`` back by ``minutes_before`` minutes on the same day.

    Minutes borrow from the hour; the hour itself is left unwrapped, so
    00:10 minus 30 minutes is hour -1, minute 40.
    """
    if minutes_before < 0:
        raise ValueError("minutes_before must be non-negative")
    borrow, minute = divmod(time.minute - minutes_before, 60)
    return ClockTime(hour=time.hour + borrow, minute=minute)


def parse_iso_date(raw: str) -> date:
    if not re.match(r"^\d{4}-\d{2}-\d{2}$", (raw or "").strip()):
        raise ValueError("Must be in YYYY-MM-DD format")
    return date.fromisoformat(raw.strip())


def weekday_for_date(d: date) -> Weekday:
    return WEEKDAYS[d.weekday()]


def parse_iso_datetime(raw: str) -> datetime:
    """Parse a full ISO 8601 timestamp; a trailing ``Z`` means UTC."""
    value = (raw or "").strip()
    if "T" not in value:
        raise ValueError("Must be an ISO 8601 datetime")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValueError("Must be an ISO 8601 datetime") from None
