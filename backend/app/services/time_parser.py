"""Keyboard-friendly time-of-day parsing.

Accepts the shorthand people type into a timetable form ("930", "2p",
"12a", "1330", "9:30") and normalizes it to a 24-hour clock value whose
canonical text form is ``HH:MM:SS`` with seconds fixed at zero.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from app.core.exceptions import InvalidFormat, InvalidHour, InvalidMinutes

MINUTES_PER_DAY = 24 * 60

_ALLOWED = re.compile(r"^[0-9:.\sapm]+$")
_SEPARATORS = re.compile(r"[:.]")


@dataclass(frozen=True, order=True)
class TimeOfDay:
    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.minute <= 59:
            raise InvalidMinutes("Minutes must be 00-59", raw=str(self.minute))
        if not 0 <= self.hour <= 23:
            raise InvalidHour("Hour must be 0-23", raw=str(self.hour))

    @property
    def canonical(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}:00"

    @property
    def minutes(self) -> int:
        return self.hour * 60 + self.minute

    def plus_minutes(self, minutes: int) -> "TimeOfDay":
        return from_minutes(self.minutes + minutes)

    def __str__(self) -> str:
        return self.canonical


def from_minutes(total: int) -> TimeOfDay:
    """Build a TimeOfDay from minutes since midnight. Past 23:59 is an InvalidHour."""
    if total < 0 or total >= MINUTES_PER_DAY:
        raise InvalidHour("Time runs past the end of the day", raw=str(total))
    return TimeOfDay(total // 60, total % 60)


def _split_digits(digits: str) -> tuple[int, int]:
    if len(digits) <= 2:
        return int(digits), 0
    if len(digits) == 3:
        return int(digits[0]), int(digits[1:])
    return int(digits[:-2]), int(digits[-2:])


def _split_fields(body: str, raw: str) -> tuple[int, int]:
    parts = [part.strip() for part in _SEPARATORS.split(body)]
    if len(parts) > 3 or any(not part.isdigit() or len(part) > 2 for part in parts):
        raise InvalidFormat("Invalid time", raw=raw)
    hour = int(parts[0])
    minute = int(parts[1]) if len(parts) > 1 else 0
    if len(parts) == 3 and int(parts[2]) > 59:
        raise InvalidFormat("Invalid time", raw=raw)
    return hour, minute


def parse_time(raw: str | None) -> TimeOfDay:
    """Normalize loosely formatted time text.

    Digit-only input: 1-2 digits are an hour, 3 digits are H+MM, 4 or more
    digits end in MM with the rest as the hour. Separated input (``9:30``,
    ``9.30``, ``09:30:00``) is read field by field, so a canonical string
    always parses back to itself. An ``a`` or ``p`` anywhere switches to a
    12-hour reading: hour mod 12, plus 12 for ``p``; the 0-23 hour check
    applies to the folded hour, so any hour with a marker is accepted.
    """
    if raw is None:
        raise InvalidFormat("Time required", raw=None)
    text = str(raw).strip().lower()
    if not text:
        raise InvalidFormat("Time required", raw=raw)
    if not _ALLOWED.match(text):
        raise InvalidFormat("Invalid time", raw=raw)

    has_am = "a" in text
    has_pm = "p" in text
    if has_am and has_pm:
        raise InvalidFormat("Invalid time", raw=raw)
    if "m" in text and not (has_am or has_pm):
        raise InvalidFormat("Invalid time", raw=raw)

    body = re.sub(r"[apm\s]", "", text)
    if not any(char.isdigit() for char in body):
        raise InvalidFormat("Invalid time", raw=raw)

    if _SEPARATORS.search(body):
        hour, minute = _split_fields(body, raw)
    else:
        hour, minute = _split_digits(body)

    if minute > 59:
        raise InvalidMinutes("Minutes must be 00-59", raw=raw)
    if has_am or has_pm:
        hour = hour % 12
        if has_pm:
            hour += 12
    if hour > 23:
        raise InvalidHour("Hour must be 0-23", raw=raw)

    return TimeOfDay(hour, minute)


def parse_field(raw: str | None, field: str) -> TimeOfDay:
    """parse_time, with any error tagged with the form field it came from."""
    try:
        return parse_time(raw)
    except (InvalidFormat, InvalidMinutes, InvalidHour) as exc:
        raise exc.for_field(field) from exc
