from __future__ import annotations

from collections.abc import Iterable

from app.services.slots import Interval, TimeSlot
from app.services.time_parser import TimeOfDay

DEFAULT_DAY_START = TimeOfDay(9, 0)


def suggest_next(
    day_slots: Iterable[TimeSlot],
    duration_minutes: int,
    default_start: TimeOfDay = DEFAULT_DAY_START,
) -> Interval:
    """Propose ``[latest end, latest end + duration]`` for the next slot of the day.

    Advisory only: callers still run the result through validate_against_day,
    since a manually edited slot elsewhere in the day may still clash.
    """
    start = max((slot.interval.end for slot in day_slots), default=default_start)
    return Interval(start, start.plus_minutes(duration_minutes))
