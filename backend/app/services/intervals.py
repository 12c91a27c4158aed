from __future__ import annotations

from collections.abc import Iterable

from app.core.exceptions import SlotConflict
from app.services.slots import Interval, TimeSlot


def overlaps(first: Interval, second: Interval) -> bool:
    # Half-open: a slot ending at 09:40 does not clash with one starting at 09:40.
    return max(first.start, second.start) < min(first.end, second.end)


def find_conflict(
    candidate: Interval,
    day_slots: Iterable[TimeSlot],
    *,
    exclude_ids: Iterable[str] = (),
    exclude_periods: Iterable[int] = (),
) -> TimeSlot | None:
    skipped_ids = {slot_id for slot_id in exclude_ids if slot_id}
    skipped_periods = set(exclude_periods)
    for slot in day_slots:
        if slot.id in skipped_ids or slot.period_number in skipped_periods:
            continue
        if overlaps(candidate, slot.interval):
            return slot
    return None


def validate_against_day(
    candidate: Interval,
    day_slots: Iterable[TimeSlot],
    exclude_id: str | None = None,
    *,
    exclude_periods: Iterable[int] = (),
) -> None:
    """Reject a zero/negative interval, then the first overlap with another slot of the day.

    ``exclude_id`` is the slot being edited; ``exclude_periods`` are period
    numbers the pending upsert will overwrite anyway.
    """
    candidate.require_valid()
    conflict = find_conflict(
        candidate,
        day_slots,
        exclude_ids=[exclude_id] if exclude_id else [],
        exclude_periods=exclude_periods,
    )
    if conflict is not None:
        raise SlotConflict(
            conflict.id,
            conflict.period_number,
            conflict.interval.start.canonical,
            conflict.interval.end.canonical,
        )


def validate_sequence(slots: Iterable[TimeSlot]) -> None:
    """Check a set of new slots for overlaps among themselves."""
    seen: list[TimeSlot] = []
    for slot in slots:
        slot.interval.require_valid()
        validate_against_day(slot.interval, seen)
        seen.append(slot)
