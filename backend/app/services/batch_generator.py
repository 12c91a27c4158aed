from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from app.core.exceptions import InvalidBatchSpec, InvalidHour
from app.services.intervals import validate_against_day
from app.services.schedule_store import ScheduleStore
from app.services.slots import BreakContent, Interval, PeriodContent, SlotScope, TimeSlot
from app.services.time_parser import TimeOfDay

logger = logging.getLogger(__name__)

LUNCH_AFTER_PERIOD = 3
LUNCH_BREAK_NAME = "Lunch Break"
BREAK_NAME = "Break"


@dataclass(frozen=True)
class BatchSpec:
    start: TimeOfDay
    period_minutes: int
    period_count: int
    break_after_periods: frozenset[int] = field(default_factory=frozenset)
    break_minutes: int = 15

    def validate(self, *, max_periods: int) -> None:
        if self.period_count < 1:
            raise InvalidBatchSpec("period_count", "At least one period is required")
        if self.period_count > max_periods:
            raise InvalidBatchSpec("period_count", f"At most {max_periods} periods can be generated")
        if self.period_minutes < 1:
            raise InvalidBatchSpec("period_minutes", "Period duration must be at least 1 minute")
        if self.break_after_periods and self.break_minutes < 1:
            raise InvalidBatchSpec("break_minutes", "Break duration must be at least 1 minute")
        out_of_range = sorted(index for index in self.break_after_periods if not 1 <= index <= self.period_count)
        if out_of_range:
            raise InvalidBatchSpec(
                "break_after_periods",
                f"Break positions must be between 1 and {self.period_count}: {out_of_range}",
            )


def generate_drafts(
    spec: BatchSpec,
    *,
    school_code: str,
    class_id: str,
    class_date: date,
    status: str = "planned",
) -> list[TimeSlot]:
    """Lay out a skeleton day: periods with breaks interleaved, one shared numbering.

    Periods come out without subject or teacher; those are filled in later
    through normal edits. A break after the last period is never emitted.
    """
    slots: list[TimeSlot] = []
    clock = spec.start

    def emit(length: int, content: PeriodContent | BreakContent) -> None:
        nonlocal clock
        end = clock.plus_minutes(length)
        scope = SlotScope(
            school_code=school_code,
            class_id=class_id,
            class_date=class_date,
            period_number=len(slots) + 1,
        )
        slots.append(TimeSlot(scope=scope, interval=Interval(clock, end), content=content, status=status))
        clock = end

    for index in range(1, spec.period_count + 1):
        emit(spec.period_minutes, PeriodContent())
        if index in spec.break_after_periods and index < spec.period_count:
            name = LUNCH_BREAK_NAME if index == LUNCH_AFTER_PERIOD else BREAK_NAME
            emit(spec.break_minutes, BreakContent(name=name))
    return slots


class BatchGenerator:
    def __init__(self, store: ScheduleStore, *, max_periods: int = 16, status: str = "planned") -> None:
        self.store = store
        self.max_periods = max_periods
        self.status = status

    async def generate(self, spec: BatchSpec, *, school_code: str, class_id: str, class_date: date) -> list[TimeSlot]:
        """Generate and persist a whole day in a single upsert.

        Existing slots at the generated period numbers are overwritten; any
        other slot already on the day must not overlap the new sequence.
        """
        spec.validate(max_periods=self.max_periods)
        try:
            drafts = generate_drafts(
                spec,
                school_code=school_code,
                class_id=class_id,
                class_date=class_date,
                status=self.status,
            )
        except InvalidHour as exc:
            raise InvalidBatchSpec("period_count", "Generated schedule runs past the end of the day") from exc

        existing = await self.store.query(school_code, class_id, class_date)
        generated_numbers = [draft.period_number for draft in drafts]
        for draft in drafts:
            validate_against_day(draft.interval, existing, exclude_periods=generated_numbers)

        saved = await self.store.upsert(drafts)
        logger.info(
            "Generated %d slot(s) (%d periods) for class %s on %s starting %s",
            len(saved),
            spec.period_count,
            class_id,
            class_date,
            spec.start.canonical,
        )
        return saved
