from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date

from app.core.exceptions import InvalidInterval
from app.services.time_parser import TimeOfDay

PERIOD = "period"
BREAK = "break"


@dataclass(frozen=True)
class Interval:
    """Half-open ``[start, end)`` span of a class day."""

    start: TimeOfDay
    end: TimeOfDay

    @property
    def duration_minutes(self) -> int:
        return self.end.minutes - self.start.minutes

    @property
    def is_valid(self) -> bool:
        return self.end > self.start

    def require_valid(self) -> "Interval":
        if not self.is_valid:
            raise InvalidInterval(self.start.canonical, self.end.canonical)
        return self


@dataclass(frozen=True)
class SlotScope:
    school_code: str
    class_id: str
    class_date: date
    period_number: int

    @property
    def day_key(self) -> tuple[str, date]:
        return self.class_id, self.class_date

    def on_date(self, class_date: date) -> "SlotScope":
        return replace(self, class_date=class_date)


@dataclass(frozen=True)
class PeriodContent:
    subject_id: str | None = None
    teacher_id: str | None = None
    chapter_id: str | None = None
    topic_id: str | None = None
    notes: str | None = None

    kind = PERIOD


@dataclass(frozen=True)
class BreakContent:
    name: str = "Break"

    kind = BREAK


SlotContent = PeriodContent | BreakContent


@dataclass(frozen=True)
class TimeSlot:
    """One period or break on a class day.

    ``id`` is None until the store has persisted the slot.
    """

    scope: SlotScope
    interval: Interval
    content: SlotContent
    status: str = "planned"
    id: str | None = None

    @property
    def kind(self) -> str:
        return self.content.kind

    @property
    def period_number(self) -> int:
        return self.scope.period_number

    @property
    def is_break(self) -> bool:
        return isinstance(self.content, BreakContent)

    def with_id(self, slot_id: str | None) -> "TimeSlot":
        return replace(self, id=slot_id)

    def moved_to(self, class_date: date) -> "TimeSlot":
        return replace(self, scope=self.scope.on_date(class_date), id=None)


def _sort_key(slot: TimeSlot) -> tuple[TimeOfDay, int]:
    return slot.interval.start, slot.period_number


@dataclass(frozen=True)
class ScheduleDay:
    """Slots of one (class, date), ordered by start time then period number."""

    school_code: str
    class_id: str
    class_date: date
    slots: tuple[TimeSlot, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "slots", tuple(sorted(self.slots, key=_sort_key)))

    def __iter__(self):
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)

    def get(self, slot_id: str) -> TimeSlot | None:
        return next((slot for slot in self.slots if slot.id == slot_id), None)

    def at_period(self, period_number: int) -> TimeSlot | None:
        return next((slot for slot in self.slots if slot.period_number == period_number), None)

    def next_period_number(self) -> int:
        return max((slot.period_number for slot in self.slots), default=0) + 1

    def periods(self) -> list[TimeSlot]:
        return [slot for slot in self.slots if not slot.is_break]

    def breaks(self) -> list[TimeSlot]:
        return [slot for slot in self.slots if slot.is_break]
