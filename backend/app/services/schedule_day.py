from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from app.core.exceptions import (
    MissingRequiredField,
    ScheduleValidationError,
    SlotNotFound,
    TopicChapterMismatch,
)
from app.services.intervals import validate_against_day
from app.services.schedule_store import ScheduleStore
from app.services.slot_suggester import DEFAULT_DAY_START, suggest_next
from app.services.slots import BREAK, PERIOD, BreakContent, Interval, PeriodContent, ScheduleDay, SlotScope, TimeSlot
from app.services.syllabus_resolver import SyllabusIndex
from app.services.time_parser import TimeOfDay, parse_field

logger = logging.getLogger(__name__)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


@dataclass(frozen=True)
class SlotDraft:
    """A slot as entered on the form: raw time text, fields present per kind."""

    school_code: str
    class_id: str
    class_date: date
    period_number: int
    slot_type: str
    start_time: str | None
    end_time: str | None
    name: str | None = None
    subject_id: str | None = None
    teacher_id: str | None = None
    chapter_id: str | None = None
    topic_id: str | None = None
    notes: str | None = None
    status: str | None = None


@dataclass(frozen=True)
class SlotSuggestion:
    interval: Interval
    period_number: int


class ScheduleDayController:
    """Single-slot create/edit/delete for one class day.

    Each mutation parses and validates first and only then issues exactly one
    store write, so a rejected draft never reaches the store and a failed
    store call leaves the persisted day as it was.
    """

    def __init__(
        self,
        store: ScheduleStore,
        *,
        syllabus_index: SyllabusIndex | None = None,
        default_status: str = "planned",
        default_day_start: TimeOfDay = DEFAULT_DAY_START,
        default_slot_minutes: int = 40,
    ) -> None:
        self.store = store
        self.syllabus_index = syllabus_index
        self.default_status = default_status
        self.default_day_start = default_day_start
        self.default_slot_minutes = default_slot_minutes

    async def list_day(self, school_code: str, class_id: str, class_date: date) -> ScheduleDay:
        slots = await self.store.query(school_code, class_id, class_date)
        return ScheduleDay(school_code=school_code, class_id=class_id, class_date=class_date, slots=tuple(slots))

    async def get_slot(self, school_code: str, slot_id: str) -> TimeSlot:
        slot = await self.store.get(school_code, slot_id)
        if slot is None:
            raise SlotNotFound(slot_id)
        return slot

    async def save_slot(self, draft: SlotDraft, slot_id: str | None = None) -> TimeSlot:
        """Create or edit a slot, upserting by (class, date, period number).

        Saving onto an occupied period number overwrites that slot in place,
        which is how edits and creates share one path.
        """
        start = parse_field(draft.start_time, "start_time")
        end = parse_field(draft.end_time, "end_time")
        interval = Interval(start, end).require_valid()
        if draft.period_number < 1:
            raise ScheduleValidationError(
                "Period number must be at least 1",
                kind="InvalidPeriodNumber",
                field="period_number",
            )
        content = self._build_content(draft)

        existing = await self.get_slot(draft.school_code, slot_id) if slot_id else None
        status = draft.status or (existing.status if existing else self.default_status)

        day = await self.list_day(draft.school_code, draft.class_id, draft.class_date)
        validate_against_day(interval, day, exclude_id=slot_id, exclude_periods=[draft.period_number])

        slot = TimeSlot(
            id=slot_id,
            scope=SlotScope(
                school_code=draft.school_code,
                class_id=draft.class_id,
                class_date=draft.class_date,
                period_number=draft.period_number,
            ),
            interval=interval,
            content=content,
            status=status,
        )
        saved = (await self.store.upsert([slot]))[0]
        logger.info(
            "Saved %s #%d (%s-%s) for class %s on %s",
            saved.kind,
            saved.period_number,
            saved.interval.start.canonical,
            saved.interval.end.canonical,
            saved.scope.class_id,
            saved.scope.class_date,
        )
        return saved

    async def delete_slot(self, school_code: str, slot_id: str) -> TimeSlot:
        # Other slots keep their numbers; gaps are expected.
        slot = await self.get_slot(school_code, slot_id)
        await self.store.delete_where(school_code, slot.scope.class_id, slot.scope.class_date, slot_id=slot_id)
        logger.info("Deleted slot %s from class %s on %s", slot_id, slot.scope.class_id, slot.scope.class_date)
        return slot

    async def suggest_slot(
        self,
        school_code: str,
        class_id: str,
        class_date: date,
        duration_minutes: int | None = None,
    ) -> SlotSuggestion:
        duration = self.default_slot_minutes if duration_minutes is None else duration_minutes
        if duration < 1:
            raise ScheduleValidationError("Duration must be at least 1 minute", kind="InvalidDuration", field="duration")
        day = await self.list_day(school_code, class_id, class_date)
        interval = suggest_next(day, duration, default_start=self.default_day_start)
        validate_against_day(interval, day)
        return SlotSuggestion(interval=interval, period_number=day.next_period_number())

    def _build_content(self, draft: SlotDraft) -> PeriodContent | BreakContent:
        if draft.slot_type == BREAK:
            name = _clean(draft.name)
            if name is None:
                raise MissingRequiredField("name", "Break name is required")
            return BreakContent(name=name)

        if draft.slot_type != PERIOD:
            raise ScheduleValidationError(
                f"Unknown slot type: {draft.slot_type}",
                kind="InvalidSlotType",
                field="slot_type",
            )

        subject_id = _clean(draft.subject_id)
        teacher_id = _clean(draft.teacher_id)
        chapter_id = _clean(draft.chapter_id)
        topic_id = _clean(draft.topic_id)
        if subject_id is None:
            raise MissingRequiredField("subject_id", "Subject is required for a period")
        if teacher_id is None:
            raise MissingRequiredField("teacher_id", "Teacher is required for a period")
        if topic_id is not None:
            if chapter_id is None:
                raise MissingRequiredField("syllabus_chapter_id", "Pick a chapter before choosing a topic")
            if self.syllabus_index is not None:
                parent = self.syllabus_index.chapter_of(topic_id)
                if parent is not None and parent != chapter_id:
                    raise TopicChapterMismatch(topic_id, chapter_id)

        return PeriodContent(
            subject_id=subject_id,
            teacher_id=teacher_id,
            chapter_id=chapter_id,
            topic_id=topic_id,
            notes=_clean(draft.notes),
        )
