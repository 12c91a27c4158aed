from __future__ import annotations

from datetime import date
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator

from app.services.copy_merge import ConflictPolicy
from app.services.slots import BreakContent, ScheduleDay, TimeSlot
from app.services.syllabus_resolver import LabelState, SyllabusLabel


class SlotIn(BaseModel):
    period_number: int = Field(ge=1, le=99)
    slot_type: Literal["period", "break"] = "period"
    start_time: str = Field(min_length=1, max_length=20)
    end_time: str = Field(min_length=1, max_length=20)
    name: str | None = Field(default=None, max_length=100)
    subject_id: str | None = Field(default=None, max_length=36)
    teacher_id: str | None = Field(default=None, max_length=36)
    syllabus_chapter_id: str | None = Field(default=None, max_length=36)
    syllabus_topic_id: str | None = Field(default=None, max_length=36)
    plan_text: str | None = Field(default=None, max_length=2000)
    status: str | None = Field(default=None, max_length=30)


class PeriodDetailsOut(BaseModel):
    slot_type: Literal["period"] = "period"
    subject_id: str | None = None
    teacher_id: str | None = None
    syllabus_chapter_id: str | None = None
    syllabus_topic_id: str | None = None
    plan_text: str | None = None


class BreakDetailsOut(BaseModel):
    slot_type: Literal["break"] = "break"
    name: str


class SlotOut(BaseModel):
    id: str
    class_id: str
    class_date: date
    period_number: int
    start_time: str
    end_time: str
    status: str
    details: Annotated[PeriodDetailsOut | BreakDetailsOut, Field(discriminator="slot_type")]

    @classmethod
    def from_slot(cls, slot: TimeSlot) -> "SlotOut":
        content = slot.content
        if isinstance(content, BreakContent):
            details: PeriodDetailsOut | BreakDetailsOut = BreakDetailsOut(name=content.name)
        else:
            details = PeriodDetailsOut(
                subject_id=content.subject_id,
                teacher_id=content.teacher_id,
                syllabus_chapter_id=content.chapter_id,
                syllabus_topic_id=content.topic_id,
                plan_text=content.notes,
            )
        return cls(
            id=slot.id,
            class_id=slot.scope.class_id,
            class_date=slot.scope.class_date,
            period_number=slot.period_number,
            start_time=slot.interval.start.canonical,
            end_time=slot.interval.end.canonical,
            status=slot.status,
            details=details,
        )


class ScheduleDayOut(BaseModel):
    class_id: str
    class_date: date
    next_period_number: int
    slots: list[SlotOut]

    @classmethod
    def from_day(cls, day: ScheduleDay) -> "ScheduleDayOut":
        return cls(
            class_id=day.class_id,
            class_date=day.class_date,
            next_period_number=day.next_period_number(),
            slots=[SlotOut.from_slot(slot) for slot in day],
        )


class ParsedTimeOut(BaseModel):
    raw: str
    canonical: str
    hour: int
    minute: int


class SuggestionOut(BaseModel):
    start_time: str
    end_time: str
    duration_minutes: int
    period_number: int


class BatchIn(BaseModel):
    start_time: str = Field(default="09:00", min_length=1, max_length=20)
    period_minutes: int = Field(default=40, ge=1, le=240)
    period_count: int = Field(default=8, ge=1, le=24)
    break_after_periods: list[int] = Field(default_factory=lambda: [3, 6], max_length=24)
    break_minutes: int = Field(default=15, ge=0, le=240)

    @field_validator("break_after_periods")
    @classmethod
    def dedupe_break_positions(cls, value: list[int]) -> list[int]:
        return sorted(set(value))


class BatchOut(BaseModel):
    created: int
    periods: int
    breaks: int
    slots: list[SlotOut]


class CopyIn(BaseModel):
    source_date: date
    target_date: date
    include_periods: bool = True
    include_breaks: bool = True
    policy: ConflictPolicy = ConflictPolicy.replace


class CopyOut(BaseModel):
    copied: int
    policy: ConflictPolicy
    source_date: date
    target_date: date


class SyllabusLabelOut(BaseModel):
    slot_id: str
    period_number: int
    state: LabelState
    text: str
    chapter_no: int | None = None
    chapter_title: str | None = None
    topic_no: int | None = None
    topic_title: str | None = None

    @classmethod
    def from_label(cls, slot: TimeSlot, label: SyllabusLabel) -> "SyllabusLabelOut":
        return cls(
            slot_id=slot.id,
            period_number=slot.period_number,
            state=label.state,
            text=label.text,
            chapter_no=label.chapter_no,
            chapter_title=label.chapter_title,
            topic_no=label.topic_no,
            topic_title=label.topic_title,
        )
