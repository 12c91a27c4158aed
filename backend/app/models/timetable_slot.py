import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, Enum as SAEnum, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class SlotType(str, Enum):
    period = "period"
    break_ = "break"


class TimetableSlot(Base):
    __tablename__ = "timetable_slots"
    __table_args__ = (
        UniqueConstraint("class_instance_id", "class_date", "period_number", name="uq_timetable_slot_period"),
        Index("ix_timetable_slots_class_day", "class_instance_id", "class_date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    school_code: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    class_instance_id: Mapped[str] = mapped_column(String(36), nullable=False)
    class_date: Mapped[date] = mapped_column(Date, nullable=False)
    period_number: Mapped[int] = mapped_column(Integer, nullable=False)
    slot_type: Mapped[SlotType] = mapped_column(
        SAEnum(SlotType, name="slot_type", values_callable=lambda obj: [item.value for item in obj]),
        nullable=False,
        default=SlotType.period,
    )
    # Canonical HH:MM:SS text, so lexical order is chronological order.
    start_time: Mapped[str] = mapped_column(String(8), nullable=False)
    end_time: Mapped[str] = mapped_column(String(8), nullable=False)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    subject_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    teacher_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    syllabus_chapter_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    syllabus_topic_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    plan_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="planned")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
