"""Persistence boundary for timetable slots.

Every mutation in the engine, whether a single edit, a generated batch or a
copied day, goes through ``upsert`` keyed by (class, date, period number).
The store only enforces that identity; interval disjointness is checked by
callers before they get here.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence
from datetime import date
from typing import Protocol

from anyio import to_thread
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import StoreError
from app.models.timetable_slot import SlotType, TimetableSlot
from app.services.slot_change_hub import SlotChangeHub, slot_change_hub
from app.services.slots import BreakContent, Interval, PeriodContent, SlotScope, TimeSlot
from app.services.time_parser import parse_time

logger = logging.getLogger(__name__)


class ScheduleStore(Protocol):
    async def query(self, school_code: str, class_id: str, class_date: date) -> list[TimeSlot]: ...

    async def get(self, school_code: str, slot_id: str) -> TimeSlot | None: ...

    async def upsert(self, slots: Sequence[TimeSlot], *, clear_day: bool = False) -> list[TimeSlot]: ...

    async def delete_where(
        self,
        school_code: str,
        class_id: str,
        class_date: date,
        slot_id: str | None = None,
    ) -> int: ...


def row_to_slot(row: TimetableSlot) -> TimeSlot:
    if row.slot_type == SlotType.break_:
        content = BreakContent(name=row.name or "Break")
    else:
        content = PeriodContent(
            subject_id=row.subject_id,
            teacher_id=row.teacher_id,
            chapter_id=row.syllabus_chapter_id,
            topic_id=row.syllabus_topic_id,
            notes=row.plan_text,
        )
    return TimeSlot(
        id=row.id,
        scope=SlotScope(
            school_code=row.school_code,
            class_id=row.class_instance_id,
            class_date=row.class_date,
            period_number=row.period_number,
        ),
        interval=Interval(parse_time(row.start_time), parse_time(row.end_time)),
        content=content,
        status=row.status,
    )


def apply_slot(row: TimetableSlot, slot: TimeSlot) -> None:
    row.school_code = slot.scope.school_code
    row.class_instance_id = slot.scope.class_id
    row.class_date = slot.scope.class_date
    row.period_number = slot.scope.period_number
    row.start_time = slot.interval.start.canonical
    row.end_time = slot.interval.end.canonical
    row.status = slot.status
    content = slot.content
    if isinstance(content, BreakContent):
        row.slot_type = SlotType.break_
        row.name = content.name
        row.subject_id = None
        row.teacher_id = None
        row.syllabus_chapter_id = None
        row.syllabus_topic_id = None
        row.plan_text = None
    else:
        row.slot_type = SlotType.period
        row.name = None
        row.subject_id = content.subject_id
        row.teacher_id = content.teacher_id
        row.syllabus_chapter_id = content.chapter_id
        row.syllabus_topic_id = content.topic_id
        row.plan_text = content.notes


class SqlScheduleStore:
    """ScheduleStore over a SQLAlchemy session.

    Blocking ORM work runs in a worker thread; each public call is a single
    transaction that is rolled back as a whole on failure.
    """

    def __init__(self, db: Session, *, hub: SlotChangeHub | None = slot_change_hub) -> None:
        self.db = db
        self.hub = hub

    async def _run(self, operation: str, func, *args):
        try:
            return await to_thread.run_sync(func, *args)
        except SQLAlchemyError as exc:
            logger.exception("Schedule store %s failed", operation)
            raise StoreError(operation) from exc

    async def _notify(self, slots: Sequence[TimeSlot], *, reason: str) -> None:
        if self.hub is None:
            return
        dates_by_class: dict[str, set[date]] = defaultdict(set)
        for slot in slots:
            dates_by_class[slot.scope.class_id].add(slot.scope.class_date)
        for class_id, class_dates in dates_by_class.items():
            await self.hub.publish(class_id, class_dates, reason=reason)

    async def query(self, school_code: str, class_id: str, class_date: date) -> list[TimeSlot]:
        return await self._run("query", self._query_sync, school_code, class_id, class_date)

    async def get(self, school_code: str, slot_id: str) -> TimeSlot | None:
        return await self._run("get", self._get_sync, school_code, slot_id)

    async def upsert(self, slots: Sequence[TimeSlot], *, clear_day: bool = False) -> list[TimeSlot]:
        if not slots:
            return []
        saved = await self._run("upsert", self._upsert_sync, list(slots), clear_day)
        await self._notify(saved, reason="replace" if clear_day else "upsert")
        return saved

    async def delete_where(
        self,
        school_code: str,
        class_id: str,
        class_date: date,
        slot_id: str | None = None,
    ) -> int:
        deleted = await self._run("delete", self._delete_sync, school_code, class_id, class_date, slot_id)
        if deleted and self.hub is not None:
            await self.hub.publish(class_id, {class_date}, reason="delete")
        return deleted

    def _query_sync(self, school_code: str, class_id: str, class_date: date) -> list[TimeSlot]:
        rows = self.db.execute(
            select(TimetableSlot)
            .where(
                TimetableSlot.school_code == school_code,
                TimetableSlot.class_instance_id == class_id,
                TimetableSlot.class_date == class_date,
            )
            .order_by(TimetableSlot.start_time, TimetableSlot.period_number)
        ).scalars()
        return [row_to_slot(row) for row in rows]

    def _get_sync(self, school_code: str, slot_id: str) -> TimeSlot | None:
        row = self.db.get(TimetableSlot, slot_id)
        if row is None or row.school_code != school_code:
            return None
        return row_to_slot(row)

    def _row_for(self, slot: TimeSlot) -> TimetableSlot:
        scope = slot.scope
        by_key = self.db.execute(
            select(TimetableSlot).where(
                TimetableSlot.class_instance_id == scope.class_id,
                TimetableSlot.class_date == scope.class_date,
                TimetableSlot.period_number == scope.period_number,
            )
        ).scalar_one_or_none()

        if slot.id:
            by_id = self.db.get(TimetableSlot, slot.id)
            if by_id is not None and by_id.school_code == scope.school_code:
                # An edit that renumbers a slot overwrites whatever held the new number.
                if by_key is not None and by_key.id != by_id.id:
                    self.db.delete(by_key)
                    self.db.flush()
                return by_id

        if by_key is not None:
            return by_key

        row = TimetableSlot()
        self.db.add(row)
        return row

    def _upsert_sync(self, slots: list[TimeSlot], clear_day: bool) -> list[TimeSlot]:
        try:
            if clear_day:
                days = {(slot.scope.school_code, slot.scope.class_id, slot.scope.class_date) for slot in slots}
                for school_code, class_id, class_date in days:
                    self.db.execute(
                        delete(TimetableSlot).where(
                            TimetableSlot.school_code == school_code,
                            TimetableSlot.class_instance_id == class_id,
                            TimetableSlot.class_date == class_date,
                        )
                    )
            rows: list[TimetableSlot] = []
            for slot in slots:
                row = self._row_for(slot)
                apply_slot(row, slot)
                self.db.flush()
                rows.append(row)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        for row in rows:
            self.db.refresh(row)
        return [row_to_slot(row) for row in rows]

    def _delete_sync(self, school_code: str, class_id: str, class_date: date, slot_id: str | None) -> int:
        statement = delete(TimetableSlot).where(
            TimetableSlot.school_code == school_code,
            TimetableSlot.class_instance_id == class_id,
            TimetableSlot.class_date == class_date,
        )
        if slot_id is not None:
            statement = statement.where(TimetableSlot.id == slot_id)
        try:
            result = self.db.execute(statement)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return result.rowcount or 0
