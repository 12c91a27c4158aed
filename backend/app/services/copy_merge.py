from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from app.core.exceptions import InvalidCopyRange, NoSourceData
from app.services.schedule_store import ScheduleStore
from app.services.slots import TimeSlot

logger = logging.getLogger(__name__)


class ConflictPolicy(str, Enum):
    replace = "replace"
    merge = "merge"


@dataclass(frozen=True)
class CopySpec:
    school_code: str
    class_id: str
    source_date: date
    target_date: date
    include_periods: bool = True
    include_breaks: bool = True
    policy: ConflictPolicy = ConflictPolicy.replace

    def wants(self, slot: TimeSlot) -> bool:
        return self.include_breaks if slot.is_break else self.include_periods


class CopyMergeEngine:
    """Copy one class day onto another date.

    ``replace`` clears the target day and writes the source slots in one
    store transaction. ``merge`` upserts by period number, overwriting the
    numbers the source has and leaving every other target slot alone.
    Intervals are not re-validated: the source day is trusted as already
    consistent, and target writes keep the source's period numbers.
    """

    def __init__(self, store: ScheduleStore) -> None:
        self.store = store

    async def copy(self, spec: CopySpec) -> int:
        if spec.source_date == spec.target_date:
            raise InvalidCopyRange("Source and target dates must differ")

        source = await self.store.query(spec.school_code, spec.class_id, spec.source_date)
        selected = [slot for slot in source if spec.wants(slot)]
        if not selected:
            raise NoSourceData(spec.source_date.isoformat())

        drafts = [slot.moved_to(spec.target_date) for slot in selected]
        saved = await self.store.upsert(drafts, clear_day=spec.policy == ConflictPolicy.replace)
        logger.info(
            "Copied %d slot(s) for class %s from %s to %s (%s)",
            len(saved),
            spec.class_id,
            spec.source_date,
            spec.target_date,
            spec.policy.value,
        )
        return len(saved)
