from collections.abc import Generator
from functools import partial

from anyio import to_thread
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.exceptions import MissingRequiredField
from app.db.session import SessionLocal
from app.services.batch_generator import BatchGenerator
from app.services.copy_merge import CopyMergeEngine
from app.services.schedule_day import ScheduleDayController
from app.services.schedule_store import SqlScheduleStore
from app.services.syllabus_resolver import SyllabusIndex, load_syllabus_index
from app.services.time_parser import parse_time


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_school_code(x_school_code: str = Header(min_length=1, max_length=50)) -> str:
    # Tenant scope is passed explicitly on every request; there is no ambient user context.
    school_code = x_school_code.strip()
    if not school_code:
        raise MissingRequiredField("X-School-Code", "School code header must not be blank")
    return school_code


def get_schedule_store(db: Session = Depends(get_db)) -> SqlScheduleStore:
    return SqlScheduleStore(db)


def get_day_controller(
    store: SqlScheduleStore = Depends(get_schedule_store),
    settings: Settings = Depends(get_settings),
) -> ScheduleDayController:
    return ScheduleDayController(
        store,
        default_status=settings.default_slot_status,
        default_day_start=parse_time(settings.default_day_start),
        default_slot_minutes=settings.default_slot_minutes,
    )


def get_batch_generator(
    store: SqlScheduleStore = Depends(get_schedule_store),
    settings: Settings = Depends(get_settings),
) -> BatchGenerator:
    return BatchGenerator(store, max_periods=settings.max_batch_periods, status=settings.default_slot_status)


def get_copy_engine(store: SqlScheduleStore = Depends(get_schedule_store)) -> CopyMergeEngine:
    return CopyMergeEngine(store)


async def fetch_syllabus_index(db: Session, *, school_code: str, class_id: str) -> SyllabusIndex:
    return await to_thread.run_sync(partial(load_syllabus_index, db, school_code=school_code, class_id=class_id))
