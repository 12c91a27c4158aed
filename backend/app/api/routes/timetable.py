from datetime import date

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from app.api.deps import (
    fetch_syllabus_index,
    get_batch_generator,
    get_copy_engine,
    get_day_controller,
    get_db,
    get_school_code,
)
from app.schemas.timetable import (
    BatchIn,
    BatchOut,
    CopyIn,
    CopyOut,
    ParsedTimeOut,
    ScheduleDayOut,
    SlotIn,
    SlotOut,
    SuggestionOut,
    SyllabusLabelOut,
)
from app.services.batch_generator import BatchGenerator, BatchSpec
from app.services.copy_merge import CopyMergeEngine, CopySpec
from app.services.schedule_day import ScheduleDayController, SlotDraft
from app.services.slot_change_hub import slot_change_hub
from app.services.syllabus_resolver import resolve
from app.services.time_parser import parse_field, parse_time

router = APIRouter()


def _draft(payload: SlotIn, *, school_code: str, class_id: str, class_date: date) -> SlotDraft:
    return SlotDraft(
        school_code=school_code,
        class_id=class_id,
        class_date=class_date,
        period_number=payload.period_number,
        slot_type=payload.slot_type,
        start_time=payload.start_time,
        end_time=payload.end_time,
        name=payload.name,
        subject_id=payload.subject_id,
        teacher_id=payload.teacher_id,
        chapter_id=payload.syllabus_chapter_id,
        topic_id=payload.syllabus_topic_id,
        notes=payload.plan_text,
        status=payload.status,
    )


@router.get("/parse-time", response_model=ParsedTimeOut)
def parse_time_field(raw: str = Query(max_length=20)) -> ParsedTimeOut:
    parsed = parse_time(raw)
    return ParsedTimeOut(raw=raw, canonical=parsed.canonical, hour=parsed.hour, minute=parsed.minute)


@router.get("/classes/{class_id}/days/{class_date}", response_model=ScheduleDayOut)
async def get_schedule_day(
    class_id: str,
    class_date: date,
    school_code: str = Depends(get_school_code),
    controller: ScheduleDayController = Depends(get_day_controller),
) -> ScheduleDayOut:
    day = await controller.list_day(school_code, class_id, class_date)
    return ScheduleDayOut.from_day(day)


@router.get("/classes/{class_id}/days/{class_date}/suggestion", response_model=SuggestionOut)
async def suggest_next_slot(
    class_id: str,
    class_date: date,
    duration: int | None = Query(default=None, ge=1, le=240),
    school_code: str = Depends(get_school_code),
    controller: ScheduleDayController = Depends(get_day_controller),
) -> SuggestionOut:
    suggestion = await controller.suggest_slot(school_code, class_id, class_date, duration)
    return SuggestionOut(
        start_time=suggestion.interval.start.canonical,
        end_time=suggestion.interval.end.canonical,
        duration_minutes=suggestion.interval.duration_minutes,
        period_number=suggestion.period_number,
    )


@router.get("/classes/{class_id}/days/{class_date}/syllabus", response_model=list[SyllabusLabelOut])
async def get_syllabus_labels(
    class_id: str,
    class_date: date,
    school_code: str = Depends(get_school_code),
    controller: ScheduleDayController = Depends(get_day_controller),
    db: Session = Depends(get_db),
) -> list[SyllabusLabelOut]:
    day = await controller.list_day(school_code, class_id, class_date)
    index = await fetch_syllabus_index(db, school_code=school_code, class_id=class_id)
    return [SyllabusLabelOut.from_label(slot, resolve(slot, index)) for slot in day.periods()]


@router.post(
    "/classes/{class_id}/days/{class_date}/slots",
    response_model=SlotOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_slot(
    class_id: str,
    class_date: date,
    payload: SlotIn,
    school_code: str = Depends(get_school_code),
    controller: ScheduleDayController = Depends(get_day_controller),
    db: Session = Depends(get_db),
) -> SlotOut:
    controller.syllabus_index = await fetch_syllabus_index(db, school_code=school_code, class_id=class_id)
    draft = _draft(payload, school_code=school_code, class_id=class_id, class_date=class_date)
    return SlotOut.from_slot(await controller.save_slot(draft))


@router.put("/slots/{slot_id}", response_model=SlotOut)
async def update_slot(
    slot_id: str,
    payload: SlotIn,
    school_code: str = Depends(get_school_code),
    controller: ScheduleDayController = Depends(get_day_controller),
    db: Session = Depends(get_db),
) -> SlotOut:
    current = await controller.get_slot(school_code, slot_id)
    scope = current.scope
    controller.syllabus_index = await fetch_syllabus_index(db, school_code=school_code, class_id=scope.class_id)
    draft = _draft(payload, school_code=school_code, class_id=scope.class_id, class_date=scope.class_date)
    return SlotOut.from_slot(await controller.save_slot(draft, slot_id=slot_id))


@router.delete("/slots/{slot_id}")
async def delete_slot(
    slot_id: str,
    school_code: str = Depends(get_school_code),
    controller: ScheduleDayController = Depends(get_day_controller),
) -> dict:
    await controller.delete_slot(school_code, slot_id)
    return {"success": True}


@router.post(
    "/classes/{class_id}/days/{class_date}/batch",
    response_model=BatchOut,
    status_code=status.HTTP_201_CREATED,
)
async def generate_day(
    class_id: str,
    class_date: date,
    payload: BatchIn,
    school_code: str = Depends(get_school_code),
    generator: BatchGenerator = Depends(get_batch_generator),
) -> BatchOut:
    spec = BatchSpec(
        start=parse_field(payload.start_time, "start_time"),
        period_minutes=payload.period_minutes,
        period_count=payload.period_count,
        break_after_periods=frozenset(payload.break_after_periods),
        break_minutes=payload.break_minutes,
    )
    slots = await generator.generate(spec, school_code=school_code, class_id=class_id, class_date=class_date)
    breaks = sum(1 for slot in slots if slot.is_break)
    return BatchOut(
        created=len(slots),
        periods=len(slots) - breaks,
        breaks=breaks,
        slots=[SlotOut.from_slot(slot) for slot in slots],
    )


@router.post("/classes/{class_id}/copy", response_model=CopyOut)
async def copy_day(
    class_id: str,
    payload: CopyIn,
    school_code: str = Depends(get_school_code),
    engine: CopyMergeEngine = Depends(get_copy_engine),
) -> CopyOut:
    spec = CopySpec(
        school_code=school_code,
        class_id=class_id,
        source_date=payload.source_date,
        target_date=payload.target_date,
        include_periods=payload.include_periods,
        include_breaks=payload.include_breaks,
        policy=payload.policy,
    )
    copied = await engine.copy(spec)
    return CopyOut(
        copied=copied,
        policy=payload.policy,
        source_date=payload.source_date,
        target_date=payload.target_date,
    )


@router.websocket("/classes/{class_id}/live")
async def timetable_websocket(websocket: WebSocket, class_id: str) -> None:
    await slot_change_hub.subscribe(class_id, websocket)
    try:
        await websocket.send_json({"event": "connected", "class_id": class_id})
        while True:
            message = await websocket.receive_text()
            if message.strip().lower() == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect:
        pass
    finally:
        await slot_change_hub.unsubscribe(class_id, websocket)
