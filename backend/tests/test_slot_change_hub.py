from datetime import date

import pytest

from app.services.schedule_day import ScheduleDayController, SlotDraft
from app.services.schedule_store import SqlScheduleStore
from app.services.slot_change_hub import SlotChangeHub


class RecordingSocket:
    def __init__(self, *, broken: bool = False) -> None:
        self.accepted = False
        self.broken = broken
        self.sent: list[dict] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, payload: dict) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(payload)


@pytest.mark.asyncio
async def test_publish_reaches_only_subscribers_of_the_class():
    hub = SlotChangeHub()
    seventh = RecordingSocket()
    eighth = RecordingSocket()
    await hub.subscribe("class-7a", seventh)
    await hub.subscribe("class-8b", eighth)

    await hub.publish("class-7a", {date(2026, 10, 20), date(2026, 10, 19)}, reason="replace")

    assert seventh.accepted
    assert seventh.sent == [
        {
            "event": "slots.changed",
            "class_id": "class-7a",
            "class_dates": ["2026-10-19", "2026-10-20"],
            "reason": "replace",
        }
    ]
    assert eighth.sent == []


@pytest.mark.asyncio
async def test_stale_sockets_are_dropped():
    hub = SlotChangeHub()
    healthy = RecordingSocket()
    await hub.subscribe("class-7a", healthy)
    await hub.subscribe("class-7a", RecordingSocket(broken=True))

    await hub.publish("class-7a", {date(2026, 10, 19)}, reason="delete")

    assert hub.subscriber_count("class-7a") == 1
    await hub.unsubscribe("class-7a", healthy)
    assert hub.subscriber_count("class-7a") == 0


@pytest.mark.asyncio
async def test_store_publishes_after_each_write(db_session):
    hub = SlotChangeHub()
    socket = RecordingSocket()
    await hub.subscribe("class-7a", socket)
    controller = ScheduleDayController(SqlScheduleStore(db_session, hub=hub))

    saved = await controller.save_slot(
        SlotDraft(
            school_code="SCH1",
            class_id="class-7a",
            class_date=date(2026, 10, 19),
            period_number=1,
            slot_type="period",
            start_time="0900",
            end_time="0940",
            subject_id="math",
            teacher_id="t-1",
        )
    )
    await controller.delete_slot("SCH1", saved.id)

    assert [event["reason"] for event in socket.sent] == ["upsert", "delete"]
