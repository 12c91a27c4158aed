from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import date

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class SlotChangeHub:
    """Fan-out of "slots changed" events to live timetable views, keyed by class.

    Events carry no payload a subscriber depends on beyond the class and
    date; receivers simply re-read the day.
    """

    def __init__(self) -> None:
        self._connections: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def subscribe(self, class_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._connections[class_id].add(websocket)

    async def unsubscribe(self, class_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            sockets = self._connections.get(class_id)
            if not sockets:
                return
            sockets.discard(websocket)
            if not sockets:
                self._connections.pop(class_id, None)

    def subscriber_count(self, class_id: str) -> int:
        return len(self._connections.get(class_id, ()))

    async def publish(self, class_id: str, class_dates: set[date], *, reason: str) -> None:
        async with self._lock:
            sockets = list(self._connections.get(class_id, set()))

        if not sockets:
            return

        payload = {
            "event": "slots.changed",
            "class_id": class_id,
            "class_dates": sorted(item.isoformat() for item in class_dates),
            "reason": reason,
        }
        stale: list[WebSocket] = []
        for websocket in sockets:
            try:
                await websocket.send_json(payload)
            except Exception:  # pragma: no cover - network/runtime dependent
                stale.append(websocket)

        if stale:
            async with self._lock:
                active = self._connections.get(class_id, set())
                for socket in stale:
                    active.discard(socket)
                if not active:
                    self._connections.pop(class_id, None)
            logger.debug("Removed %d stale timetable websocket(s) for class %s", len(stale), class_id)


slot_change_hub = SlotChangeHub()
