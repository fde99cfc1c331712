"""FastAPI app wiring the websocket gateway to the session engine."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import defaultdict
from typing import Any

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from .config import BackendSettings, load_settings
from .engine import SESSION_STATE_UPDATE, ActionResult, Disconnect, SessionEngine
from .exceptions import InvalidMessage
from .identifiers import generate_connection_id
from .protocol import encode_frame, parse_action, parse_frame
from .registry import InMemoryRoomRegistry, RoomRegistry

logger = logging.getLogger(__name__)


class RoomConnectionHub:
    """Tracks which connections listen to which room and delivers frames.

    Every connection owns an outbound queue drained by its own sender task.
    Enqueueing never awaits, so frames reach each client in the order the
    engine produced them.
    """

    def __init__(self) -> None:
        self._outboxes: dict[str, asyncio.Queue[dict[str, Any] | None]] = {}
        self._subscribers: dict[str, set[str]] = defaultdict(set)

    async def connect(self, connection_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self._outboxes[connection_id] = asyncio.Queue()

    def disconnect(self, connection_id: str) -> None:
        outbox = self._outboxes.pop(connection_id, None)
        if outbox is not None:
            outbox.put_nowait(None)
        for room_id in list(self._subscribers):
            self.unsubscribe(room_id=room_id, connection_id=connection_id)

    def subscribe(self, room_id: str, connection_id: str) -> None:
        if connection_id in self._outboxes:
            self._subscribers[room_id].add(connection_id)

    def unsubscribe(self, room_id: str, connection_id: str) -> None:
        subscribers = self._subscribers.get(room_id)
        if subscribers is None:
            return
        subscribers.discard(connection_id)
        if not subscribers:
            self._subscribers.pop(room_id, None)

    def drop_room(self, room_id: str) -> None:
        self._subscribers.pop(room_id, None)

    def subscribers(self, room_id: str) -> set[str]:
        return set(self._subscribers.get(room_id, set()))

    def send(self, connection_id: str, event: str, data: Any) -> None:
        outbox = self._outboxes.get(connection_id)
        if outbox is not None:
            outbox.put_nowait(encode_frame(event, data))

    def broadcast(self, room_id: str, event: str, data: Any) -> None:
        for connection_id in self._subscribers.get(room_id, set()):
            self.send(connection_id, event, data)

    def deliver(self, connection_id: str, result: ActionResult) -> None:
        """Hand an engine outcome to the transport without waiting on it."""
        if result.joined_room_id is not None:
            self.subscribe(room_id=result.joined_room_id, connection_id=connection_id)
        for reply in result.replies:
            self.send(connection_id, reply.event, reply.message)
        for update in result.broadcasts:
            self.broadcast(update.room_id, SESSION_STATE_UPDATE, update.snapshot)
        for room_id in result.removed_room_ids:
            self.drop_room(room_id)

    async def pump(self, connection_id: str, websocket: WebSocket) -> None:
        outbox = self._outboxes.get(connection_id)
        if outbox is None:
            return
        while True:
            frame = await outbox.get()
            if frame is None:
                return
            try:
                await websocket.send_json(frame)
            except (RuntimeError, WebSocketDisconnect):
                logger.info("Dropping stale connection %s", connection_id)
                self.disconnect(connection_id)
                return


def create_app(settings: BackendSettings | None = None, registry: RoomRegistry | None = None) -> FastAPI:
    app_settings = settings if settings is not None else load_settings()
    engine = SessionEngine(registry if registry is not None else InMemoryRoomRegistry())
    hub = RoomConnectionHub()

    app = FastAPI(title="Planning Poker API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(app_settings.cors_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.hub = hub

    @app.get("/")
    def root() -> dict[str, str]:
        return {"message": "Planning Poker backend is running", "status": "ok"}

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "healthy"}

    @app.websocket("/ws")
    async def session_ws(websocket: WebSocket) -> None:
        connection_id = generate_connection_id()
        await hub.connect(connection_id=connection_id, websocket=websocket)
        sender = asyncio.create_task(hub.pump(connection_id=connection_id, websocket=websocket))
        logger.info("Client connected: %s", connection_id)

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(code=message.get("code", 1000))
                try:
                    action = parse_action(parse_frame(message.get("text") or message.get("bytes")))
                except InvalidMessage as exc:
                    logger.warning("Dropping frame from %s: %s", connection_id, exc)
                    continue
                hub.deliver(connection_id, engine.apply(connection_id, action))
        except WebSocketDisconnect:
            logger.info("Client disconnected: %s", connection_id)
        finally:
            result = engine.apply(connection_id, Disconnect())
            hub.disconnect(connection_id)
            hub.deliver(connection_id, result)
            sender.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sender

    return app


app = create_app()
