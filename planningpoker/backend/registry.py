"""Process-wide registry of live rooms."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Protocol

from .identifiers import ROOM_ID_LENGTH, generate_short_id
from .models import Room
from .state import build_initial_room

logger = logging.getLogger(__name__)


class RoomRegistry(Protocol):
    def create(self) -> Room:
        """Create a room under a fresh unique id and store it."""

    def get(self, room_id: str) -> Room | None:
        """Return the room or None when it does not exist."""

    def remove(self, room_id: str) -> None:
        """Forget the room; unknown ids are ignored."""

    def for_each(self, fn: Callable[[Room], None]) -> None:
        """Call ``fn`` for every room currently registered."""


@dataclass
class InMemoryRoomRegistry:
    id_length: int = ROOM_ID_LENGTH

    def __post_init__(self) -> None:
        self._rooms: dict[str, Room] = {}
        self._lock = threading.Lock()

    def create(self) -> Room:
        with self._lock:
            room_id = generate_short_id(self.id_length)
            while room_id in self._rooms:
                logger.warning("Room id collision detected, regenerating: %s", room_id)
                room_id = generate_short_id(self.id_length)
            room = build_initial_room(room_id=room_id)
            self._rooms[room_id] = room
        logger.info("Created room %s", room_id)
        return room

    def get(self, room_id: str) -> Room | None:
        return self._rooms.get(room_id)

    def remove(self, room_id: str) -> None:
        with self._lock:
            removed = self._rooms.pop(room_id, None)
        if removed is not None:
            logger.info("Deleted room %s", room_id)

    def for_each(self, fn: Callable[[Room], None]) -> None:
        # Iterate over a copy so fn may remove rooms.
        with self._lock:
            rooms = list(self._rooms.values())
        for room in rooms:
            fn(room)

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms
