"""Exceptions raised by the session engine and the wire protocol."""

from __future__ import annotations


class PlanningPokerError(Exception):
    """Base class for every rejected action."""


class RoomNotFound(PlanningPokerError):
    def __init__(self, room_id: str | None) -> None:
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class VoteNotAllowed(PlanningPokerError):
    """A vote was submitted while the room is not collecting votes."""

    def __init__(self, room_id: str) -> None:
        self.room_id = room_id
        super().__init__(f"Room {room_id} is not accepting votes")


class InvalidMessage(PlanningPokerError):
    """An inbound frame could not be turned into an action."""
