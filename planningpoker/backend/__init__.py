"""Backend package for the planning poker session synchronizer."""

from .config import BackendSettings, load_settings
from .engine import ActionResult, SessionEngine
from .models import NumericVote, OpaqueVote, Player, Room, RoundPhase, parse_vote
from .registry import InMemoryRoomRegistry, RoomRegistry
from .state import average_vote, build_initial_room, room_snapshot

__all__ = [
    "ActionResult",
    "average_vote",
    "BackendSettings",
    "build_initial_room",
    "InMemoryRoomRegistry",
    "load_settings",
    "NumericVote",
    "OpaqueVote",
    "parse_vote",
    "Player",
    "Room",
    "RoomRegistry",
    "room_snapshot",
    "RoundPhase",
    "SessionEngine",
]
