"""State builders and snapshot serialization for rooms."""

from __future__ import annotations

import copy
from typing import Any

from .models import NumericVote, Player, Room


STATUS_WAITING_FOR_PLAYERS = "Waiting for players..."
STATUS_VOTING_OPEN = "Voting open"
STATUS_CARDS_REVEALED = "Cards revealed"
STATUS_WAITING_FOR_VOTES = "Waiting for votes..."


def build_initial_room(room_id: str) -> Room:
    """Return a fresh room in the idle phase."""
    return Room(
        id=room_id,
        name=f"Session {room_id}",
        current_story="",
        status=STATUS_WAITING_FOR_PLAYERS,
        round_active=False,
        cards_revealed=False,
    )


def player_snapshot(player: Player) -> dict[str, Any]:
    return {
        "id": player.id,
        "name": player.name,
        "vote": copy.deepcopy(player.vote.raw) if player.vote is not None else None,
        "hasVoted": player.has_voted,
    }


def room_snapshot(room: Room) -> dict[str, Any]:
    """Serialize the full room state broadcast as ``session_state_update``.

    The result shares no mutable objects with ``room``.
    """
    return {
        "id": room.id,
        "name": room.name,
        "currentStory": room.current_story,
        "status": room.status,
        "players": {player_id: player_snapshot(player) for player_id, player in room.players.items()},
        "roundActive": room.round_active,
        "cardsRevealed": room.cards_revealed,
    }


def average_vote(room: Room) -> float:
    """Mean of the numeric votes in ``room``; 0 when nobody cast one."""
    numeric = [player.vote.value for player in room.players.values() if isinstance(player.vote, NumericVote)]
    if not numeric:
        return 0.0
    return sum(numeric) / len(numeric)
