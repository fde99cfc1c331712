"""Session engine: applies client actions to rooms and reports what to deliver."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .exceptions import PlanningPokerError, RoomNotFound, VoteNotAllowed
from .identifiers import placeholder_player_name
from .models import Player, Room, RoundPhase, parse_vote
from .registry import RoomRegistry
from .state import (
    STATUS_CARDS_REVEALED,
    STATUS_VOTING_OPEN,
    STATUS_WAITING_FOR_VOTES,
    room_snapshot,
)

logger = logging.getLogger(__name__)

SESSION_STATE_UPDATE = "session_state_update"
SESSION_ERROR = "session_error"
VOTE_ERROR = "vote_error"

SESSION_NOT_FOUND_MESSAGE = "The session does not exist."
VOTE_NOT_ALLOWED_MESSAGE = "You cannot vote right now."


class ActionType(str, Enum):
    JOIN_SESSION = "join_session"
    START_ROUND = "start_round"
    SUBMIT_VOTE = "submit_vote"
    REVEAL_CARDS = "reveal_cards"
    RESET_ROUND = "reset_round"
    DISCONNECT = "disconnect"


@dataclass(frozen=True)
class JoinSession:
    session_id: str | None = None
    player_name: str | None = None
    type: ActionType = field(default=ActionType.JOIN_SESSION, init=False)


@dataclass(frozen=True)
class StartRound:
    session_id: str
    story: str = ""
    type: ActionType = field(default=ActionType.START_ROUND, init=False)


@dataclass(frozen=True)
class SubmitVote:
    session_id: str
    vote: Any = None
    type: ActionType = field(default=ActionType.SUBMIT_VOTE, init=False)


@dataclass(frozen=True)
class RevealCards:
    session_id: str
    type: ActionType = field(default=ActionType.REVEAL_CARDS, init=False)


@dataclass(frozen=True)
class ResetRound:
    session_id: str
    type: ActionType = field(default=ActionType.RESET_ROUND, init=False)


@dataclass(frozen=True)
class Disconnect:
    type: ActionType = field(default=ActionType.DISCONNECT, init=False)


Action = Union[JoinSession, StartRound, SubmitVote, RevealCards, ResetRound, Disconnect]


@dataclass(frozen=True)
class RoomBroadcast:
    room_id: str
    snapshot: dict[str, Any]


@dataclass(frozen=True)
class DirectReply:
    event: str
    message: str


@dataclass
class ActionResult:
    broadcasts: list[RoomBroadcast] = field(default_factory=list)
    replies: list[DirectReply] = field(default_factory=list)
    joined_room_id: str | None = None
    removed_room_ids: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.broadcasts) or bool(self.removed_room_ids)

    def broadcast(self, room: Room) -> None:
        self.broadcasts.append(RoomBroadcast(room_id=room.id, snapshot=room_snapshot(room)))


class SessionEngine:
    """Serializes every action against the registry it owns.

    Each call to :meth:`apply` reads, mutates and snapshots rooms while
    holding one lock, so broadcasts always reflect a consistent state.
    """

    def __init__(self, registry: RoomRegistry) -> None:
        self.registry = registry
        self._lock = threading.RLock()

    def apply(self, connection_id: str, action: Action) -> ActionResult:
        with self._lock:
            result = ActionResult()
            try:
                self._dispatch(connection_id=connection_id, action=action, result=result)
            except RoomNotFound as exc:
                if action.type is ActionType.JOIN_SESSION:
                    result.replies.append(DirectReply(event=SESSION_ERROR, message=SESSION_NOT_FOUND_MESSAGE))
                else:
                    logger.debug("Ignoring %s for unknown room %s", action.type.value, exc.room_id)
            except VoteNotAllowed as exc:
                logger.info("Rejected vote from %s in room %s", connection_id, exc.room_id)
                result.replies.append(DirectReply(event=VOTE_ERROR, message=VOTE_NOT_ALLOWED_MESSAGE))
            return result

    def _dispatch(self, connection_id: str, action: Action, result: ActionResult) -> None:
        if isinstance(action, JoinSession):
            self._apply_join(connection_id, action, result)
        elif isinstance(action, StartRound):
            self._apply_start_round(action, result)
        elif isinstance(action, SubmitVote):
            self._apply_submit_vote(connection_id, action, result)
        elif isinstance(action, RevealCards):
            self._apply_reveal(action, result)
        elif isinstance(action, ResetRound):
            self._apply_reset_round(action, result)
        elif isinstance(action, Disconnect):
            self._apply_disconnect(connection_id, result)
        else:
            raise PlanningPokerError(f"Unsupported action {action!r}")

    def _require_room(self, room_id: str | None) -> Room:
        room = self.registry.get(room_id) if room_id else None
        if room is None:
            raise RoomNotFound(room_id)
        return room

    def _apply_join(self, connection_id: str, action: JoinSession, result: ActionResult) -> None:
        if action.session_id:
            room = self._require_room(action.session_id)
        else:
            room = self.registry.create()

        player = Player(id=connection_id, name=action.player_name or placeholder_player_name())
        room.players[connection_id] = player
        logger.info("Player %s (%s) joined room %s", player.name, connection_id, room.id)

        result.joined_room_id = room.id
        result.broadcast(room)

    def _apply_start_round(self, action: StartRound, result: ActionResult) -> None:
        room = self._require_room(action.session_id)
        room.current_story = action.story or ""
        room.status = STATUS_VOTING_OPEN
        room.round_active = True
        room.cards_revealed = False
        _clear_votes(room)
        logger.info("Round started in room %s: %s", room.id, room.current_story)
        result.broadcast(room)

    def _apply_submit_vote(self, connection_id: str, action: SubmitVote, result: ActionResult) -> None:
        room = self._require_room(action.session_id)
        if room.phase is not RoundPhase.VOTING:
            raise VoteNotAllowed(room.id)

        player = room.players.get(connection_id)
        if player is None:
            return

        player.vote = parse_vote(action.vote)
        logger.info("Player %s voted %r in room %s", player.name, action.vote, room.id)
        result.broadcast(room)

    def _apply_reveal(self, action: RevealCards, result: ActionResult) -> None:
        room = self._require_room(action.session_id)
        if room.phase is not RoundPhase.VOTING:
            return

        room.cards_revealed = True
        room.status = STATUS_CARDS_REVEALED
        logger.info("Cards revealed in room %s", room.id)
        result.broadcast(room)

    def _apply_reset_round(self, action: ResetRound, result: ActionResult) -> None:
        room = self._require_room(action.session_id)
        room.current_story = ""
        room.status = STATUS_WAITING_FOR_VOTES
        room.round_active = False
        room.cards_revealed = False
        _clear_votes(room)
        logger.info("Round reset in room %s", room.id)
        result.broadcast(room)
        self._collect_if_abandoned(room, result)

    def _apply_disconnect(self, connection_id: str, result: ActionResult) -> None:
        def leave(room: Room) -> None:
            player = room.players.pop(connection_id, None)
            if player is not None:
                logger.info("Player %s (%s) left room %s", player.name, connection_id, room.id)
                result.broadcast(room)
            self._collect_if_abandoned(room, result)

        self.registry.for_each(leave)

    def _collect_if_abandoned(self, room: Room, result: ActionResult) -> None:
        # Rooms keeping a story stay registered even with nobody left.
        if room.is_abandoned:
            self.registry.remove(room.id)
            result.removed_room_ids.append(room.id)


def _clear_votes(room: Room) -> None:
    for player in room.players.values():
        player.clear_vote()
