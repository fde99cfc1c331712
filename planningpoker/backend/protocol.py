"""Wire protocol: parse inbound websocket frames into engine actions."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .engine import (
    Action,
    ActionType,
    JoinSession,
    ResetRound,
    RevealCards,
    StartRound,
    SubmitVote,
)
from .exceptions import InvalidMessage


class InboundFrame(BaseModel):
    event: str = Field(min_length=1)
    data: Any = None


class OutboundFrame(BaseModel):
    event: str
    data: Any


class JoinSessionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(default=None, alias="sessionId")
    player_name: str | None = Field(default=None, alias="playerName")


class StartRoundPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    story: str | None = None


class SubmitVotePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    vote: Any = None


class RoomRefPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")


def encode_frame(event: str, data: Any) -> dict[str, Any]:
    return OutboundFrame(event=event, data=data).model_dump()


def parse_frame(raw: str | bytes | None) -> InboundFrame:
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as exc:
        raise InvalidMessage(f"Frame is not valid JSON: {exc}") from exc
    try:
        return InboundFrame.model_validate(payload)
    except ValidationError as exc:
        raise InvalidMessage(f"Malformed frame: {exc}") from exc


def parse_action(frame: InboundFrame) -> Action:
    """Translate a decoded frame into the matching engine action.

    ``reveal_cards`` and ``reset_round`` carry the bare session id as their
    payload; an object with ``sessionId`` is accepted as well.
    """
    try:
        action_type = ActionType(frame.event)
    except ValueError as exc:
        raise InvalidMessage(f"Unknown event {frame.event!r}") from exc

    try:
        if action_type is ActionType.JOIN_SESSION:
            join = JoinSessionPayload.model_validate(frame.data or {})
            return JoinSession(session_id=join.session_id, player_name=join.player_name)
        if action_type is ActionType.START_ROUND:
            start = StartRoundPayload.model_validate(frame.data)
            return StartRound(session_id=start.session_id, story=start.story or "")
        if action_type is ActionType.SUBMIT_VOTE:
            vote = SubmitVotePayload.model_validate(frame.data)
            return SubmitVote(session_id=vote.session_id, vote=vote.vote)
        if action_type is ActionType.REVEAL_CARDS:
            return RevealCards(session_id=_room_ref(frame.data))
        if action_type is ActionType.RESET_ROUND:
            return ResetRound(session_id=_room_ref(frame.data))
    except ValidationError as exc:
        raise InvalidMessage(f"Invalid payload for {frame.event}: {exc}") from exc

    # Disconnects come from the transport, never from a client frame.
    raise InvalidMessage(f"Event {frame.event!r} cannot be sent by clients")


def _room_ref(data: Any) -> str:
    if isinstance(data, str):
        return data
    return RoomRefPayload.model_validate(data).session_id
