"""Domain models for rooms, players and votes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class RoundPhase(str, Enum):
    IDLE = "idle"
    VOTING = "voting"
    REVEALED = "revealed"


@dataclass(frozen=True)
class NumericVote:
    value: int | float

    @property
    def raw(self) -> int | float:
        return self.value


@dataclass(frozen=True)
class OpaqueVote:
    """Any non-numeric vote such as "?" or a coffee card."""

    value: Any

    @property
    def raw(self) -> Any:
        return self.value


Vote = Union[NumericVote, OpaqueVote]


def parse_vote(raw: Any) -> Vote | None:
    """Map a raw wire value to a vote; ``None`` means no vote."""
    if raw is None:
        return None
    # bool is an int subclass but a checkbox is not an estimate.
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        if isinstance(raw, float) and math.isnan(raw):
            return OpaqueVote(value=raw)
        return NumericVote(value=raw)
    return OpaqueVote(value=raw)


@dataclass
class Player:
    id: str
    name: str
    vote: Vote | None = None

    @property
    def has_voted(self) -> bool:
        return self.vote is not None

    def clear_vote(self) -> None:
        self.vote = None


@dataclass
class Room:
    id: str
    name: str
    current_story: str = ""
    status: str = ""
    round_active: bool = False
    cards_revealed: bool = False
    players: dict[str, Player] = field(default_factory=dict)

    @property
    def phase(self) -> RoundPhase:
        if not self.round_active:
            return RoundPhase.IDLE
        if self.cards_revealed:
            return RoundPhase.REVEALED
        return RoundPhase.VOTING

    @property
    def is_abandoned(self) -> bool:
        """True when the room has no players and no story in progress."""
        return not self.players and not self.current_story
