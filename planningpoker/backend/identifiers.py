"""Identifier helpers for rooms, connections and placeholder names."""

from __future__ import annotations

import secrets
import string
import uuid


ROOM_ID_ALPHABET = string.ascii_lowercase + string.digits
ROOM_ID_LENGTH = 7


def generate_short_id(length: int = ROOM_ID_LENGTH) -> str:
    """Generate a short lowercase base36 identifier."""
    return "".join(secrets.choice(ROOM_ID_ALPHABET) for _ in range(length))


def generate_connection_id() -> str:
    """Generate the per-connection identifier that also keys the player."""
    return uuid.uuid4().hex


def placeholder_player_name() -> str:
    return f"Player {generate_short_id()}"
