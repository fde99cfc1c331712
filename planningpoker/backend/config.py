"""Configuration helpers for backend runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class BackendSettings:
    host: str
    port: int
    cors_origins: tuple[str, ...]
    log_level: str


def _split_origins(raw: str) -> tuple[str, ...]:
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


def load_settings() -> BackendSettings:
    port_raw = os.getenv("PLANNINGPOKER_PORT") or os.getenv("PORT") or "3000"
    return BackendSettings(
        host=os.getenv("PLANNINGPOKER_HOST", "127.0.0.1"),
        port=int(port_raw),
        cors_origins=_split_origins(os.getenv("PLANNINGPOKER_CORS_ORIGINS", "*")),
        log_level=os.getenv("PLANNINGPOKER_LOG_LEVEL", "INFO").upper(),
    )
