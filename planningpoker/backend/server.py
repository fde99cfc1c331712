"""Command line entrypoint that serves the websocket gateway with uvicorn."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace

import uvicorn

from .api import create_app
from .config import BackendSettings, load_settings


def parse_args(settings: BackendSettings, argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Planning Poker backend")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--log-level", default=settings.log_level)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    args = parse_args(settings, argv)
    settings = replace(settings, host=args.host, port=args.port, log_level=args.log_level.upper())

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info("Listening on %s:%s", settings.host, settings.port)

    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
