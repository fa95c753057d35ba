from __future__ import annotations

import logging
import os

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def resolve_level(level: str | int | None) -> int:
    if level is None:
        level = os.getenv("CATALOG_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        return _LEVELS.get(level.upper(), logging.INFO)
    return level


def setup_logging(level: str | int | None = None) -> None:
    """
    Configure process logging once for the CLI and the API worker.
    Playwright's asyncio chatter is kept at WARNING unless we are debugging.
    """
    resolved = resolve_level(level)
    logging.basicConfig(level=resolved, format=_FORMAT)
    if resolved > logging.DEBUG:
        logging.getLogger("asyncio").setLevel(logging.WARNING)
