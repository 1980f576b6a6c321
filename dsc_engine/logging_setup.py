"""Logging configuration for tools and scripts."""
from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger with a single stream handler.

    Unknown level names fall back to INFO.
    """
    resolved = getattr(logging, str(level).upper(), None)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(handler)
    root.setLevel(resolved)

    # Per-token transfer refusals are noise outside debugging sessions.
    logging.getLogger("dsc_engine.integration.tokens").setLevel(
        logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    )
