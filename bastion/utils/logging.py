"""Logging setup shared by the server and the headless CLI."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)-5s] %(name)-25s | %(message)s"

# Chatty third-party loggers kept at WARNING unless we are debugging
_NOISY = ("uvicorn.access", "urllib3", "httpx")


def setup_logging(level: str = "INFO") -> None:
    """Route every log record to stdout in one compact format.

    Safe to call more than once: the root handlers are replaced, not stacked.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)

    noisy_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in _NOISY:
        logging.getLogger(name).setLevel(noisy_level)
