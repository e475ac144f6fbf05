"""
CodeLogic - Logging
====================
Pre-configured logger factory plus a small timing helper, so every
module logs in the same ``time | level | name | message`` shape.

Logging verbosity is driven by ``settings.ENV``:
  • ``"dev"``  → DEBUG level  (maximum detail)
  • ``"prod"`` → WARNING level (errors & warnings only)

Usage:
    from codelogic.src.utils.logger import get_logger, timed
    logger = get_logger(__name__)
    with timed(logger, "[RAG] Retrieval"):
        ...
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager

from codelogic.config.settings import settings

# ── Resolve default level from environment mode ───────────────────────
_ENV_LEVEL_MAP = {
    "dev": logging.DEBUG,
    "prod": logging.WARNING,
}
_DEFAULT_LEVEL = _ENV_LEVEL_MAP.get(settings.ENV, logging.INFO)

# Third-party loggers that flood DEBUG output with per-request chatter.
_NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "grpc", "google_genai", "lancedb")

_FORMATTER = logging.Formatter(
    fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Create and return a named logger writing to stdout.

    Args:
        name:  Typically ``__name__`` of the calling module.
        level: Explicit logging level override.
               If *None*, the level is derived from ``settings.ENV``.
    """
    resolved_level = level if level is not None else _DEFAULT_LEVEL
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.setLevel(resolved_level)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(resolved_level)
        console_handler.setFormatter(_FORMATTER)
        logger.addHandler(console_handler)

        # Own handler already attached; the root logger would print twice.
        logger.propagate = False

    return logger


def quiet_third_party_loggers(level: int = logging.WARNING) -> None:
    """Raise the threshold of chatty client libraries (called once at startup)."""
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)


@contextmanager
def timed(logger: logging.Logger, label: str) -> Iterator[None]:
    """Log ``<label> completed in X.Xms`` when the block exits, even on error."""
    t_start = time.perf_counter()
    try:
        yield
    finally:
        logger.info("%s completed in %.1fms", label, (time.perf_counter() - t_start) * 1000)
