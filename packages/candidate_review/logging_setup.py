"""Logging for the ``candidate_review`` package.

Library modules only call ``get_logger("candidate_review.<module>")``. The
CLI owns the single stderr handler: ``configure_logging`` installs it on the
``candidate_review`` logger from the ``--log-level`` option (falling back to
``CANDIDATE_REVIEW_LOG_LEVEL``, then INFO). Calling it again, e.g. once per
CLI invocation in the same process, retargets the existing handler instead of
stacking another one.

Records of note: reducer no-ops log ``ignored: <reason>`` at DEBUG, dropped
stale candidate sets at WARNING, and every outbound message at DEBUG.
"""

from __future__ import annotations

import logging
import os
import sys

PACKAGE_LOGGER = "candidate_review"
LEVEL_ENV = "CANDIDATE_REVIEW_LOG_LEVEL"

_FORMAT = "%(levelname)s %(name)s: %(message)s"
_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_handler: logging.StreamHandler | None = None


def resolve_level(option: str | None) -> int:
    """Map the ``--log-level`` value (or the env fallback) to a logging level.

    Raises ``ValueError`` for anything but a standard level name.
    """

    raw = option if option is not None else os.getenv(LEVEL_ENV)
    if raw is None or not raw.strip():
        return logging.INFO
    name = raw.strip().upper()
    if name not in _LEVEL_NAMES:
        expected = ", ".join(_LEVEL_NAMES)
        raise ValueError(f"unknown log level {raw!r} (expected one of {expected})")
    return logging.getLevelName(name)


def configure_logging(option: str | None = None) -> int:
    """Route package logs to the current ``sys.stderr``; returns the level used."""

    global _handler
    level = resolve_level(option)
    logger = logging.getLogger(PACKAGE_LOGGER)

    if _handler is None or _handler not in logger.handlers:
        for h in list(logger.handlers):
            if isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(_handler)
    else:
        _handler.setStream(sys.stderr)

    _handler.setLevel(level)
    logger.setLevel(level)
    logger.propagate = False
    return level


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
