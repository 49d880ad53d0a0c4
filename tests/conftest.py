"""Pytest configuration shared by the candidate review tests.

Makes the workspace ``packages/`` directory importable (the package is not
required to be installed) and provides a controller wired to a recording
channel and presenter.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
# Ensure `packages/` precedes the repo root on sys.path so local packages resolve first.
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]

from candidate_review import logging_setup  # noqa: E402
from candidate_review.channels import RecordingChannel  # noqa: E402
from candidate_review.controller import ReviewController  # noqa: E402

from tests.helpers.candidates import RecordingPresenter  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment settings out of the tests."""

    monkeypatch.delenv("CANDIDATE_REVIEW_LOG_LEVEL", raising=False)
    monkeypatch.delenv("CANDIDATE_REVIEW_OUTBOX", raising=False)


@pytest.fixture(autouse=True)
def _reset_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Undo `configure_logging` between tests so caplog keeps seeing records."""

    monkeypatch.setattr(logging_setup, "_handler", None)
    logger = logging.getLogger("candidate_review")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def controller(channel: RecordingChannel, presenter: RecordingPresenter) -> ReviewController:
    return ReviewController(channel, presenter)
