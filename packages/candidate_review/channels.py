"""Outbound channels and inbound file loaders.

The core assumes a reliable duplex channel and never retries; write errors
from the underlying stream propagate to the caller.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import IO, Any

from .logging_setup import get_logger

_logger = get_logger("candidate_review.channels")


class RecordingChannel:
    """Keeps every sent message in memory (tests, headless replays)."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    def send(self, message: dict[str, Any]) -> None:
        self.sent.append(message)

    def types(self) -> list[str]:
        return [m["type"] for m in self.sent]


class JsonLinesChannel:
    """Writes one compact JSON object per line and flushes after each send."""

    def __init__(self, stream: IO[str]) -> None:
        self._stream = stream

    def send(self, message: dict[str, Any]) -> None:
        self._stream.write(json.dumps(message, ensure_ascii=False, separators=(",", ":")) + "\n")
        self._stream.flush()


def load_candidates_payload(path: str | Path) -> Mapping[str, Any]:
    """Read a ``{candidates, used_transactions}`` JSON document.

    Raises ``OSError`` or ``json.JSONDecodeError``; shape validation happens in
    :meth:`candidate_review.models.CandidateSet.from_payload`.
    """

    with open(path, encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, Mapping):
        raise ValueError(f"expected a JSON object in {path}")
    _logger.debug("loaded %d candidates from %s", len(payload.get("candidates") or ()), path)
    return payload


def load_accounts(path: str | Path) -> list[str]:
    """Read a JSON list of account names."""

    with open(path, encoding="utf-8") as f:
        accounts = json.load(f)
    if not isinstance(accounts, list) or not all(isinstance(a, str) for a in accounts):
        raise ValueError(f"expected a JSON list of account names in {path}")
    return accounts


__all__ = ["JsonLinesChannel", "RecordingChannel", "load_accounts", "load_candidates_payload"]
