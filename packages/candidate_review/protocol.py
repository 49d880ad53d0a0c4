"""Outbound change protocol.

Message builders are stateless: each one reads the generation from the
``CandidateSet`` it is handed at send time, so a slow interaction can never be
applied against a stale candidate list. Builders return ``None`` instead of
raising when the referenced candidate does not exist.

Wire format is a ``{"type": ..., "value": {...}}`` envelope. Within
``changes`` only explicitly provided fields are sent; a field provided as
``None`` (e.g. a missing payee) is sent as ``null``. An empty ``changes``
object asks the server to restore the original transaction.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict

from .models import CandidateSet, TransactionProperties

SkipDirection = Literal["prior", "next", "first", "last"]


class Message(BaseModel):
    """Base for outbound messages; subclasses set ``message_type``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    message_type: ClassVar[str]

    def to_wire(self) -> dict[str, Any]:
        return {
            "type": self.message_type,
            "value": self.model_dump(mode="json", exclude_unset=True),
        }


class CandidateChanges(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    accounts: list[str] | None = None
    tags: list[str] | None = None
    links: list[str] | None = None
    narration: str | None = None
    payee: str | None = None


class ChangeCandidate(Message):
    message_type: ClassVar[str] = "change_candidate"

    generation: int
    candidate_index: int
    changes: CandidateChanges


class SelectCandidate(Message):
    message_type: ClassVar[str] = "select_candidate"

    generation: int
    index: int


class Skip(Message):
    message_type: ClassVar[str] = "skip"

    direction: SkipDirection


class Retrain(Message):
    message_type: ClassVar[str] = "retrain"


def _changes(accounts: Sequence[str], properties: TransactionProperties) -> CandidateChanges:
    return CandidateChanges(
        accounts=list(accounts),
        tags=list(properties.tags),
        links=list(properties.links),
        narration=properties.narration,
        payee=properties.payee,
    )


def change_accounts(
    candidate_set: CandidateSet, candidate_index: int, accounts: Sequence[str]
) -> ChangeCandidate | None:
    """New account list; resends the primary transaction's current properties."""

    candidate = candidate_set.get(candidate_index)
    if candidate is None:
        return None
    return ChangeCandidate(
        generation=candidate_set.generation,
        candidate_index=candidate_index,
        changes=_changes(accounts, candidate.current_properties),
    )


def change_properties(
    candidate_set: CandidateSet, candidate_index: int, properties: TransactionProperties
) -> ChangeCandidate | None:
    """New tags/links/narration/payee; resends the current account list unchanged."""

    candidate = candidate_set.get(candidate_index)
    if candidate is None:
        return None
    return ChangeCandidate(
        generation=candidate_set.generation,
        candidate_index=candidate_index,
        changes=_changes(candidate.current_accounts, properties),
    )


def revert(candidate_set: CandidateSet, candidate_index: int) -> ChangeCandidate | None:
    if candidate_set.get(candidate_index) is None:
        return None
    return ChangeCandidate(
        generation=candidate_set.generation,
        candidate_index=candidate_index,
        changes=CandidateChanges(),
    )


def select_candidate(candidate_set: CandidateSet, candidate_index: int) -> SelectCandidate | None:
    if candidate_set.get(candidate_index) is None:
        return None
    return SelectCandidate(generation=candidate_set.generation, index=candidate_index)


def skip(direction: SkipDirection) -> Skip:
    return Skip(direction=direction)


def retrain() -> Retrain:
    return Retrain()


__all__ = [
    "CandidateChanges",
    "ChangeCandidate",
    "Message",
    "Retrain",
    "SelectCandidate",
    "Skip",
    "SkipDirection",
    "change_accounts",
    "change_properties",
    "retrain",
    "revert",
    "select_candidate",
    "skip",
]
