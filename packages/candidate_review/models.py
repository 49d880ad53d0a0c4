"""Data models for the candidate review controller.

Everything here describes what the server sends: a snapshot of candidate
matches (``CandidateSet``) stamped with a monotonic generation id. Models are
immutable and validated once at the inbound boundary; the rest of the package
only reads them.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, ClassVar, NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

# Group numbers are digit-keyable.
MIN_GROUP_NUMBER = 0
MAX_GROUP_NUMBER = 9


class SubstitutedAccount(NamedTuple):
    """An account whose real value is unknown and was filled with a placeholder.

    Arrives on the wire as a 4-element list
    ``[unique_name, account_name, group_number, original_name]``.
    """

    unique_name: str
    account_name: str
    group_number: int
    original_name: str


class Posting(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    account: str


class Entry(BaseModel):
    """One proposed ledger entry.

    The first entry of a candidate is its primary transaction and carries the
    editable properties. Non-transaction entries have no ``postings``.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    narration: str | None = None
    payee: str | None = None
    tags: tuple[str, ...] = ()
    links: tuple[str, ...] = ()
    postings: tuple[Posting, ...] | None = None
    # Opaque to this package; forwarded to the presentation layer on accept.
    meta: Any = None

    @field_validator("tags", "links", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return () if v is None else v


class TransactionProperties(BaseModel):
    """The user-editable properties of a candidate's primary transaction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    tags: tuple[str, ...] = ()
    links: tuple[str, ...] = ()
    # A missing narration stays ``None`` and is resent as null.
    narration: str | None = None
    payee: str | None = None

    @field_validator("tags", "links", mode="before")
    @classmethod
    def _none_as_empty(cls, v: Any) -> Any:
        return () if v is None else v


class UsedTransaction(BaseModel):
    """A prior transaction consumed by one or more candidates (opaque)."""

    model_config = ConfigDict(frozen=True, extra="allow")


class Candidate(BaseModel):
    """One proposed transaction match awaiting user acceptance."""

    model_config = ConfigDict(frozen=True, extra="allow")

    used_transaction_ids: frozenset[int] = frozenset()
    substituted_accounts: tuple[SubstitutedAccount, ...] = ()
    new_entries: tuple[Entry, ...] = ()
    # ``None`` means there is no original to revert to; property edits are
    # disabled for such candidates.
    original_transaction_properties: TransactionProperties | None = None

    @field_validator("substituted_accounts")
    @classmethod
    def _group_numbers_in_range(
        cls, v: tuple[SubstitutedAccount, ...]
    ) -> tuple[SubstitutedAccount, ...]:
        for sub in v:
            if not MIN_GROUP_NUMBER <= sub.group_number <= MAX_GROUP_NUMBER:
                raise ValueError(
                    f"group number {sub.group_number} of {sub.unique_name!r} is outside "
                    f"{MIN_GROUP_NUMBER}..{MAX_GROUP_NUMBER}"
                )
        return v

    @property
    def primary_transaction(self) -> Entry | None:
        return self.new_entries[0] if self.new_entries else None

    @property
    def current_accounts(self) -> list[str]:
        return [sub.account_name for sub in self.substituted_accounts]

    @property
    def original_accounts(self) -> list[str]:
        return [sub.original_name for sub in self.substituted_accounts]

    @property
    def has_account_substitutions(self) -> bool:
        return len(self.substituted_accounts) > 0

    @property
    def can_edit_properties(self) -> bool:
        return self.original_transaction_properties is not None

    @property
    def current_properties(self) -> TransactionProperties:
        """Tags/links/narration/payee as currently proposed for the primary entry."""

        tx = self.primary_transaction
        if tx is None:
            return TransactionProperties()
        return TransactionProperties(
            tags=tx.tags, links=tx.links, narration=tx.narration, payee=tx.payee
        )

    def is_hidden_by(self, disabled: frozenset[int] | set[int]) -> bool:
        return not self.used_transaction_ids.isdisjoint(disabled)


class CandidateSet(BaseModel):
    """Immutable snapshot of the server's candidate list for one generation.

    Candidate indices are only meaningful within the generation that produced
    them.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    # Sentinel generation for "nothing received yet".
    NO_GENERATION: ClassVar[int] = -1

    generation: int = NO_GENERATION
    candidates: tuple[Candidate, ...] = ()
    used_transactions: tuple[UsedTransaction, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, generation: int) -> CandidateSet:
        """Validate a ``{candidates, used_transactions}`` payload.

        Raises ``pydantic.ValidationError`` on malformed input.
        """

        return cls.model_validate({**payload, "generation": generation})

    @classmethod
    def empty(cls) -> CandidateSet:
        return cls()

    def get(self, index: int) -> Candidate | None:
        """Return the candidate at ``index`` or ``None`` when out of range."""

        if 0 <= index < len(self.candidates):
            return self.candidates[index]
        return None


def dedupe_preserving_order(values: Sequence[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


__all__ = [
    "MAX_GROUP_NUMBER",
    "MIN_GROUP_NUMBER",
    "Candidate",
    "CandidateSet",
    "Entry",
    "Posting",
    "SubstitutedAccount",
    "TransactionProperties",
    "UsedTransaction",
    "dedupe_preserving_order",
]
