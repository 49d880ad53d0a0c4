"""Inline account substitution edits.

At most one ``EditSession`` exists at a time; the reducer enforces that. A
session targets either every substitution of a candidate (``whole``), the
substitutions sharing a group number (``group``), or exactly one positional
substitution (``field``).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from .models import (
    Candidate,
    SubstitutedAccount,
    TransactionProperties,
    dedupe_preserving_order,
)

# Transaction line edits handled by the presentation layer.
PropertyAction = Literal["tag", "link", "narration"]


class TargetKind(str, Enum):
    WHOLE = "whole"
    GROUP = "group"
    FIELD = "field"


@dataclass(frozen=True, slots=True)
class EditTarget:
    kind: TargetKind
    number: int | None = None

    @classmethod
    def whole(cls) -> EditTarget:
        return cls(TargetKind.WHOLE)

    @classmethod
    def group(cls, group_number: int) -> EditTarget:
        return cls(TargetKind.GROUP, group_number)

    @classmethod
    def field(cls, field_number: int) -> EditTarget:
        return cls(TargetKind.FIELD, field_number)

    def matches(self, position: int, substitution: SubstitutedAccount) -> bool:
        if self.kind is TargetKind.GROUP:
            return substitution.group_number == self.number
        if self.kind is TargetKind.FIELD:
            return position == self.number
        return True


@dataclass(frozen=True, slots=True)
class EditSession:
    candidate_index: int
    target: EditTarget
    initial_value: str


def open_session(
    candidate: Candidate | None, candidate_index: int, target: EditTarget
) -> EditSession | None:
    """Return a new session, or ``None`` when the target does not exist.

    The initial value is the account currently assigned to the first
    substitution matching ``target``.
    """

    if candidate is None:
        return None
    for position, sub in enumerate(candidate.substituted_accounts):
        if target.matches(position, sub):
            return EditSession(
                candidate_index=candidate_index, target=target, initial_value=sub.account_name
            )
    return None


def broadcast_accounts(
    substitutions: Sequence[SubstitutedAccount], target: EditTarget, new_value: str
) -> list[str]:
    """Assign ``new_value`` to every matching substitution.

    Non-matching substitutions keep their current (not original) account.
    """

    return [
        new_value if target.matches(position, sub) else sub.account_name
        for position, sub in enumerate(substitutions)
    ]


def suggest_accounts(known_accounts: Iterable[str], candidate: Candidate | None) -> list[str]:
    """Accounts offered by the input widget while editing ``candidate``."""

    values = list(known_accounts)
    if candidate is not None:
        for sub in candidate.substituted_accounts:
            values.append(sub.account_name)
            values.append(sub.original_name)
        for entry in candidate.new_entries:
            for posting in entry.postings or ():
                values.append(posting.account)
    return dedupe_preserving_order(values)


def apply_property_edit(
    properties: TransactionProperties, action: PropertyAction, value: str
) -> TransactionProperties:
    """Add a tag or link (ignoring duplicates and blanks) or replace the narration."""

    value = value.strip()
    if action == "narration":
        return properties.model_copy(update={"narration": value})
    # Tags and links are entered with or without their sigil.
    value = value.lstrip("#^")
    key = "tags" if action == "tag" else "links"
    current = getattr(properties, key)
    if not value or value in current:
        return properties
    return properties.model_copy(update={key: (*current, value)})


__all__ = [
    "EditSession",
    "EditTarget",
    "PropertyAction",
    "TargetKind",
    "apply_property_edit",
    "broadcast_accounts",
    "open_session",
    "suggest_accounts",
]
