"""Discrete input events fed to the reducer.

Actions that reference a candidate index may carry the ``generation`` the
index was observed in (e.g. a click on a rendered row). A generation that does
not match the current candidate set makes the action stale and it is dropped.
``None`` means "the current generation".
"""

from __future__ import annotations

from dataclasses import dataclass

from .edit_session import EditTarget, PropertyAction
from .models import CandidateSet, TransactionProperties
from .protocol import SkipDirection

# ---------------------------------------------------------------------------
# Inbound (server)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CandidatesReceived:
    candidate_set: CandidateSet


@dataclass(frozen=True, slots=True)
class AccountsReceived:
    accounts: tuple[str, ...]


# ---------------------------------------------------------------------------
# Filtering and navigation
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ToggleUsedTransaction:
    used_transaction_id: int
    enabled: bool


@dataclass(frozen=True, slots=True)
class SelectRelative:
    amount: int


@dataclass(frozen=True, slots=True)
class Select:
    candidate_index: int
    generation: int | None = None


@dataclass(frozen=True, slots=True)
class Hover:
    candidate_index: int
    is_on: bool
    generation: int | None = None


# ---------------------------------------------------------------------------
# Account edit session
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RequestAccountEdit:
    candidate_index: int
    target: EditTarget
    generation: int | None = None


@dataclass(frozen=True, slots=True)
class EditSelectedAccounts:
    target: EditTarget


@dataclass(frozen=True, slots=True)
class CommitAccountEdit:
    value: str


@dataclass(frozen=True, slots=True)
class CancelAccountEdit:
    pass


@dataclass(frozen=True, slots=True)
class Fixme:
    """Reset every substitution of the selected candidate to its original account."""


# ---------------------------------------------------------------------------
# Transaction properties
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class EditSelectedProperties:
    action: PropertyAction


@dataclass(frozen=True, slots=True)
class ChangeProperties:
    candidate_index: int
    properties: TransactionProperties
    generation: int | None = None


@dataclass(frozen=True, slots=True)
class Revert:
    candidate_index: int | None = None
    generation: int | None = None


# ---------------------------------------------------------------------------
# Server-side navigation
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Accept:
    candidate_index: int
    generation: int | None = None


@dataclass(frozen=True, slots=True)
class AcceptSelected:
    pass


@dataclass(frozen=True, slots=True)
class SkipPending:
    direction: SkipDirection


@dataclass(frozen=True, slots=True)
class RequestRetrain:
    pass


type Action = (
    CandidatesReceived
    | AccountsReceived
    | ToggleUsedTransaction
    | SelectRelative
    | Select
    | Hover
    | RequestAccountEdit
    | EditSelectedAccounts
    | CommitAccountEdit
    | CancelAccountEdit
    | Fixme
    | EditSelectedProperties
    | ChangeProperties
    | Revert
    | Accept
    | AcceptSelected
    | SkipPending
    | RequestRetrain
)


__all__ = [
    "Accept",
    "AcceptSelected",
    "AccountsReceived",
    "Action",
    "CancelAccountEdit",
    "CandidatesReceived",
    "ChangeProperties",
    "CommitAccountEdit",
    "EditSelectedAccounts",
    "EditSelectedProperties",
    "Fixme",
    "Hover",
    "RequestAccountEdit",
    "RequestRetrain",
    "Revert",
    "Select",
    "SelectRelative",
    "SkipPending",
    "ToggleUsedTransaction",
]
