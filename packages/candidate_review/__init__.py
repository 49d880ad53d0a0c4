"""Public interface for the ``candidate_review`` package.

This module exposes the controller, its state/actions, and the data models as
the stable import surface. There is no runtime logic here, only symbol
re-exports.
"""

from .actions import (
    Accept,
    AcceptSelected,
    AccountsReceived,
    CancelAccountEdit,
    CandidatesReceived,
    ChangeProperties,
    CommitAccountEdit,
    EditSelectedAccounts,
    EditSelectedProperties,
    Fixme,
    Hover,
    RequestAccountEdit,
    RequestRetrain,
    Revert,
    Select,
    SelectRelative,
    SkipPending,
    ToggleUsedTransaction,
)
from .channels import JsonLinesChannel, RecordingChannel
from .controller import ReviewController
from .edit_session import EditSession, EditTarget
from .filtering import FilteredView, compute_filtered_view
from .keyboard import KEY_BINDINGS, KeyboardDispatcher, KeyEvent
from .models import (
    Candidate,
    CandidateSet,
    Entry,
    SubstitutedAccount,
    TransactionProperties,
    UsedTransaction,
)
from .reducer import reduce
from .selection import Selection
from .state import ReviewState, initial_state

__all__ = [
    # Controller
    "ReviewController",
    "KeyboardDispatcher",
    "KeyEvent",
    "KEY_BINDINGS",
    "reduce",
    "ReviewState",
    "initial_state",
    "Selection",
    "FilteredView",
    "compute_filtered_view",
    "EditSession",
    "EditTarget",
    # Channels
    "JsonLinesChannel",
    "RecordingChannel",
    # Actions
    "Accept",
    "AcceptSelected",
    "AccountsReceived",
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
    # Models
    "Candidate",
    "CandidateSet",
    "Entry",
    "SubstitutedAccount",
    "TransactionProperties",
    "UsedTransaction",
]
