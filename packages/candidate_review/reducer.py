"""Pure state transitions for the review controller.

``reduce(state, action)`` returns the next ``ReviewState`` plus the commands
to execute. Lookups that can fail (missing candidate, stale generation,
missing substitution target, empty filtered list, an edit session already
open) never raise: the action degrades to a no-op and the reason is logged at
DEBUG.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import Any

from . import protocol
from .actions import (
    Accept,
    AcceptSelected,
    AccountsReceived,
    Action,
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
from .commands import (
    CloseAccountInput,
    Command,
    OpenAccountInput,
    PostAccept,
    ScrollToCandidate,
    Send,
    StartPropertyEdit,
)
from .edit_session import EditTarget, broadcast_accounts, open_session, suggest_accounts
from .filtering import compute_filtered_view, toggle_used_transaction
from .logging_setup import get_logger
from .protocol import Message
from .selection import hover, reset_selection, select, select_relative
from .state import ReviewState, selected_candidate, with_disabled

_logger = get_logger("candidate_review.reducer")

type Result = tuple[ReviewState, list[Command]]


def _unchanged(state: ReviewState, reason: str, *args: Any) -> Result:
    _logger.debug("ignored: " + reason, *args)
    return state, []


def _send(message: Message | None) -> list[Command]:
    return [Send(message)] if message is not None else []


def _is_stale(state: ReviewState, generation: int | None) -> bool:
    return generation is not None and generation != state.generation


# ----------------------------------------------------------------------------
# Inbound
# ----------------------------------------------------------------------------


def _candidates_received(state: ReviewState, action: CandidatesReceived) -> Result:
    incoming = action.candidate_set
    if incoming.generation <= state.generation:
        _logger.warning(
            "dropping candidate set for generation %d (current is %d)",
            incoming.generation,
            state.generation,
        )
        return state, []

    view = compute_filtered_view(incoming.candidates, state.disabled)
    commands: list[Command] = []
    if state.edit is not None:
        # Sessions are discarded, never migrated, across generations.
        commands.append(CloseAccountInput())
    _logger.debug(
        "generation %d: %d candidates, %d visible",
        incoming.generation,
        len(incoming.candidates),
        len(view),
    )
    new_state = replace(
        state,
        candidate_set=incoming,
        view=view,
        selection=reset_selection(view),
        edit=None,
    )
    return new_state, commands


def _accounts_received(state: ReviewState, action: AccountsReceived) -> Result:
    return replace(state, accounts=tuple(action.accounts)), []


# ----------------------------------------------------------------------------
# Filtering and navigation
# ----------------------------------------------------------------------------


def _toggle_used_transaction(state: ReviewState, action: ToggleUsedTransaction) -> Result:
    disabled = toggle_used_transaction(state.disabled, action.used_transaction_id, action.enabled)
    if disabled == state.disabled:
        return state, []
    return with_disabled(state, disabled), []


def _select_relative(state: ReviewState, action: SelectRelative) -> Result:
    if len(state.view) == 0:
        return _unchanged(state, "relative selection with no visible candidates")
    selection = select_relative(state.selection, state.view, action.amount)
    return replace(state, selection=selection), [ScrollToCandidate(selection.selected)]


def _select(state: ReviewState, action: Select) -> Result:
    if _is_stale(state, action.generation):
        return _unchanged(state, "stale selection for generation %s", action.generation)
    selection = select(state.selection, state.view, action.candidate_index)
    if selection is state.selection:
        return state, []
    return replace(state, selection=selection), []


def _hover(state: ReviewState, action: Hover) -> Result:
    if _is_stale(state, action.generation):
        return _unchanged(state, "stale hover for generation %s", action.generation)
    selection = hover(
        state.selection,
        len(state.candidate_set.candidates),
        action.candidate_index,
        action.is_on,
    )
    if selection is state.selection:
        return state, []
    return replace(state, selection=selection), []


# ----------------------------------------------------------------------------
# Account edit session
# ----------------------------------------------------------------------------


def _open_edit(state: ReviewState, candidate_index: int, target: EditTarget) -> Result:
    if state.edit is not None:
        return _unchanged(state, "edit session already open")
    candidate = state.candidate_set.get(candidate_index)
    session = open_session(candidate, candidate_index, target)
    if session is None:
        return _unchanged(state, "no substitution for %s on candidate %d", target, candidate_index)
    suggestions = tuple(suggest_accounts(state.accounts, candidate))
    return replace(state, edit=session), [OpenAccountInput(session.initial_value, suggestions)]


def _request_account_edit(state: ReviewState, action: RequestAccountEdit) -> Result:
    if _is_stale(state, action.generation):
        return _unchanged(state, "stale account edit for generation %s", action.generation)
    return _open_edit(state, action.candidate_index, action.target)


def _edit_selected_accounts(state: ReviewState, action: EditSelectedAccounts) -> Result:
    if selected_candidate(state) is None:
        return _unchanged(state, "account edit without a selected candidate")
    return _open_edit(state, state.selection.selected, action.target)


def _commit_account_edit(state: ReviewState, action: CommitAccountEdit) -> Result:
    session = state.edit
    if session is None:
        return _unchanged(state, "commit without an open edit session")
    closed = replace(state, edit=None)
    candidate = state.candidate_set.get(session.candidate_index)
    if candidate is None:
        return _unchanged(closed, "commit for missing candidate %d", session.candidate_index)
    accounts = broadcast_accounts(candidate.substituted_accounts, session.target, action.value)
    message = protocol.change_accounts(state.candidate_set, session.candidate_index, accounts)
    return closed, _send(message)


def _cancel_account_edit(state: ReviewState, action: CancelAccountEdit) -> Result:
    if state.edit is None:
        return state, []
    return replace(state, edit=None), []


def _fixme(state: ReviewState, action: Fixme) -> Result:
    if state.edit is not None:
        return _unchanged(state, "fixme while an edit session is open")
    candidate = selected_candidate(state)
    if candidate is None or not candidate.has_account_substitutions:
        return _unchanged(state, "fixme without account substitutions")
    message = protocol.change_accounts(
        state.candidate_set, state.selection.selected, candidate.original_accounts
    )
    return state, _send(message)


# ----------------------------------------------------------------------------
# Transaction properties
# ----------------------------------------------------------------------------


def _edit_selected_properties(state: ReviewState, action: EditSelectedProperties) -> Result:
    candidate = selected_candidate(state)
    if candidate is None or not candidate.can_edit_properties:
        return _unchanged(state, "%s edit not available", action.action)
    return state, [
        StartPropertyEdit(state.selection.selected, action.action, candidate.current_properties)
    ]


def _change_properties(state: ReviewState, action: ChangeProperties) -> Result:
    if _is_stale(state, action.generation):
        return _unchanged(state, "stale property change for generation %s", action.generation)
    candidate = state.candidate_set.get(action.candidate_index)
    if candidate is None or not candidate.can_edit_properties:
        return _unchanged(state, "property change for candidate %d", action.candidate_index)
    message = protocol.change_properties(
        state.candidate_set, action.candidate_index, action.properties
    )
    return state, _send(message)


def _revert(state: ReviewState, action: Revert) -> Result:
    if _is_stale(state, action.generation):
        return _unchanged(state, "stale revert for generation %s", action.generation)
    if action.candidate_index is None:
        index = state.selection.selected
        candidate = selected_candidate(state)
    else:
        index = action.candidate_index
        candidate = state.candidate_set.get(index)
    if candidate is None or not candidate.can_edit_properties:
        return _unchanged(state, "revert not available for candidate %d", index)
    return state, _send(protocol.revert(state.candidate_set, index))


# ----------------------------------------------------------------------------
# Accept / skip / retrain
# ----------------------------------------------------------------------------


def _accept_index(state: ReviewState, index: int) -> Result:
    candidate = state.candidate_set.get(index)
    if candidate is None:
        return _unchanged(state, "accept for missing candidate %d", index)
    commands = _send(protocol.select_candidate(state.candidate_set, index))
    if candidate.new_entries:
        commands.append(PostAccept(index, candidate.new_entries[0].meta))
    return state, commands


def _accept(state: ReviewState, action: Accept) -> Result:
    if _is_stale(state, action.generation):
        return _unchanged(state, "stale accept for generation %s", action.generation)
    return _accept_index(state, action.candidate_index)


def _accept_selected(state: ReviewState, action: AcceptSelected) -> Result:
    if selected_candidate(state) is None:
        return _unchanged(state, "accept without a selected candidate")
    return _accept_index(state, state.selection.selected)


def _skip(state: ReviewState, action: SkipPending) -> Result:
    return state, _send(protocol.skip(action.direction))


def _retrain(state: ReviewState, action: RequestRetrain) -> Result:
    return state, _send(protocol.retrain())


_HANDLERS: dict[type, Callable[[ReviewState, Any], Result]] = {
    CandidatesReceived: _candidates_received,
    AccountsReceived: _accounts_received,
    ToggleUsedTransaction: _toggle_used_transaction,
    SelectRelative: _select_relative,
    Select: _select,
    Hover: _hover,
    RequestAccountEdit: _request_account_edit,
    EditSelectedAccounts: _edit_selected_accounts,
    CommitAccountEdit: _commit_account_edit,
    CancelAccountEdit: _cancel_account_edit,
    Fixme: _fixme,
    EditSelectedProperties: _edit_selected_properties,
    ChangeProperties: _change_properties,
    Revert: _revert,
    Accept: _accept,
    AcceptSelected: _accept_selected,
    SkipPending: _skip,
    RequestRetrain: _retrain,
}


def reduce(state: ReviewState, action: Action) -> Result:
    """Apply ``action`` to ``state``; returns ``(new_state, commands)``."""

    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"unsupported action: {action!r}")
    return handler(state, action)


__all__ = ["reduce"]
