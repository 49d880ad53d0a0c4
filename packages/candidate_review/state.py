"""Immutable snapshot of the review controller's state.

``ReviewState`` bundles the current ``CandidateSet`` (and thereby the
generation), the disabled used-transaction set, the filtered view derived from
both, the selection, and the optional edit session. The filtered view is
rebuilt whenever candidates or the disabled set change; nothing else writes
it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import AbstractSet

from .edit_session import EditSession
from .filtering import FilteredView, compute_filtered_view
from .models import Candidate, CandidateSet
from .selection import Selection, normalize_selection


@dataclass(frozen=True, slots=True)
class ReviewState:
    candidate_set: CandidateSet = field(default_factory=CandidateSet.empty)
    disabled: frozenset[int] = frozenset()
    view: FilteredView = field(default_factory=FilteredView)
    selection: Selection = field(default_factory=Selection)
    edit: EditSession | None = None
    accounts: tuple[str, ...] = ()

    @property
    def generation(self) -> int:
        return self.candidate_set.generation


def initial_state(accounts: tuple[str, ...] = ()) -> ReviewState:
    return ReviewState(accounts=accounts)


def with_disabled(state: ReviewState, disabled: AbstractSet[int]) -> ReviewState:
    """Replace the disabled set, rebuild the view and re-validate the selection."""

    disabled = frozenset(disabled)
    view = compute_filtered_view(state.candidate_set.candidates, disabled)
    selection = normalize_selection(state.selection, view, len(state.candidate_set.candidates))
    return replace(state, disabled=disabled, view=view, selection=selection)


def selected_candidate(state: ReviewState) -> Candidate | None:
    """The selected candidate, or ``None`` when it is missing or hidden."""

    index = state.selection.selected
    if not state.view.is_visible(index):
        return None
    return state.candidate_set.get(index)


def hover_candidate(state: ReviewState) -> Candidate | None:
    index = state.selection.hover
    if index is None:
        return None
    return state.candidate_set.get(index)


def highlighted_used_ids(state: ReviewState) -> tuple[frozenset[int], frozenset[int]]:
    """Used transaction ids of the selected and hovered candidates."""

    selected = selected_candidate(state)
    hovered = hover_candidate(state)
    return (
        selected.used_transaction_ids if selected is not None else frozenset(),
        hovered.used_transaction_ids if hovered is not None else frozenset(),
    )


@dataclass(frozen=True, slots=True)
class ToolbarState:
    change_account: bool
    fixme: bool
    edit_properties: bool
    revert: bool


def toolbar_state(state: ReviewState) -> ToolbarState:
    candidate = selected_candidate(state)
    has_subs = candidate is not None and candidate.has_account_substitutions
    can_edit = candidate is not None and candidate.can_edit_properties
    return ToolbarState(
        change_account=has_subs and state.edit is None,
        fixme=has_subs and state.edit is None,
        edit_properties=can_edit,
        revert=can_edit,
    )


__all__ = [
    "ReviewState",
    "ToolbarState",
    "highlighted_used_ids",
    "hover_candidate",
    "initial_state",
    "selected_candidate",
    "toolbar_state",
    "with_disabled",
]
