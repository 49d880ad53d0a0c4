"""Controller behavior: reducer transitions plus command execution."""

from __future__ import annotations

import logging

import pytest

from candidate_review.actions import (
    Accept,
    AcceptSelected,
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
from candidate_review.commands import OpenAccountInput, ScrollToCandidate, Send
from candidate_review.edit_session import EditSession, EditTarget
from candidate_review.models import TransactionProperties
from candidate_review.reducer import reduce
from candidate_review.state import initial_state, toolbar_state

from tests.helpers.candidates import ORIGINAL_PROPS, TWO_SUBS, candidate_payload, candidate_set


def _three(generation: int = 1):
    return candidate_set(
        [
            candidate_payload(used=[5], subs=TWO_SUBS, original=ORIGINAL_PROPS),
            candidate_payload(used=[], subs=TWO_SUBS, original=ORIGINAL_PROPS, meta={"id": 1}),
            candidate_payload(used=[5, 6]),
        ],
        generation=generation,
    )


@pytest.fixture
def loaded(controller):
    controller.dispatch(CandidatesReceived(_three()))
    return controller


# ----------------------------------------------------------------------------
# Generations
# ----------------------------------------------------------------------------


def test_generation_change_clears_session_and_resets_selection(loaded, presenter):
    loaded.dispatch(Select(2))
    loaded.dispatch(Hover(1, True))
    loaded.dispatch(RequestAccountEdit(1, EditTarget.whole()))
    assert loaded.state.edit is not None

    loaded.dispatch(CandidatesReceived(_three(generation=2)))

    state = loaded.state
    assert state.generation == 2
    assert state.edit is None
    assert state.selection.selected == 0  # prior index 2 still in range
    assert state.selection.hover is None
    assert presenter.names()[-1] == "close_account_input"


def test_stale_or_repeated_generation_is_dropped(loaded, caplog):
    before = loaded.state
    with caplog.at_level(logging.WARNING, logger="candidate_review"):
        loaded.dispatch(CandidatesReceived(_three(generation=1)))
        loaded.dispatch(CandidatesReceived(_three(generation=0)))
    assert loaded.state is before
    assert "dropping candidate set" in caplog.text


def test_disabled_set_survives_generation_change(loaded):
    loaded.dispatch(ToggleUsedTransaction(5, enabled=False))
    loaded.dispatch(CandidatesReceived(_three(generation=2)))

    assert loaded.state.disabled == {5}
    assert loaded.state.view.visible == (1,)
    # Index 0 is hidden, so the reset lands on the first visible candidate.
    assert loaded.state.selection.selected == 1


def test_actions_from_stale_generation_are_rejected(loaded, channel):
    before = loaded.state
    loaded.dispatch(Select(1, generation=0))
    loaded.dispatch(Hover(1, True, generation=0))
    loaded.dispatch(RequestAccountEdit(1, EditTarget.whole(), generation=0))
    loaded.dispatch(Accept(1, generation=0))
    loaded.dispatch(ChangeProperties(1, TransactionProperties(), generation=0))
    loaded.dispatch(Revert(1, generation=0))
    assert loaded.state is before
    assert channel.sent == []

    loaded.dispatch(Accept(1, generation=1))
    assert channel.types() == ["select_candidate"]


# ----------------------------------------------------------------------------
# Filtering and navigation
# ----------------------------------------------------------------------------


def test_scenario_single_visible_candidate(loaded, presenter):
    loaded.dispatch(ToggleUsedTransaction(5, enabled=False))
    assert loaded.state.view.visible == (1,)
    assert loaded.state.selection.selected == 1

    for amount in (1, -1, 1, 1):
        loaded.dispatch(SelectRelative(amount))
        assert loaded.state.selection.selected == 1
    assert ("scroll_to_candidate", (1,)) in presenter.calls


def test_hiding_selected_candidate_moves_selection_to_first_visible(loaded):
    loaded.dispatch(Select(2))
    loaded.dispatch(ToggleUsedTransaction(6, enabled=False))
    assert loaded.state.selection.selected == 0


def test_select_relative_with_nothing_visible_is_noop():
    empty = initial_state()
    state, commands = reduce(empty, SelectRelative(1))
    assert commands == []
    assert state is empty


def test_select_relative_emits_scroll_command():
    state, _ = reduce(initial_state(), CandidatesReceived(_three()))
    state, commands = reduce(state, SelectRelative(1))
    assert state.selection.selected == 1
    assert commands == [ScrollToCandidate(1)]


# ----------------------------------------------------------------------------
# Edit session
# ----------------------------------------------------------------------------


def test_second_edit_session_leaves_state_unchanged(loaded, presenter):
    loaded.dispatch(RequestAccountEdit(0, EditTarget.group(1)))
    snapshot = loaded.state
    calls = list(presenter.calls)

    loaded.dispatch(RequestAccountEdit(1, EditTarget.whole()))
    loaded.dispatch(EditSelectedAccounts(EditTarget.group(0)))

    assert loaded.state == snapshot
    assert presenter.calls == calls


def test_open_edit_emits_input_with_initial_value_and_suggestions():
    state = initial_state(accounts=("Income:Salary",))
    state, _ = reduce(state, CandidatesReceived(_three()))
    state, commands = reduce(state, EditSelectedAccounts(EditTarget.group(1)))

    assert state.edit == EditSession(0, EditTarget.group(1), "Expenses:Y")
    assert commands == [
        OpenAccountInput(
            "Expenses:Y",
            ("Income:Salary", "Expenses:X", "Orig1", "Expenses:Y", "Orig2", "Assets:Checking"),
        )
    ]


@pytest.mark.parametrize(
    ("target", "accounts"),
    [
        (EditTarget.group(1), ["Expenses:X", "Expenses:Z"]),
        (EditTarget.field(0), ["Expenses:Z", "Expenses:Y"]),
        (EditTarget.whole(), ["Expenses:Z", "Expenses:Z"]),
    ],
)
def test_commit_sends_broadcast_accounts(loaded, channel, target, accounts):
    loaded.dispatch(RequestAccountEdit(1, target))
    loaded.dispatch(CommitAccountEdit("Expenses:Z"))

    assert loaded.state.edit is None
    assert channel.sent == [
        {
            "type": "change_candidate",
            "value": {
                "generation": 1,
                "candidate_index": 1,
                "changes": {
                    "accounts": accounts,
                    "tags": [],
                    "links": [],
                    "narration": "Coffee",
                    "payee": "Cafe",
                },
            },
        }
    ]


def test_commit_stamps_generation_current_at_send_time(controller, channel):
    controller.dispatch(CandidatesReceived(_three(generation=3)))
    controller.dispatch(RequestAccountEdit(1, EditTarget.whole()))
    controller.dispatch(CommitAccountEdit("Expenses:Z"))
    assert channel.sent[0]["value"]["generation"] == 3


def test_group_edit_updates_every_substitution_sharing_the_number(controller, channel):
    subs = [
        ("u1", "Expenses:A", 2, "Orig1"),
        ("u2", "Expenses:B", 5, "Orig2"),
        ("u3", "Expenses:C", 2, "Orig3"),
    ]
    controller.dispatch(CandidatesReceived(candidate_set([candidate_payload(subs=subs)])))
    controller.dispatch(RequestAccountEdit(0, EditTarget.group(2)))
    assert controller.state.edit.initial_value == "Expenses:A"

    controller.dispatch(CommitAccountEdit("Expenses:Z"))
    changes = channel.sent[0]["value"]["changes"]
    assert changes["accounts"] == ["Expenses:Z", "Expenses:B", "Expenses:Z"]


def test_cancel_discards_session_without_sending(loaded, channel):
    loaded.dispatch(RequestAccountEdit(1, EditTarget.whole()))
    loaded.dispatch(CancelAccountEdit())
    assert loaded.state.edit is None
    assert channel.sent == []

    # Commit without a session is ignored too.
    loaded.dispatch(CommitAccountEdit("Expenses:Z"))
    assert channel.sent == []


@pytest.mark.parametrize("target", [EditTarget.group(4), EditTarget.field(9)])
def test_open_edit_for_absent_target_is_noop(loaded, presenter, target):
    before = loaded.state
    loaded.dispatch(RequestAccountEdit(0, target))
    loaded.dispatch(RequestAccountEdit(2, EditTarget.whole()))  # no substitutions
    loaded.dispatch(RequestAccountEdit(9, EditTarget.whole()))  # missing candidate
    assert loaded.state is before
    assert presenter.calls == []


def test_fixme_resets_to_original_accounts(loaded, channel):
    loaded.dispatch(Fixme())
    assert channel.sent[0]["value"]["candidate_index"] == 0
    assert channel.sent[0]["value"]["changes"]["accounts"] == ["Orig1", "Orig2"]
    assert loaded.state.edit is None


def test_fixme_is_blocked_while_editing_or_without_substitutions(loaded, channel):
    loaded.dispatch(RequestAccountEdit(1, EditTarget.whole()))
    loaded.dispatch(Fixme())
    assert channel.sent == []
    loaded.dispatch(CancelAccountEdit())

    loaded.dispatch(Select(2))
    loaded.dispatch(Fixme())
    assert channel.sent == []


# ----------------------------------------------------------------------------
# Properties, accept, skip, retrain
# ----------------------------------------------------------------------------


def test_property_edit_requires_original_properties(loaded, presenter):
    loaded.dispatch(EditSelectedProperties("tag"))
    name, (index, action, props) = presenter.calls[-1]
    assert (name, index, action) == ("start_property_edit", 0, "tag")
    assert props.narration == "Coffee"

    presenter.calls.clear()
    loaded.dispatch(Select(2))
    loaded.dispatch(EditSelectedProperties("narration"))
    assert presenter.calls == []


def test_change_properties_and_revert(loaded, channel):
    props = TransactionProperties(tags=("t",), links=(), narration="N", payee=None)
    loaded.dispatch(ChangeProperties(0, props))
    loaded.dispatch(Revert())
    loaded.dispatch(Revert(2))  # no original properties

    assert channel.sent[0]["value"]["changes"] == {
        "accounts": ["Expenses:X", "Expenses:Y"],
        "tags": ["t"],
        "links": [],
        "narration": "N",
        "payee": None,
    }
    assert channel.sent[1] == {
        "type": "change_candidate",
        "value": {"generation": 1, "candidate_index": 0, "changes": {}},
    }
    assert len(channel.sent) == 2


def test_accept_sends_select_and_post_accept_payload(loaded, channel, presenter):
    loaded.dispatch(Select(1))
    loaded.dispatch(AcceptSelected())

    assert channel.sent == [{"type": "select_candidate", "value": {"generation": 1, "index": 1}}]
    assert presenter.calls[-1] == ("post_accept", (1, {"id": 1}))


def test_accept_without_entries_has_no_post_accept(controller, channel, presenter):
    controller.dispatch(CandidatesReceived(candidate_set([candidate_payload(entries=False)])))
    controller.dispatch(AcceptSelected())
    assert channel.types() == ["select_candidate"]
    assert "post_accept" not in presenter.names()


def test_accept_selected_with_everything_hidden_is_noop(loaded, channel):
    loaded.dispatch(ToggleUsedTransaction(5, enabled=False))
    loaded.dispatch(ToggleUsedTransaction(6, enabled=False))
    loaded.dispatch(ToggleUsedTransaction(0, enabled=False))
    assert loaded.state.view.visible == (1,)
    loaded.dispatch(CandidatesReceived(candidate_set([candidate_payload(used=[5])], generation=2)))
    loaded.dispatch(AcceptSelected())
    assert channel.sent == []


def test_skip_and_retrain(loaded, channel):
    for direction in ("prior", "next", "first", "last"):
        loaded.dispatch(SkipPending(direction))
    loaded.dispatch(RequestRetrain())
    assert channel.sent == [
        {"type": "skip", "value": {"direction": "prior"}},
        {"type": "skip", "value": {"direction": "next"}},
        {"type": "skip", "value": {"direction": "first"}},
        {"type": "skip", "value": {"direction": "last"}},
        {"type": "retrain", "value": {}},
    ]


def test_commands_are_returned_and_reducer_is_pure():
    state, _ = reduce(initial_state(), CandidatesReceived(_three()))
    again, commands = reduce(state, Fixme())
    assert again is state
    assert len(commands) == 1 and isinstance(commands[0], Send)


def test_toolbar_state(loaded):
    tb = toolbar_state(loaded.state)
    assert (tb.change_account, tb.fixme, tb.edit_properties, tb.revert) == (True, True, True, True)

    loaded.dispatch(Select(2))
    tb = toolbar_state(loaded.state)
    assert (tb.change_account, tb.fixme, tb.edit_properties, tb.revert) == (
        False,
        False,
        False,
        False,
    )


def test_listeners_see_new_snapshots(loaded):
    seen = []
    loaded.subscribe(seen.append)
    loaded.dispatch(SelectRelative(1))
    loaded.dispatch(Select(99))  # no change, no notification
    assert [s.selection.selected for s in seen] == [1]


def test_receive_candidates_validates_payload(controller):
    controller.receive_accounts(["Assets:Cash"])
    controller.receive_candidates(
        {"candidates": [candidate_payload(subs=TWO_SUBS)], "used_transactions": []},
        generation=4,
    )
    assert controller.state.generation == 4
    assert controller.state.accounts == ("Assets:Cash",)

    with pytest.raises(ValueError):
        controller.receive_candidates(
            {"candidates": [candidate_payload(subs=[("u", "A:B", 12, "A:C")])]}, generation=5
        )
    assert controller.state.generation == 4
