import asyncio
import contextlib

import pytest
from prompt_toolkit.application import create_app_session
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from candidate_review import terminal_app
from candidate_review.actions import (
    CandidatesReceived,
    RequestAccountEdit,
    SelectRelative,
    ToggleUsedTransaction,
)
from candidate_review.controller import ReviewController
from candidate_review.edit_session import EditTarget
from candidate_review.models import TransactionProperties
from candidate_review.terminal_app import TerminalPresenter

from tests.helpers.candidates import ORIGINAL_PROPS, TWO_SUBS, candidate_payload, candidate_set


def _text(fragments):
    return "".join(text for _, text in fragments)


@pytest.fixture
def terminal(channel):
    with create_pipe_input() as pipe, create_app_session(input=pipe, output=DummyOutput()):
        controller = ReviewController(channel)
        presenter = TerminalPresenter(controller)
        controller.dispatch(
            CandidatesReceived(
                candidate_set(
                    [
                        candidate_payload(
                            used=[0], subs=TWO_SUBS, tags=["trip"], original=ORIGINAL_PROPS
                        ),
                        candidate_payload(used=[1], narration="Groceries", payee=None),
                    ]
                )
            )
        )
        yield controller, presenter


@pytest.fixture
def open_edit(terminal, monkeypatch):
    """Open an account edit session without starting the background prompt."""

    controller, presenter = terminal
    monkeypatch.setattr(presenter, "open_account_input", lambda initial, suggestions: None)
    controller.dispatch(RequestAccountEdit(0, EditTarget.whole()))
    assert controller.state.edit is not None
    return controller, presenter


def _fake_prompt(monkeypatch, name, outcome):
    @contextlib.asynccontextmanager
    async def _no_terminal():
        yield

    async def _prompt(*args, **kwargs):
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    monkeypatch.setattr(terminal_app, "in_terminal", _no_terminal)
    monkeypatch.setattr(terminal_app, name, _prompt)


def test_presenter_registers_itself(terminal):
    controller, presenter = terminal
    controller.dispatch(SelectRelative(1))
    assert ("[SetCursorPosition]", "") in presenter._render_candidates()


def test_candidates_render_substitutions_with_digit_labels(terminal):
    _, presenter = terminal
    text = _text(presenter._render_candidates())
    assert "Cafe Coffee #trip" in text
    assert "[1] Expenses:X  (was Orig1)" in text
    assert "[2] Expenses:Y  (was Orig2)" in text
    assert "Groceries" in text


def test_hidden_candidates_are_not_rendered(terminal):
    controller, presenter = terminal
    controller.dispatch(ToggleUsedTransaction(1, enabled=False))
    assert "Groceries" not in _text(presenter._render_candidates())
    used = presenter._render_used()
    assert used[1] == ("class:used.disabled", " [ ] 1: used 1\n")
    assert used[0] == ("class:used.highlight", ">[x] 0: used 0\n")
    assert "1/2 visible" in _text(presenter._render_status())


def test_used_cursor_toggles_a_single_transaction(terminal):
    controller, presenter = terminal
    controller.dispatch(ToggleUsedTransaction(0, enabled=False))

    presenter.move_used_cursor(1)
    presenter.toggle_used_at_cursor()
    assert controller.state.disabled == {0, 1}
    assert controller.state.view.visible == ()

    # Re-enabling one id leaves the other disabled.
    presenter.toggle_used_at_cursor()
    assert controller.state.disabled == {0}
    assert "Groceries" in _text(presenter._render_candidates())
    assert presenter._render_used()[1][1].startswith(">[x] 1:")


def test_used_cursor_wraps(terminal):
    _, presenter = terminal
    presenter.move_used_cursor(-1)
    assert presenter._render_used()[7][1].startswith(">")
    presenter.move_used_cursor(1)
    assert presenter._render_used()[0][1].startswith(">")


def test_toolbar_reflects_selected_candidate(terminal):
    controller, presenter = terminal
    enabled = [style for style, text in presenter._render_toolbar() if "revert" in text]
    assert enabled == ["class:toolbar"]

    controller.dispatch(SelectRelative(1))
    disabled = [style for style, text in presenter._render_toolbar() if "revert" in text]
    assert disabled == ["class:toolbar.disabled"]


def test_post_accept_updates_status(terminal):
    _, presenter = terminal
    presenter.post_accept(0, {"filename": "ledger.beancount", "lineno": 1})
    assert _text(presenter._render_status()).endswith("accepted candidate 0")


def test_close_account_input_without_prompt_is_noop(terminal):
    _, presenter = terminal
    presenter.close_account_input()


def test_account_prompt_eof_closes_edit_session(open_edit, monkeypatch, channel):
    controller, presenter = open_edit
    _fake_prompt(monkeypatch, "prompt_account_async", EOFError())

    asyncio.run(presenter._ask_account("Expenses:X", []))

    assert controller.state.edit is None
    assert channel.sent == []


def test_account_prompt_error_still_closes_edit_session(open_edit, monkeypatch):
    controller, presenter = open_edit
    _fake_prompt(monkeypatch, "prompt_account_async", RuntimeError("terminal gone"))

    with pytest.raises(RuntimeError):
        asyncio.run(presenter._ask_account("Expenses:X", []))
    assert controller.state.edit is None


def test_account_prompt_value_commits(open_edit, monkeypatch, channel):
    controller, presenter = open_edit
    _fake_prompt(monkeypatch, "prompt_account_async", "Expenses:Z")

    asyncio.run(presenter._ask_account("Expenses:X", []))

    assert controller.state.edit is None
    assert channel.sent[0]["value"]["changes"]["accounts"] == ["Expenses:Z", "Expenses:Z"]


def test_property_prompt_eof_sends_nothing(terminal, monkeypatch, channel):
    _, presenter = terminal
    _fake_prompt(monkeypatch, "prompt_property_async", EOFError())

    asyncio.run(presenter._ask_property(0, 1, "tag", TransactionProperties()))

    assert channel.sent == []
