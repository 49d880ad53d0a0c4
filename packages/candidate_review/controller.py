"""Review controller: the single owner of the review state.

The controller runs the pure reducer for every incoming event and then
executes the returned commands in order. It is the only writer of the
snapshot; renderers and the network layer read ``controller.state`` or feed
actions into ``dispatch``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from .actions import AccountsReceived, Action, CandidatesReceived
from .commands import (
    CloseAccountInput,
    Command,
    NullPresenter,
    OpenAccountInput,
    OutboundChannel,
    PostAccept,
    Presenter,
    ScrollToCandidate,
    Send,
    StartPropertyEdit,
)
from .logging_setup import get_logger
from .models import CandidateSet
from .reducer import reduce
from .state import ReviewState, initial_state

_logger = get_logger("candidate_review.controller")


class ReviewController:
    def __init__(
        self,
        channel: OutboundChannel,
        presenter: Presenter | None = None,
        *,
        state: ReviewState | None = None,
    ) -> None:
        self._channel = channel
        self._presenter: Presenter = presenter if presenter is not None else NullPresenter()
        self._state = state if state is not None else initial_state()
        self._listeners: list[Callable[[ReviewState], None]] = []

    @property
    def state(self) -> ReviewState:
        return self._state

    def set_presenter(self, presenter: Presenter) -> None:
        self._presenter = presenter

    def subscribe(self, listener: Callable[[ReviewState], None]) -> None:
        """Register a callback invoked with the new snapshot after each change."""

        self._listeners.append(listener)

    def dispatch(self, action: Action) -> list[Command]:
        """Reduce ``action`` and execute the resulting commands; returns them."""

        previous = self._state
        self._state, commands = reduce(previous, action)
        for command in commands:
            self._execute(command)
        if self._state is not previous:
            for listener in list(self._listeners):
                listener(self._state)
        return commands

    def receive_candidates(self, payload: Mapping[str, Any], *, generation: int) -> None:
        """Validate an inbound payload and apply it as a new generation.

        Raises ``pydantic.ValidationError`` for malformed payloads.
        """

        self.dispatch(CandidatesReceived(CandidateSet.from_payload(payload, generation=generation)))

    def receive_accounts(self, accounts: Iterable[str]) -> None:
        self.dispatch(AccountsReceived(tuple(accounts)))

    def _execute(self, command: Command) -> None:
        presenter = self._presenter
        if isinstance(command, Send):
            wire = command.message.to_wire()
            _logger.debug("send %s %s", wire["type"], wire["value"])
            self._channel.send(wire)
        elif isinstance(command, ScrollToCandidate):
            presenter.scroll_to_candidate(command.index)
        elif isinstance(command, OpenAccountInput):
            presenter.open_account_input(command.initial, command.suggestions)
        elif isinstance(command, CloseAccountInput):
            presenter.close_account_input()
        elif isinstance(command, StartPropertyEdit):
            presenter.start_property_edit(
                command.candidate_index, command.action, command.properties
            )
        elif isinstance(command, PostAccept):
            presenter.post_accept(command.candidate_index, command.payload)
        else:  # pragma: no cover - exhaustive over Command
            raise TypeError(f"unsupported command: {command!r}")


__all__ = ["ReviewController"]
