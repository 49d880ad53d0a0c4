"""Side effects requested by the reducer.

The reducer never performs I/O. It returns a list of commands which the
controller executes in order: ``Send`` goes to the outbound channel, every
other command is a capability call on the presentation layer.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from .edit_session import PropertyAction
from .models import TransactionProperties
from .protocol import Message


@dataclass(frozen=True, slots=True)
class Send:
    message: Message


@dataclass(frozen=True, slots=True)
class ScrollToCandidate:
    index: int


@dataclass(frozen=True, slots=True)
class OpenAccountInput:
    initial: str
    suggestions: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class CloseAccountInput:
    """The open account input was invalidated (e.g. a new generation arrived)."""


@dataclass(frozen=True, slots=True)
class StartPropertyEdit:
    candidate_index: int
    action: PropertyAction
    properties: TransactionProperties


@dataclass(frozen=True, slots=True)
class PostAccept:
    """Presentation hook after accepting; ``payload`` is the primary entry's meta."""

    candidate_index: int
    payload: Any


type Command = (
    Send | ScrollToCandidate | OpenAccountInput | CloseAccountInput | StartPropertyEdit | PostAccept
)


class OutboundChannel(Protocol):
    def send(self, message: dict[str, Any]) -> None: ...


class Presenter(Protocol):
    """Capabilities the presentation layer offers to the controller."""

    def scroll_to_candidate(self, index: int) -> None: ...

    def open_account_input(self, initial: str, suggestions: Sequence[str]) -> None: ...

    def close_account_input(self) -> None: ...

    def start_property_edit(
        self, candidate_index: int, action: PropertyAction, properties: TransactionProperties
    ) -> None: ...

    def post_accept(self, candidate_index: int, payload: Any) -> None: ...


class NullPresenter:
    """Presenter that ignores every request (headless use)."""

    def scroll_to_candidate(self, index: int) -> None:
        return None

    def open_account_input(self, initial: str, suggestions: Sequence[str]) -> None:
        return None

    def close_account_input(self) -> None:
        return None

    def start_property_edit(
        self, candidate_index: int, action: PropertyAction, properties: TransactionProperties
    ) -> None:
        return None

    def post_accept(self, candidate_index: int, payload: Any) -> None:
        return None


__all__ = [
    "CloseAccountInput",
    "Command",
    "NullPresenter",
    "OpenAccountInput",
    "OutboundChannel",
    "PostAccept",
    "Presenter",
    "ScrollToCandidate",
    "Send",
    "StartPropertyEdit",
]
