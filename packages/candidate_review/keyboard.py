"""Keyboard shortcuts for the review controller.

The key table is part of the public contract (it mirrors the documented
shortcuts) and maps key names to controller actions:

=================  ==========================================================
key                action
=================  ==========================================================
``[`` / ``]``      skip to the prior / next pending entry
``1`` … ``9, 0``   edit the accounts of group 0 … 8, 9 on the selected candidate
``ArrowUp/Down``   select the previous / next visible candidate
``Enter``          accept the selected candidate
``a``              edit every unknown account of the selected candidate
``f``              reset unknown accounts to their originals ("fixme later")
``t``              retrain
``#`` ``^`` ``n``  edit tags / links / narration of the selected candidate
=================  ==========================================================

Events originating from a text-entry control are ignored. Consumed events
have propagation stopped and their default prevented; unmapped keys pass
through untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Protocol

from .actions import (
    AcceptSelected,
    Action,
    EditSelectedAccounts,
    EditSelectedProperties,
    Fixme,
    RequestRetrain,
    SelectRelative,
    SkipPending,
)
from .edit_session import EditTarget
from .models import MAX_GROUP_NUMBER, MIN_GROUP_NUMBER

# Digit keys follow the keyboard row: "1" is the first group, "0" the tenth.
GROUP_KEYS: Mapping[str, int] = MappingProxyType(
    {str((n + 1) % 10): n for n in range(MIN_GROUP_NUMBER, MAX_GROUP_NUMBER + 1)}
)

_STATIC_BINDINGS: dict[str, tuple[Action, str]] = {
    "[": (SkipPending("prior"), "Skip to previous pending entry"),
    "]": (SkipPending("next"), "Skip to next pending entry"),
    "ArrowUp": (SelectRelative(-1), "Select previous candidate"),
    "ArrowDown": (SelectRelative(1), "Select next candidate"),
    "Enter": (AcceptSelected(), "Accept selected candidate"),
    "a": (EditSelectedAccounts(EditTarget.whole()), "Change all unknown accounts"),
    "f": (Fixme(), "Reset unknown accounts to FIXME (fix later)"),
    "t": (RequestRetrain(), "Retrain"),
    "#": (EditSelectedProperties("tag"), "Add tag"),
    "^": (EditSelectedProperties("link"), "Add link"),
    "n": (EditSelectedProperties("narration"), "Edit narration"),
}

KEY_BINDINGS: Mapping[str, Action] = MappingProxyType(
    {
        **{key: action for key, (action, _) in _STATIC_BINDINGS.items()},
        **{key: EditSelectedAccounts(EditTarget.group(n)) for key, n in GROUP_KEYS.items()},
    }
)


def describe_key_bindings() -> list[tuple[str, str]]:
    """``(key, description)`` rows in display order."""

    rows = [(key, help_text) for key, (_, help_text) in _STATIC_BINDINGS.items()]
    digits = sorted(GROUP_KEYS.items(), key=lambda kv: kv[1])
    rows.insert(2, ("1-9, 0", f"Change accounts of group {digits[0][1]}-{digits[-1][1]}"))
    return rows


@dataclass(slots=True)
class KeyEvent:
    """A discrete key press as seen by the dispatcher."""

    key: str
    in_text_input: bool = False
    propagation_stopped: bool = False
    default_prevented: bool = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    def prevent_default(self) -> None:
        self.default_prevented = True


class _Dispatch(Protocol):
    def dispatch(self, action: Action) -> object: ...


def action_for_key(key: str) -> Action | None:
    return KEY_BINDINGS.get(key)


class KeyboardDispatcher:
    def __init__(self, controller: _Dispatch) -> None:
        self._controller = controller

    def handle(self, event: KeyEvent) -> bool:
        """Dispatch ``event``; returns True when the key was consumed."""

        if event.in_text_input:
            return False
        action = action_for_key(event.key)
        if action is None:
            return False
        self._controller.dispatch(action)
        event.stop_propagation()
        event.prevent_default()
        return True


__all__ = [
    "GROUP_KEYS",
    "KEY_BINDINGS",
    "KeyEvent",
    "KeyboardDispatcher",
    "action_for_key",
    "describe_key_bindings",
]
