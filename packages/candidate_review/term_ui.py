"""Terminal input prompts (prompt_toolkit-based).

These are the text-entry widgets the controller delegates to: an account
prompt with completion over the suggested account list, and a small prompt
for tag/link/narration edits. They are kept decoupled from the controller so
they can be tested in isolation with pipe input.

Both prompts return ``None`` when canceled with Esc or Ctrl+C, and on Ctrl+D
over an empty line.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.application.current import get_app
from prompt_toolkit.auto_suggest import AutoSuggest, Suggestion
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.filters import Condition
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.styles import Style
from prompt_toolkit.validation import ValidationError, Validator

from .edit_session import PropertyAction
from .models import TransactionProperties

# ----------------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------------

# Colon-separated components, each starting with an uppercase letter or digit.
_ACCOUNT_RE = re.compile(r"^[A-Z][^\s:]*(?::[A-Z0-9][^\s:]*)+$")
_TAG_RE = re.compile(r"^[#^]?[^\s#^]+$")


@dataclass(frozen=True, slots=True)
class InputValidation:
    ok: bool
    reason: str | None = None


def validate_account(name: str) -> InputValidation:
    """Lightweight shape check for ledger account names (e.g. ``Expenses:Food``)."""

    n = name.strip()
    if not n:
        return InputValidation(False, "Account cannot be empty")
    if not _ACCOUNT_RE.match(n):
        return InputValidation(
            False, "Use capitalized components separated by ':' (e.g. Expenses:Food)"
        )
    return InputValidation(True, None)


def validate_tag_or_link(value: str) -> InputValidation:
    if not _TAG_RE.match(value.strip()):
        return InputValidation(False, "Tags and links are a single word without spaces")
    return InputValidation(True, None)


class _ResultValidator(Validator):
    def __init__(self, check) -> None:
        self._check = check

    def validate(self, document) -> None:
        v = self._check(document.text)
        if not v.ok:
            raise ValidationError(message=v.reason or "Invalid value")


# ----------------------------------------------------------------------------
# Account prompt
# ----------------------------------------------------------------------------


class _PrefixSuggest(AutoSuggest):
    def __init__(self, vocab: Sequence[str]) -> None:
        self._vocab = list(vocab)

    def get_suggestion(self, buffer, document):
        text = document.text
        if not text:
            return None
        lower = text.lower()
        for w in self._vocab:
            wl = w.lower()
            if wl == lower:
                return None
            if wl.startswith(lower):
                return Suggestion(w[len(text) :])
        return None


def _cancel_bindings() -> KeyBindings:
    kb = KeyBindings()

    @kb.add("escape")
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result=None)

    @kb.add("c-c", eager=True)
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result=None)

    # Ctrl-D on an empty line would otherwise end the prompt with EOFError.
    @kb.add("c-d", filter=Condition(lambda: not get_app().current_buffer.text), eager=True)
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result=None)

    return kb


def _session(kb: KeyBindings, session: PromptSession | None) -> PromptSession:
    if session is None:
        return PromptSession(key_bindings=kb)
    return PromptSession(
        input=getattr(session, "input", None),
        output=getattr(session, "output", None),
        key_bindings=kb,
    )


def _account_prompt(
    initial: str,
    accounts: Iterable[str],
    *,
    session: PromptSession | None,
    message: str,
) -> tuple[PromptSession, dict[str, Any]]:
    words = list(accounts)
    kb = _cancel_bindings()

    @kb.add("tab", eager=True)
    def _(event) -> None:  # pragma: no cover - integration path
        b = event.app.current_buffer
        s = getattr(b, "suggestion", None)
        if s is not None and s.text:
            b.insert_text(s.text)
        elif b.complete_state is None:
            b.start_completion(select_first=True)
        else:
            b.complete_next()

    @kb.add("enter", eager=True)
    def _(event) -> None:  # pragma: no cover - integration path
        b = event.app.current_buffer
        cs = b.complete_state
        if cs is not None and cs.current_completion is not None:
            b.apply_completion(cs.current_completion)
        b.validate_and_handle()

    sess = _session(kb, session)
    kwargs: dict[str, Any] = {
        "message": message,
        "default": initial,
        "completer": WordCompleter(words, ignore_case=True, match_middle=True, sentence=True),
        "auto_suggest": _PrefixSuggest(words),
        "validator": _ResultValidator(validate_account),
        "validate_while_typing": False,
        "key_bindings": kb,
        "style": Style.from_dict({"auto-suggestion": "fg:#888888"}),
    }
    return sess, kwargs


def prompt_account(
    *,
    initial: str,
    accounts: Iterable[str],
    session: PromptSession | None = None,
    message: str = "Account (Enter to save • Esc to cancel): ",
) -> str | None:
    """Collect an account name, pre-filled with ``initial``.

    Returns the stripped account name, or ``None`` when canceled.
    """

    sess, kwargs = _account_prompt(initial, accounts, session=session, message=message)
    result = sess.prompt(**kwargs)
    return result.strip() if result is not None else None


async def prompt_account_async(
    *,
    initial: str,
    accounts: Iterable[str],
    session: PromptSession | None = None,
    message: str = "Account (Enter to save • Esc to cancel): ",
) -> str | None:
    sess, kwargs = _account_prompt(initial, accounts, session=session, message=message)
    result = await sess.prompt_async(**kwargs)
    return result.strip() if result is not None else None


# ----------------------------------------------------------------------------
# Transaction property prompt
# ----------------------------------------------------------------------------

_PROPERTY_MESSAGES: dict[str, str] = {
    "tag": "Add tag (Enter to save • Esc to cancel): ",
    "link": "Add link (Enter to save • Esc to cancel): ",
    "narration": "Narration (Enter to save • Esc to cancel): ",
}


def _property_prompt(
    action: PropertyAction,
    properties: TransactionProperties,
    *,
    session: PromptSession | None,
) -> tuple[PromptSession, dict[str, Any]]:
    kb = _cancel_bindings()
    sess = _session(kb, session)
    kwargs: dict[str, Any] = {
        "message": _PROPERTY_MESSAGES[action],
        "default": (properties.narration or "") if action == "narration" else "",
        "key_bindings": kb,
    }
    if action != "narration":
        kwargs["validator"] = _ResultValidator(validate_tag_or_link)
        kwargs["validate_while_typing"] = False
    return sess, kwargs


def prompt_property(
    action: PropertyAction,
    properties: TransactionProperties,
    *,
    session: PromptSession | None = None,
) -> str | None:
    """Collect a tag, link, or replacement narration; ``None`` when canceled."""

    sess, kwargs = _property_prompt(action, properties, session=session)
    return sess.prompt(**kwargs)


async def prompt_property_async(
    action: PropertyAction,
    properties: TransactionProperties,
    *,
    session: PromptSession | None = None,
) -> str | None:
    sess, kwargs = _property_prompt(action, properties, session=session)
    return await sess.prompt_async(**kwargs)


__all__ = [
    "InputValidation",
    "prompt_account",
    "prompt_account_async",
    "prompt_property",
    "prompt_property_async",
    "validate_account",
    "validate_tag_or_link",
]
