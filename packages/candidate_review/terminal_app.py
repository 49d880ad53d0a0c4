"""Full-screen terminal presenter for the review controller (prompt_toolkit).

The presenter renders the controller's snapshot and forwards key presses to
the ``KeyboardDispatcher``. It implements the presenter capabilities the
controller invokes via commands: scrolling to a candidate, running the
account/property prompts, and reporting accepted candidates.

Besides the documented shortcuts the presenter binds a few keys of its own,
standing in for toolbar buttons: ``x`` hides every candidate sharing a used
transaction with the selected one, ``u`` shows all candidates again, ``R``
reverts the selected candidate, ``Home``/``End`` skip to the first/last
pending entry, ``q`` quits. In the used-transactions panel ``Left``/``Right``
move a cursor and ``Space`` toggles the checkbox under it, one used
transaction at a time.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from prompt_toolkit.application import Application, in_terminal
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension
from prompt_toolkit.styles import Style

from .actions import (
    CancelAccountEdit,
    ChangeProperties,
    CommitAccountEdit,
    Revert,
    SkipPending,
    ToggleUsedTransaction,
)
from .controller import ReviewController
from .edit_session import PropertyAction, apply_property_edit
from .keyboard import GROUP_KEYS, KEY_BINDINGS, KeyboardDispatcher, KeyEvent
from .logging_setup import get_logger
from .models import Candidate, TransactionProperties
from .state import highlighted_used_ids, selected_candidate, toolbar_state
from .term_ui import prompt_account_async, prompt_property_async

_logger = get_logger("candidate_review.terminal_app")

# prompt_toolkit key names for the non-character keys of the key table.
_PTK_KEYS: dict[str, str] = {"ArrowUp": "up", "ArrowDown": "down", "Enter": "enter"}

_GROUP_LABELS: dict[int, str] = {n: key for key, n in GROUP_KEYS.items()}

_STYLE = Style.from_dict(
    {
        "toolbar": "reverse",
        "toolbar.disabled": "reverse fg:#777777",
        "used.disabled": "fg:#777777",
        "used.highlight": "bold",
        "candidate.selected": "bg:#303060 bold",
        "candidate.hover": "underline",
        "status": "fg:#88aa88",
    }
)


def _describe_used(index: int, used: Any) -> str:
    extra = used.model_extra or {}
    label = extra.get("narration") or extra.get("payee") or extra.get("date") or ""
    return f"{index}: {label}".rstrip(": ")


def _candidate_lines(index: int, candidate: Candidate) -> list[str]:
    props = candidate.current_properties
    title = " ".join(filter(None, [props.payee, props.narration])) or "(no narration)"
    extras = [f"#{t}" for t in props.tags] + [f"^{link}" for link in props.links]
    lines = [f"{index:>3}  {title} {' '.join(extras)}".rstrip()]
    for sub in candidate.substituted_accounts:
        label = _GROUP_LABELS.get(sub.group_number, "?")
        lines.append(f"       [{label}] {sub.account_name}  (was {sub.original_name})")
    return lines


class TerminalPresenter:
    def __init__(self, controller: ReviewController) -> None:
        self._controller = controller
        self._dispatcher = KeyboardDispatcher(controller)
        self._scroll_target: int | None = None
        self._status = ""
        self._used_cursor = 0
        self._input_task: asyncio.Task[None] | None = None

        candidates_control = FormattedTextControl(self._render_candidates, focusable=True)
        body = HSplit(
            [
                Window(FormattedTextControl(self._render_toolbar), height=1),
                Window(FormattedTextControl(self._render_used), height=Dimension(max=8)),
                Window(candidates_control, wrap_lines=False),
                Window(FormattedTextControl(self._render_status), height=1),
            ]
        )
        self.app: Application[None] = Application(
            layout=Layout(body, focused_element=candidates_control),
            key_bindings=self._key_bindings(),
            style=_STYLE,
            full_screen=True,
        )
        controller.set_presenter(self)
        controller.subscribe(lambda _state: self.app.invalidate())

    # -- key bindings -------------------------------------------------------

    def _key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        def bind(key_name: str) -> None:
            @kb.add(_PTK_KEYS.get(key_name, key_name))
            def _(event) -> None:  # pragma: no cover - interactive
                self._dispatcher.handle(
                    KeyEvent(key_name, in_text_input=event.app.layout.buffer_has_focus)
                )

        for key_name in KEY_BINDINGS:
            bind(key_name)

        @kb.add("x")
        def _(event) -> None:  # pragma: no cover - interactive
            candidate = selected_candidate(self._controller.state)
            if candidate is None:
                return
            for used_id in sorted(candidate.used_transaction_ids):
                self._controller.dispatch(ToggleUsedTransaction(used_id, enabled=False))

        @kb.add("u")
        def _(event) -> None:  # pragma: no cover - interactive
            for used_id in sorted(self._controller.state.disabled):
                self._controller.dispatch(ToggleUsedTransaction(used_id, enabled=True))

        @kb.add("left")
        def _(event) -> None:  # pragma: no cover - interactive
            self.move_used_cursor(-1)

        @kb.add("right")
        def _(event) -> None:  # pragma: no cover - interactive
            self.move_used_cursor(1)

        @kb.add("space")
        def _(event) -> None:  # pragma: no cover - interactive
            self.toggle_used_at_cursor()

        @kb.add("R")
        def _(event) -> None:  # pragma: no cover - interactive
            self._controller.dispatch(Revert())

        @kb.add("home")
        def _(event) -> None:  # pragma: no cover - interactive
            self._controller.dispatch(SkipPending("first"))

        @kb.add("end")
        def _(event) -> None:  # pragma: no cover - interactive
            self._controller.dispatch(SkipPending("last"))

        @kb.add("q")
        @kb.add("c-c")
        def _(event) -> None:  # pragma: no cover - interactive
            event.app.exit()

        return kb

    # -- used-transactions panel --------------------------------------------

    def move_used_cursor(self, delta: int) -> None:
        count = len(self._controller.state.candidate_set.used_transactions)
        if count == 0:
            return
        self._used_cursor = (min(self._used_cursor, count - 1) + delta) % count
        self.app.invalidate()

    def toggle_used_at_cursor(self) -> None:
        state = self._controller.state
        if not 0 <= self._used_cursor < len(state.candidate_set.used_transactions):
            return
        used_id = self._used_cursor
        self._controller.dispatch(
            ToggleUsedTransaction(used_id, enabled=used_id in state.disabled)
        )

    # -- rendering ----------------------------------------------------------

    def _render_toolbar(self) -> StyleAndTextTuples:
        tb = toolbar_state(self._controller.state)
        items = [
            ("[ ] skip", True),
            ("a change account", tb.change_account),
            ("f fixme later", tb.fixme),
            ("n narration", tb.edit_properties),
            ("^ link", tb.edit_properties),
            ("# tag", tb.edit_properties),
            ("R revert", tb.revert),
            ("t retrain", True),
        ]
        out: StyleAndTextTuples = []
        for label, enabled in items:
            out.append(("class:toolbar" if enabled else "class:toolbar.disabled", f" {label} "))
            out.append(("", " "))
        return out

    def _render_used(self) -> StyleAndTextTuples:
        state = self._controller.state
        selected_ids, hover_ids = highlighted_used_ids(state)
        out: StyleAndTextTuples = []
        for index, used in enumerate(state.candidate_set.used_transactions):
            checked = "[ ]" if index in state.disabled else "[x]"
            marker = ">" if index == self._used_cursor else " "
            style = ""
            if index in state.disabled:
                style = "class:used.disabled"
            elif index in selected_ids or index in hover_ids:
                style = "class:used.highlight"
            out.append((style, f"{marker}{checked} {_describe_used(index, used)}\n"))
        return out

    def _render_candidates(self) -> StyleAndTextTuples:
        state = self._controller.state
        out: StyleAndTextTuples = []
        for g in state.view.visible:
            candidate = state.candidate_set.candidates[g]
            style = ""
            if g == state.selection.selected:
                style = "class:candidate.selected"
            elif g == state.selection.hover:
                style = "class:candidate.hover"
            if g == self._scroll_target:
                out.append(("[SetCursorPosition]", ""))
            for line in _candidate_lines(g, candidate):
                out.append((style, line + "\n"))
        if not out:
            out.append(("", "No candidates.\n"))
        return out

    def _render_status(self) -> StyleAndTextTuples:
        state = self._controller.state
        summary = (
            f"generation {state.generation} · {len(state.view)}/"
            f"{len(state.candidate_set.candidates)} visible"
        )
        return [("class:status", f"{summary}  {self._status}".rstrip())]

    # -- presenter capabilities ----------------------------------------------

    def scroll_to_candidate(self, index: int) -> None:
        self._scroll_target = index

    def open_account_input(self, initial: str, suggestions: Sequence[str]) -> None:
        self._input_task = self.app.create_background_task(
            self._ask_account(initial, list(suggestions))
        )

    def close_account_input(self) -> None:
        if self._input_task is not None and not self._input_task.done():
            self._input_task.cancel()
        self._input_task = None

    def start_property_edit(
        self, candidate_index: int, action: PropertyAction, properties: TransactionProperties
    ) -> None:
        generation = self._controller.state.generation
        self.app.create_background_task(
            self._ask_property(candidate_index, generation, action, properties)
        )

    def post_accept(self, candidate_index: int, payload: Any) -> None:
        self._status = f"accepted candidate {candidate_index}"
        _logger.info("accepted candidate %d", candidate_index)

    # -- prompts -------------------------------------------------------------

    async def _ask_account(self, initial: str, suggestions: list[str]) -> None:
        value: str | None = None
        try:
            async with in_terminal():
                value = await prompt_account_async(initial=initial, accounts=suggestions)
        except EOFError:
            # Ctrl-D; handled like Esc.
            value = None
        finally:
            # The session closes on every exit path, cancellation included.
            if value is None:
                self._controller.dispatch(CancelAccountEdit())
            else:
                self._controller.dispatch(CommitAccountEdit(value))

    async def _ask_property(
        self,
        candidate_index: int,
        generation: int,
        action: PropertyAction,
        properties: TransactionProperties,
    ) -> None:
        try:
            async with in_terminal():
                value = await prompt_property_async(action, properties)
        except EOFError:
            return
        if value is None:
            return
        self._controller.dispatch(
            ChangeProperties(
                candidate_index,
                apply_property_edit(properties, action, value),
                generation=generation,
            )
        )


def run_review(controller: ReviewController) -> None:
    """Run the full-screen review until the user quits."""

    TerminalPresenter(controller).app.run()  # pragma: no cover - interactive


__all__ = ["TerminalPresenter", "run_review"]
