# ruff: noqa: I001
"""CLI for the ``candidate_review`` package.

This module exposes a Typer-based console interface. Environment variables
are loaded from a local ``.env`` using ``python-dotenv`` before delegating to
command logic. Review logic lives in ``candidate_review.controller`` and
related modules.

Commands
--------
- ``review``: interactive full-screen review; outbound messages are appended
  as JSON lines to the outbox file.
- ``replay``: headless; feeds a key sequence through the keyboard dispatcher
  and prints every outbound message as a JSON line on stdout.
- ``keys``: print the keyboard shortcuts.
"""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from typer.models import OptionInfo

from .actions import CancelAccountEdit, ChangeProperties, CommitAccountEdit
from .channels import JsonLinesChannel, load_accounts, load_candidates_payload
from .controller import ReviewController
from .edit_session import PropertyAction, apply_property_edit
from .keyboard import KeyboardDispatcher, KeyEvent, describe_key_bindings
from .logging_setup import configure_logging, get_logger
from .models import TransactionProperties

_logger = get_logger("candidate_review.cli")

_OUTBOX_ENV = "CANDIDATE_REVIEW_OUTBOX"

app = typer.Typer(add_completion=False, help="Review and reconcile candidate transaction matches.")


# Module-level option objects (no calls in parameter defaults).
CANDIDATES_OPTION: OptionInfo = typer.Option(
    ...,
    "--candidates",
    help="JSON file holding a {candidates, used_transactions} payload",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
ACCOUNTS_OPTION: OptionInfo = typer.Option(
    None, "--accounts", help="Optional JSON list of known account names", dir_okay=False
)
GENERATION_OPTION: OptionInfo = typer.Option(1, "--generation", help="Generation id of the payload")


class ScriptedPresenter:
    """Headless presenter answering every prompt with a fixed value.

    Account prompts are committed with ``account_value`` (canceled when
    ``None``); property prompts apply ``property_value`` when given.
    """

    def __init__(
        self,
        controller: ReviewController,
        *,
        account_value: str | None = None,
        property_value: str | None = None,
    ) -> None:
        self._controller = controller
        self._account_value = account_value
        self._property_value = property_value
        self.accepted: list[tuple[int, Any]] = []

    def scroll_to_candidate(self, index: int) -> None:
        _logger.debug("scroll to candidate %d", index)

    def open_account_input(self, initial: str, suggestions: Sequence[str]) -> None:
        if self._account_value is None:
            self._controller.dispatch(CancelAccountEdit())
        else:
            self._controller.dispatch(CommitAccountEdit(self._account_value))

    def close_account_input(self) -> None:
        return None

    def start_property_edit(
        self, candidate_index: int, action: PropertyAction, properties: TransactionProperties
    ) -> None:
        if self._property_value is None:
            return
        self._controller.dispatch(
            ChangeProperties(
                candidate_index,
                apply_property_edit(properties, action, self._property_value),
                generation=self._controller.state.generation,
            )
        )

    def post_accept(self, candidate_index: int, payload: Any) -> None:
        self.accepted.append((candidate_index, payload))


def _load_controller(
    controller: ReviewController,
    candidates_path: Path,
    accounts_path: Path | None,
    generation: int,
) -> int:
    """Feed the inbound files into ``controller``; returns an exit status."""

    try:
        if accounts_path is not None:
            controller.receive_accounts(load_accounts(accounts_path))
        payload = load_candidates_payload(candidates_path)
        controller.receive_candidates(payload, generation=generation)
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename}", file=sys.stderr)
        return 1
    except PermissionError as e:
        print(f"Error: Permission denied: {e.filename}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: Failed to parse JSON: {e}", file=sys.stderr)
        return 1
    except (ValidationError, ValueError) as e:
        print(f"Error: Invalid payload: {e}", file=sys.stderr)
        return 1
    return 0


@app.command("replay")
def replay_cmd(
    candidates: Path = CANDIDATES_OPTION,
    keys: str = typer.Option(
        ..., "--keys", help="Whitespace-separated key names, e.g. 'ArrowDown 2 Enter'"
    ),
    accounts: Path | None = ACCOUNTS_OPTION,
    generation: int = GENERATION_OPTION,
    account_value: str | None = typer.Option(
        None, "--account-value", help="Value entered whenever an account prompt opens"
    ),
    property_value: str | None = typer.Option(
        None, "--property-value", help="Value entered whenever a tag/link/narration prompt opens"
    ),
) -> None:
    """Replay key presses headlessly and print outbound messages as JSON lines."""

    controller = ReviewController(JsonLinesChannel(sys.stdout))
    controller.set_presenter(
        ScriptedPresenter(controller, account_value=account_value, property_value=property_value)
    )
    status = _load_controller(controller, candidates, accounts, generation)
    if status:
        raise typer.Exit(status)

    dispatcher = KeyboardDispatcher(controller)
    for key in keys.split():
        if not dispatcher.handle(KeyEvent(key)):
            _logger.info("key %r is not bound", key)


@app.command("review")
def review_cmd(
    candidates: Path = CANDIDATES_OPTION,
    accounts: Path | None = ACCOUNTS_OPTION,
    generation: int = GENERATION_OPTION,
    outbox: Path | None = typer.Option(
        None,
        "--outbox",
        help=(
            "JSON-lines file receiving outbound messages"
            f" (env {_OUTBOX_ENV}, default ./outbox.jsonl)"
        ),
    ),
) -> None:
    """Interactive full-screen review."""

    # Deferred import keeps headless commands free of terminal setup.
    from .terminal_app import run_review

    outbox_path = outbox or Path(os.getenv(_OUTBOX_ENV) or "outbox.jsonl")
    try:
        stream = open(outbox_path, "a", encoding="utf-8")
    except OSError as e:
        print(f"Error: cannot open outbox '{outbox_path}': {e}", file=sys.stderr)
        raise typer.Exit(1) from e

    with stream:
        controller = ReviewController(JsonLinesChannel(stream))
        status = _load_controller(controller, candidates, accounts, generation)
        if status:
            raise typer.Exit(status)
        run_review(controller)


@app.command("keys")
def keys_cmd() -> None:
    """Print the keyboard shortcuts."""

    for key, description in describe_key_bindings():
        typer.echo(f"{key:<10} {description}")


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level (falls back to CANDIDATE_REVIEW_LOG_LEVEL, then INFO)"
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    try:
        configure_logging(log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level") from e


def main() -> None:  # pragma: no cover - console script entry point
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
