"""Selection and hover over the filtered candidate list.

All functions are pure: they take the current ``Selection`` plus the
``FilteredView`` and return a new ``Selection``. Selection is tracked by
global index and always re-validated against the filtered list; a selection
pointing at a hidden or missing candidate is corrected to the first visible
candidate.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .filtering import FilteredView


@dataclass(frozen=True, slots=True)
class Selection:
    selected: int = 0
    hover: int | None = None


def select_relative(selection: Selection, view: FilteredView, amount: int) -> Selection:
    """Move ``amount`` steps through the filtered list, wrapping around.

    No-op when nothing is visible. ``k`` successive calls in one direction
    return to the starting candidate.
    """

    k = len(view)
    if k == 0:
        return selection
    pos = view.position_of(selection.selected)
    if pos is None:
        return replace(selection, selected=view.visible[0])
    return replace(selection, selected=view.visible[(pos + amount + k) % k])


def select(selection: Selection, view: FilteredView, global_index: int) -> Selection:
    if not view.is_visible(global_index):
        return selection
    return replace(selection, selected=global_index)


def hover(selection: Selection, count: int, global_index: int, is_on: bool) -> Selection:
    """Set or clear the advisory hover index; never touches ``selected``."""

    if not is_on:
        return replace(selection, hover=None)
    if not 0 <= global_index < count:
        return selection
    return replace(selection, hover=global_index)


def normalize_selection(selection: Selection, view: FilteredView, count: int) -> Selection:
    selected = selection.selected
    if not view.is_visible(selected):
        first = view.first()
        selected = first if first is not None else 0
    hover_index = selection.hover
    if hover_index is not None and not 0 <= hover_index < count:
        hover_index = None
    if selected == selection.selected and hover_index == selection.hover:
        return selection
    return Selection(selected=selected, hover=hover_index)


def reset_selection(view: FilteredView) -> Selection:
    """Selection for a fresh generation: global index 0, no hover."""

    return normalize_selection(Selection(), view, len(view.visible))


__all__ = [
    "Selection",
    "hover",
    "normalize_selection",
    "reset_selection",
    "select",
    "select_relative",
]
