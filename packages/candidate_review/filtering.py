"""Derive the visible subset of candidates from the disabled used-transaction set.

A candidate at global index ``g`` is visible iff none of its used transaction
ids is disabled. Global indices are never renumbered; the filtered index is a
dense ``0..k-1`` position within the visible subset.

The view is always recomputed from scratch from ``(candidates, disabled)`` and
never patched in place.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import AbstractSet

from .models import Candidate


@dataclass(frozen=True, slots=True)
class FilteredView:
    """Ordered visible global indices plus the global→filtered index mapping."""

    visible: tuple[int, ...] = ()
    global_to_filtered: Mapping[int, int] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __len__(self) -> int:
        return len(self.visible)

    def position_of(self, global_index: int) -> int | None:
        return self.global_to_filtered.get(global_index)

    def is_visible(self, global_index: int) -> bool:
        return global_index in self.global_to_filtered

    def first(self) -> int | None:
        return self.visible[0] if self.visible else None


def compute_filtered_view(
    candidates: Sequence[Candidate], disabled: AbstractSet[int]
) -> FilteredView:
    visible: list[int] = []
    mapping: dict[int, int] = {}
    for g, candidate in enumerate(candidates):
        if not candidate.used_transaction_ids.isdisjoint(disabled):
            continue
        mapping[g] = len(visible)
        visible.append(g)
    return FilteredView(visible=tuple(visible), global_to_filtered=MappingProxyType(mapping))


def toggle_used_transaction(
    disabled: AbstractSet[int], used_id: int, enabled: bool
) -> frozenset[int]:
    """Return a new disabled set with ``used_id`` enabled (removed) or disabled (added)."""

    if enabled:
        return frozenset(disabled) - {used_id}
    return frozenset(disabled) | {used_id}


__all__ = ["FilteredView", "compute_filtered_view", "toggle_used_transaction"]
