"""Pure merge/remove computations over decoded favorites lists.

Nothing here talks to the store. Each ``plan_*`` function takes the decoded
list currently stored and returns the outcome together with the
:class:`WritePlan` the synchronizer must apply.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from storefront_favorites.services.favorites.codec import dedupe
from storefront_favorites.services.favorites.errors import (
    FavoritesValidationError,
    HandleNotFoundError,
    NothingToRemoveError,
)


class WriteAction(str, Enum):
    """Mutation the synchronizer issues after planning."""

    SET = "set"
    DELETE = "delete"


@dataclass(frozen=True)
class WritePlan:
    action: WriteAction
    handles: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MergeOutcome:
    """Result of merging incoming candidates into the stored list."""

    current: list[str]
    incoming: list[str]
    merged: list[str]

    @property
    def net_new(self) -> int:
        """Number of handles that were not stored before."""

        return len(self.merged) - len(dedupe(self.current))


@dataclass(frozen=True)
class RemovalOutcome:
    """Result of removing one handle from the stored list."""

    handle: str
    previous: list[str]
    remaining: list[str]

    @property
    def deleted(self) -> bool:
        return not self.remaining


def merge_handles(current: list[str], incoming: list[str]) -> MergeOutcome:
    """Append ``incoming`` to ``current`` and collapse duplicates."""

    return MergeOutcome(
        current=list(current),
        incoming=list(incoming),
        merged=dedupe([*current, *incoming]),
    )


def remove_handle(current: list[str], handle: str) -> RemovalOutcome:
    """Drop every exact occurrence of ``handle`` from ``current``.

    Raises :class:`NothingToRemoveError` when the list is empty and
    :class:`HandleNotFoundError` (carrying the current list) when ``handle``
    is not stored.
    """

    if not current:
        raise NothingToRemoveError(
            "No favorite products found for this customer",
            context={"productHandle": handle},
        )
    if handle not in current:
        raise HandleNotFoundError(
            "Product handle not found in favorites",
            context={"productHandle": handle, "currentFavorites": list(current)},
        )

    remaining = [item for item in current if item != handle]
    return RemovalOutcome(handle=handle, previous=list(current), remaining=remaining)


def plan_add(
    current: list[str], incoming: list[str]
) -> tuple[MergeOutcome, WritePlan]:
    """Plan the upsert for an ADD request."""

    outcome = merge_handles(current, incoming)
    if not outcome.merged:
        raise FavoritesValidationError(
            "No valid product handles found after processing",
            context={"processedValues": list(incoming)},
        )
    return outcome, WritePlan(action=WriteAction.SET, handles=outcome.merged)


def plan_remove(current: list[str], handle: str) -> tuple[RemovalOutcome, WritePlan]:
    """Plan the write for a REMOVE request; an emptied list deletes the field."""

    outcome = remove_handle(current, handle)
    if outcome.deleted:
        return outcome, WritePlan(action=WriteAction.DELETE)
    return outcome, WritePlan(action=WriteAction.SET, handles=outcome.remaining)


__all__ = [
    "MergeOutcome",
    "RemovalOutcome",
    "WriteAction",
    "WritePlan",
    "merge_handles",
    "plan_add",
    "plan_remove",
    "remove_handle",
]
