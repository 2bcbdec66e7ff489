"""Membership differ.

Turns two versions of a project's team into the discrete added/removed
deltas that become ``member_added`` / ``member_removed`` activity events.
"""

from collections.abc import Iterable

from pydantic import BaseModel, Field


class MembershipDiff(BaseModel):
    """Delta between two member-ID sets."""

    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.removed


def dedupe_ids(ids: Iterable[str] | None) -> list[str]:
    """Drop repeated IDs, keeping first-seen order."""
    return list(dict.fromkeys(ids or ()))


def diff_members(
    previous_ids: Iterable[str] | None,
    next_ids: Iterable[str] | None,
) -> MembershipDiff:
    """Compute which members were added and removed.

    Both inputs are treated as sets. ``added`` follows the order of
    ``next_ids`` and ``removed`` the order of ``previous_ids``.

    Examples:
        >>> diff_members(["u1", "u2"], ["u2", "u3", "u3"])
        MembershipDiff(added=['u3'], removed=['u1'])
    """
    previous = dedupe_ids(previous_ids)
    upcoming = dedupe_ids(next_ids)
    previous_set = set(previous)
    upcoming_set = set(upcoming)

    return MembershipDiff(
        added=[uid for uid in upcoming if uid not in previous_set],
        removed=[uid for uid in previous if uid not in upcoming_set],
    )
