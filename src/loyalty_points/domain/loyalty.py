"""Loyalty domain values: members, tiers, and the point ledger.

Everything in this module is pure. Stores own ``Loyalty`` records; the values
are frozen so a record handed out by a store never aliases the store's state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple
from uuid import UUID

from .errors import InvalidStateError, NegativePointsTotalError


class Tier(str, Enum):
    """Member classification by continuous months of active membership."""

    NONE = "none"
    BASIC = "basic"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"

    def ratio(self) -> int:
        """Points earned per whole currency unit spent."""
        return _TIER_RATIOS[self]


_TIER_RATIOS = {
    Tier.NONE: 0,
    Tier.BASIC: 10,
    Tier.SILVER: 12,
    Tier.GOLD: 15,
    Tier.PLATINUM: 20,
}


def tier_for_months(membership_months: Optional[int]) -> Tier:
    if membership_months is None:
        return Tier.NONE
    if membership_months < 12:
        return Tier.BASIC
    if membership_months < 24:
        return Tier.SILVER
    if membership_months < 36:
        return Tier.GOLD
    return Tier.PLATINUM


@dataclass(frozen=True, slots=True)
class Member:
    """Per-request view of a member, combining directory and ledger data."""

    member_id: UUID
    membership_months: Optional[int]  # None for members who are no longer active
    loyalty_points: int

    def __post_init__(self) -> None:
        if self.membership_months is not None and self.membership_months < 0:
            raise ValueError("membership_months must be non-negative")
        if self.loyalty_points < 0:
            raise ValueError("loyalty_points must be non-negative")

    def tier(self) -> Tier:
        return tier_for_months(self.membership_months)


@dataclass(frozen=True, slots=True)
class LoyaltyEvent:
    """Signed adjustment to a member's point balance.

    The reason is free text rather than an enum since the set of reasons
    evolves over time.
    """

    event_id: UUID
    delta_points: int
    reason: str


def next_points_total(current_points: int, delta_points: int) -> int:
    """Return the balance after applying ``delta_points``.

    Raises ``NegativePointsTotalError`` when the balance would drop below zero.
    """

    new_total = current_points + delta_points
    if new_total < 0:
        raise NegativePointsTotalError(current_points=current_points, delta_points=delta_points)
    return new_total


@dataclass(frozen=True, slots=True)
class Loyalty:
    """Running point total and ordered event ledger for one member."""

    member_id: UUID
    points: int = 0
    events: Tuple[LoyaltyEvent, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls, member_id: UUID) -> "Loyalty":
        return cls(member_id=member_id)

    def with_event(self, event: LoyaltyEvent) -> "Loyalty":
        """Return the ledger with ``event`` appended to the tail."""

        if any(existing.event_id == event.event_id for existing in self.events):
            raise InvalidStateError(
                f"event {event.event_id} is already recorded for member {self.member_id}"
            )
        new_total = next_points_total(self.points, event.delta_points)
        return Loyalty(
            member_id=self.member_id,
            points=new_total,
            events=self.events + (event,),
        )


__all__ = [
    "Loyalty",
    "LoyaltyEvent",
    "Member",
    "Tier",
    "next_points_total",
    "tier_for_months",
]
