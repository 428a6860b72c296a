"""Service layer for awarding loyalty points.

``LoyaltyPointsService.add_points`` is the single write operation: it looks the
member up in the directory, derives their tier, prices the incoming event and
appends it to the member's ledger.

The balance read and the append are separate store calls; other writers may
interleave between them. Deltas never depend on the balance and the store
re-checks the non-negative rule inside its atomic append. ``old_loyalty_points``
in the response is the balance this call observed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union
from uuid import UUID, uuid4

from loguru import logger

from loyalty_points.domain.errors import (
    DirectoryAdapterError,
    InvalidStateError,
    LoyaltyError,
    StoreAdapterError,
)
from loyalty_points.domain.loyalty import Loyalty, LoyaltyEvent, Member, Tier
from loyalty_points.domain.time import Clock, utc_now
from loyalty_points.observability.loyalty import LoyaltyObservabilityStore, get_loyalty_store
from loyalty_points.services.members.directory import MemberDirectory

from .store import LoyaltyStore

MEMBERSHIP_RENEWED_POINTS = 290


@dataclass(frozen=True, slots=True)
class MembershipRenewed:
    """The member continued their membership for another period."""

    event_type = "membership_renewed"


@dataclass(frozen=True, slots=True)
class InStorePurchase:
    """The member made a purchase in a physical store."""

    purchase_amount: float

    event_type = "in_store_purchase"

    def __post_init__(self) -> None:
        _require_finite_amount(self.purchase_amount)


@dataclass(frozen=True, slots=True)
class OnlinePurchase:
    """The member made a purchase online."""

    purchase_amount: float

    event_type = "online_purchase"

    def __post_init__(self) -> None:
        _require_finite_amount(self.purchase_amount)


@dataclass(frozen=True, slots=True)
class ManualAddition:
    """Points granted by hand, e.g. by support staff."""

    loyalty_points: int
    reason: Optional[str] = None

    event_type = "manual"

    def __post_init__(self) -> None:
        if self.loyalty_points < 0:
            raise ValueError("loyalty_points must be non-negative")


AddPointsEvent = Union[MembershipRenewed, InStorePurchase, OnlinePurchase, ManualAddition]


def _require_finite_amount(amount: float) -> None:
    if not math.isfinite(amount):
        raise ValueError("purchase_amount must be a finite number")


@dataclass(frozen=True, slots=True)
class AddPointsRequest:
    member_id: UUID
    event: AddPointsEvent


@dataclass(frozen=True, slots=True)
class AddPointsResponse:
    member_id: UUID
    tier: Tier
    old_loyalty_points: int  # balance observed before the append
    new_loyalty_points: int


def event_reason(event: AddPointsEvent) -> str:
    if isinstance(event, MembershipRenewed):
        return "Membership renewed"
    if isinstance(event, InStorePurchase):
        return "In-store purchase"
    if isinstance(event, OnlinePurchase):
        return "Online purchase"
    if isinstance(event, ManualAddition):
        if event.reason:
            return event.reason
        return "Manual addition"
    raise TypeError(f"Unsupported loyalty event {type(event).__name__}")


def delta_points(tier: Tier, event: AddPointsEvent) -> int:
    """Points an event is worth for a member of ``tier``.

    Purchase amounts are truncated toward zero before applying the tier ratio.
    """

    if isinstance(event, MembershipRenewed):
        return MEMBERSHIP_RENEWED_POINTS
    if isinstance(event, (InStorePurchase, OnlinePurchase)):
        return int(event.purchase_amount) * tier.ratio()
    if isinstance(event, ManualAddition):
        return event.loyalty_points
    raise TypeError(f"Unsupported loyalty event {type(event).__name__}")


def create_event(tier: Tier, event: AddPointsEvent) -> LoyaltyEvent:
    return LoyaltyEvent(
        event_id=uuid4(),
        delta_points=delta_points(tier, event),
        reason=event_reason(event),
    )


def months_since(membership_since: datetime, now: datetime) -> int:
    """Calendar months counted from ``membership_since`` to ``now``.

    Day-of-month is ignored. Raises ``InvalidStateError`` on a negative count.
    """

    months = (now.year - membership_since.year) * 12 + membership_since.month - now.month
    if months < 0:
        raise InvalidStateError(f"start date is {-months} month(s) in the past")
    return months


class LoyaltyPointsService:
    """Coordinates the member directory and loyalty store to award points."""

    def __init__(
        self,
        directory: MemberDirectory,
        store: LoyaltyStore,
        *,
        clock: Clock = utc_now,
        observability: LoyaltyObservabilityStore | None = None,
    ) -> None:
        self._directory = directory
        self._store = store
        self._clock = clock
        self._observability = observability or get_loyalty_store()

    async def add_points(self, request: AddPointsRequest) -> AddPointsResponse:
        try:
            response, event = await self._add_points(request)
        except LoyaltyError as exc:
            self._observability.record_failure(exc.code)
            logger.warning(
                "loyalty.points.rejected",
                member_id=str(request.member_id),
                event_type=request.event.event_type,
                code=exc.code,
                error=str(exc),
            )
            raise

        self._observability.record_points_added(
            request.event.event_type, response.tier.value, event.delta_points
        )
        logger.info(
            "loyalty.points.added",
            member_id=str(response.member_id),
            event_id=str(event.event_id),
            event_type=request.event.event_type,
            tier=response.tier.value,
            delta_points=event.delta_points,
            old_loyalty_points=response.old_loyalty_points,
            new_loyalty_points=response.new_loyalty_points,
        )
        return response

    async def _add_points(self, request: AddPointsRequest) -> tuple[AddPointsResponse, LoyaltyEvent]:
        try:
            directory_member = await self._directory.get_member(request.member_id)
        except LoyaltyError:
            raise
        except Exception as exc:
            raise DirectoryAdapterError(str(exc) or type(exc).__name__) from exc

        membership_months = None
        if directory_member.active_member:
            membership_months = months_since(directory_member.membership_since, self._clock())

        loyalty = await self.get_loyalty(directory_member.member_id)

        member = Member(
            member_id=directory_member.member_id,
            membership_months=membership_months,
            loyalty_points=loyalty.points,
        )
        tier = member.tier()
        event = create_event(tier, request.event)

        try:
            updated = await self._store.append_event(member.member_id, event)
        except LoyaltyError:
            raise
        except Exception as exc:
            raise StoreAdapterError(str(exc) or type(exc).__name__) from exc

        response = AddPointsResponse(
            member_id=member.member_id,
            tier=tier,
            old_loyalty_points=loyalty.points,
            new_loyalty_points=updated.points,
        )
        return response, event

    async def get_loyalty(self, member_id: UUID) -> Loyalty:
        try:
            return await self._store.get_loyalty(member_id)
        except LoyaltyError:
            raise
        except Exception as exc:
            raise StoreAdapterError(str(exc) or type(exc).__name__) from exc


__all__ = [
    "AddPointsEvent",
    "AddPointsRequest",
    "AddPointsResponse",
    "InStorePurchase",
    "LoyaltyPointsService",
    "MEMBERSHIP_RENEWED_POINTS",
    "ManualAddition",
    "MembershipRenewed",
    "OnlinePurchase",
    "create_event",
    "delta_points",
    "event_reason",
    "months_since",
]
