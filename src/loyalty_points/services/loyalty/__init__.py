from .points_service import (
    MEMBERSHIP_RENEWED_POINTS,
    AddPointsEvent,
    AddPointsRequest,
    AddPointsResponse,
    InStorePurchase,
    LoyaltyPointsService,
    ManualAddition,
    MembershipRenewed,
    OnlinePurchase,
    create_event,
    delta_points,
    event_reason,
    months_since,
)
from .sql_store import SqlLoyaltyStore
from .store import InMemoryLoyaltyStore, LoyaltyStore

__all__ = [
    "AddPointsEvent",
    "AddPointsRequest",
    "AddPointsResponse",
    "InMemoryLoyaltyStore",
    "InStorePurchase",
    "LoyaltyPointsService",
    "LoyaltyStore",
    "MEMBERSHIP_RENEWED_POINTS",
    "ManualAddition",
    "MembershipRenewed",
    "OnlinePurchase",
    "SqlLoyaltyStore",
    "create_event",
    "delta_points",
    "event_reason",
    "months_since",
]
