"""Loyalty domain helpers."""

from .errors import (  # noqa: F401
    AdapterError,
    DirectoryAdapterError,
    InvalidStateError,
    LoyaltyError,
    MemberNotFoundError,
    NegativePointsTotalError,
    StoreAdapterError,
)
from .loyalty import (  # noqa: F401
    Loyalty,
    LoyaltyEvent,
    Member,
    Tier,
    next_points_total,
    tier_for_months,
)
