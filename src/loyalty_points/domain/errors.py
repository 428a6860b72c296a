"""Error taxonomy shared by the loyalty core and its adapters."""

from __future__ import annotations

from uuid import UUID


class LoyaltyError(RuntimeError):
    """Base exception for loyalty point failures."""

    code = "loyalty_error"


class MemberNotFoundError(LoyaltyError):
    """Raised when the member directory does not know the requested member."""

    code = "member_not_found"

    def __init__(self, member_id: UUID) -> None:
        super().__init__(f"member {member_id} does not exist")
        self.member_id = member_id


class NegativePointsTotalError(LoyaltyError):
    """Raised when an event would drive a member's point total below zero."""

    code = "negative_points_total"

    def __init__(self, current_points: int, delta_points: int) -> None:
        super().__init__(
            f"trying to subtract too many points: {delta_points} from {current_points}"
        )
        self.current_points = current_points
        self.delta_points = delta_points


class InvalidStateError(LoyaltyError):
    """Raised when upstream data contradicts the loyalty model."""

    code = "invalid_state"


class AdapterError(LoyaltyError):
    """Opaque failure from a concrete adapter (transport, configuration, locking).

    Only a plain-text description crosses the port boundary; the original
    exception, when there is one, is chained as ``__cause__``.
    """

    code = "adapter_failure"

    def __init__(self, description: str) -> None:
        super().__init__(f"adapter error: {description}")
        self.description = description


class DirectoryAdapterError(AdapterError):
    code = "directory_adapter_failure"


class StoreAdapterError(AdapterError):
    code = "store_adapter_failure"


__all__ = [
    "AdapterError",
    "DirectoryAdapterError",
    "InvalidStateError",
    "LoyaltyError",
    "MemberNotFoundError",
    "NegativePointsTotalError",
    "StoreAdapterError",
]
