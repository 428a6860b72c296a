"""API endpoints for awarding loyalty points and reading member ledgers."""

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from loyalty_points.api.dependencies.loyalty import get_loyalty_service
from loyalty_points.api.dependencies.security import require_operator_api_key
from loyalty_points.domain.errors import (
    AdapterError,
    InvalidStateError,
    LoyaltyError,
    MemberNotFoundError,
    NegativePointsTotalError,
)
from loyalty_points.observability.loyalty import get_loyalty_store
from loyalty_points.services.loyalty import (
    AddPointsEvent,
    AddPointsRequest,
    InStorePurchase,
    LoyaltyPointsService,
    ManualAddition,
    MembershipRenewed,
    OnlinePurchase,
)


router = APIRouter(prefix="/loyalty", tags=["loyalty"])


class MembershipRenewedPayload(BaseModel):
    type: Literal["membership_renewed"]

    def to_event(self) -> AddPointsEvent:
        return MembershipRenewed()


class InStorePurchasePayload(BaseModel):
    type: Literal["in_store_purchase"]
    purchaseAmount: float = Field(..., allow_inf_nan=False, description="Purchase total in currency units")

    def to_event(self) -> AddPointsEvent:
        return InStorePurchase(purchase_amount=self.purchaseAmount)


class OnlinePurchasePayload(BaseModel):
    type: Literal["online_purchase"]
    purchaseAmount: float = Field(..., allow_inf_nan=False, description="Purchase total in currency units")

    def to_event(self) -> AddPointsEvent:
        return OnlinePurchase(purchase_amount=self.purchaseAmount)


class ManualAdditionPayload(BaseModel):
    type: Literal["manual"]
    loyaltyPoints: int = Field(..., ge=0, description="Points to add")
    reason: Optional[str] = Field(None, description="Reason recorded on the ledger entry")

    def to_event(self) -> AddPointsEvent:
        return ManualAddition(loyalty_points=self.loyaltyPoints, reason=self.reason)


AddPointsEventPayload = Annotated[
    Union[
        MembershipRenewedPayload,
        InStorePurchasePayload,
        OnlinePurchasePayload,
        ManualAdditionPayload,
    ],
    Field(discriminator="type"),
]


class AddPointsPayload(BaseModel):
    event: AddPointsEventPayload


class AddPointsResponseModel(BaseModel):
    memberId: UUID
    tier: str
    oldLoyaltyPoints: int
    newLoyaltyPoints: int


class LoyaltyEventResponse(BaseModel):
    eventId: UUID
    deltaPoints: int
    reason: str


class LoyaltyLedgerResponse(BaseModel):
    memberId: UUID
    points: int
    events: List[LoyaltyEventResponse]


def _http_error(error: LoyaltyError) -> HTTPException:
    if isinstance(error, MemberNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, NegativePointsTotalError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(error, InvalidStateError):
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(error, AdapterError):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=status_code, detail={"code": error.code, "message": str(error)})


@router.post(
    "/members/{member_id}/points",
    response_model=AddPointsResponseModel,
    dependencies=[Depends(require_operator_api_key)],
)
async def add_member_points(
    member_id: UUID,
    payload: AddPointsPayload,
    service: LoyaltyPointsService = Depends(get_loyalty_service),
) -> AddPointsResponseModel:
    request = AddPointsRequest(member_id=member_id, event=payload.event.to_event())
    try:
        response = await service.add_points(request)
    except LoyaltyError as error:
        raise _http_error(error) from error

    return AddPointsResponseModel(
        memberId=response.member_id,
        tier=response.tier.value,
        oldLoyaltyPoints=response.old_loyalty_points,
        newLoyaltyPoints=response.new_loyalty_points,
    )


@router.get("/members/{member_id}", response_model=LoyaltyLedgerResponse)
async def get_member_ledger(
    member_id: UUID,
    service: LoyaltyPointsService = Depends(get_loyalty_service),
) -> LoyaltyLedgerResponse:
    try:
        loyalty = await service.get_loyalty(member_id)
    except LoyaltyError as error:
        raise _http_error(error) from error

    return LoyaltyLedgerResponse(
        memberId=loyalty.member_id,
        points=loyalty.points,
        events=[
            LoyaltyEventResponse(eventId=event.event_id, deltaPoints=event.delta_points, reason=event.reason)
            for event in loyalty.events
        ],
    )


@router.get("/observability", dependencies=[Depends(require_operator_api_key)])
async def get_loyalty_observability() -> dict[str, Any]:
    return get_loyalty_store().snapshot().as_dict()
