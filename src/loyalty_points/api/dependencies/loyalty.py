"""Request-scoped access to the application's loyalty service."""

from __future__ import annotations

from fastapi import Request

from loyalty_points.services.loyalty import LoyaltyPointsService


def get_loyalty_service(request: Request) -> LoyaltyPointsService:
    return request.app.state.loyalty_service
