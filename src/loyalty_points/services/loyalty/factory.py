"""Construct the loyalty service from configuration."""

from __future__ import annotations

from loguru import logger

from loyalty_points.core.settings import Settings
from loyalty_points.db.session import get_session_factory
from loyalty_points.services.members import HttpMemberDirectory, InMemoryMemberDirectory, MemberDirectory

from .points_service import LoyaltyPointsService
from .sql_store import SqlLoyaltyStore
from .store import InMemoryLoyaltyStore, LoyaltyStore


def build_member_directory(config: Settings) -> MemberDirectory:
    if config.member_directory_url:
        return HttpMemberDirectory(
            base_url=config.member_directory_url,
            api_key=config.member_directory_api_key,
            timeout_seconds=config.member_directory_timeout_seconds,
        )
    logger.warning(
        "member_directory.in_memory",
        reason="member_directory_url is not configured",
    )
    return InMemoryMemberDirectory()


def build_loyalty_store(config: Settings) -> LoyaltyStore:
    if config.loyalty_store_backend == "sql":
        return SqlLoyaltyStore(get_session_factory())
    return InMemoryLoyaltyStore(lock_timeout_seconds=config.loyalty_store_lock_timeout_seconds)


def build_loyalty_service(config: Settings) -> LoyaltyPointsService:
    return LoyaltyPointsService(build_member_directory(config), build_loyalty_store(config))


__all__ = ["build_loyalty_service", "build_loyalty_store", "build_member_directory"]
