"""Loyalty store port and the in-process reference adapter."""

from __future__ import annotations

from contextlib import contextmanager
from threading import Lock
from typing import Dict, Iterator, Protocol
from uuid import UUID

from loguru import logger

from loyalty_points.core.settings import settings
from loyalty_points.domain.errors import StoreAdapterError
from loyalty_points.domain.loyalty import Loyalty, LoyaltyEvent


class LoyaltyStore(Protocol):
    """Persistence port for member point ledgers."""

    async def get_loyalty(self, member_id: UUID) -> Loyalty:
        """Return the member's ledger, or an empty one when none is recorded."""

    async def append_event(self, member_id: UUID, event: LoyaltyEvent) -> Loyalty:
        """Atomically append ``event`` and return the post-append ledger.

        Raises ``NegativePointsTotalError`` without appending when the event
        would drive the total below zero.
        """


class InMemoryLoyaltyStore:
    """Process-local loyalty store guarded by a single mutex.

    The mutex is a thread lock so the store can be shared across threads. The
    critical sections never await, so holders release it promptly; a waiter on
    the event loop thread blocks for at most ``lock_timeout_seconds``.
    """

    def __init__(self, *, lock_timeout_seconds: float | None = None) -> None:
        self._lock = Lock()
        self._lock_timeout_seconds = (
            lock_timeout_seconds
            if lock_timeout_seconds is not None
            else settings.loyalty_store_lock_timeout_seconds
        )
        self._loyalties: Dict[UUID, Loyalty] = {}

    @contextmanager
    def _locked(self) -> Iterator[Dict[UUID, Loyalty]]:
        if not self._lock.acquire(timeout=self._lock_timeout_seconds):
            logger.error(
                "loyalty.store.lock_timeout",
                timeout_seconds=self._lock_timeout_seconds,
            )
            raise StoreAdapterError(
                f"timed out after {self._lock_timeout_seconds}s waiting for the loyalty store lock"
            )
        try:
            yield self._loyalties
        finally:
            self._lock.release()

    async def get_loyalty(self, member_id: UUID) -> Loyalty:
        with self._locked() as loyalties:
            return loyalties.get(member_id) or Loyalty.empty(member_id)

    async def append_event(self, member_id: UUID, event: LoyaltyEvent) -> Loyalty:
        with self._locked() as loyalties:
            current = loyalties.get(member_id) or Loyalty.empty(member_id)
            updated = current.with_event(event)
            loyalties[member_id] = updated
            return updated


__all__ = ["InMemoryLoyaltyStore", "LoyaltyStore"]
