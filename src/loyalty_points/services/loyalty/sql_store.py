"""SQLAlchemy-backed loyalty store."""

from __future__ import annotations

import asyncio
from typing import MutableMapping
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from loyalty_points.domain.errors import InvalidStateError, StoreAdapterError
from loyalty_points.domain.loyalty import Loyalty, LoyaltyEvent, next_points_total
from loyalty_points.models.loyalty import LoyaltyAccount, LoyaltyEventRecord


class SqlLoyaltyStore:
    """Persists loyalty accounts and events; one transaction per append.

    Appends for a member are serialised in-process by a per-member lock held
    for the whole transaction. ``SELECT ... FOR UPDATE`` extends that across
    processes on backends that support row locks; SQLite ignores it.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._locks: MutableMapping[UUID, asyncio.Lock] = {}

    async def get_loyalty(self, member_id: UUID) -> Loyalty:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    account = await session.get(LoyaltyAccount, member_id)
                    if account is None:
                        return Loyalty.empty(member_id)
                    return await self._load(session, account)
        except SQLAlchemyError as exc:
            logger.exception("loyalty.store.sql.read_failed", member_id=str(member_id))
            raise StoreAdapterError(f"failed to read loyalty for member {member_id}: {exc}") from exc

    async def append_event(self, member_id: UUID, event: LoyaltyEvent) -> Loyalty:
        lock = self._locks.setdefault(member_id, asyncio.Lock())
        async with lock:
            try:
                return await self._append(member_id, event)
            except SQLAlchemyError as exc:
                logger.exception("loyalty.store.sql.append_failed", member_id=str(member_id))
                raise StoreAdapterError(
                    f"failed to append loyalty event for member {member_id}: {exc}"
                ) from exc

    async def _append(self, member_id: UUID, event: LoyaltyEvent) -> Loyalty:
        async with self._session_factory() as session:
            async with session.begin():
                stmt = (
                    select(LoyaltyAccount)
                    .where(LoyaltyAccount.member_id == member_id)
                    .with_for_update()
                )
                account = (await session.execute(stmt)).scalar_one_or_none()

                current_points = account.points if account is not None else 0
                new_total = next_points_total(current_points, event.delta_points)

                if await session.get(LoyaltyEventRecord, (member_id, event.event_id)) is not None:
                    raise InvalidStateError(
                        f"event {event.event_id} is already recorded for member {member_id}"
                    )

                if account is None:
                    account = LoyaltyAccount(member_id=member_id, points=0, event_count=0)
                    session.add(account)
                    await session.flush()

                session.add(
                    LoyaltyEventRecord(
                        member_id=member_id,
                        event_id=event.event_id,
                        sequence=account.event_count,
                        delta_points=event.delta_points,
                        reason=event.reason,
                    )
                )
                account.points = new_total
                account.event_count = account.event_count + 1
                await session.flush()
                return await self._load(session, account)

    @staticmethod
    async def _load(session: AsyncSession, account: LoyaltyAccount) -> Loyalty:
        stmt = (
            select(LoyaltyEventRecord)
            .where(LoyaltyEventRecord.member_id == account.member_id)
            .order_by(LoyaltyEventRecord.sequence.asc())
        )
        records = (await session.execute(stmt)).scalars().all()
        return Loyalty(
            member_id=account.member_id,
            points=account.points,
            events=tuple(
                LoyaltyEvent(
                    event_id=record.event_id,
                    delta_points=record.delta_points,
                    reason=record.reason,
                )
                for record in records
            ),
        )


__all__ = ["SqlLoyaltyStore"]
