from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

from loyalty_points.domain import (
    InvalidStateError,
    LoyaltyEvent,
    NegativePointsTotalError,
    StoreAdapterError,
)
from loyalty_points.services.loyalty import InMemoryLoyaltyStore


def _event(delta_points: int, reason: str = "") -> LoyaltyEvent:
    return LoyaltyEvent(event_id=uuid4(), delta_points=delta_points, reason=reason)


@pytest.mark.asyncio
async def test_register_retrieve(store: InMemoryLoyaltyStore) -> None:
    member_id = uuid4()

    stored = await store.append_event(member_id, _event(5))
    assert stored.member_id == member_id
    assert stored.points == 5
    assert len(stored.events) == 1

    first = await store.get_loyalty(member_id)
    second = await store.get_loyalty(member_id)
    assert first == second
    assert first.points == 5


@pytest.mark.asyncio
async def test_unknown_member_reads_empty_loyalty(store: InMemoryLoyaltyStore) -> None:
    member_id = uuid4()

    loyalty = await store.get_loyalty(member_id)

    assert loyalty.member_id == member_id
    assert loyalty.points == 0
    assert loyalty.events == ()


@pytest.mark.asyncio
async def test_negative_points_empty(store: InMemoryLoyaltyStore) -> None:
    member_id = uuid4()

    with pytest.raises(NegativePointsTotalError) as excinfo:
        await store.append_event(member_id, _event(-5))

    assert excinfo.value.current_points == 0
    assert excinfo.value.delta_points == -5
    loyalty = await store.get_loyalty(member_id)
    assert loyalty.points == 0
    assert loyalty.events == ()


@pytest.mark.asyncio
async def test_negative_points_exists(store: InMemoryLoyaltyStore) -> None:
    member_id = uuid4()
    await store.append_event(member_id, _event(5))
    # Removing the current number of points is allowed
    await store.append_event(member_id, _event(-5))

    with pytest.raises(NegativePointsTotalError) as excinfo:
        await store.append_event(member_id, _event(-1))

    assert excinfo.value.current_points == 0
    assert excinfo.value.delta_points == -1
    loyalty = await store.get_loyalty(member_id)
    assert loyalty.points == 0
    assert [event.delta_points for event in loyalty.events] == [5, -5]


@pytest.mark.asyncio
async def test_returned_loyalty_is_detached(store: InMemoryLoyaltyStore) -> None:
    member_id = uuid4()
    before = await store.append_event(member_id, _event(5))

    await store.append_event(member_id, _event(7))

    assert before.points == 5
    assert len(before.events) == 1
    assert (await store.get_loyalty(member_id)).points == 12


@pytest.mark.asyncio
async def test_duplicate_event_id_is_rejected(store: InMemoryLoyaltyStore) -> None:
    member_id = uuid4()
    event = _event(5)
    await store.append_event(member_id, event)

    with pytest.raises(InvalidStateError):
        await store.append_event(member_id, event)

    loyalty = await store.get_loyalty(member_id)
    assert loyalty.points == 5
    assert len(loyalty.events) == 1


@pytest.mark.asyncio
async def test_concurrent_withdrawals_never_overdraw(store: InMemoryLoyaltyStore) -> None:
    member_id = uuid4()
    await store.append_event(member_id, _event(10))

    results = await asyncio.gather(
        *(store.append_event(member_id, _event(-1)) for _ in range(25)),
        return_exceptions=True,
    )

    rejected = [result for result in results if isinstance(result, NegativePointsTotalError)]
    assert len(rejected) == 15
    loyalty = await store.get_loyalty(member_id)
    assert loyalty.points == 0
    assert len(loyalty.events) == 11


@pytest.mark.asyncio
async def test_lock_timeout_surfaces_as_adapter_error() -> None:
    store = InMemoryLoyaltyStore(lock_timeout_seconds=0.01)
    store._lock.acquire()
    try:
        with pytest.raises(StoreAdapterError) as excinfo:
            await store.get_loyalty(uuid4())
    finally:
        store._lock.release()

    assert "loyalty store lock" in excinfo.value.description
    assert excinfo.value.code == "store_adapter_failure"


@pytest.mark.asyncio
async def test_withdrawals_from_worker_threads_never_overdraw(store: InMemoryLoyaltyStore) -> None:
    member_id = uuid4()
    await store.append_event(member_id, _event(10))

    def withdraw() -> None:
        asyncio.run(store.append_event(member_id, _event(-1)))

    results = await asyncio.gather(
        *(asyncio.to_thread(withdraw) for _ in range(25)),
        return_exceptions=True,
    )

    rejected = [result for result in results if isinstance(result, NegativePointsTotalError)]
    assert len(rejected) == 15
    assert not [result for result in results if isinstance(result, StoreAdapterError)]
    loyalty = await store.get_loyalty(member_id)
    assert loyalty.points == 0
    assert len(loyalty.events) == 11
