import asyncio

import pytest

from cardgame.barrier import Barrier


def test_rejects_zero_parties():
    with pytest.raises(ValueError):
        Barrier(0)


@pytest.mark.asyncio
async def test_single_party_passes_immediately():
    barrier = Barrier(1)
    await asyncio.wait_for(barrier.wait(), timeout=1)
    assert barrier.phase == 1
    assert barrier.waiting == 0


@pytest.mark.asyncio
async def test_first_waiter_blocks_until_second_arrives():
    barrier = Barrier(2)
    first = asyncio.create_task(barrier.wait())
    await asyncio.sleep(0.01)
    assert not first.done()
    assert barrier.waiting == 1
    assert barrier.phase == 0

    await asyncio.wait_for(barrier.wait(), timeout=1)
    await asyncio.wait_for(first, timeout=1)
    assert first.done()
    assert barrier.phase == 1
    assert barrier.waiting == 0


@pytest.mark.asyncio
async def test_lone_waiter_times_out():
    barrier = Barrier(2)
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(barrier.wait(), timeout=0.05)


@pytest.mark.asyncio
async def test_barrier_is_reusable_across_rounds():
    barrier = Barrier(2)
    order = []

    async def party(name):
        for round_number in range(3):
            order.append((name, round_number))
            await barrier.wait()

    await asyncio.wait_for(asyncio.gather(party("a"), party("b")), timeout=1)
    assert barrier.phase == 3
    # Nobody starts round n+1 before both have reached round n.
    rounds = [round_number for _, round_number in order]
    assert rounds == sorted(rounds)


@pytest.mark.asyncio
async def test_many_parties_all_released():
    barrier = Barrier(5)
    await asyncio.wait_for(asyncio.gather(*(barrier.wait() for _ in range(5))), timeout=1)
    assert barrier.phase == 1
    assert barrier.expected_count == 5