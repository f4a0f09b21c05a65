"""A reusable rendezvous point for a fixed number of tasks."""

from __future__ import annotations

import asyncio


class Barrier:
    """Blocks each caller of :meth:`wait` until ``expected_count`` callers have arrived.

    Once the last caller arrives, every waiter is released and the barrier
    resets itself for the next round.
    """

    def __init__(self, expected_count: int) -> None:
        if expected_count < 1:
            raise ValueError(f"a barrier needs at least one party, got {expected_count}")
        self._expected_count = expected_count
        self._count = 0
        self._phase = 0
        self._condition = asyncio.Condition()

    @property
    def expected_count(self) -> int:
        return self._expected_count

    @property
    def phase(self) -> int:
        """Number of rounds that have completed so far."""
        return self._phase

    @property
    def waiting(self) -> int:
        """Number of callers currently blocked in the present round."""
        return self._count

    async def wait(self) -> None:
        async with self._condition:
            phase = self._phase
            self._count += 1
            if self._count == self._expected_count:
                self._count = 0
                self._phase += 1
                self._condition.notify_all()
                return
            await self._condition.wait_for(lambda: self._phase != phase)