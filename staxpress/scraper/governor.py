"""Admission control for jobs and their subsection tasks."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import TypeVar

from ..exceptions import JobRejected

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Gate:
    """Bounded-concurrency gate with a synchronous fullness check."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")
        self.capacity = capacity
        self.active = 0
        self._semaphore = asyncio.Semaphore(capacity)

    def locked(self) -> bool:
        """Return ``True`` when entering would have to wait."""

        return self._semaphore.locked()

    async def __aenter__(self) -> Gate:
        await self._semaphore.acquire()
        self.active += 1
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.active -= 1
        self._semaphore.release()


class ConcurrencyGovernor:
    """Two-level limiter for scrape jobs.

    The outer ``jobs`` gate rejects new jobs outright when full. The inner
    ``tasks`` gate is shared by every running job and queues subsection
    tasks until a slot frees up.

    Args:
        job_capacity: Jobs allowed to run at once.
        task_capacity: Subsection tasks allowed at once across all jobs.
        retry_after: Delay in seconds suggested to rejected callers.
    """

    def __init__(
        self,
        job_capacity: int = 2,
        task_capacity: int = 5,
        retry_after: int = 30,
    ) -> None:
        self.jobs = Gate(job_capacity)
        self.tasks = Gate(task_capacity)
        self.retry_after = retry_after

    @asynccontextmanager
    async def admit_job(self) -> AsyncIterator[None]:
        """Hold a job slot for the duration of the block.

        Raises:
            JobRejected: When every job slot is taken. Nothing is queued.
        """

        if self.jobs.locked():
            logger.info(
                "Rejecting job: %d of %d slots busy",
                self.jobs.active,
                self.jobs.capacity,
            )
            raise JobRejected(self.retry_after)

        async with self.jobs:
            yield

    async def run_task(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` while holding a task slot."""

        async with self.tasks:
            return await awaitable
