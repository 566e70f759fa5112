from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
import logging
import threading
import time
from typing import AsyncIterator, Callable, Dict, Optional, TypeVar

from fieldops.core.exceptions import OperationTimeoutException
from fieldops.monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")


def schedule_lock_key(technician_id: str) -> str:
    return f"technician:{technician_id}:schedule"


class TechnicianLockRegistry:
    """
    One asyncio.Lock per technician, held across conflict check and insert.

    Owned by the wiring layer and shared by every SchedulingService in the
    process. Entries are dropped once nobody holds or waits on them.
    Cross-process serialization is the store's job (see VisitRepository).
    """

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._refs: Dict[str, int] = {}

    def is_locked(self, technician_id: str) -> bool:
        lock = self._locks.get(technician_id)
        return bool(lock and lock.locked())

    def __len__(self) -> int:
        return len(self._locks)

    async def acquire(self, technician_id: str) -> None:
        lock = self._locks.get(technician_id)
        if lock is None:
            lock = self._locks[technician_id] = asyncio.Lock()
        self._refs[technician_id] = self._refs.get(technician_id, 0) + 1

        started = time.monotonic()
        try:
            await lock.acquire()
        except BaseException:
            self._unref(technician_id)
            raise
        waited = time.monotonic() - started
        prometheus_metrics.observe_technician_lock_wait(waited)
        if waited > 1.0:
            logger.warning(
                "technician_lock_slow_acquire",
                extra={"lock_key": schedule_lock_key(technician_id), "waited_s": waited},
            )

    def release(self, technician_id: str) -> None:
        self._locks[technician_id].release()
        self._unref(technician_id)

    def _unref(self, technician_id: str) -> None:
        remaining = self._refs[technician_id] - 1
        if remaining:
            self._refs[technician_id] = remaining
        else:
            del self._refs[technician_id]
            del self._locks[technician_id]

    @asynccontextmanager
    async def hold(self, technician_id: str) -> AsyncIterator[None]:
        await self.acquire(technician_id)
        try:
            yield
        finally:
            self.release(technician_id)

    async def run_exclusive(
        self,
        technician_id: str,
        fn: Callable[[], T],
        *,
        operation: str,
        timeout_seconds: Optional[float] = None,
        abandoned: Optional[threading.Event] = None,
    ) -> T:
        """
        Run blocking ``fn`` in a worker thread while holding the technician lock.

        The lock is released when the thread finishes, not when the caller
        stops waiting: a timed-out write still in flight keeps the schedule
        locked until it commits or rolls back. ``abandoned`` is set on timeout
        so that work can roll back instead of committing.

        Raises:
            OperationTimeoutException: If ``fn`` does not finish in time
        """
        await self.acquire(technician_id)
        work = asyncio.ensure_future(asyncio.to_thread(fn))

        def _finished(done: "asyncio.Future[T]") -> None:
            self.release(technician_id)
            if not done.cancelled():
                # Mark retrieved so a failure after timeout is not reported as unhandled
                done.exception()

        work.add_done_callback(_finished)
        try:
            return await asyncio.wait_for(asyncio.shield(work), timeout=timeout_seconds)
        except asyncio.TimeoutError as exc:
            if abandoned is not None:
                abandoned.set()
            logger.error(
                "Operation %s for technician %s timed out after %ss",
                operation,
                technician_id,
                timeout_seconds,
            )
            raise OperationTimeoutException(operation, timeout_seconds or 0.0) from exc
