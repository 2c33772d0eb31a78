# booking_form/services/notifications/dispatcher.py
"""
Background notification dispatcher.

Accepted bookings are queued here after the store commit. A worker task,
started in the app lifespan, hands each job to every notifier in a worker
thread. Failures are logged and kept in `failures`; they never reach the
request that created the booking.

Flow:
1. Route handler calls enqueue() after a successful commit
2. Worker pops the job
3. Each notifier runs via asyncio.to_thread
4. Exceptions → logger.exception + failures log
"""

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Optional

from ...schemas.bookings import BookingRecord
from .base import Notifier

logger = logging.getLogger(__name__)

MAX_FAILURES_KEPT = 100
DRAIN_TIMEOUT = 10.0  # seconds to finish queued jobs on shutdown


@dataclass(frozen=True)
class NotificationJob:
    record: BookingRecord
    replaced: Optional[BookingRecord] = None


@dataclass(frozen=True)
class NotificationFailure:
    booking_id: str
    notifier: str
    error: str
    ts: int


class NotificationDispatcher:

    def __init__(self, notifiers: list[Notifier]):
        self.notifiers = notifiers
        self.failures: deque[NotificationFailure] = deque(maxlen=MAX_FAILURES_KEPT)
        self._queue: asyncio.Queue[NotificationJob] | None = None
        self._worker: asyncio.Task | None = None

    @property
    def queue(self) -> asyncio.Queue:
        if self._queue is None:
            self._queue = asyncio.Queue()
        return self._queue

    def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="notification-dispatcher")

    async def stop(self, drain: bool = True) -> None:
        if self._worker is None:
            return
        if drain:
            try:
                await asyncio.wait_for(self.queue.join(), timeout=DRAIN_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning(f"Dropping {self.queue.qsize()} queued notifications on shutdown")
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None

        for notifier in self.notifiers:
            notifier.close()

    def enqueue(self, record: BookingRecord, replaced: Optional[BookingRecord] = None) -> None:
        if not self.notifiers:
            return
        self.queue.put_nowait(NotificationJob(record=record, replaced=replaced))
        logger.info(f"Notification queued for booking {record.id}")

    async def _run(self) -> None:
        logger.info("notification dispatcher started")
        try:
            while True:
                job = await self.queue.get()
                try:
                    await self.deliver(job)
                finally:
                    self.queue.task_done()
        except asyncio.CancelledError:
            logger.info("notification dispatcher cancelled")
            raise

    async def deliver(self, job: NotificationJob) -> None:
        for notifier in self.notifiers:
            try:
                await asyncio.to_thread(notifier.notify, job.record, job.replaced)
            except Exception as e:
                logger.exception(f"Notification via {notifier.name} failed for booking {job.record.id}")
                self.failures.append(NotificationFailure(
                    booking_id=job.record.id,
                    notifier=notifier.name,
                    error=str(e),
                    ts=int(time.time()),
                ))
