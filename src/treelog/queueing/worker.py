"""
Async writer: one background thread draining the bounded queue.

Work items are ``(record, origin, dispatch_fn)`` tuples. The worker calls
``dispatch_fn(origin, record)`` for each item of a batch, in FIFO order.

Drain Triggers:
    - The queue holds at least ``batch_size`` items
    - ``flush_interval`` seconds passed since the last drain with items pending
    - ``flush()`` was requested

Health:
    The writer is healthy while its status is ``running`` and its thread is
    alive. ``submit`` on an unhealthy writer restarts a dead thread (up to
    ``max_restarts`` times); otherwise the item is dispatched synchronously
    and a ``WorkerUnhealthy`` line is written to the diagnostic channel.

Shutdown:
    ``stop()`` flushes first, then stops the thread. Anything still queued
    after that is dispatched on the caller's thread.
"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from treelog.core.config.settings import settings
from treelog.core.exceptions.custom_exceptions import WorkerUnhealthy
from treelog.core.logging.logger import get_logger
from treelog.queueing.queue import DROP_OLDEST, BoundedQueue

logger = get_logger(__name__)

WorkItem = Tuple[Any, Any, Callable[[Any, Any], None]]

STATUS_STOPPED = "stopped"
STATUS_RUNNING = "running"
STATUS_STOPPING = "stopping"
STATUS_DEAD = "dead"


class AsyncWriter:
    """
    Background dispatcher for log records.

    Args:
        batch_size: Items processed per drain
        flush_interval: Seconds between time-based drains
        max_queue_size: Queue capacity
        overflow_strategy: ``drop_oldest`` or ``drop_newest``
        max_restarts: Restarts allowed after the thread dies
    """

    def __init__(
        self,
        batch_size: int = 50,
        flush_interval: float = 1.0,
        max_queue_size: int = 10000,
        overflow_strategy: str = DROP_OLDEST,
        max_restarts: int = 3,
    ):
        self.batch_size = batch_size
        self.flush_interval = flush_interval
        self.max_restarts = max_restarts
        self.queue = BoundedQueue(max_queue_size, overflow_strategy)

        self.messages_processed = 0
        self.backend_errors = 0
        self.worker_restarts = 0
        self.last_flush_time: Optional[float] = None

        self._status = STATUS_STOPPED
        self._thread: Optional[threading.Thread] = None
        self._in_flight = 0
        self._flush_requested = False
        self._last_drain = time.monotonic()

    # Lifecycle

    def start(self) -> None:
        with self.queue.condition:
            if self._status == STATUS_RUNNING and self._thread_alive():
                return
            self._status = STATUS_RUNNING
            self._last_drain = time.monotonic()
            self._thread = threading.Thread(
                target=self._run, name="treelog-async-writer", daemon=True
            )
            self._thread.start()
        logger.debug("async writer started", batch_size=self.batch_size)

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Flush, stop the thread, then dispatch leftovers synchronously.

        Returns:
            True if the flush completed within the timeout
        """
        flushed = self.flush(timeout)
        with self.queue.condition:
            if self._status == STATUS_RUNNING:
                self._status = STATUS_STOPPING
            self.queue.condition.notify_all()
            thread = self._thread

        if thread is not None and thread is not threading.current_thread():
            thread.join(self._timeout(timeout))

        leftovers = self.queue.extract_batch()
        if leftovers:
            logger.warning("dispatching leftover items synchronously", count=len(leftovers))
            self._process(leftovers)

        with self.queue.condition:
            self._status = STATUS_STOPPED
            self._thread = None
        return flushed

    def is_healthy(self) -> bool:
        return self._status == STATUS_RUNNING and self._thread_alive()

    @property
    def worker_status(self) -> str:
        if self._status == STATUS_RUNNING and not self._thread_alive():
            return STATUS_DEAD
        return self._status

    # Producer side

    def submit(self, record: Any, origin: Any, dispatch_fn: Callable[[Any, Any], None]) -> bool:
        """
        Queue one record for background dispatch.

        Returns:
            True if the item was queued, False if it was dispatched
            synchronously or discarded by the overflow policy
        """
        if self.is_healthy() or self._try_restart():
            # Health is re-checked under the lock stop() takes before draining
            with self.queue.condition:
                if self._status == STATUS_RUNNING and self._thread_alive():
                    return self.queue._enqueue_locked((record, origin, dispatch_fn))
        self._report_unhealthy(record)
        dispatch_fn(origin, record)
        return False

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the queue is empty and no batch is in flight.

        Args:
            timeout: Seconds to wait; defaults to ``settings.FLUSH_TIMEOUT``

        Returns:
            False if the timeout expired first
        """
        if not self.is_healthy():
            leftovers = self.queue.extract_batch()
            self._process(leftovers)
            return True

        deadline = time.monotonic() + self._timeout(timeout)
        with self.queue.condition:
            self._flush_requested = True
            self.queue.condition.notify_all()
            while self.queue._items or self._in_flight:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.warning(
                        "flush timed out",
                        queue_size=len(self.queue._items),
                        in_flight=self._in_flight,
                    )
                    return False
                if not self._thread_alive():
                    break
                self.queue.condition.wait(remaining)

        if self.queue.size():
            # Thread died while flushing
            self._process(self.queue.extract_batch())
        return True

    # Consumer side

    def _run(self) -> None:
        condition = self.queue.condition
        while True:
            with condition:
                while not self._should_drain():
                    if self._status != STATUS_RUNNING:
                        return
                    condition.wait(self._wait_time())
                batch = self.queue._extract_locked(self.batch_size)
                self._in_flight = len(batch)

            self._process(batch)

            with condition:
                self._in_flight = 0
                self._last_drain = time.monotonic()
                self.last_flush_time = time.time()
                if not self.queue._items:
                    self._flush_requested = False
                condition.notify_all()

    def _should_drain(self) -> bool:
        size = len(self.queue._items)
        if size == 0:
            return False
        if size >= self.batch_size or self._flush_requested:
            return True
        if self._status != STATUS_RUNNING:
            return False
        return time.monotonic() - self._last_drain >= self.flush_interval

    def _wait_time(self) -> float:
        if not self.queue._items:
            return self.flush_interval
        elapsed = time.monotonic() - self._last_drain
        return max(self.flush_interval - elapsed, 0.001)

    def _process(self, batch: List[WorkItem]) -> None:
        for record, origin, dispatch_fn in batch:
            try:
                dispatch_fn(origin, record)
            except Exception as e:
                self.backend_errors += 1
                logger.error(
                    "Async dispatch failed",
                    error_code="ASYNC_DISPATCH_FAILED",
                    stage="async",
                    logger_name=getattr(origin, "name", None),
                    error=repr(e),
                )
            self.messages_processed += 1

    # Helpers

    def _thread_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _timeout(self, timeout: Optional[float]) -> float:
        return settings.FLUSH_TIMEOUT if timeout is None else timeout

    def _try_restart(self) -> bool:
        if self.worker_status != STATUS_DEAD or self.worker_restarts >= self.max_restarts:
            return False
        self.worker_restarts += 1
        logger.warning("restarting dead async worker", restarts=self.worker_restarts)
        self.start()
        return self.is_healthy()

    def _report_unhealthy(self, record: Any) -> None:
        error = WorkerUnhealthy(
            f"Async worker is {self.worker_status}; dispatching synchronously",
            details={
                "stage": "async",
                "worker_status": self.worker_status,
                "worker_restarts": self.worker_restarts,
                "logger_name": getattr(record, "source_logger_name", None),
            },
        )
        logger.error(str(error), error_code=error.error_code, **error.details)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "queue_size": self.queue.size(),
            "max_queue_size": self.queue.max_size,
            "overflow_strategy": self.queue.overflow_strategy,
            "queue_overflows": self.queue.overflow_count,
            "messages_processed": self.messages_processed,
            "messages_dropped": self.queue.overflow_count,
            "backend_errors": self.backend_errors,
            "worker_status": self.worker_status,
            "worker_restarts": self.worker_restarts,
            "batch_size": self.batch_size,
            "flush_interval": self.flush_interval,
            "last_flush_time": self.last_flush_time,
        }
