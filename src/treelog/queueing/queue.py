"""
Bounded FIFO queue with an overflow policy.

Overflow Strategies:
    drop_oldest: Evict the item at the head, then append the new one
    drop_newest: Discard the incoming item

Both strategies count every dropped item in ``overflow_count``. Producers
never block; the consumer waits on the queue's condition.
"""

import threading
from collections import deque
from typing import Any, Deque, List, Optional

from treelog.core.exceptions.custom_exceptions import ConfigurationError

DROP_OLDEST = "drop_oldest"
DROP_NEWEST = "drop_newest"
OVERFLOW_STRATEGIES = (DROP_OLDEST, DROP_NEWEST)


class BoundedQueue:
    """
    Thread-safe bounded FIFO.

    Attributes:
        max_size (int): Capacity, at least 1
        overflow_strategy (str): One of ``OVERFLOW_STRATEGIES``
        overflow_count (int): Items dropped so far
        condition (threading.Condition): Notified on every enqueue and on
            every change the consumer may be waiting for
    """

    def __init__(self, max_size: int, overflow_strategy: str = DROP_OLDEST):
        if not isinstance(max_size, int) or isinstance(max_size, bool) or max_size < 1:
            raise ConfigurationError(
                f"max_queue_size must be a positive integer, got {max_size!r}",
                error_code="CONFIG_INVALID_VALUE",
            )
        if overflow_strategy not in OVERFLOW_STRATEGIES:
            raise ConfigurationError(
                f"Unknown overflow strategy '{overflow_strategy}'. "
                f"Valid strategies are: {', '.join(OVERFLOW_STRATEGIES)}",
                error_code="CONFIG_INVALID_VALUE",
            )
        self.max_size = max_size
        self.overflow_strategy = overflow_strategy
        self.overflow_count = 0
        self._items: Deque[Any] = deque()
        self.condition = threading.Condition(threading.Lock())

    def enqueue(self, item: Any) -> bool:
        """
        Add an item, applying the overflow strategy when full.

        Returns:
            False when the item itself was discarded (drop_newest), else True
        """
        with self.condition:
            return self._enqueue_locked(item)

    def _enqueue_locked(self, item: Any) -> bool:
        if len(self._items) >= self.max_size:
            self.overflow_count += 1
            if self.overflow_strategy == DROP_NEWEST:
                return False
            self._items.popleft()
        self._items.append(item)
        self.condition.notify_all()
        return True

    def extract_batch(self, max_items: Optional[int] = None) -> List[Any]:
        """Remove and return up to ``max_items`` items from the head (all if None)."""
        with self.condition:
            return self._extract_locked(max_items)

    def _extract_locked(self, max_items: Optional[int] = None) -> List[Any]:
        count = len(self._items) if max_items is None else min(max_items, len(self._items))
        return [self._items.popleft() for _ in range(count)]

    def clear(self) -> int:
        """Drop every queued item; returns how many were dropped."""
        with self.condition:
            dropped = len(self._items)
            self._items.clear()
            self.condition.notify_all()
            return dropped

    def size(self) -> int:
        with self.condition:
            return len(self._items)

    def __len__(self) -> int:
        return self.size()

    def is_empty(self) -> bool:
        return self.size() == 0
