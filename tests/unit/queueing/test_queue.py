"""
Unit tests for the bounded queue
"""

import pytest

from treelog.core.exceptions.custom_exceptions import ConfigurationError
from treelog.queueing.queue import DROP_NEWEST, DROP_OLDEST, BoundedQueue


class TestBoundedQueue:
    """FIFO with overflow policies"""

    def test_fifo(self):
        queue = BoundedQueue(10)
        for item in range(4):
            queue.enqueue(item)

        assert queue.extract_batch(3) == [0, 1, 2]
        assert queue.extract_batch() == [3]
        assert queue.is_empty()

    def test_drop_oldest(self):
        queue = BoundedQueue(5, DROP_OLDEST)
        results = [queue.enqueue(item) for item in range(6)]

        assert all(results)
        assert queue.extract_batch() == [1, 2, 3, 4, 5]
        assert queue.overflow_count == 1

    def test_drop_newest(self):
        queue = BoundedQueue(3, DROP_NEWEST)
        results = [queue.enqueue(item) for item in range(4)]

        assert results == [True, True, True, False]
        assert queue.extract_batch() == [0, 1, 2]
        assert queue.overflow_count == 1

    def test_extract_more_than_available(self):
        queue = BoundedQueue(3)
        queue.enqueue("a")
        assert queue.extract_batch(10) == ["a"]

    def test_clear(self):
        queue = BoundedQueue(3)
        queue.enqueue("a")
        queue.enqueue("b")

        assert queue.clear() == 2
        assert len(queue) == 0

    @pytest.mark.parametrize("size", [0, -1, 1.5, True])
    def test_invalid_size(self, size):
        with pytest.raises(ConfigurationError):
            BoundedQueue(size)

    def test_invalid_strategy(self):
        with pytest.raises(ConfigurationError):
            BoundedQueue(3, "block")
