"""
treelog queueing - bounded queue and the background async writer.

Modules:
    queue: Bounded FIFO with drop_oldest / drop_newest overflow
    worker: AsyncWriter thread
    manager: Process-wide writer facade
"""
