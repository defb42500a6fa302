"""
treelog diagnostics - the library's own logging.

treelog never reports its internal failures through the logger tree it
manages: a broken output or presenter could otherwise feed on itself. Instead
every isolated failure (a transformer that raised, an output that failed, an
unhealthy async worker) is written as one structlog key=value line on
standard error.

Components:
    - logger: ``get_logger(name)`` factory for the diagnostic channel

Levels:
    - error: Isolated failures during dispatch
    - warning: Flush timeouts, worker restarts, leftover items on stop
    - info: Live level changes
    - debug: Step by step dispatch trace (``TREELOG_DEBUG=true``)

Example:
    >>> from treelog.core.logging.logger import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.error("Output 'console' failed", stage="output", logger_name="app")
"""
