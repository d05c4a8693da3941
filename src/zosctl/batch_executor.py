"""Bounded parallel execution for multi-item transfers.

Directory uploads and member downloads issue one request per item. The
executor runs those requests on a thread pool whose size is the caller's
concurrency cap, and keeps one outcome per item so a failure never stops
its siblings.
"""

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def resolve_max_workers(max_concurrent_requests: int | None, item_count: int) -> int:
    """Translate a concurrency cap into a pool size.

    None or 0 means no ceiling: every item may be in flight at once.

    Examples:
        >>> resolve_max_workers(None, 5)
        5
        >>> resolve_max_workers(2, 5)
        2
        >>> resolve_max_workers(8, 3)
        3
    """
    if max_concurrent_requests is not None and max_concurrent_requests < 0:
        raise ValueError("max_concurrent_requests must not be negative")
    if not max_concurrent_requests:
        return max(item_count, 1)
    return max(min(max_concurrent_requests, item_count), 1)


class BatchExecutor:
    """Execute one operation per item in parallel."""

    def __init__(self, max_concurrent_requests: int | None = 1):
        """Initialize batch executor.

        Args:
            max_concurrent_requests: Maximum requests in flight; None or 0 for no limit
        """
        self.max_concurrent_requests = max_concurrent_requests
        self.failures: dict[int, Exception] = {}

    def execute(
        self,
        operation: Callable[[T], R],
        items: Iterable[T],
        progress_callback: Callable[[str], None] | None = None,
    ) -> list[R]:
        """Run operation on every item and return results in item order.

        operation is expected to capture its own failures in its return
        value. An exception escaping it is recorded against its item in
        self.failures while the remaining items finish; the failure of the
        earliest item is then raised.
        """
        items = list(items)
        self.failures = {}
        if not items:
            return []

        max_workers = resolve_max_workers(self.max_concurrent_requests, len(items))
        logger.debug(f"Running {len(items)} operation(s) with {max_workers} worker(s)")

        results: list[R | None] = [None] * len(items)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(operation, item): index for index, item in enumerate(items)}
            for done, future in enumerate(as_completed(futures), start=1):
                index = futures[future]
                try:
                    results[index] = future.result()
                except Exception as e:
                    logger.debug(f"Item {index + 1} of {len(items)} failed: {e}")
                    self.failures[index] = e
                if progress_callback:
                    progress_callback(f"Finished {done} of {len(items)}")

        if self.failures:
            raise self.failures[min(self.failures)]
        return results  # type: ignore[return-value]
