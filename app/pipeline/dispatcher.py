"""
Bounded concurrent dispatcher.

K workers pull the next unclaimed index from a shared counter until the batch
is exhausted, so at most K items are in flight and every item is attempted
exactly once. Completion order is not preserved.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Any

from app.pipeline.base import BatchResult

logger = logging.getLogger('pipeline.dispatcher')

SKIPPED_PREFIX = 'skipped'


def dispatch(items: List[Any], worker: Callable[[Any, int], Any], concurrency: int = 3) -> BatchResult:
    """
    Run worker(item, index) over items with at most `concurrency` in flight.

    A worker exception is logged and counted against that item only; the
    other workers keep pulling. Outcomes starting with 'skipped' count as
    skipped, any other return value as processed.
    """
    result = BatchResult(total=len(items))
    if not items:
        return result

    lock = threading.Lock()
    next_index = [0]

    def _claim():
        with lock:
            idx = next_index[0]
            if idx >= len(items):
                return None
            next_index[0] = idx + 1
            return idx

    def _record(idx, outcome=None, error=None):
        with lock:
            if error is not None:
                result.failed += 1
                result.errors.append(f"item {idx}: {error}")
                result.outcomes[idx] = 'failed'
                return
            result.outcomes[idx] = outcome
            if isinstance(outcome, str) and outcome.startswith(SKIPPED_PREFIX):
                result.skipped += 1
            else:
                result.processed += 1

    def _work_loop():
        while True:
            idx = _claim()
            if idx is None:
                return
            try:
                _record(idx, outcome=worker(items[idx], idx))
            except Exception as e:
                logger.error("Item %d failed: %s", idx, e, exc_info=True)
                _record(idx, error=e)

    workers = max(1, min(concurrency, len(items)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='enrich') as pool:
        futures = [pool.submit(_work_loop) for _ in range(workers)]
        for fut in futures:
            fut.result()

    logger.info("Dispatched %d items (workers=%d): %d processed, %d skipped, %d failed",
                result.total, workers, result.processed, result.skipped, result.failed)
    return result
