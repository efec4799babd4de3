"""Parallel processing utilities for epubmanga.

Image normalization is the only stage whose items are independent; this
module runs such work on a bounded thread pool while keeping results in
input order.
"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor, FIRST_EXCEPTION, wait
from typing import Callable, List, Optional, Sequence, TypeVar
from tqdm import tqdm

# Type variables for generic functions
T = TypeVar('T')
R = TypeVar('R')

# Set up logging
logger = logging.getLogger(__name__)


def default_worker_count() -> int:
    """Number of workers used when the caller does not choose one."""
    return min(32, (os.cpu_count() or 1) + 4)


def map_in_thread_pool(func: Callable[[T], R], items: Sequence[T],
                       max_workers: Optional[int] = None,
                       show_progress: bool = False,
                       desc: str = "Processing", unit: str = "item") -> List[R]:
    """Apply a blocking function to every item on a thread pool.

    Results are returned in the order of ``items``. The first exception raised
    by any call cancels the work that has not started yet and is re-raised
    once the running calls have finished.

    Args:
        func: Function to run for each item.
        items: Items to process.
        max_workers: Maximum number of threads.
        show_progress: Whether to show a progress bar.
        desc: Description for the progress bar.
        unit: Unit for the progress bar.

    Returns:
        List of results, one per item.
    """
    if not items:
        return []

    workers = max(1, min(max_workers or default_worker_count(), len(items)))
    logger.debug(f"Running {len(items)} task(s) on {workers} worker(s)")

    with tqdm(total=len(items), desc=desc, unit=unit, disable=not show_progress) as progress:
        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            futures = [executor.submit(func, item) for item in items]
            for future in futures:
                future.add_done_callback(lambda _: progress.update(1))

            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            failed = [f for f in futures if f in done and not f.cancelled() and f.exception() is not None]
            if failed:
                for future in pending:
                    future.cancel()
                logger.debug(f"Cancelled {len(pending)} pending task(s) after a failure")
                raise failed[0].exception()

            return [future.result() for future in futures]
        finally:
            executor.shutdown(wait=True, cancel_futures=True)
