"""Executors for policy training passes.

Training is fire-and-forget from the stepper's point of view: a job is
submitted and the tick moves on. Failures surface through a done callback
that logs them; they never propagate into the tick.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def _log_job_failure(future: Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("Policy training job failed: %s", exc, exc_info=exc)


class TrainingExecutor:
    """Thread-pool backed executor for training jobs."""

    def __init__(self, max_workers: int = 2) -> None:
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="policy-train")
        self._closed = False

    def submit(self, fn: Callable[..., None], *args) -> Optional[Future]:
        """Schedule ``fn(*args)``; returns None once the executor is shut down."""
        if self._closed:
            return None
        future = self._pool.submit(fn, *args)
        future.add_done_callback(_log_job_failure)
        return future

    def shutdown(self) -> None:
        """Stop accepting jobs; in-flight jobs finish on their own."""
        if self._closed:
            return
        self._closed = True
        self._pool.shutdown(wait=False, cancel_futures=True)
        logger.debug("Training executor shut down")


class InlineTrainingExecutor:
    """Runs training jobs synchronously in the calling thread."""

    def submit(self, fn: Callable[..., None], *args) -> None:
        try:
            fn(*args)
        except Exception as exc:
            # Same contract as the pool: a failed job is logged, not raised
            logger.error("Policy training job failed: %s", exc, exc_info=True)
        return None

    def shutdown(self) -> None:
        pass
