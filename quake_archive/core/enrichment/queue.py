"""
Single-worker enrichment queue.

All enrichment work across all records runs on one background thread, in
submission order, so region and intensity computations never overlap.
The queue is an explicitly owned object: create it at startup, hand it to
the records through EnrichmentServices, and shut it down at teardown.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_for_futures
from typing import Callable

from quake_archive.observability import metrics
from quake_archive.observability.logger import get_logger

logger = get_logger(__name__)


class EnrichmentQueueClosedError(RuntimeError):
    """Raised when a job is submitted after the queue was shut down."""

    def __init__(self, queue_name: str):
        self.queue_name = queue_name
        super().__init__(f"Enrichment queue '{queue_name}' is shut down and accepts no new jobs")


class EnrichmentQueue:
    """
    FIFO task queue backed by exactly one worker thread.

    submit() never blocks the caller. Jobs that raise are logged here and do
    not stop the worker; jobs that need per-record failure handling catch
    their own errors.

    Usage:
        with EnrichmentQueue() as queue:
            queue.submit(job)
            queue.drain(timeout=5.0)
    """

    def __init__(self, name: str = "quake-enrichment"):
        """
        Initialize and start the queue.

        Args:
            name: Queue name, used for the worker thread name and metric labels
        """
        self.name = name
        self._executor: ThreadPoolExecutor | None = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=name
        )
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

        metrics.set_gauge(metrics.enrichment_queue_pending, 0, queue=self.name)
        logger.debug(f"Started enrichment queue {self.name}")

    @property
    def is_closed(self) -> bool:
        return self._executor is None

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def submit(self, job: Callable[[], None]) -> Future:
        """
        Enqueue a job without waiting for it.

        Args:
            job: Zero-argument callable run on the worker thread

        Returns:
            Future completing when the job has run

        Raises:
            EnrichmentQueueClosedError: If the queue has been shut down
        """
        with self._lock:
            if self._executor is None:
                metrics.increment_counter(
                    metrics.enrichment_submissions_rejected_total, 1, queue=self.name
                )
                raise EnrichmentQueueClosedError(self.name)

            future = self._executor.submit(self._run, job)
            self._pending.add(future)
            pending = len(self._pending)

        future.add_done_callback(self._forget)
        metrics.set_gauge(metrics.enrichment_queue_pending, pending, queue=self.name)
        return future

    def drain(self, timeout: float | None = None) -> bool:
        """
        Wait until every job submitted so far has finished.

        Args:
            timeout: Maximum seconds to wait (None waits indefinitely)

        Returns:
            True if the queue is empty, False if the timeout expired first
        """
        with self._lock:
            outstanding = list(self._pending)

        if not outstanding:
            return True

        _, not_done = wait_for_futures(outstanding, timeout=timeout)
        return not not_done

    def shutdown(self, cancel_pending: bool = True, wait: bool = True) -> None:
        """
        Stop accepting jobs.

        Args:
            cancel_pending: Cancel jobs that have not started yet; when False
                they are still run before the worker exits
            wait: Block until the worker thread has exited
        """
        with self._lock:
            executor, self._executor = self._executor, None

        if executor is None:
            return

        logger.info(
            f"Shutting down enrichment queue {self.name}",
            extra={"queue": self.name, "pending": self.pending_count, "cancel_pending": cancel_pending}
        )
        executor.shutdown(wait=wait, cancel_futures=cancel_pending)

    def _run(self, job: Callable[[], None]) -> None:
        try:
            job()
        except Exception as e:
            logger.error(
                f"Enrichment job failed on queue {self.name}: {e}",
                extra={"queue": self.name},
                exc_info=True
            )

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
            pending = len(self._pending)
        metrics.set_gauge(metrics.enrichment_queue_pending, pending, queue=self.name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False

    def __repr__(self) -> str:
        state = "closed" if self.is_closed else "open"
        return f"{self.__class__.__name__}(name={self.name!r}, state={state}, pending={self.pending_count})"
