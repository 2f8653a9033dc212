"""
CompletionQueue — Completion-order result collection

Pairs a WorkerPool with a thread-safe queue:
- Each submitted task's future is put on the queue when it finishes
- The consumer takes futures in the order they completed
- take() blocks on the queue itself; there is no polling loop

This lets a batch caller stream results as they finish instead of
waiting for the slowest task to place the first one.
"""

import threading
import queue
from concurrent.futures import Future
from dataclasses import dataclass
from typing import List, Optional

from .pools import WorkerPool
from .task import Task


class TakeInterrupted(Exception):
    """Raised by take() when the queue was interrupted."""


# Queue marker that wakes a blocked take()
_INTERRUPT = object()


@dataclass
class QueueStats:
    """Statistics for completion queue observability."""
    submitted: int = 0
    completed: int = 0
    taken: int = 0

    def to_dict(self) -> dict:
        return {
            "submitted": self.submitted,
            "completed": self.completed,
            "taken": self.taken,
            "outstanding": self.submitted - self.taken
        }


class CompletionQueue:
    """
    Submit tasks to a pool and take their futures in completion order.

    One queue serves one batch. The pool behind it may be shared by
    many queues at once.

    Usage:
        completions = CompletionQueue(pool)
        for task in tasks:
            completions.submit(task)

        for _ in range(len(tasks)):
            future = completions.take()
            handle(future.result())
    """

    def __init__(self, pool: WorkerPool):
        self._pool = pool
        self._queue: queue.Queue = queue.Queue()
        self._futures: List[Future] = []
        self._stats = QueueStats()
        self._lock = threading.Lock()
        self._interrupted = False
        self._interrupt_reason = ""

    def submit(self, task: Task) -> Future:
        """
        Submit a task to the pool.

        Raises:
            PoolUnavailable: If the pool refuses the task
        """
        future = self._pool.submit(task)

        with self._lock:
            self._futures.append(future)
            self._stats.submitted += 1

        future.add_done_callback(self._on_done)
        return future

    def _on_done(self, future: Future) -> None:
        with self._lock:
            self._stats.completed += 1
        self._queue.put(future)

    def take(self, timeout: Optional[float] = None) -> Future:
        """
        Block until the next future completes and return it.

        Raises:
            TakeInterrupted: If interrupt() was called
            queue.Empty: If timeout elapsed first
        """
        if self._interrupted:
            raise TakeInterrupted(self._interrupt_reason)

        item = self._queue.get(timeout=timeout)

        if item is _INTERRUPT:
            raise TakeInterrupted(self._interrupt_reason)

        with self._lock:
            self._stats.taken += 1
        return item

    def interrupt(self, reason: str = "interrupted") -> None:
        """
        Wake a blocked take() and make every later take() raise.

        Thread-safe. Intended to be called from another thread.
        """
        self._interrupted = True
        self._interrupt_reason = reason
        self._queue.put(_INTERRUPT)

    def cancel_pending(self) -> int:
        """
        Cancel submitted futures that have not started yet.

        Running tasks finish on their own; their results are left in
        the queue and discarded with it.

        Returns number of futures cancelled.
        """
        with self._lock:
            futures = list(self._futures)
        return sum(1 for future in futures if future.cancel())

    @property
    def outstanding(self) -> int:
        """Number of submitted futures not yet taken."""
        with self._lock:
            return self._stats.submitted - self._stats.taken

    def stats(self) -> QueueStats:
        """Get queue statistics."""
        with self._lock:
            return QueueStats(
                submitted=self._stats.submitted,
                completed=self._stats.completed,
                taken=self._stats.taken
            )
