"""
WorkerPool — Thread pool for per-gadget work

Gadget processing is dominated by network fetches and XML parsing of
small documents, so a ThreadPoolExecutor gives true overlap of the
waits without the pickling constraints of a process pool.

Design principles:
- One pool per process, shared across concurrent batch calls
- Callers submit and read; they never resize or reconfigure the pool
- Task exceptions are captured into TaskResult, never lost
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor, Future
from dataclasses import dataclass, replace
from datetime import datetime, timezone

import structlog

from .task import Task, TaskResult, TaskStatus
from .config import PoolConfig


logger = structlog.get_logger(__name__)


@dataclass
class PoolStats:
    """Counters for pool observability."""
    submitted: int = 0
    active: int = 0
    succeeded: int = 0
    failed: int = 0
    busy_ms: float = 0.0

    @property
    def finished(self) -> int:
        return self.succeeded + self.failed

    @property
    def mean_task_ms(self) -> float:
        """Mean wall time of finished tasks."""
        return self.busy_ms / self.finished if self.finished else 0.0

    def to_dict(self) -> dict:
        return {
            "submitted": self.submitted,
            "active": self.active,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "mean_task_ms": round(self.mean_task_ms, 2),
        }


class PoolUnavailable(RuntimeError):
    """Raised when submitting to a pool that has been shut down."""


class WorkerPool:
    """
    ThreadPool for gadget processing tasks.

    Thread Safety:
    - submit() may be called from any thread
    - Counters are guarded by one lock
    """

    def __init__(self, config: PoolConfig):
        config.validate()
        self._config = config
        self._executor = ThreadPoolExecutor(
            max_workers=config.workers,
            thread_name_prefix=config.thread_name_prefix,
        )
        self._counters = PoolStats()
        self._guard = threading.Lock()
        self._closed = False

    @property
    def config(self) -> PoolConfig:
        return self._config

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    def submit(self, task: Task) -> Future:
        """
        Queue a task.

        The returned Future resolves to a TaskResult; it never carries
        the task's own exception.

        Raises:
            PoolUnavailable: If the pool is shut down
        """
        if self._closed:
            raise PoolUnavailable("Pool is shut down")

        try:
            future = self._executor.submit(self._run, task)
        except RuntimeError as e:
            # Executor refuses work after shutdown (also at interpreter exit)
            raise PoolUnavailable(str(e)) from e

        with self._guard:
            self._counters.submitted += 1
            self._counters.active += 1

        future.add_done_callback(self._record)
        return future

    def _run(self, task: Task) -> TaskResult:
        """Run one task in a worker thread."""
        started = datetime.now(timezone.utc)
        clock = time.perf_counter()
        outcome = TaskResult(task_id=task.id, status=TaskStatus.RUNNING, started_at=started.isoformat())

        try:
            outcome.result = task.fn(*task.args, **task.kwargs)
            outcome.status = TaskStatus.COMPLETED
        except Exception as e:
            outcome.exception = e
            outcome.status = TaskStatus.FAILED

        outcome.duration_ms = (time.perf_counter() - clock) * 1000
        outcome.completed_at = datetime.now(timezone.utc).isoformat()
        return outcome

    def _record(self, future: Future) -> None:
        if future.cancelled():
            outcome = None
        else:
            outcome = future.result() if future.exception() is None else None

        with self._guard:
            self._counters.active -= 1
            if outcome is not None and outcome.success:
                self._counters.succeeded += 1
            else:
                self._counters.failed += 1
            if outcome is not None:
                self._counters.busy_ms += outcome.duration_ms or 0.0

    def stats(self) -> PoolStats:
        """Snapshot of the pool counters."""
        with self._guard:
            return replace(self._counters)

    def shutdown(self, wait: bool = True, cancel_pending: bool = False) -> None:
        """
        Stop accepting work.

        Args:
            wait: Block until running tasks finish, at most
                config.shutdown_timeout seconds
            cancel_pending: Cancel queued tasks that have not started
        """
        self._closed = True
        if not wait:
            self._executor.shutdown(wait=False, cancel_futures=cancel_pending)
            return

        closer = threading.Thread(
            target=self._executor.shutdown,
            kwargs={"wait": True, "cancel_futures": cancel_pending},
            name=f"{self._config.thread_name_prefix}shutdown",
            daemon=True,
        )
        closer.start()
        closer.join(self._config.shutdown_timeout)
        if closer.is_alive():
            logger.warning(
                "pool_shutdown_timeout",
                timeout=self._config.shutdown_timeout,
                active=self.stats().active,
            )
