"""
Orchestrator — Shared worker pool and completion-order collection

Public API for running per-gadget work in parallel.

Usage:
    from gadgetmeta.orchestrator import get_pool, CompletionQueue, make_task

    completions = CompletionQueue(get_pool())
    for context in contexts:
        completions.submit(make_task(fn=job, args=(context,)))

    for _ in contexts:
        result = completions.take().result()   # TaskResult, completion order

    # Graceful shutdown (process exit, tests)
    reset_pool()

Configuration via environment variables:
    GADGETMETA_WORKERS=8              # Thread pool size
    GADGETMETA_SHUTDOWN_TIMEOUT=10    # Pool shutdown timeout (seconds)
"""

import threading
from typing import Optional

from .task import Task, TaskStatus, TaskResult, make_task
from .config import PoolConfig
from .pools import WorkerPool, PoolStats, PoolUnavailable
from .aggregator import CompletionQueue, TakeInterrupted, QueueStats
from .cancellation import CancellationToken
from .metrics import MetricsCollector, LatencyHistogram


# Process-wide pool shared by all handlers (singleton pattern)
_pool: Optional[WorkerPool] = None
_pool_lock = threading.Lock()


def get_pool(config: Optional[PoolConfig] = None) -> WorkerPool:
    """
    Get the process-wide worker pool.

    Creates one on first use, from config or the environment. Later
    calls return the existing pool and ignore config.
    """
    global _pool

    if _pool is None:
        with _pool_lock:
            if _pool is None:
                _pool = WorkerPool(config or PoolConfig.from_env())

    return _pool


def reset_pool(wait: bool = True) -> None:
    """
    Shut down and forget the process-wide pool.

    Useful for testing or reconfiguration.
    """
    global _pool

    with _pool_lock:
        if _pool is not None:
            _pool.shutdown(wait=wait)
            _pool = None


__all__ = [
    # Tasks
    "Task",
    "TaskStatus",
    "TaskResult",
    "make_task",

    # Configuration
    "PoolConfig",

    # Components
    "WorkerPool",
    "PoolStats",
    "PoolUnavailable",
    "CompletionQueue",
    "TakeInterrupted",
    "QueueStats",
    "CancellationToken",
    "MetricsCollector",
    "LatencyHistogram",

    # Shared instance
    "get_pool",
    "reset_pool",
]
