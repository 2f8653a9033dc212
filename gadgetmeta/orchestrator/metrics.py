"""
MetricsCollector — Observability for batch processing

Collects and exposes metrics:
- Batch counters (started, completed, aborted by reason)
- Gadget counters (requested, succeeded, failed)
- Gadget and batch latency histograms

Design: Observable by default. Every gadget outcome is counted.
"""

import bisect
import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone


# Upper bounds (exclusive) of the latency buckets, in milliseconds
BUCKET_BOUNDS_MS = (10, 50, 100, 500, 1000, 5000)
BUCKET_NAMES = ("lt_10ms", "lt_50ms", "lt_100ms", "lt_500ms", "lt_1s", "lt_5s", "gt_5s")


@dataclass
class LatencyHistogram:
    """Fixed-bucket latency histogram."""
    counts: List[int] = field(default_factory=lambda: [0] * len(BUCKET_NAMES))
    total_ms: float = 0.0
    fastest_ms: Optional[float] = None
    slowest_ms: float = 0.0

    @property
    def count(self) -> int:
        return sum(self.counts)

    def record(self, duration_ms: float) -> None:
        """Add one observation."""
        self.counts[bisect.bisect_right(BUCKET_BOUNDS_MS, duration_ms)] += 1
        self.total_ms += duration_ms
        if self.fastest_ms is None or duration_ms < self.fastest_ms:
            self.fastest_ms = duration_ms
        self.slowest_ms = max(self.slowest_ms, duration_ms)

    def to_dict(self) -> dict:
        count = self.count
        return {
            "count": count,
            "avg_ms": round(self.total_ms / count, 2) if count else 0.0,
            "min_ms": round(self.fastest_ms, 2) if self.fastest_ms is not None else 0,
            "max_ms": round(self.slowest_ms, 2),
            "buckets": dict(zip(BUCKET_NAMES, self.counts)),
        }


class MetricsCollector:
    """
    Collects metrics for batch processing observability.

    Thread-safe; every update happens under one lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        """Start over from zero."""
        with self._lock:
            self._batches: Counter = Counter()
            self._gadgets: Counter = Counter()
            self._abort_reasons: Counter = Counter()
            self._gadget_latency = LatencyHistogram()
            self._batch_latency = LatencyHistogram()
            self._since = datetime.now(timezone.utc)

    def record_batch_started(self, size: int) -> None:
        """A batch was decoded and is about to be dispatched."""
        with self._lock:
            self._batches["started"] += 1
            self._gadgets["requested"] += size

    def record_gadget(self, success: bool, duration_ms: Optional[float] = None) -> None:
        """One gadget finished, either way."""
        with self._lock:
            self._gadgets["succeeded" if success else "failed"] += 1
            if duration_ms is not None:
                self._gadget_latency.record(duration_ms)

    def record_batch_completed(self, duration_ms: float) -> None:
        with self._lock:
            self._batches["completed"] += 1
            self._batch_latency.record(duration_ms)

    def record_batch_aborted(self, reason: str) -> None:
        with self._lock:
            self._batches["aborted"] += 1
            self._abort_reasons[reason] += 1

    def get_summary(self) -> Dict[str, Any]:
        """Point-in-time view of every metric."""
        with self._lock:
            succeeded = self._gadgets["succeeded"]
            finished = succeeded + self._gadgets["failed"]

            return {
                "uptime_seconds": round(
                    (datetime.now(timezone.utc) - self._since).total_seconds(), 2
                ),
                "batches": {
                    "started": self._batches["started"],
                    "completed": self._batches["completed"],
                    "aborted": self._batches["aborted"],
                    "abort_reasons": dict(self._abort_reasons),
                },
                "gadgets": {
                    "requested": self._gadgets["requested"],
                    "succeeded": succeeded,
                    "failed": self._gadgets["failed"],
                    "success_rate": round(succeeded * 100 / finished, 1) if finished else 0.0,
                },
                "latency": {
                    "gadget": self._gadget_latency.to_dict(),
                    "batch": self._batch_latency.to_dict(),
                },
            }
