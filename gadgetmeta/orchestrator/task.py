"""
Task — Unit of per-gadget work

Defines the core abstractions for the worker pool:
- Task: one callable plus the arguments it runs with
- TaskStatus: lifecycle states
- TaskResult: outcome of running a task (value or captured exception)

Design principles:
- Tasks are immutable after creation
- Tasks carry all context needed for execution
- A failed task keeps the raised exception object, not just its text,
  so the caller can decide how to classify it
"""

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Any, Dict, Optional
from datetime import datetime, timezone
import xxhash


class TaskStatus(Enum):
    """Task lifecycle states."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Task:
    """
    Unit of parallelizable work.

    Immutable after creation. Carries all context needed for execution.
    """
    # Identity
    id: str = field(default_factory=lambda: _generate_task_id())

    # Execution
    fn: Callable = field(default=None)
    args: tuple = field(default_factory=tuple)
    kwargs: Dict[str, Any] = field(default_factory=dict)

    # Metadata (for observability)
    name: str = ""
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if isinstance(other, Task):
            return self.id == other.id
        return False


@dataclass
class TaskResult:
    """Outcome of task execution."""
    task_id: str
    status: TaskStatus
    result: Any = None
    exception: Optional[BaseException] = None

    # Timing
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    duration_ms: Optional[float] = None

    @property
    def success(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def failed(self) -> bool:
        return self.status == TaskStatus.FAILED

    @property
    def error(self) -> Optional[str]:
        """Message of the captured exception, if any."""
        if self.exception is None:
            return None
        return str(self.exception) or type(self.exception).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for logging."""
        return {
            "task_id": self.task_id,
            "status": self.status.value,
            "error": self.error,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "duration_ms": self.duration_ms,
        }


_task_counter = itertools.count()


def _generate_task_id() -> str:
    """Generate unique task ID using xxhash over timestamp and a counter."""
    seed = f"{datetime.now(timezone.utc).isoformat()}:{next(_task_counter)}"
    return xxhash.xxh64(seed.encode()).hexdigest()[:12]


def make_task(
    fn: Callable,
    args: tuple = (),
    kwargs: Dict[str, Any] = None,
    name: str = ""
) -> Task:
    """
    Create a task.

    Args:
        fn: Function to execute
        args: Positional arguments tuple for fn
        kwargs: Keyword arguments dict for fn
        name: Optional task name for observability

    Example:
        task = make_task(fn=job.run, name="http://example.com/gadget.xml")
    """
    return Task(
        fn=fn,
        args=args,
        kwargs=kwargs or {},
        name=name,
    )
