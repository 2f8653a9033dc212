"""
JsonRpcHandler — Parallel gadget metadata aggregation

Processes a JSON-RPC batch request by retrieving every gadget's
metadata in parallel and coalescing the outcomes into one response:

    {"gadgets": [<entry>, <entry>, ...]}

Flow:
1. Decode the whole request first (DecodeError, nothing dispatched)
2. Submit one task per gadget to the shared worker pool
3. Take finished tasks from a completion queue, appending each entry
   as it arrives. Response order is completion order.

Failure policy:
- A gadget whose processing raises becomes a failure entry
  {"url", "moduleId", "errors": [message]}; siblings are unaffected
- Pool unavailability, cancellation, an unserializable entry, or a task
  outcome that is not a per-gadget error aborts the batch with
  OrchestrationError and no partial response
"""

import time
from concurrent.futures import Future
from typing import Any, Callable, Dict, Optional

import orjson
import structlog

from ..context import GadgetContext
from ..errors import OrchestrationError, PerGadgetError
from ..orchestrator import (
    CancellationToken, CompletionQueue, MetricsCollector, PoolUnavailable,
    TakeInterrupted, WorkerPool, get_pool, make_task,
)
from ..processing.base import GadgetProcessor, UriBuilder
from .parser import RawRequest, RpcRequestParser
from .projector import SpecProjector
from .result import BatchResponse, Failure, GadgetResult, Success


logger = structlog.get_logger(__name__)


class GadgetJob:
    """
    Work for one gadget: process, then project.

    Any exception is re-raised as PerGadgetError carrying the context,
    which is what lets the handler report it inline.
    """

    def __init__(self, context: GadgetContext, processor: GadgetProcessor, projector: SpecProjector):
        self.context = context
        self._processor = processor
        self._projector = projector

    def __call__(self) -> Dict[str, Any]:
        try:
            gadget = self._processor.process(self.context)
            return self._projector.project(gadget)
        except Exception as e:
            raise PerGadgetError(self.context, e) from e


class JsonRpcHandler:
    """
    Batch handler for gadget metadata requests.

    Thread Safety:
    - process() may be called concurrently; batches share only the pool
    - The processor and URI builder must be safe for concurrent use
    """

    def __init__(
        self,
        processor: GadgetProcessor,
        uri_builder: UriBuilder,
        pool: Optional[WorkerPool] = None,
        parser: Optional[RpcRequestParser] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Args:
            processor: Resolves gadget specs
            uri_builder: Builds rendering URIs
            pool: Worker pool. If None, the process-wide pool is used.
            parser: Request parser. If None, one with default context values.
            metrics: Metrics sink. If None, a private collector.
        """
        self._processor = processor
        self._projector = SpecProjector(uri_builder)
        self._pool = pool
        self._parser = parser or RpcRequestParser()
        self._metrics = metrics or MetricsCollector()

    @property
    def pool(self) -> WorkerPool:
        """Worker pool (process-wide pool unless one was given)."""
        if self._pool is None:
            self._pool = get_pool()
        return self._pool

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    def create_job(self, context: GadgetContext) -> Callable[[], Dict[str, Any]]:
        """Build the callable run in the pool for one gadget."""
        return GadgetJob(context, self._processor, self._projector)

    def process(self, request: RawRequest, cancel: Optional[CancellationToken] = None) -> Dict[str, Any]:
        """
        Process a batch request.

        Args:
            request: Decoded request object, or raw JSON bytes/text
            cancel: Optional token; cancelling it aborts the batch

        Returns:
            {"gadgets": [...]} with exactly one entry per requested gadget

        Raises:
            DecodeError: If the request is malformed (nothing dispatched)
            OrchestrationError: If the batch could not be processed
        """
        # Decode everything first so a bad entry cannot strand running tasks
        batch = self._parser.parse(request)

        started = time.monotonic()
        self._metrics.record_batch_started(len(batch))
        log = logger.bind(batch_size=len(batch))
        log.debug("batch_dispatch")

        completions = CompletionQueue(self.pool)
        response = BatchResponse()

        def interrupt() -> None:
            completions.interrupt(cancel.reason)

        if cancel is not None:
            cancel.add_callback(interrupt)

        completed = False
        try:
            try:
                for context in batch.gadgets:
                    if cancel is not None and cancel.cancelled:
                        raise OrchestrationError(f"Processing interrupted: {cancel.reason}")
                    completions.submit(make_task(fn=self.create_job(context), name=context.url))
            except PoolUnavailable as e:
                raise OrchestrationError("Worker pool unavailable") from e

            for _ in range(len(batch)):
                try:
                    future = completions.take()
                except TakeInterrupted as e:
                    raise OrchestrationError(f"Processing interrupted: {e}") from e
                except KeyboardInterrupt as e:
                    raise OrchestrationError("Processing interrupted") from e

                response.append(self._to_result(future))

            completed = True

        except OrchestrationError as e:
            self._metrics.record_batch_aborted(type(e.__cause__).__name__ if e.__cause__ else "error")
            log.error("batch_aborted", error=str(e))
            raise

        finally:
            if cancel is not None:
                cancel.remove_callback(interrupt)
            if not completed:
                # Nobody reads the response now; queued work is dropped
                cancelled = completions.cancel_pending()
                log.debug("pending_tasks_cancelled", count=cancelled)

        duration_ms = (time.monotonic() - started) * 1000
        self._metrics.record_batch_completed(duration_ms)
        log.info(
            "batch_completed",
            succeeded=response.succeeded,
            failed=response.failed,
            duration_ms=round(duration_ms, 2),
        )

        return response.to_wire()

    def process_json(self, request: RawRequest, cancel: Optional[CancellationToken] = None) -> bytes:
        """
        Process a batch request and encode the response as JSON.

        Raises:
            DecodeError: If the request is malformed
            OrchestrationError: If the batch could not be processed or encoded
        """
        response = self.process(request, cancel=cancel)
        try:
            return orjson.dumps(response)
        except TypeError as e:
            raise OrchestrationError(f"Unable to write JSON: {e}") from e

    def _to_result(self, future: Future) -> GadgetResult:
        """Classify one finished task."""
        if future.cancelled():
            raise OrchestrationError("Processing interrupted: task cancelled")

        # The pool captures Exception; anything set here is a BaseException
        if future.exception() is not None:
            raise OrchestrationError("Processing interrupted") from future.exception()

        task_result = future.result()

        if task_result.success:
            self._metrics.record_gadget(True, task_result.duration_ms)
            return Success(entry=task_result.result)

        error = task_result.exception
        if not isinstance(error, PerGadgetError):
            raise OrchestrationError("Processing interrupted") from error

        self._metrics.record_gadget(False, task_result.duration_ms)
        logger.warning(
            "gadget_failed",
            url=error.context.url,
            module_id=error.context.module_id,
            error=error.message,
            error_type=type(error.cause).__name__,
        )
        return Failure(context=error.context, message=error.message)
