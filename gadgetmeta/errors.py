"""
Errors — Exception taxonomy for gadget metadata requests

Three outcomes matter to callers of the RPC handler:
- DecodeError: the batch request could not be decoded. Nothing was dispatched.
- PerGadgetError: one gadget failed. Captured inline in the response.
- OrchestrationError: the batch as a whole could not be processed.

Collaborator errors (fetch, parse, processing) are raised inside worker
tasks and always surface to the client as PerGadgetError entries.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import GadgetContext


class GadgetMetaError(Exception):
    """Base class for all gadgetmeta errors."""


class DecodeError(GadgetMetaError):
    """Raised when a batch request is structurally invalid."""


class OrchestrationError(GadgetMetaError):
    """
    Raised when a batch cannot be processed at all.

    Covers pool unavailability, cancellation of the orchestrating call,
    and failure to serialize a result entry. No partial response is
    returned alongside this error.
    """


class PerGadgetError(GadgetMetaError):
    """
    One gadget's processing failed.

    Carries the originating context so the failure entry can report the
    gadget's url and module id, and the underlying cause whose message
    is reported to the client.
    """

    def __init__(self, context: "GadgetContext", cause: BaseException):
        self.context = context
        self.cause = cause
        super().__init__(f"{context.url}: {cause}")

    @property
    def message(self) -> str:
        """Client-facing message of the underlying failure."""
        text = str(self.cause)
        return text or type(self.cause).__name__


class SpecFetchError(GadgetMetaError):
    """Raised when a gadget specification cannot be retrieved."""

    def __init__(self, url: str, reason: str, status: int = 0):
        self.url = url
        self.reason = reason
        self.status = status
        super().__init__(f"Unable to retrieve spec for {url}: {reason}")


class SpecParseError(GadgetMetaError):
    """Raised when a gadget specification document is malformed."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Malformed gadget spec {url}: {reason}")


class ProcessingError(GadgetMetaError):
    """Raised by processors when a resolved gadget cannot be served."""
