"""
Processing interfaces — Collaborators consumed by the RPC core

The RPC handler never fetches or parses specs itself. It relies on:
- GadgetProcessor: context -> ProcessedGadget (may fail per gadget)
- UriBuilder: ProcessedGadget -> rendering URI

Both are called from worker threads and must be safe for concurrent use.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..context import GadgetContext
from ..spec.model import GadgetSpec


@dataclass(frozen=True)
class ProcessedGadget:
    """A resolved gadget spec together with the context that requested it."""
    context: GadgetContext
    spec: GadgetSpec


class GadgetProcessor(ABC):
    """Abstract base for gadget processors."""

    @abstractmethod
    def process(self, context: GadgetContext) -> ProcessedGadget:
        """
        Resolve, fetch and parse the gadget a context refers to.

        Args:
            context: Request context for one gadget

        Returns:
            ProcessedGadget for the context

        Raises:
            Exception: Any failure; the caller reports it for this gadget only
        """
        pass


class UriBuilder(ABC):
    """Abstract base for rendering URI builders."""

    @abstractmethod
    def make_rendering_uri(self, gadget: ProcessedGadget) -> str:
        """Compute the URI a container should load to render the gadget."""
        pass
