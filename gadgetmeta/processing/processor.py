"""
Processors — Concrete GadgetProcessor implementations

- DefaultProcessor: fetch the spec document, parse it, check the
  requested view can be served
- RegistryProcessor: resolve specs from an in-memory mapping, for
  embedding callers that already hold parsed specs
"""

import fnmatch
from typing import Iterable, Mapping, Optional

import structlog

from ..context import DEFAULT_VIEW, GadgetContext
from ..errors import ProcessingError
from ..spec.model import GadgetSpec
from ..spec.parser import parse_spec
from .base import GadgetProcessor, ProcessedGadget
from .fetcher import SpecFetcher


logger = structlog.get_logger(__name__)


def check_view(spec: GadgetSpec, view: str) -> None:
    """
    Ensure the spec can render the requested view.

    A spec without the requested view still renders through its default
    view, if it has one.

    Raises:
        ProcessingError: If neither the view nor a default view exists
    """
    if spec.get_view(view) is None and spec.get_view(DEFAULT_VIEW) is None:
        raise ProcessingError(
            f"Unable to locate an appropriate view in this gadget. Requested: '{view}'"
        )


class DefaultProcessor(GadgetProcessor):
    """
    Fetches and parses gadget spec documents.

    Thread-safe: the fetcher carries the only shared state.
    """

    def __init__(self, fetcher: Optional[SpecFetcher] = None, blacklist: Iterable[str] = ()):
        """
        Args:
            fetcher: Document fetcher (a default one if None)
            blacklist: URL glob patterns that are never served
        """
        self._fetcher = fetcher or SpecFetcher()
        self._blacklist = tuple(blacklist)

    @property
    def fetcher(self) -> SpecFetcher:
        return self._fetcher

    def is_blacklisted(self, url: str) -> bool:
        """Check a URL against the blacklist patterns."""
        return any(fnmatch.fnmatchcase(url, pattern) for pattern in self._blacklist)

    def process(self, context: GadgetContext) -> ProcessedGadget:
        if self.is_blacklisted(context.url):
            logger.info("gadget_blacklisted", url=context.url)
            raise ProcessingError("The requested gadget is unavailable")

        text = self._fetcher.fetch(context.url, ignore_cache=context.ignore_cache)
        spec = parse_spec(context.url, text)
        check_view(spec, context.view)

        return ProcessedGadget(context=context, spec=spec)


class RegistryProcessor(GadgetProcessor):
    """Resolves gadgets from a fixed url -> GadgetSpec mapping."""

    def __init__(self, specs: Mapping[str, GadgetSpec]):
        self._specs = dict(specs)

    def process(self, context: GadgetContext) -> ProcessedGadget:
        spec = self._specs.get(context.url)
        if spec is None:
            raise ProcessingError(f"No gadget registered for {context.url}")

        check_view(spec, context.view)
        return ProcessedGadget(context=context, spec=spec)
