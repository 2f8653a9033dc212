"""
Processing — Collaborators that resolve gadgets and build rendering URIs.

Usage:
    from gadgetmeta.processing import DefaultProcessor, IframeUriBuilder

    processor = DefaultProcessor()
    gadget = processor.process(context)
    uri = IframeUriBuilder("/gadgets/ifr").make_rendering_uri(gadget)
"""

from .base import GadgetProcessor, UriBuilder, ProcessedGadget
from .fetcher import SpecFetcher
from .processor import DefaultProcessor, RegistryProcessor, check_view
from .uri import IframeUriBuilder


__all__ = [
    "GadgetProcessor",
    "UriBuilder",
    "ProcessedGadget",
    "SpecFetcher",
    "DefaultProcessor",
    "RegistryProcessor",
    "check_view",
    "IframeUriBuilder",
]
