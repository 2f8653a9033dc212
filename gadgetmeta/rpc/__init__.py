"""
RPC — JSON-RPC batch handling for gadget metadata

Usage:
    from gadgetmeta.rpc import create_handler

    handler = create_handler()
    response = handler.process({
        "context": {"language": "en", "country": "US", "view": "home"},
        "gadgets": [{"url": "http://example.com/gadget.xml", "moduleId": 1}],
    })
    response["gadgets"][0]["iframeUrl"]
"""

from typing import Optional

from ..config import Config, get_config
from ..orchestrator import get_pool
from ..processing import DefaultProcessor, IframeUriBuilder, SpecFetcher
from .handler import JsonRpcHandler, GadgetJob
from .parser import RpcRequestParser, BatchRequest
from .projector import SpecProjector
from .result import BatchResponse, Failure, GadgetResult, Success


def create_handler(config: Optional[Config] = None) -> JsonRpcHandler:
    """
    Build a handler wired with the default collaborators.

    Args:
        config: Configuration. If None, loads from files and environment.
    """
    config = config or get_config()

    processor = DefaultProcessor(
        fetcher=SpecFetcher(config.fetch),
        blacklist=config.fetch.blacklist,
    )
    return JsonRpcHandler(
        processor=processor,
        uri_builder=IframeUriBuilder(config.rendering.iframe_base),
        pool=get_pool(config.pool),
        parser=RpcRequestParser(config.context_defaults()),
    )


__all__ = [
    "JsonRpcHandler",
    "GadgetJob",
    "RpcRequestParser",
    "BatchRequest",
    "SpecProjector",
    "BatchResponse",
    "GadgetResult",
    "Success",
    "Failure",
    "create_handler",
]
