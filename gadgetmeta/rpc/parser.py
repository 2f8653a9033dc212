"""
RpcRequestParser — Batch request decoding

Turns a raw JSON-RPC batch request

    {"context": {...global fields...}, "gadgets": [{...}, {...}]}

into one GadgetContext per gadget entry, in request order.

All decoding happens here, before any work is dispatched, so a
malformed request can never leave tasks running in the pool.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

import orjson

from ..context import ContextDefaults, GadgetContext
from ..errors import DecodeError


RawRequest = Union[Mapping[str, Any], bytes, bytearray, str]


@dataclass(frozen=True)
class BatchRequest:
    """A decoded batch. Immutable after parsing."""
    context: Mapping[str, Any]
    gadgets: Tuple[GadgetContext, ...]

    def __len__(self) -> int:
        return len(self.gadgets)


class RpcRequestParser:
    """Decodes batch requests against a set of context defaults."""

    def __init__(self, defaults: Optional[ContextDefaults] = None):
        self._defaults = defaults or ContextDefaults()

    @property
    def defaults(self) -> ContextDefaults:
        return self._defaults

    def parse(self, request: RawRequest) -> BatchRequest:
        """
        Decode a batch request.

        Args:
            request: Decoded JSON object, or raw JSON bytes/text

        Returns:
            BatchRequest with contexts in request order

        Raises:
            DecodeError: If the request is malformed
        """
        if isinstance(request, (bytes, bytearray, str)):
            try:
                request = orjson.loads(request)
            except orjson.JSONDecodeError as e:
                raise DecodeError(f"Request is not valid JSON: {e}") from e

        if not isinstance(request, Mapping):
            raise DecodeError("Request must be a JSON object")

        request_context = request.get("context")
        if not isinstance(request_context, Mapping):
            raise DecodeError("Request is missing required object 'context'")

        requested = request.get("gadgets")
        if not isinstance(requested, list):
            raise DecodeError("Request is missing required array 'gadgets'")

        contexts = []
        for index, gadget in enumerate(requested):
            try:
                contexts.append(
                    GadgetContext.from_json(request_context, gadget, self._defaults)
                )
            except DecodeError as e:
                raise DecodeError(f"gadgets[{index}]: {e}") from e

        return BatchRequest(
            context=MappingProxyType(dict(request_context)),
            gadgets=tuple(contexts),
        )
