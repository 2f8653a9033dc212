"""
gadgetmeta — Parallel gadget metadata service

Answers batch requests for gadget metadata: every requested gadget's
spec is fetched and parsed in parallel, and the outcomes (metadata or a
per-gadget error) come back together in one response.

Usage:
    gadgetmeta rpc request.json
    gadgetmeta inspect http://example.com/gadget.xml --view canvas
    gadgetmeta config fetch.timeout 10
"""

__version__ = "0.1.0"

# Request values
from .context import GadgetContext, ContextDefaults

# Errors
from .errors import (
    GadgetMetaError, DecodeError, PerGadgetError, OrchestrationError,
    SpecFetchError, SpecParseError, ProcessingError,
)

# Spec model
from .spec import GadgetSpec, ModulePrefs, UserPref, View, parse_spec

# Collaborators
from .processing import (
    GadgetProcessor, UriBuilder, ProcessedGadget,
    DefaultProcessor, RegistryProcessor, IframeUriBuilder, SpecFetcher,
)

# RPC core
from .rpc import JsonRpcHandler, RpcRequestParser, SpecProjector, create_handler

# Config
from .config import Config, ConfigManager, get_config

__all__ = [
    'GadgetContext', 'ContextDefaults',
    'GadgetMetaError', 'DecodeError', 'PerGadgetError', 'OrchestrationError',
    'SpecFetchError', 'SpecParseError', 'ProcessingError',
    'GadgetSpec', 'ModulePrefs', 'UserPref', 'View', 'parse_spec',
    'GadgetProcessor', 'UriBuilder', 'ProcessedGadget',
    'DefaultProcessor', 'RegistryProcessor', 'IframeUriBuilder', 'SpecFetcher',
    'JsonRpcHandler', 'RpcRequestParser', 'SpecProjector', 'create_handler',
    'Config', 'ConfigManager', 'get_config',
]
