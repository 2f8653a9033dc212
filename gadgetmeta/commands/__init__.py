"""
Commands — CLI subcommands, registered from a module list

A command module provides:
- COMMAND_NAME (optional; defaults to the module name without "_cmd")
- register_parser(subparsers): adds its argparse subparser
- handle(cli, args) -> int: runs the command, returns the exit code

Listing a module in COMMAND_MODULES is all it takes to expose it.
"""

import importlib
from typing import Any, Callable, Dict

from .base import BaseCommand

# Help lists commands in this order
COMMAND_MODULES = [
    'rpc_cmd',
    'inspect_cmd',
    'config_cmd',
]

Handler = Callable[[Any, Any], int]

_registry: Dict[str, Handler] = {}


def register_all(subparsers) -> None:
    """Import every command module and attach its parser and handler."""
    _registry.clear()

    for module_name in COMMAND_MODULES:
        module = importlib.import_module(f'.{module_name}', __package__)
        module.register_parser(subparsers)
        name = getattr(module, 'COMMAND_NAME', module_name[:-len('_cmd')])
        _registry[name] = module.handle


def dispatch(command: str, cli: Any, args: Any) -> int:
    """
    Run a registered command.

    Raises:
        KeyError: If no module registered the command
    """
    try:
        handler = _registry[command]
    except KeyError:
        raise KeyError(f"Unknown command: {command}. Available: {sorted(_registry)}") from None
    return handler(cli, args)


__all__ = ['BaseCommand', 'COMMAND_MODULES', 'register_all', 'dispatch']
