"""
BaseCommand — What every subcommand can reach

Commands hold the GadgetCLI instance and read its shared resources
(configuration, handler, output stream) through properties, so a test
can swap any of them on the CLI object.
"""

import sys
from typing import TYPE_CHECKING, Any, Dict

import orjson

if TYPE_CHECKING:
    from ..cli import GadgetCLI


class BaseCommand:
    """Subcommand base with JSON output and stderr error helpers."""

    def __init__(self, cli: 'GadgetCLI'):
        self._cli = cli

    @property
    def config(self):
        return self._cli.config

    @property
    def config_manager(self):
        return self._cli.config_manager

    @property
    def handler(self):
        """JSON-RPC batch handler (built on first use)."""
        return self._cli.handler

    @property
    def out(self):
        return self._cli.out

    def write_json(self, data: Dict[str, Any], compact: bool = False) -> None:
        """Write data as JSON: indented, or one sorted-key line if compact."""
        option = orjson.OPT_SORT_KEYS if compact else orjson.OPT_INDENT_2
        self.out.write(orjson.dumps(data, option=option).decode("utf-8"))
        self.out.write("\n")

    def error(self, message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)
