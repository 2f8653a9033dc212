"""
CLI -- Command interface for gadget metadata requests

Commands:
  rpc      Process a JSON-RPC batch request (file or stdin)
  inspect  Show metadata for one gadget
  config   View or set configuration

Output goes to stdout as JSON; logs go to stderr.
"""

import argparse
import atexit
import os
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .config import Config, ConfigManager
from .logconfig import configure_logging
from .orchestrator import reset_pool
from .rpc import JsonRpcHandler, create_handler
from . import __version__


class GadgetCLI:
    """Holds the resources commands share for one invocation."""

    def __init__(self, project_dir: Path, out: Optional[TextIO] = None,
                 config_manager: Optional[ConfigManager] = None):
        self.project_dir = Path(project_dir)
        self.out = out or sys.stdout
        self.config_manager = config_manager or ConfigManager(self.project_dir)
        self._handler: Optional[JsonRpcHandler] = None

    @property
    def config(self) -> Config:
        return self.config_manager.load()

    @property
    def handler(self) -> JsonRpcHandler:
        """Handler wired from configuration (built on first use)."""
        if self._handler is None:
            self._handler = create_handler(self.config)
        return self._handler


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all registered commands."""
    parser = argparse.ArgumentParser(
        prog="gadgetmeta",
        description="gadgetmeta -- parallel gadget metadata service",
    )

    parser.add_argument(
        '--project', '-p',
        default=os.environ.get("GADGETMETA_PROJECT_PATH", "."),
        help='Project directory for .gadgetmeta/config.yaml (default: current)'
    )
    parser.add_argument(
        '--log-level',
        help='Log level: DEBUG, INFO, WARNING, ERROR'
    )
    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'gadgetmeta {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    from .commands import register_all
    register_all(subparsers)

    return parser


def main(argv: Optional[List[str]] = None, cli: Optional[GadgetCLI] = None) -> int:
    """
    Main entry point for the gadgetmeta CLI.

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    cli = cli or GadgetCLI(Path(args.project))

    try:
        config = cli.config
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 2

    configure_logging(level=args.log_level or config.logging.level, format=config.logging.format)
    atexit.register(reset_pool, wait=False)

    from .commands import dispatch
    return dispatch(args.command, cli, args)


if __name__ == '__main__':
    sys.exit(main())
