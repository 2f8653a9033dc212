"""
RpcCommand — Run a JSON-RPC batch request from a file or stdin

    gadgetmeta rpc request.json
    cat request.json | gadgetmeta rpc --compact
    gadgetmeta rpc request.json --stats --workers 16
    gadgetmeta rpc local-batch.json --allow-files

Exit codes: 0 success, 1 batch could not be processed, 2 bad request.
"""

import sys

from ..errors import DecodeError, OrchestrationError
from .base import BaseCommand


EXIT_OK = 0
EXIT_ORCHESTRATION = 1
EXIT_DECODE = 2


class RpcCommand(BaseCommand):
    """Runs one batch request through the handler."""

    def run(self, source: str, compact: bool = False, stats: bool = False) -> int:
        try:
            raw = self._read(source)
        except OSError as e:
            self.error(f"Cannot read {source}: {e.strerror or e}")
            return EXIT_DECODE

        try:
            response = self.handler.process(raw)
        except DecodeError as e:
            self.error(f"Bad request: {e}")
            return EXIT_DECODE
        except OrchestrationError as e:
            self.error(str(e))
            return EXIT_ORCHESTRATION

        if stats:
            response = dict(response)
            response["stats"] = {
                "metrics": self.handler.metrics.get_summary(),
                "pool": self.handler.pool.stats().to_dict(),
            }

        self.write_json(response, compact=compact)
        return EXIT_OK

    def _read(self, source: str) -> bytes:
        if source == "-":
            return sys.stdin.buffer.read()
        with open(source, "rb") as f:
            return f.read()


def register_parser(subparsers):
    """Register rpc command parser."""
    p = subparsers.add_parser('rpc', help='Process a JSON-RPC batch request')
    p.add_argument('request', nargs='?', default='-',
                   help='Request file (default: stdin)')
    p.add_argument('--compact', action='store_true',
                   help='Single-line JSON output')
    p.add_argument('--stats', action='store_true',
                   help='Append metrics and pool statistics to the output')
    p.add_argument('--workers', type=int,
                   help='Worker pool size (overrides pool.workers)')
    p.add_argument('--allow-files', action='store_true',
                   help='Resolve local paths and file:// URLs in the request')
    return p


def handle(cli, args):
    """Handle rpc command dispatch."""
    command = RpcCommand(cli)
    if args.workers is not None:
        if args.workers < 1:
            command.error("--workers must be >= 1")
            return EXIT_DECODE
        # Applies before the handler, and with it the pool, is built
        cli.config.pool.workers = args.workers
    if args.allow_files:
        cli.config.fetch.allow_files = True
    return command.run(args.request, compact=args.compact, stats=args.stats)
