"""
InspectCommand — Metadata for a single gadget

Convenience over `rpc` for one URL: builds a one-gadget batch and
prints its entry. The operator names the URL here, so local paths and
file:// URLs are allowed.

    gadgetmeta inspect http://example.com/gadget.xml --view canvas
    gadgetmeta inspect ./weather.xml
"""

from ..errors import DecodeError, OrchestrationError
from .base import BaseCommand
from .rpc_cmd import EXIT_DECODE, EXIT_OK, EXIT_ORCHESTRATION


class InspectCommand(BaseCommand):
    """Processes one gadget URL."""

    def run(self, url: str, view: str = None, module_id: int = 0,
            language: str = None, country: str = None,
            ignore_cache: bool = False, compact: bool = False) -> int:
        context = {"ignoreCache": ignore_cache}
        if view:
            context["view"] = view
        if language:
            context["language"] = language
        if country:
            context["country"] = country

        request = {"context": context, "gadgets": [{"url": url, "moduleId": module_id}]}

        try:
            response = self.handler.process(request)
        except DecodeError as e:
            self.error(f"Bad request: {e}")
            return EXIT_DECODE
        except OrchestrationError as e:
            self.error(str(e))
            return EXIT_ORCHESTRATION

        entry = response["gadgets"][0]
        self.write_json(entry, compact=compact)
        return EXIT_ORCHESTRATION if "errors" in entry else EXIT_OK


def register_parser(subparsers):
    """Register inspect command parser."""
    p = subparsers.add_parser('inspect', help='Show metadata for one gadget')
    p.add_argument('url', help='Gadget spec URL or path')
    p.add_argument('--view', help='Requested view')
    p.add_argument('--module-id', type=int, default=0, help='Module id (default: 0)')
    p.add_argument('--language', help='Language (default from config)')
    p.add_argument('--country', help='Country (default from config)')
    p.add_argument('--no-cache', action='store_true', help='Bypass the spec cache')
    p.add_argument('--compact', action='store_true', help='Single-line JSON output')
    return p


def handle(cli, args):
    """Handle inspect command dispatch."""
    cli.config.fetch.allow_files = True
    return InspectCommand(cli).run(
        args.url,
        view=args.view,
        module_id=args.module_id,
        language=args.language,
        country=args.country,
        ignore_cache=args.no_cache,
        compact=args.compact,
    )
