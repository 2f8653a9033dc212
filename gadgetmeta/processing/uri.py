"""
IframeUriBuilder — Rendering URIs for gadget iframes

Builds the URL a container loads into an iframe to render a gadget:

    {base}?container=default&mid=3&nocache=0&country=US&lang=en
          &view=canvas&url=http%3A%2F%2F...&up_color=red

Parameters are emitted in a fixed order so equal contexts give equal URIs.
"""

from urllib.parse import urlencode

from ..context import DEFAULT_VIEW
from .base import ProcessedGadget, UriBuilder


class IframeUriBuilder(UriBuilder):
    """Builds iframe rendering URIs against a configurable base path."""

    def __init__(self, base: str = "/gadgets/ifr"):
        self._base = base

    @property
    def base(self) -> str:
        return self._base

    def make_rendering_uri(self, gadget: ProcessedGadget) -> str:
        context = gadget.context
        spec = gadget.spec

        # Fall back to the default view when the spec lacks the requested one
        view = context.view if spec.get_view(context.view) is not None else DEFAULT_VIEW

        params = [
            ("container", context.container),
            ("mid", str(context.module_id)),
            ("nocache", "1" if context.ignore_cache else "0"),
            ("country", context.country),
            ("lang", context.language),
            ("view", view),
            ("url", spec.url),
        ]
        if context.debug:
            params.append(("debug", "1"))

        # User prefs: declared defaults, overridden by the request's values
        for name, pref in spec.user_prefs.items():
            value = context.user_prefs.get(name, pref.default_value)
            params.append((f"up_{name}", value))

        separator = "&" if "?" in self._base else "?"
        return f"{self._base}{separator}{urlencode(params)}"
