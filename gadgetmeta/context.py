"""
GadgetContext — Immutable request value for one gadget

A context merges the batch-wide fields of a JSON-RPC request (locale,
view, container, cache and debug flags) with one gadget entry's own
fields (url, module id, user preferences).

Design principles:
- Immutable after creation (frozen dataclass, read-only prefs mapping)
- Created once during request decode, consumed by exactly one task
- Carries everything a processor needs; processors never see raw JSON
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .errors import DecodeError


DEFAULT_VIEW = "default"


@dataclass(frozen=True)
class ContextDefaults:
    """Fallback values for global fields a request leaves out."""
    language: str = "all"
    country: str = "ALL"
    view: str = DEFAULT_VIEW
    container: str = "default"


@dataclass(frozen=True)
class GadgetContext:
    """
    Everything known about one requested gadget.

    Immutable after creation. The user_prefs mapping is read-only.
    """
    # Per-gadget
    url: str
    module_id: int = 0
    user_prefs: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )

    # Global
    language: str = "all"
    country: str = "ALL"
    view: str = DEFAULT_VIEW
    container: str = "default"
    ignore_cache: bool = False
    debug: bool = False

    @property
    def locale(self) -> str:
        """Locale tag in language_COUNTRY form."""
        return f"{self.language}_{self.country}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for logging and display."""
        return {
            "url": self.url,
            "moduleId": self.module_id,
            "prefs": dict(self.user_prefs),
            "language": self.language,
            "country": self.country,
            "view": self.view,
            "container": self.container,
            "ignoreCache": self.ignore_cache,
            "debug": self.debug,
        }

    @classmethod
    def from_json(
        cls,
        request_context: Mapping[str, Any],
        gadget: Mapping[str, Any],
        defaults: Optional[ContextDefaults] = None
    ) -> "GadgetContext":
        """
        Merge the request's global context with one gadget entry.

        Args:
            request_context: The request's "context" object
            gadget: One element of the request's "gadgets" array
            defaults: Fallbacks for absent global fields

        Raises:
            DecodeError: If a required field is missing or mistyped
        """
        defaults = defaults or ContextDefaults()

        if not isinstance(gadget, Mapping):
            raise DecodeError("Gadget entry must be an object")

        return cls(
            url=_get_url(gadget),
            module_id=_get_module_id(gadget),
            user_prefs=MappingProxyType(_get_user_prefs(gadget)),
            language=_get_str(request_context, "language", defaults.language),
            country=_get_str(request_context, "country", defaults.country),
            view=_get_str(request_context, "view", defaults.view),
            container=_get_str(request_context, "container", defaults.container),
            ignore_cache=_get_bool(request_context, "ignoreCache"),
            debug=_get_bool(request_context, "debug"),
        )


def _get_url(gadget: Mapping[str, Any]) -> str:
    url = gadget.get("url")
    if not isinstance(url, str) or not url.strip():
        raise DecodeError("Gadget entry is missing required field 'url'")
    return url.strip()


def _get_module_id(gadget: Mapping[str, Any]) -> int:
    value = gadget.get("moduleId")
    if value is None:
        return 0
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise DecodeError("Field 'moduleId' must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    raise DecodeError(f"Field 'moduleId' must be an integer, got {value!r}")


def _get_user_prefs(gadget: Mapping[str, Any]) -> Dict[str, str]:
    prefs = gadget.get("prefs")
    if prefs is None:
        return {}
    if not isinstance(prefs, Mapping):
        raise DecodeError("Field 'prefs' must be an object")
    return {str(name): _pref_value(value) for name, value in prefs.items()}


def _pref_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _get_str(data: Mapping[str, Any], key: str, default: str) -> str:
    value = data.get(key)
    if value is None or value == "":
        return default
    return str(value)


def _get_bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "on")
    return bool(value)
