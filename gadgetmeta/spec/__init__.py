"""
Gadget spec — Model and parser for gadget specification documents.

Usage:
    from gadgetmeta.spec import parse_spec

    spec = parse_spec("http://example.com/gadget.xml", xml_text)
    spec.module_prefs.title
    spec.views["canvas"].preferred_height
"""

from .model import (
    GadgetSpec,
    ModulePrefs,
    Feature,
    LinkSpec,
    View,
    ViewType,
    UserPref,
    EnumValuePair,
    DataType,
)
from .parser import parse_spec


__all__ = [
    "GadgetSpec",
    "ModulePrefs",
    "Feature",
    "LinkSpec",
    "View",
    "ViewType",
    "UserPref",
    "EnumValuePair",
    "DataType",
    "parse_spec",
]
