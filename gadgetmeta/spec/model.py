"""
Gadget spec model — Resolved gadget specification

Plain data records for a parsed gadget document:
- GadgetSpec: root, holds module prefs, views and user prefs
- ModulePrefs: gadget-level metadata (title, author, features, links)
- Feature / LinkSpec: feature requirements and related links
- View: one renderable view of the gadget
- UserPref / EnumValuePair: user-configurable parameters

Mappings keep declaration order (dict insertion order), which the
wire format relies on for features and enumerated values.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class ViewType(Enum):
    """How a view's content is delivered."""
    HTML = "html"
    URL = "url"


class DataType(Enum):
    """Declared data type of a user preference."""
    STRING = "string"
    HIDDEN = "hidden"
    BOOL = "bool"
    ENUM = "enum"
    LIST = "list"
    NUMBER = "number"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DataType":
        """Parse a datatype attribute. Empty means STRING."""
        if not value:
            return cls.STRING
        return cls(value.strip().lower())


@dataclass(frozen=True)
class Feature:
    """A feature the gadget requires or optionally uses."""
    name: str
    required: bool = True
    params: Dict[str, List[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class LinkSpec:
    """A related link declared by the gadget."""
    rel: str
    href: str


@dataclass(frozen=True)
class View:
    """One named view of the gadget."""
    name: str
    type: ViewType = ViewType.HTML
    quirks: bool = True
    preferred_height: int = 0
    preferred_width: int = 0
    href: Optional[str] = None
    content: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EnumValuePair:
    """One enumerated value of a user preference, in declaration order."""
    value: str
    display_value: str


@dataclass(frozen=True)
class UserPref:
    """A user-configurable parameter declared by the gadget."""
    name: str
    display_name: str = ""
    data_type: DataType = DataType.STRING
    default_value: str = ""
    required: bool = False
    enum_values: Dict[str, str] = field(default_factory=dict)
    ordered_enum_values: List[EnumValuePair] = field(default_factory=list)


@dataclass
class ModulePrefs:
    """Gadget-level metadata block."""
    title: str = ""
    title_url: Optional[str] = None
    description: str = ""

    # Extended metadata
    directory_title: str = ""
    thumbnail: Optional[str] = None
    screenshot: Optional[str] = None
    author: str = ""
    author_email: str = ""
    author_affiliation: str = ""
    author_location: str = ""
    author_photo: str = ""
    author_aboutme: str = ""
    author_quote: str = ""
    author_link: str = ""
    categories: List[str] = field(default_factory=list)
    height: int = 0
    width: int = 0
    show_stats: bool = False
    show_in_directory: bool = False
    singleton: bool = True
    scaling: bool = False
    scrolling: bool = False

    # Requirements and relations
    features: Dict[str, Feature] = field(default_factory=dict)
    links: Dict[str, LinkSpec] = field(default_factory=dict)


@dataclass
class GadgetSpec:
    """A fully parsed gadget specification."""
    url: str
    module_prefs: ModulePrefs = field(default_factory=ModulePrefs)
    views: Dict[str, View] = field(default_factory=dict)
    user_prefs: Dict[str, UserPref] = field(default_factory=dict)

    def get_view(self, name: str) -> Optional[View]:
        """Look up a view by name."""
        return self.views.get(name)
