"""
Spec parser — Gadget XML documents to GadgetSpec

Understands the gadget document layout:

    <Module>
      <ModulePrefs title="..." author="..." ...>
        <Require feature="dynamic-height"/>
        <Optional feature="pubsub"><Param name="topic">news</Param></Optional>
        <Link rel="icon" href="..."/>
      </ModulePrefs>
      <UserPref name="color" datatype="enum" default_value="red">
        <EnumValue value="red" display_value="Red"/>
      </UserPref>
      <Content type="html" view="home,canvas" preferred_height="200">...</Content>
    </Module>

Lenient where the format is lenient (numeric attributes that do not
parse become 0), strict where a spec would be unusable.
"""

from typing import Dict, List, Optional
from urllib.parse import urljoin
from xml.etree import ElementTree

from ..context import DEFAULT_VIEW
from ..errors import SpecParseError
from .model import (
    DataType, EnumValuePair, Feature, GadgetSpec, LinkSpec, ModulePrefs,
    UserPref, View, ViewType,
)


# Content attributes mapped onto View fields; the rest go to View.attributes
_VIEW_FIELDS = {"type", "view", "quirks", "preferred_height", "preferred_width", "href"}


def parse_spec(url: str, xml_text: str) -> GadgetSpec:
    """
    Parse a gadget XML document.

    Args:
        url: Where the document came from (relative links resolve against it)
        xml_text: Raw document text

    Returns:
        Parsed GadgetSpec

    Raises:
        SpecParseError: If the document is malformed
    """
    try:
        root = ElementTree.fromstring(xml_text)
    except ElementTree.ParseError as e:
        raise SpecParseError(url, f"invalid XML ({e})") from e

    if root.tag != "Module":
        raise SpecParseError(url, f"root element must be <Module>, got <{root.tag}>")

    prefs_elements = root.findall("ModulePrefs")
    if len(prefs_elements) != 1:
        raise SpecParseError(url, "exactly one <ModulePrefs> element is required")

    spec = GadgetSpec(url=url, module_prefs=_parse_module_prefs(url, prefs_elements[0]))

    for element in root.findall("UserPref"):
        pref = _parse_user_pref(url, element)
        spec.user_prefs[pref.name] = pref

    for element in root.findall("Content"):
        for view in _parse_content(url, element):
            existing = spec.views.get(view.name)
            if existing is not None:
                # Repeated views concatenate their content
                view = View(
                    name=existing.name,
                    type=existing.type,
                    quirks=existing.quirks,
                    preferred_height=existing.preferred_height,
                    preferred_width=existing.preferred_width,
                    href=existing.href,
                    content=existing.content + view.content,
                    attributes=existing.attributes,
                )
            spec.views[view.name] = view

    return spec


def _parse_module_prefs(url: str, element: ElementTree.Element) -> ModulePrefs:
    attrs = element.attrib
    prefs = ModulePrefs(
        title=attrs.get("title", ""),
        title_url=_resolve(url, attrs.get("title_url")),
        description=attrs.get("description", ""),
        directory_title=attrs.get("directory_title", ""),
        thumbnail=_resolve(url, attrs.get("thumbnail")),
        screenshot=_resolve(url, attrs.get("screenshot")),
        author=attrs.get("author", ""),
        author_email=attrs.get("author_email", ""),
        author_affiliation=attrs.get("author_affiliation", ""),
        author_location=attrs.get("author_location", ""),
        author_photo=attrs.get("author_photo", ""),
        author_aboutme=attrs.get("author_aboutme", ""),
        author_quote=attrs.get("author_quote", ""),
        author_link=attrs.get("author_link", ""),
        categories=[
            attrs[key] for key in ("category", "category2") if attrs.get(key)
        ],
        height=_int_attr(attrs.get("height")),
        width=_int_attr(attrs.get("width")),
        show_stats=_bool_attr(attrs.get("show_stats"), False),
        show_in_directory=_bool_attr(attrs.get("show_in_directory"), False),
        singleton=_bool_attr(attrs.get("singleton"), True),
        scaling=_bool_attr(attrs.get("scaling"), False),
        scrolling=_bool_attr(attrs.get("scrolling"), False),
    )

    for child in element:
        if child.tag in ("Require", "Optional"):
            feature = _parse_feature(url, child)
            prefs.features[feature.name] = feature
        elif child.tag == "Link":
            rel = child.get("rel")
            href = child.get("href")
            if not rel or not href:
                raise SpecParseError(url, "<Link> requires both rel and href")
            prefs.links[rel] = LinkSpec(rel=rel, href=_resolve(url, href))

    return prefs


def _parse_feature(url: str, element: ElementTree.Element) -> Feature:
    name = (element.get("feature") or "").strip()
    if not name:
        raise SpecParseError(url, f"<{element.tag}> requires a feature attribute")

    params: Dict[str, List[str]] = {}
    for param in element.findall("Param"):
        param_name = param.get("name")
        if not param_name:
            raise SpecParseError(url, "<Param> requires a name attribute")
        params.setdefault(param_name, []).append((param.text or "").strip())

    return Feature(name=name, required=element.tag == "Require", params=params)


def _parse_user_pref(url: str, element: ElementTree.Element) -> UserPref:
    name = element.get("name")
    if not name:
        raise SpecParseError(url, "<UserPref> requires a name attribute")

    try:
        data_type = DataType.parse(element.get("datatype"))
    except ValueError:
        raise SpecParseError(
            url, f"unknown datatype {element.get('datatype')!r} for user pref {name!r}"
        )

    ordered: List[EnumValuePair] = []
    for enum_element in element.findall("EnumValue"):
        value = enum_element.get("value")
        if value is None:
            raise SpecParseError(url, f"<EnumValue> of {name!r} requires a value")
        display = enum_element.get("display_value") or value
        ordered.append(EnumValuePair(value=value, display_value=display))

    return UserPref(
        name=name,
        display_name=element.get("display_name", ""),
        data_type=data_type,
        default_value=element.get("default_value", ""),
        required=_bool_attr(element.get("required"), False),
        enum_values={pair.value: pair.display_value for pair in ordered},
        ordered_enum_values=ordered,
    )


def _parse_content(url: str, element: ElementTree.Element) -> List[View]:
    attrs = element.attrib
    type_name = (attrs.get("type") or "html").strip().lower()
    try:
        view_type = ViewType(type_name)
    except ValueError:
        raise SpecParseError(url, f"unknown content type {type_name!r}")

    href = _resolve(url, attrs.get("href"))
    if view_type == ViewType.URL and not href:
        raise SpecParseError(url, "type=\"url\" content requires an href")

    names = [n.strip() for n in (attrs.get("view") or DEFAULT_VIEW).split(",") if n.strip()]
    extra = {k: v for k, v in attrs.items() if k not in _VIEW_FIELDS}

    return [
        View(
            name=name,
            type=view_type,
            quirks=_bool_attr(attrs.get("quirks"), True),
            preferred_height=_int_attr(attrs.get("preferred_height")),
            preferred_width=_int_attr(attrs.get("preferred_width")),
            href=href,
            content=element.text or "",
            attributes=dict(extra),
        )
        for name in names or [DEFAULT_VIEW]
    ]


def _resolve(base: str, value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return urljoin(base, value.strip())


def _int_attr(value: Optional[str]) -> int:
    if not value:
        return 0
    try:
        return int(value.strip())
    except ValueError:
        return 0


def _bool_attr(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("true", "1", "yes")
