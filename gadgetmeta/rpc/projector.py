"""
SpecProjector — Processed gadget to wire-format object

Pure transformation of a resolved gadget spec into the JSON object
returned for each successful gadget. The only collaborator call is the
UriBuilder, for the iframe URL.

Wire shape (per gadget):
    iframeUrl, url, moduleId, title, titleUrl,
    views:          {name: {type, quirks, preferredHeight, preferredWidth, attributes?}}
    features:       [name, ...]                      declaration order
    featureDetails: {name: {required, parameters: {param: [value, ...]}}}
    links:          {rel: href}
    userPrefs:      {name: {displayName, type, default, enumValues,
                            orderedEnumValues: [{value, displayValue}, ...]}}
    plus extended metadata copied from module prefs (author, thumbnail, ...)
"""

from typing import Any, Dict, List

from ..errors import ProcessingError
from ..processing.base import ProcessedGadget, UriBuilder
from ..spec.model import Feature, GadgetSpec, ModulePrefs, UserPref, View


class SpecProjector:
    """Projects processed gadgets onto the wire format."""

    def __init__(self, uri_builder: UriBuilder):
        self._uri_builder = uri_builder

    def project(self, gadget: ProcessedGadget) -> Dict[str, Any]:
        """
        Build the wire object for one gadget.

        Missing optional values come out as None.

        Raises:
            ProcessingError: If the spec is structurally invalid
        """
        spec = gadget.spec
        if not isinstance(spec, GadgetSpec) or not isinstance(spec.module_prefs, ModulePrefs):
            raise ProcessingError("Gadget spec is structurally invalid")

        prefs = spec.module_prefs
        context = gadget.context

        return {
            "iframeUrl": self._uri_builder.make_rendering_uri(gadget),
            "url": context.url,
            "moduleId": context.module_id,
            "title": prefs.title,
            "titleUrl": prefs.title_url,
            "views": {name: _view_json(view) for name, view in spec.views.items()},
            "features": list(prefs.features),
            "featureDetails": {
                feature.name: _feature_json(feature) for feature in prefs.features.values()
            },
            "userPrefs": {
                pref.name: _user_pref_json(pref) for pref in spec.user_prefs.values()
            },
            "links": {link.rel: link.href for link in prefs.links.values()},

            # extended meta data
            "directoryTitle": prefs.directory_title,
            "thumbnail": prefs.thumbnail,
            "screenshot": prefs.screenshot,
            "author": prefs.author,
            "authorEmail": prefs.author_email,
            "authorAffiliation": prefs.author_affiliation,
            "authorLocation": prefs.author_location,
            "authorPhoto": prefs.author_photo,
            "authorAboutme": prefs.author_aboutme,
            "authorQuote": prefs.author_quote,
            "authorLink": prefs.author_link,
            "categories": list(prefs.categories),
            "height": prefs.height,
            "width": prefs.width,
            "showStats": prefs.show_stats,
            "showInDirectory": prefs.show_in_directory,
            "singleton": prefs.singleton,
            "scaling": prefs.scaling,
            "scrolling": prefs.scrolling,
        }


def _view_json(view: View) -> Dict[str, Any]:
    result = {
        "type": view.type.value,
        "quirks": view.quirks,
        "preferredHeight": view.preferred_height,
        "preferredWidth": view.preferred_width,
    }
    if view.attributes:
        result["attributes"] = dict(view.attributes)
    return result


def _feature_json(feature: Feature) -> Dict[str, Any]:
    return {
        "required": feature.required,
        "parameters": {name: list(values) for name, values in feature.params.items()},
    }


def _user_pref_json(pref: UserPref) -> Dict[str, Any]:
    return {
        "displayName": pref.display_name,
        "type": pref.data_type.value.lower(),
        "default": pref.default_value,
        "enumValues": dict(pref.enum_values),
        "orderedEnumValues": _ordered_enums(pref),
    }


def _ordered_enums(pref: UserPref) -> List[Dict[str, str]]:
    return [
        {"value": pair.value, "displayValue": pair.display_value}
        for pair in pref.ordered_enum_values
    ]
