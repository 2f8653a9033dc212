"""
Test factories for gadgetmeta.

Builders for specs and contexts, plus stub collaborators whose latency
and failures are scripted per URL, so handler tests can control
completion order without a network.

Usage:
    processor = StubProcessor(
        specs={"http://a": make_spec("http://a")},
        delays={"http://a": 0.3},
        failures={"http://b": RuntimeError("boom")},
    )
"""

import threading
import time
from typing import Dict, List, Optional

from gadgetmeta.context import GadgetContext
from gadgetmeta.processing.base import GadgetProcessor, ProcessedGadget, UriBuilder
from gadgetmeta.spec.model import (
    DataType, EnumValuePair, Feature, GadgetSpec, LinkSpec, ModulePrefs,
    UserPref, View, ViewType,
)


SAMPLE_SPEC_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Module>
  <ModulePrefs title="Weather" title_url="/weather/about"
               author="Jane Doe" author_email="jane@example.com"
               thumbnail="thumb.png" screenshot="http://cdn.example.com/shot.png"
               category="tools" category2="news"
               height="250" width="320" scrolling="true" singleton="false">
    <Require feature="dynamic-height"/>
    <Optional feature="pubsub">
      <Param name="topic">weather</Param>
      <Param name="topic">alerts</Param>
    </Optional>
    <Link rel="icon" href="/weather/icon.png"/>
  </ModulePrefs>
  <UserPref name="units" display_name="Units" datatype="enum" default_value="c">
    <EnumValue value="c" display_value="Celsius"/>
    <EnumValue value="f" display_value="Fahrenheit"/>
    <EnumValue value="k"/>
  </UserPref>
  <UserPref name="city" display_name="City" default_value="Oslo" required="true"/>
  <Content type="html" view="home,default" preferred_height="200" quirks="false">
    <![CDATA[<div id="weather"></div>]]>
  </Content>
  <Content type="url" view="canvas" href="http://example.com/canvas.html"
           preferred_width="640" data-mode="full"/>
</Module>
"""


def make_context(url: str = "http://example.com/gadget.xml", module_id: int = 0, **kwargs) -> GadgetContext:
    """Build a GadgetContext with defaults for everything not given."""
    return GadgetContext(url=url, module_id=module_id, **kwargs)


def make_spec(url: str = "http://example.com/gadget.xml", title: str = "Test Gadget") -> GadgetSpec:
    """Build a small but complete GadgetSpec."""
    prefs = ModulePrefs(
        title=title,
        title_url="http://example.com/about",
        author="Author",
        categories=["tools"],
        features={
            "dynamic-height": Feature(name="dynamic-height", required=True),
            "pubsub": Feature(name="pubsub", required=False, params={"topic": ["a", "b"]}),
        },
        links={"icon": LinkSpec(rel="icon", href="http://example.com/icon.png")},
    )
    views = {
        "default": View(name="default", type=ViewType.HTML, preferred_height=100),
        "canvas": View(name="canvas", type=ViewType.URL, href="http://example.com/c",
                       attributes={"data-mode": "full"}),
    }
    user_prefs = {
        "color": UserPref(
            name="color",
            display_name="Color",
            data_type=DataType.ENUM,
            default_value="red",
            enum_values={"red": "Red", "blue": "Blue"},
            ordered_enum_values=[EnumValuePair("red", "Red"), EnumValuePair("blue", "Blue")],
        ),
    }
    return GadgetSpec(url=url, module_prefs=prefs, views=views, user_prefs=user_prefs)


def make_request(*urls: str, context: Optional[dict] = None) -> dict:
    """Build a batch request for the given URLs with sequential module ids."""
    return {
        "context": context if context is not None else {},
        "gadgets": [{"url": url, "moduleId": i} for i, url in enumerate(urls)],
    }


class StubUriBuilder(UriBuilder):
    """Deterministic URI builder."""

    def make_rendering_uri(self, gadget: ProcessedGadget) -> str:
        return f"/ifr?url={gadget.spec.url}&mid={gadget.context.module_id}"


class StubProcessor(GadgetProcessor):
    """
    Processor with scripted behaviour per URL.

    Unknown URLs get a spec built by make_spec. Records every call.
    """

    def __init__(
        self,
        specs: Optional[Dict[str, GadgetSpec]] = None,
        delays: Optional[Dict[str, float]] = None,
        failures: Optional[Dict[str, BaseException]] = None,
    ):
        self.specs = specs or {}
        self.delays = delays or {}
        self.failures = failures or {}
        self.calls: List[str] = []
        self.completed: List[str] = []
        self._lock = threading.Lock()

    def process(self, context: GadgetContext) -> ProcessedGadget:
        with self._lock:
            self.calls.append(context.url)

        delay = self.delays.get(context.url)
        if delay:
            time.sleep(delay)

        failure = self.failures.get(context.url)
        if failure is not None:
            raise failure

        spec = self.specs.get(context.url) or make_spec(context.url)
        with self._lock:
            self.completed.append(context.url)
        return ProcessedGadget(context=context, spec=spec)


class BlockingProcessor(GadgetProcessor):
    """Processor that blocks every call until release() is called."""

    def __init__(self):
        self.started = threading.Event()
        self._release = threading.Event()

    def release(self) -> None:
        self._release.set()

    def process(self, context: GadgetContext) -> ProcessedGadget:
        self.started.set()
        self._release.wait(timeout=5.0)
        return ProcessedGadget(context=context, spec=make_spec(context.url))
