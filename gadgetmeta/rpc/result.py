"""
GadgetResult — Per-gadget outcome and the batch response

Every requested gadget yields exactly one result:
- Success: the projected wire object
- Failure: the gadget's url and module id plus the error message

BatchResponse collects results in the order they are appended (the
handler appends in completion order) and checks each entry is
serializable as it arrives.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

import orjson

from ..context import GadgetContext
from ..errors import OrchestrationError


@dataclass(frozen=True)
class Success:
    """A gadget that was processed and projected."""
    entry: Dict[str, Any]

    @property
    def ok(self) -> bool:
        return True

    def to_wire(self) -> Dict[str, Any]:
        return self.entry


@dataclass(frozen=True)
class Failure:
    """A gadget whose processing failed."""
    context: GadgetContext
    message: str

    @property
    def ok(self) -> bool:
        return False

    def to_wire(self) -> Dict[str, Any]:
        return {
            "url": self.context.url,
            "moduleId": self.context.module_id,
            "errors": [self.message],
        }


GadgetResult = Union[Success, Failure]


@dataclass
class BatchResponse:
    """Results of one batch, in append order."""
    results: List[GadgetResult] = field(default_factory=list)

    def append(self, result: GadgetResult) -> None:
        """
        Add a result.

        Raises:
            OrchestrationError: If the entry cannot be serialized
        """
        try:
            orjson.dumps(result.to_wire())
        except TypeError as e:
            # orjson.JSONEncodeError is a TypeError
            raise OrchestrationError(f"Unable to write JSON: {e}") from e
        self.results.append(result)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded

    def to_wire(self) -> Dict[str, Any]:
        return {"gadgets": [result.to_wire() for result in self.results]}
