"""Exception taxonomy for node reference resolution and URI building."""

from __future__ import annotations


class NodelinkError(Exception):
    """Base class for all nodelink errors."""


class UnsupportedReferenceError(NodelinkError):
    """Raised in strict mode for reference shapes the resolver cannot handle."""

    def __init__(self, kind: str, value: str = "") -> None:
        self.kind = kind
        self.value = value
        detail = f": {value!r}" if value else ""
        super().__init__(f"Unsupported node reference ({kind}){detail}")


class InvalidNodeAggregateIdentifier(NodelinkError, ValueError):
    """Raised when a node aggregate identifier is empty or malformed."""


class InvalidDimensionSpacePoint(NodelinkError, ValueError):
    """Raised when a dimension space point cannot be parsed."""


class RoutingError(NodelinkError):
    """Raised by a URI builder when no URI can be produced."""


class MissingActionNameError(RoutingError):
    """Raised when ``uri_for`` is called without an action name."""


class NoMatchingRouteError(RoutingError):
    """Raised when no route matches the requested target."""


class ShortcutResolutionError(NodelinkError):
    """Raised when a shortcut node cannot be resolved to a target."""


class NodeNotFoundError(NodelinkError, KeyError):
    """Raised when a required node is missing from the store."""

    def __str__(self) -> str:
        return f"Node not found: {self.args[0]}" if self.args else "Node not found"
