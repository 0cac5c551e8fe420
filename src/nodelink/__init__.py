"""nodelink: resolve content node references and render node URIs.

Public API re-exports.
"""

from nodelink.errors import (
    InvalidDimensionSpacePoint,
    InvalidNodeAggregateIdentifier,
    MissingActionNameError,
    NodelinkError,
    NodeNotFoundError,
    NoMatchingRouteError,
    RoutingError,
    ShortcutResolutionError,
    UnsupportedReferenceError,
)
from nodelink.helper import NodeUriHelper, RenderingContext
from nodelink.models import (
    ContentQuery,
    DimensionSpacePoint,
    Node,
    NodeAggregateIdentifier,
)
from nodelink.references import (
    AbsolutePathReference,
    EmptyReference,
    NodeHandleReference,
    NodeReference,
    NodeUriReference,
    ReferenceKind,
    RelativePathReference,
    SitePathReference,
    SiteRootReference,
    parse_reference,
)
from nodelink.resolver import NodeReferenceResolver
from nodelink.routing import (
    RequestContext,
    Route,
    RouteUriBuilder,
    UriBuilder,
    UriOptions,
)
from nodelink.shortcuts import ShortcutResolver, StoreShortcutResolver
from nodelink.store import NodeStore

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # models
    "ContentQuery",
    "DimensionSpacePoint",
    "Node",
    "NodeAggregateIdentifier",
    # references
    "AbsolutePathReference",
    "EmptyReference",
    "NodeHandleReference",
    "NodeReference",
    "NodeUriReference",
    "ReferenceKind",
    "RelativePathReference",
    "SitePathReference",
    "SiteRootReference",
    "parse_reference",
    # resolution
    "NodeReferenceResolver",
    "ShortcutResolver",
    "StoreShortcutResolver",
    "NodeStore",
    # routing
    "RequestContext",
    "Route",
    "RouteUriBuilder",
    "UriBuilder",
    "UriOptions",
    # helper
    "NodeUriHelper",
    "RenderingContext",
    # errors
    "InvalidDimensionSpacePoint",
    "InvalidNodeAggregateIdentifier",
    "MissingActionNameError",
    "NodeNotFoundError",
    "NoMatchingRouteError",
    "NodelinkError",
    "RoutingError",
    "ShortcutResolutionError",
    "UnsupportedReferenceError",
]
