"""Template helper rendering URIs that point to content nodes.

The target node is given as a node object, ``~`` (the site node) or a
``node://<identifier>`` URI.  Node paths are not resolved yet: for those,
and for a missing reference, the helper renders an empty string, which
callers must treat as "no URI available".

Examples::

    helper.render(node, context=ctx)
    # about/us.html

    helper.render("node://30e893c1-caef-0ca5-b53d-e5699bb8e506", context=ctx, absolute=True)
    # http://www.example.org/30e893c1-...@live.html

    helper.render("~/about/us", context=ctx)
    # ""
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from nodelink.models import ContentQuery, DimensionSpacePoint
from nodelink.resolver import NodeReferenceResolver
from nodelink.routing import RequestContext, UriBuilder, UriOptions

SHOW_ACTION = "show"
NODE_CONTROLLER = "Frontend\\Node"
NODE_PACKAGE = "Neos.Neos"


class RenderingContext(BaseModel):
    """Context a template is rendered in: current query and request."""

    content_query: ContentQuery
    request: RequestContext = Field(default_factory=RequestContext)


class NodeUriHelper:
    """Renders node URIs by resolving the reference, then routing the query."""

    def __init__(self, resolver: NodeReferenceResolver, uri_builder: UriBuilder) -> None:
        self._resolver = resolver
        self._uri_builder = uri_builder

    def render(
        self,
        node: object = None,
        *,
        context: RenderingContext,
        format: str | None = None,
        absolute: bool = False,
        arguments: dict[str, Any] | None = None,
        section: str = "",
        add_query_string: bool = False,
        arguments_to_be_excluded_from_query_string: list[str] | None = None,
        resolve_shortcuts: bool = True,
        dimension_space_point: DimensionSpacePoint | None = None,
    ) -> str:
        """Render the URI for *node*.

        Args:
            node: A ``Node``, ``~``, a ``node://`` URI, a node path or ``None``.
            context: Current rendering context.
            format: Format to use for the URI, for example "html" or "json".
            absolute: Render an absolute URI.
            arguments: Additional arguments, e.g. pagination parameters.
            section: Anchor appended as ``#section``.
            add_query_string: Keep the current request's query arguments.
            arguments_to_be_excluded_from_query_string: Arguments removed
                from the kept query string.  Only used with
                *add_query_string*.
            resolve_shortcuts: If False, link to a shortcut node itself
                instead of its target.
            dimension_space_point: Explicit variant, e.g. for dimension menus.

        Returns:
            The URI, or ``""`` if no URI could be resolved for *node*.

        Raises:
            RoutingError: If the URI builder finds no matching route.
        """
        query = self._resolver.resolve(
            node,
            context.content_query,
            resolve_shortcuts=resolve_shortcuts,
            dimension_space_point=dimension_space_point,
        )
        if query is None:
            return ""

        options = UriOptions(
            format=format,
            absolute=absolute,
            arguments=arguments or {},
            section=section,
            add_query_string=add_query_string,
            arguments_to_be_excluded_from_query_string=(
                arguments_to_be_excluded_from_query_string or []
            ),
        )
        return self._uri_builder.uri_for(
            SHOW_ACTION,
            {"node": query},
            NODE_CONTROLLER,
            NODE_PACKAGE,
            options=options,
            request=context.request,
        )
