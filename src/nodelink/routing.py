"""URI building: capability interface plus a small route-table implementation.

``RouteUriBuilder`` matches a package/controller/action triple against a
list of ``Route`` patterns such as ``{node}.{@format}`` and renders the
remaining arguments as a query string.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote, urlencode

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nodelink.errors import MissingActionNameError, NoMatchingRouteError
from nodelink.models import ContentQuery

logger = logging.getLogger(__name__)

FORMAT_PLACEHOLDER = "@format"

_PLACEHOLDER_RE = re.compile(r"\{(@?[\w.-]+)\}")

# Characters kept verbatim inside a path segment produced from a route value.
_SAFE_ROUTE_CHARS = "@;=&-_.~"


class RequestContext(BaseModel):
    """The request a URI is built for: base URI and current query arguments."""

    base_uri: str = "http://localhost/"
    arguments: dict[str, Any] = Field(default_factory=dict)

    @field_validator("base_uri")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"


class UriOptions(BaseModel):
    """Rendering options passed through to the URI builder."""

    model_config = ConfigDict(frozen=True)

    format: str | None = None
    absolute: bool = False
    arguments: dict[str, Any] = Field(default_factory=dict)
    section: str = ""
    add_query_string: bool = False
    arguments_to_be_excluded_from_query_string: list[str] = Field(default_factory=list)


class Route(BaseModel):
    """A single route: target triple plus a URI pattern."""

    name: str = ""
    package: str
    controller: str
    action: str
    uri_pattern: str
    defaults: dict[str, str] = Field(default_factory=dict)

    @property
    def placeholders(self) -> list[str]:
        return _PLACEHOLDER_RE.findall(self.uri_pattern)

    def matches(self, action: str, controller: str, package: str) -> bool:
        """Case-insensitive match on the target triple."""
        return (
            self.action.lower() == action.lower()
            and self.controller.lower() == controller.lower()
            and self.package.lower() == package.lower()
        )


DEFAULT_ROUTES: list[Route] = [
    Route(
        name="Neos :: Frontend :: Document node",
        package="Neos.Neos",
        controller="Frontend\\Node",
        action="show",
        uri_pattern="{node}.{@format}",
        defaults={FORMAT_PLACEHOLDER: "html"},
    ),
]


class UriBuilder(ABC):
    """Capability: build a URI for an action/controller/package triple."""

    @abstractmethod
    def uri_for(
        self,
        action: str,
        arguments: dict[str, Any],
        controller: str,
        package: str,
        *,
        options: UriOptions | None = None,
        request: RequestContext | None = None,
    ) -> str:
        """Return the URI for the target.

        Raises:
            RoutingError: If no URI can be built for the target.
        """


class RouteUriBuilder(UriBuilder):
    """Builds URIs by matching the first route for the target triple."""

    def __init__(
        self,
        routes: list[Route] | None = None,
        request: RequestContext | None = None,
    ) -> None:
        self._routes = list(routes) if routes else list(DEFAULT_ROUTES)
        self._request = request or RequestContext()

    @property
    def routes(self) -> list[Route]:
        return list(self._routes)

    def uri_for(
        self,
        action: str,
        arguments: dict[str, Any],
        controller: str,
        package: str,
        *,
        options: UriOptions | None = None,
        request: RequestContext | None = None,
    ) -> str:
        if not action:
            raise MissingActionNameError("The action name must not be empty")
        options = options or UriOptions()
        request = request or self._request

        route = self._find_route(action, controller, package)
        if route is None:
            raise NoMatchingRouteError(
                f"No route matches {package}/{controller}/{action}"
            )

        path, consumed = self._render_pattern(route, arguments, options)

        query: dict[str, Any] = {}
        if options.add_query_string:
            excluded = set(options.arguments_to_be_excluded_from_query_string)
            query.update(
                {
                    k: _argument_value(v)
                    for k, v in request.arguments.items()
                    if k not in excluded
                }
            )
        for key, value in arguments.items():
            if key not in consumed:
                query[key] = _argument_value(value)
        for key, value in options.arguments.items():
            query[key] = _argument_value(value)

        uri = path
        if query:
            uri += "?" + urlencode(query, doseq=True)
        if options.section:
            uri += "#" + options.section
        if options.absolute:
            uri = request.base_uri + uri

        logger.debug("Built URI %s with route %r", uri, route.name or route.uri_pattern)
        return uri

    def _find_route(self, action: str, controller: str, package: str) -> Route | None:
        for route in self._routes:
            if route.matches(action, controller, package):
                return route
        return None

    def _render_pattern(
        self, route: Route, arguments: dict[str, Any], options: UriOptions
    ) -> tuple[str, set[str]]:
        consumed: set[str] = set()

        def substitute(match: re.Match[str]) -> str:
            name = match.group(1)
            if name == FORMAT_PLACEHOLDER:
                value = options.format or route.defaults.get(FORMAT_PLACEHOLDER, "")
            elif name in arguments:
                value = _argument_value(arguments[name])
                if isinstance(value, (list, tuple)):
                    raise NoMatchingRouteError(
                        f"Route {route.uri_pattern!r} cannot take a list for {{{name}}}"
                    )
                consumed.add(name)
            else:
                value = route.defaults.get(name, "")
            if not value:
                raise NoMatchingRouteError(
                    f"Route {route.uri_pattern!r} needs a value for {{{name}}}"
                )
            return quote(value, safe=_SAFE_ROUTE_CHARS)

        return _PLACEHOLDER_RE.sub(substitute, route.uri_pattern), consumed


def _argument_value(value: Any) -> Any:
    """Convert a route argument to its URI representation."""
    if isinstance(value, ContentQuery):
        try:
            return value.to_route_value()
        except ValueError as exc:
            raise NoMatchingRouteError(str(exc)) from exc
    if isinstance(value, bool):
        return "1" if value else "0"
    return value if isinstance(value, (list, tuple)) else str(value)
