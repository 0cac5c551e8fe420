"""Resolve heterogeneous node references into content queries."""

from __future__ import annotations

import logging

from nodelink.errors import UnsupportedReferenceError
from nodelink.models import ContentQuery, DimensionSpacePoint
from nodelink.references import (
    AbsolutePathReference,
    EmptyReference,
    NodeHandleReference,
    NodeReference,
    NodeUriReference,
    RelativePathReference,
    SitePathReference,
    SiteRootReference,
    parse_reference,
)
from nodelink.shortcuts import ShortcutResolver

logger = logging.getLogger(__name__)


class NodeReferenceResolver:
    """Turns a node reference plus the current query into a target query.

    Supported references are node handles, the ``~`` site root and
    ``node://`` URIs.  Path references and empty input yield ``None``;
    with ``strict=True`` path references raise instead.
    """

    def __init__(self, shortcut_resolver: ShortcutResolver, *, strict: bool = False) -> None:
        self._shortcut_resolver = shortcut_resolver
        self._strict = strict

    @property
    def strict(self) -> bool:
        return self._strict

    def resolve(
        self,
        reference: object,
        base_query: ContentQuery,
        *,
        resolve_shortcuts: bool = True,
        dimension_space_point: DimensionSpacePoint | None = None,
    ) -> ContentQuery | None:
        """Resolve *reference* relative to *base_query*.

        Args:
            reference: A ``Node``, a string, ``None`` or a parsed reference.
            base_query: Query of the current rendering context.  Never
                modified.
            resolve_shortcuts: Follow shortcut nodes to their target.
                Only affects node handles.
            dimension_space_point: Explicit variant overriding the query's
                default.

        Returns:
            A query targeting exactly one node aggregate, or ``None`` when
            no target can be derived from the reference.

        Raises:
            UnsupportedReferenceError: For path references in strict mode.
            InvalidNodeAggregateIdentifier: For a malformed ``node://`` URI.
            ShortcutResolutionError: When a shortcut has no valid target.
        """
        parsed = parse_reference(reference)
        query = self._target_query(parsed, base_query, resolve_shortcuts)
        if query is None:
            return None

        if dimension_space_point is not None:
            query = query.with_dimension_space_point(dimension_space_point)

        logger.debug("Resolved %s reference to %s", parsed.kind, query.to_route_value())
        return query

    def _target_query(
        self,
        reference: NodeReference,
        base_query: ContentQuery,
        resolve_shortcuts: bool,
    ) -> ContentQuery | None:
        if isinstance(reference, NodeHandleReference):
            node = reference.node
            if resolve_shortcuts:
                node = self._shortcut_resolver.resolve_shortcut_target(node)
            return base_query.with_node_aggregate_identifier(node.node_aggregate_identifier)

        if isinstance(reference, SiteRootReference):
            return base_query.with_node_aggregate_identifier(base_query.site_identifier)

        if isinstance(reference, NodeUriReference):
            return base_query.with_node_aggregate_identifier(reference.identifier)

        if isinstance(reference, (SitePathReference, AbsolutePathReference, RelativePathReference)):
            # TODO: resolve node paths once the content graph exposes path lookups
            if self._strict:
                raise UnsupportedReferenceError(reference.kind, reference.path)
            logger.debug("Path reference %r is not supported, no URI", reference.path)
            return None

        if isinstance(reference, EmptyReference):
            return None

        raise TypeError(f"Unhandled node reference variant: {reference!r}")
