"""Shortcut resolution: redirect a shortcut node to the node it points at."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import StrEnum

from nodelink.errors import InvalidNodeAggregateIdentifier, ShortcutResolutionError
from nodelink.models import Node, NodeAggregateIdentifier
from nodelink.references import NODE_URI_SCHEME
from nodelink.store import NodeStore

logger = logging.getLogger(__name__)


class ShortcutTargetMode(StrEnum):
    """Values of a shortcut node's ``targetMode`` property."""

    FIRST_CHILD_NODE = "firstChildNode"
    PARENT_NODE = "parentNode"
    SELECTED_TARGET = "selectedTarget"


class ShortcutResolver(ABC):
    """Capability: find the effective target of a (possibly shortcut) node."""

    @abstractmethod
    def resolve_shortcut_target(self, node: Node) -> Node:
        """Return the node a link to *node* should point at.

        Non-shortcut nodes are returned unchanged.
        """


class StoreShortcutResolver(ShortcutResolver):
    """Follows shortcut chains through a ``NodeStore``."""

    def __init__(self, store: NodeStore) -> None:
        self._store = store

    def resolve_shortcut_target(self, node: Node) -> Node:
        """Follow shortcuts until a non-shortcut node is reached.

        Raises:
            ShortcutResolutionError: On a cycle, a missing target or an
                unknown ``targetMode``.
        """
        seen: list[str] = []
        current = node
        while current.is_shortcut:
            if current.identifier in seen:
                chain = " -> ".join([*seen, current.identifier])
                raise ShortcutResolutionError(f"Shortcut cycle detected: {chain}")
            seen.append(current.identifier)
            current = self._next_target(current)

        if seen:
            logger.debug("Resolved shortcut %s to %s", node.identifier, current.identifier)
        return current

    def _next_target(self, shortcut: Node) -> Node:
        raw_mode = shortcut.properties.get("targetMode", ShortcutTargetMode.FIRST_CHILD_NODE)
        try:
            mode = ShortcutTargetMode(raw_mode)
        except ValueError:
            raise ShortcutResolutionError(
                f"Unknown targetMode {raw_mode!r} on shortcut {shortcut.identifier}"
            ) from None

        if mode is ShortcutTargetMode.FIRST_CHILD_NODE:
            children = [
                child
                for child in self._store.children(shortcut.node_aggregate_identifier)
                if child.is_document
            ]
            if not children:
                raise ShortcutResolutionError(
                    f"Shortcut {shortcut.identifier} has no child document to point to"
                )
            return children[0]

        if mode is ShortcutTargetMode.PARENT_NODE:
            parent = self._store.parent(shortcut.node_aggregate_identifier)
            if parent is None:
                raise ShortcutResolutionError(
                    f"Shortcut {shortcut.identifier} has no parent node to point to"
                )
            return parent

        target = shortcut.properties.get("target")
        if not isinstance(target, str) or not target.startswith(NODE_URI_SCHEME):
            raise ShortcutResolutionError(
                f"Shortcut {shortcut.identifier} has no node:// target: {target!r}"
            )
        try:
            identifier = NodeAggregateIdentifier.from_string(target[len(NODE_URI_SCHEME):])
        except InvalidNodeAggregateIdentifier as exc:
            raise ShortcutResolutionError(str(exc)) from exc
        resolved = self._store.get(identifier)
        if resolved is None:
            raise ShortcutResolutionError(
                f"Target {target} of shortcut {shortcut.identifier} does not exist"
            )
        return resolved
