"""In-memory node store with JSON persistence.

Backs the default shortcut resolver and the CLI.  Mirrors the content
repository's parent/child structure just enough to follow shortcuts.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from pathlib import Path

from pydantic import BaseModel, Field

from nodelink.errors import NodeNotFoundError
from nodelink.models import Node, NodeAggregateIdentifier

logger = logging.getLogger(__name__)

NODE_STORE_FILENAME = ".nodelink-nodes.json"

# Alias to avoid shadowing by NodeStore.list method
_list = list


class _StoreData(BaseModel):
    """Internal wrapper for JSON serialization."""

    nodes: list[Node] = Field(default_factory=list)


class NodeStore:
    """Node lookup by aggregate identifier, with optional JSON persistence.

    Internal indices:
    - ``_nodes``: identifier -> Node (insertion ordered)
    - ``_children``: parent identifier -> list[identifier]
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._nodes: dict[str, Node] = {}
        self._children: dict[str, list[str]] = defaultdict(list)

        if path is not None:
            self._load()

    # -- Write operations ----------------------------------------------------

    def upsert(self, node: Node) -> Node:
        """Insert or replace a node, keeping the child index consistent."""
        key = node.identifier
        existing = self._nodes.get(key)
        if existing is not None and existing.parent_identifier == node.parent_identifier:
            # Same parent: the node keeps its position among its siblings.
            self._nodes[key] = node
            return node

        if existing is not None:
            # Re-append so save() writes nodes in sibling order.
            del self._nodes[key]
            if existing.parent_identifier is not None:
                siblings = self._children[str(existing.parent_identifier)]
                if key in siblings:
                    siblings.remove(key)
        self._nodes[key] = node
        if node.parent_identifier is not None:
            self._children[str(node.parent_identifier)].append(key)
        return node

    # -- Read operations -----------------------------------------------------

    def get(self, identifier: NodeAggregateIdentifier | str) -> Node | None:
        """Return a node by identifier, or ``None``."""
        return self._nodes.get(str(identifier))

    def require(self, identifier: NodeAggregateIdentifier | str) -> Node:
        """Return a node by identifier.

        Raises:
            NodeNotFoundError: If the identifier is unknown.
        """
        node = self.get(identifier)
        if node is None:
            raise NodeNotFoundError(str(identifier))
        return node

    def children(self, identifier: NodeAggregateIdentifier | str) -> _list[Node]:
        """Return child nodes in insertion order."""
        return [self._nodes[k] for k in self._children.get(str(identifier), []) if k in self._nodes]

    def parent(self, identifier: NodeAggregateIdentifier | str) -> Node | None:
        node = self.get(identifier)
        if node is None or node.parent_identifier is None:
            return None
        return self.get(node.parent_identifier)

    def list(self, node_type: str | None = None) -> _list[Node]:
        """Return nodes, optionally filtered by node type."""
        if node_type is None:
            return _list(self._nodes.values())
        return [n for n in self._nodes.values() if n.node_type == node_type]

    def count(self) -> int:
        return len(self._nodes)

    # -- Persistence ---------------------------------------------------------

    def save(self) -> None:
        """Serialize nodes to JSON at ``path / NODE_STORE_FILENAME``."""
        if self._path is None:
            return

        filepath = self._path / NODE_STORE_FILENAME
        filepath.parent.mkdir(parents=True, exist_ok=True)
        data = _StoreData(nodes=_list(self._nodes.values()))
        filepath.write_text(data.model_dump_json(indent=2), encoding="utf-8")

    def _load(self) -> None:
        if self._path is None:
            return

        filepath = self._path / NODE_STORE_FILENAME
        if not filepath.exists():
            return

        try:
            data = _StoreData.model_validate(json.loads(filepath.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, ValueError):
            logger.warning("Corrupt node store at %s, starting fresh", filepath)
            return

        for node in data.nodes:
            self.upsert(node)
