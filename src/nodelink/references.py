"""Node reference variants and classification of raw template input.

A node reference arrives from templates as a node object, a string or
nothing at all.  ``parse_reference`` turns it into one of the tagged
variants below; the ``kind`` field is the discriminator.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from nodelink.models import Node, NodeAggregateIdentifier

NODE_URI_SCHEME = "node://"
SITE_ROOT_SENTINEL = "~"


class ReferenceKind(StrEnum):
    """Discriminator for node reference variants."""

    NODE_HANDLE = "node_handle"
    SITE_ROOT = "site_root"
    NODE_URI = "node_uri"
    SITE_PATH = "site_path"
    ABSOLUTE_PATH = "absolute_path"
    RELATIVE_PATH = "relative_path"
    EMPTY = "empty"


class _Reference(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def is_path(self) -> bool:
        return False


class NodeHandleReference(_Reference):
    """A node object that is already resolved."""

    kind: Literal["node_handle"] = ReferenceKind.NODE_HANDLE.value
    node: Node


class SiteRootReference(_Reference):
    """The bare ``~`` sentinel, addressing the current site node."""

    kind: Literal["site_root"] = ReferenceKind.SITE_ROOT.value


class NodeUriReference(_Reference):
    """A ``node://<identifier>`` URI."""

    kind: Literal["node_uri"] = ReferenceKind.NODE_URI.value
    identifier: NodeAggregateIdentifier

    @property
    def uri(self) -> str:
        return f"{NODE_URI_SCHEME}{self.identifier}"


class SitePathReference(_Reference):
    """A path relative to the site node, e.g. ``~/about/us``."""

    kind: Literal["site_path"] = ReferenceKind.SITE_PATH.value
    path: str

    @property
    def is_path(self) -> bool:
        return True


class AbsolutePathReference(_Reference):
    """An absolute node path, e.g. ``/sites/acmecom/about/us``."""

    kind: Literal["absolute_path"] = ReferenceKind.ABSOLUTE_PATH.value
    path: str

    @property
    def is_path(self) -> bool:
        return True


class RelativePathReference(_Reference):
    """A path relative to the current node, e.g. ``../about``."""

    kind: Literal["relative_path"] = ReferenceKind.RELATIVE_PATH.value
    path: str

    @property
    def is_path(self) -> bool:
        return True


class EmptyReference(_Reference):
    """No reference was given."""

    kind: Literal["empty"] = ReferenceKind.EMPTY.value


NodeReference = Annotated[
    NodeHandleReference
    | SiteRootReference
    | NodeUriReference
    | SitePathReference
    | AbsolutePathReference
    | RelativePathReference
    | EmptyReference,
    Field(discriminator="kind"),
]

_REFERENCE_TYPES = (
    NodeHandleReference,
    SiteRootReference,
    NodeUriReference,
    SitePathReference,
    AbsolutePathReference,
    RelativePathReference,
    EmptyReference,
)


def parse_reference(value: object) -> NodeReference:
    """Classify raw template input as a node reference.

    Args:
        value: A ``Node``, a string, ``None`` or an already parsed reference.

    Returns:
        The matching reference variant.

    Raises:
        InvalidNodeAggregateIdentifier: If a ``node://`` URI carries an
            empty or malformed identifier.
        TypeError: If *value* is of an unsupported type.
    """
    if isinstance(value, _REFERENCE_TYPES):
        return value
    if isinstance(value, Node):
        return NodeHandleReference(node=value)
    if value is None or value == "":
        return EmptyReference()
    if not isinstance(value, str):
        raise TypeError(f"Cannot use {type(value).__name__} as a node reference")

    if value == SITE_ROOT_SENTINEL:
        return SiteRootReference()
    if value.startswith(NODE_URI_SCHEME):
        identifier = NodeAggregateIdentifier.from_string(value[len(NODE_URI_SCHEME):])
        return NodeUriReference(identifier=identifier)
    if value.startswith(SITE_ROOT_SENTINEL + "/"):
        return SitePathReference(path=value[2:])
    if value.startswith("/"):
        return AbsolutePathReference(path=value)
    return RelativePathReference(path=value)
