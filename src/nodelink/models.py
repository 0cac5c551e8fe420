"""Core value types for addressing content nodes.

``ContentQuery`` is the descriptor handed to routing: which node aggregate,
on which site, in which workspace and dimension variant.  All query values
are frozen; derive new ones through the ``with_*`` methods.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    ValidationError,
    field_validator,
)

from nodelink.errors import InvalidDimensionSpacePoint, InvalidNodeAggregateIdentifier

DEFAULT_WORKSPACE = "live"
DOCUMENT_NODE_TYPE = "Neos.Neos:Document"
SHORTCUT_NODE_TYPE = "Neos.Neos:Shortcut"
DOCUMENT_NODE_TYPES = frozenset({DOCUMENT_NODE_TYPE, SHORTCUT_NODE_TYPE})

# Characters reserved by the route value format ``id@workspace;dim=value&...``.
_IDENTIFIER_FORBIDDEN_RE = re.compile(r"[\s/@;]")
_DIMENSION_FORBIDDEN_RE = re.compile(r"[\s=&,;@]")


class NodeAggregateIdentifier(RootModel[str]):
    """Opaque identifier of a node aggregate across workspaces and variants."""

    model_config = ConfigDict(frozen=True)

    @field_validator("root")
    @classmethod
    def _check_format(cls, value: str) -> str:
        if not value:
            raise ValueError("node aggregate identifier must not be empty")
        if _IDENTIFIER_FORBIDDEN_RE.search(value):
            raise ValueError(f"invalid node aggregate identifier: {value!r}")
        return value

    @classmethod
    def from_string(cls, value: str) -> NodeAggregateIdentifier:
        """Build an identifier from untrusted input.

        Raises:
            InvalidNodeAggregateIdentifier: If *value* is empty or contains
                whitespace, ``/``, ``@`` or ``;``.
        """
        try:
            return cls(value)
        except ValidationError as exc:
            raise InvalidNodeAggregateIdentifier(
                f"Invalid node aggregate identifier: {value!r}"
            ) from exc

    def __str__(self) -> str:
        return self.root


class DimensionSpacePoint(RootModel[dict[str, str]]):
    """Coordinate selecting a content variant, e.g. ``{"language": "de"}``."""

    model_config = ConfigDict(frozen=True)

    @field_validator("root")
    @classmethod
    def _check_coordinates(cls, value: dict[str, str]) -> dict[str, str]:
        for dimension, dimension_value in value.items():
            if not dimension or not dimension_value:
                raise ValueError(f"empty dimension name or value in {value!r}")
            if _DIMENSION_FORBIDDEN_RE.search(dimension) or _DIMENSION_FORBIDDEN_RE.search(
                dimension_value
            ):
                raise ValueError(
                    f"reserved character in dimension {dimension!r}={dimension_value!r}"
                )
        return dict(sorted(value.items()))

    @classmethod
    def from_string(cls, text: str) -> DimensionSpacePoint:
        """Parse ``"language=de,region=at"`` (``&`` is accepted as separator too).

        Raises:
            InvalidDimensionSpacePoint: On a part without ``=`` or with
                empty or reserved names and values.
        """
        coordinates: dict[str, str] = {}
        for part in re.split(r"[,&]", text):
            part = part.strip()
            if not part:
                continue
            dimension, sep, value = part.partition("=")
            if not sep:
                raise InvalidDimensionSpacePoint(f"Expected dimension=value, got {part!r}")
            coordinates[dimension.strip()] = value.strip()
        return cls.from_mapping(coordinates)

    @classmethod
    def from_mapping(cls, coordinates: Mapping[str, str]) -> DimensionSpacePoint:
        try:
            return cls(dict(coordinates))
        except ValidationError as exc:
            raise InvalidDimensionSpacePoint(
                f"Invalid dimension space point: {dict(coordinates)!r}"
            ) from exc

    @property
    def coordinates(self) -> dict[str, str]:
        """Return a copy of the dimension coordinates."""
        return dict(self.root)

    def get(self, dimension: str, default: str | None = None) -> str | None:
        return self.root.get(dimension, default)

    def to_uri_string(self) -> str:
        """Render as ``dim=value&dim=value`` in sorted dimension order."""
        return "&".join(f"{k}={v}" for k, v in self.root.items())

    def __getitem__(self, dimension: str) -> str:
        return self.root[dimension]

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __bool__(self) -> bool:
        return bool(self.root)

    def __hash__(self) -> int:
        return hash(tuple(self.root.items()))


class ContentQuery(BaseModel):
    """Immutable descriptor of which node to address, in which context.

    Before resolution ``node_aggregate_identifier`` may be unset; a
    resolved query always carries exactly one target identifier.
    """

    model_config = ConfigDict(frozen=True)

    node_aggregate_identifier: NodeAggregateIdentifier | None = None
    site_identifier: NodeAggregateIdentifier
    workspace_name: str = DEFAULT_WORKSPACE
    dimension_space_point: DimensionSpacePoint | None = None

    def with_node_aggregate_identifier(
        self, identifier: NodeAggregateIdentifier | str
    ) -> ContentQuery:
        if isinstance(identifier, str):
            identifier = NodeAggregateIdentifier.from_string(identifier)
        return self.model_copy(update={"node_aggregate_identifier": identifier})

    def with_dimension_space_point(
        self, dimension_space_point: DimensionSpacePoint | None
    ) -> ContentQuery:
        return self.model_copy(update={"dimension_space_point": dimension_space_point})

    def with_workspace_name(self, workspace_name: str) -> ContentQuery:
        if not workspace_name:
            raise ValueError("Workspace name must not be empty")
        return self.model_copy(update={"workspace_name": workspace_name})

    @property
    def is_resolved(self) -> bool:
        return self.node_aggregate_identifier is not None

    def to_route_value(self) -> str:
        """Serialize for routing: ``<identifier>@<workspace>[;dim=value&...]``.

        Raises:
            ValueError: If the query has no target identifier yet.
        """
        if self.node_aggregate_identifier is None:
            raise ValueError("ContentQuery has no node aggregate identifier")
        value = f"{self.node_aggregate_identifier}@{self.workspace_name}"
        if self.dimension_space_point:
            value += ";" + self.dimension_space_point.to_uri_string()
        return value


class Node(BaseModel):
    """A resolved content node handle."""

    node_aggregate_identifier: NodeAggregateIdentifier
    node_type: str = DOCUMENT_NODE_TYPE
    name: str = ""
    parent_identifier: NodeAggregateIdentifier | None = None
    properties: dict[str, object] = Field(default_factory=dict)

    @property
    def is_shortcut(self) -> bool:
        return self.node_type == SHORTCUT_NODE_TYPE

    @property
    def is_document(self) -> bool:
        """Whether the node is a page-like node a link can point at."""
        return self.node_type in DOCUMENT_NODE_TYPES

    @property
    def identifier(self) -> str:
        """Plain string form of the aggregate identifier."""
        return str(self.node_aggregate_identifier)
