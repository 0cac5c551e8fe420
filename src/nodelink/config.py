"""Unified configuration loaded from .nodelink.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from nodelink.models import ContentQuery, DimensionSpacePoint, NodeAggregateIdentifier
from nodelink.routing import DEFAULT_ROUTES, FORMAT_PLACEHOLDER, RequestContext, Route

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".nodelink.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "nodelink" / "config.toml"


class SiteSectionConfig(BaseModel):
    """[site] section."""

    site_identifier: str = "site"
    workspace: str = "live"
    dimensions: dict[str, str] = Field(default_factory=dict)


class RoutingSectionConfig(BaseModel):
    """[routing] section."""

    base_uri: str = "http://localhost/"
    default_format: str = "html"
    routes: list[Route] = Field(default_factory=list)


class ResolverSectionConfig(BaseModel):
    """[resolver] section."""

    resolve_shortcuts: bool = True
    strict_paths: bool = False


class StoreSectionConfig(BaseModel):
    """[store] section."""

    directory: str = "."


class NodelinkConfig(BaseModel):
    """Top-level configuration model."""

    site: SiteSectionConfig = Field(default_factory=SiteSectionConfig)
    routing: RoutingSectionConfig = Field(default_factory=RoutingSectionConfig)
    resolver: ResolverSectionConfig = Field(default_factory=ResolverSectionConfig)
    store: StoreSectionConfig = Field(default_factory=StoreSectionConfig)

    def to_content_query(self) -> ContentQuery:
        """Build the base query of the rendering context.

        Raises:
            InvalidNodeAggregateIdentifier: If the site identifier is malformed.
            InvalidDimensionSpacePoint: If the site dimensions are malformed.
        """
        dimensions = (
            DimensionSpacePoint.from_mapping(self.site.dimensions)
            if self.site.dimensions
            else None
        )
        return ContentQuery(
            site_identifier=NodeAggregateIdentifier.from_string(self.site.site_identifier),
            workspace_name=self.site.workspace,
            dimension_space_point=dimensions,
        )

    def to_routes(self) -> list[Route]:
        """Configured routes, falling back to the built-in frontend route.

        ``routing.default_format`` replaces the built-in route's format and
        fills in configured routes that declare none.
        """
        fmt = {FORMAT_PLACEHOLDER: self.routing.default_format}
        if not self.routing.routes:
            return [
                route.model_copy(update={"defaults": {**route.defaults, **fmt}})
                for route in DEFAULT_ROUTES
            ]
        return [
            route.model_copy(update={"defaults": {**fmt, **route.defaults}})
            for route in self.routing.routes
        ]

    def to_request_context(self) -> RequestContext:
        return RequestContext(base_uri=self.routing.base_uri)

    @property
    def store_path(self) -> Path:
        return Path(self.store.directory)


def load_config(path: str | Path | None = None) -> NodelinkConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .nodelink.toml in CWD
    3. ~/.config/nodelink/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged NodelinkConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = NodelinkConfig.model_validate(data) if data else NodelinkConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: NodelinkConfig, **cli_kwargs: object) -> NodelinkConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values, e.g. ``site_identifier``,
            ``workspace``, ``base_uri``, ``strict_paths``, ``store_directory``.

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "site_identifier": ("site", "site_identifier"),
        "workspace": ("site", "workspace"),
        "dimensions": ("site", "dimensions"),
        "base_uri": ("routing", "base_uri"),
        "default_format": ("routing", "default_format"),
        "resolve_shortcuts": ("resolver", "resolve_shortcuts"),
        "strict_paths": ("resolver", "strict_paths"),
        "store_directory": ("store", "directory"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return NodelinkConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: NodelinkConfig) -> NodelinkConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "NODELINK_SITE_IDENTIFIER": ("site", "site_identifier"),
        "NODELINK_WORKSPACE": ("site", "workspace"),
        "NODELINK_BASE_URI": ("routing", "base_uri"),
        "NODELINK_DEFAULT_FORMAT": ("routing", "default_format"),
        "NODELINK_STORE_DIR": ("store", "directory"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    dimensions_raw = os.environ.get("NODELINK_DIMENSIONS")
    if dimensions_raw is not None:
        data["site"]["dimensions"] = DimensionSpacePoint.from_string(dimensions_raw).coordinates

    strict_raw = os.environ.get("NODELINK_STRICT_PATHS")
    if strict_raw is not None:
        data["resolver"]["strict_paths"] = strict_raw.lower() in ("true", "1", "yes")

    return NodelinkConfig.model_validate(data)
