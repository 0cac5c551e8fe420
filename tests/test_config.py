"""Tests for nodelink.config — NodelinkConfig, TOML loading, env and CLI overrides."""

from pathlib import Path

import pytest
from nodelink import config as config_module
from nodelink.config import NodelinkConfig, load_config, merge_cli_overrides
from nodelink.errors import InvalidDimensionSpacePoint, InvalidNodeAggregateIdentifier
from nodelink.models import DimensionSpacePoint, NodeAggregateIdentifier

_ENV_VARS = (
    "NODELINK_SITE_IDENTIFIER",
    "NODELINK_WORKSPACE",
    "NODELINK_DIMENSIONS",
    "NODELINK_BASE_URI",
    "NODELINK_DEFAULT_FORMAT",
    "NODELINK_STRICT_PATHS",
    "NODELINK_STORE_DIR",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Isolate tests from the user's env vars and global config."""
    for key in _ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config_module, "GLOBAL_CONFIG_PATH", tmp_path / "no-global.toml")


class TestDefaults:
    def test_sections(self):
        cfg = NodelinkConfig()
        assert cfg.site.site_identifier == "site"
        assert cfg.site.workspace == "live"
        assert cfg.routing.base_uri == "http://localhost/"
        assert cfg.routing.default_format == "html"
        assert cfg.resolver.resolve_shortcuts is True
        assert cfg.resolver.strict_paths is False

    def test_content_query(self):
        query = NodelinkConfig().to_content_query()
        assert query.site_identifier == NodeAggregateIdentifier("site")
        assert query.dimension_space_point is None
        assert query.node_aggregate_identifier is None

    def test_content_query_rejects_bad_site_identifier(self):
        cfg = merge_cli_overrides(NodelinkConfig(), site_identifier="bad site")
        with pytest.raises(InvalidNodeAggregateIdentifier, match="bad site"):
            cfg.to_content_query()

    def test_default_route_uses_default_format(self):
        cfg = NodelinkConfig.model_validate({"routing": {"default_format": "json"}})
        routes = cfg.to_routes()
        assert len(routes) == 1
        assert routes[0].uri_pattern == "{node}.{@format}"
        assert routes[0].defaults["@format"] == "json"


class TestLoadConfig:
    def test_explicit_path(self, tmp_path: Path):
        toml_file = tmp_path / "nodelink.toml"
        toml_file.write_text(
            "[site]\n"
            'site_identifier = "acme"\n'
            'workspace = "user-admin"\n'
            'dimensions = { language = "de" }\n'
            "[routing]\n"
            'base_uri = "https://acme.test"\n'
            "[resolver]\n"
            "strict_paths = true\n",
            encoding="utf-8",
        )
        cfg = load_config(toml_file)
        assert cfg.site.site_identifier == "acme"
        assert cfg.resolver.strict_paths is True
        query = cfg.to_content_query()
        assert query.workspace_name == "user-admin"
        assert query.dimension_space_point == DimensionSpacePoint({"language": "de"})
        assert cfg.to_request_context().base_uri == "https://acme.test/"

    def test_routes_from_toml(self, tmp_path: Path):
        toml_file = tmp_path / "nodelink.toml"
        toml_file.write_text(
            "[[routing.routes]]\n"
            'package = "Neos.Neos"\n'
            'controller = "Frontend\\\\Node"\n'
            'action = "show"\n'
            'uri_pattern = "content/{node}.{@format}"\n',
            encoding="utf-8",
        )
        routes = load_config(toml_file).to_routes()
        assert routes[0].controller == "Frontend\\Node"
        assert routes[0].uri_pattern == "content/{node}.{@format}"
        assert routes[0].defaults["@format"] == "html"

    def test_missing_explicit_path_uses_defaults(self, tmp_path: Path):
        cfg = load_config(tmp_path / "missing.toml")
        assert cfg == NodelinkConfig()

    def test_invalid_toml_uses_defaults(self, tmp_path: Path):
        toml_file = tmp_path / "broken.toml"
        toml_file.write_text("[site\n", encoding="utf-8")
        assert load_config(toml_file) == NodelinkConfig()

    def test_discovers_file_in_cwd(self, tmp_path: Path, monkeypatch):
        (tmp_path / ".nodelink.toml").write_text(
            '[site]\nsite_identifier = "from-cwd"\n', encoding="utf-8"
        )
        monkeypatch.chdir(tmp_path)
        assert load_config().site.site_identifier == "from-cwd"

    def test_global_config_fallback(self, tmp_path: Path, monkeypatch):
        global_file = tmp_path / "global.toml"
        global_file.write_text('[site]\nsite_identifier = "global"\n', encoding="utf-8")
        monkeypatch.setattr(config_module, "GLOBAL_CONFIG_PATH", global_file)
        empty_cwd = tmp_path / "cwd"
        empty_cwd.mkdir()
        monkeypatch.chdir(empty_cwd)
        assert load_config().site.site_identifier == "global"


class TestEnvVars:
    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch):
        toml_file = tmp_path / "nodelink.toml"
        toml_file.write_text('[site]\nsite_identifier = "acme"\n', encoding="utf-8")
        monkeypatch.setenv("NODELINK_SITE_IDENTIFIER", "from-env")
        monkeypatch.setenv("NODELINK_BASE_URI", "https://env.test/")
        cfg = load_config(toml_file)
        assert cfg.site.site_identifier == "from-env"
        assert cfg.routing.base_uri == "https://env.test/"

    def test_dimensions(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("NODELINK_DIMENSIONS", "language=de,region=at")
        cfg = load_config(tmp_path / "missing.toml")
        assert cfg.site.dimensions == {"language": "de", "region": "at"}

    def test_invalid_dimensions(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("NODELINK_DIMENSIONS", "language")
        with pytest.raises(InvalidDimensionSpacePoint):
            load_config(tmp_path / "missing.toml")

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("no", False)])
    def test_strict_paths(self, tmp_path: Path, monkeypatch, raw, expected):
        monkeypatch.setenv("NODELINK_STRICT_PATHS", raw)
        assert load_config(tmp_path / "missing.toml").resolver.strict_paths is expected


class TestCliOverrides:
    def test_overrides_set_values(self):
        cfg = merge_cli_overrides(
            NodelinkConfig(),
            site_identifier="cli-site",
            workspace="review",
            strict_paths=True,
            store_directory="/tmp/nodes",
        )
        assert cfg.site.site_identifier == "cli-site"
        assert cfg.site.workspace == "review"
        assert cfg.resolver.strict_paths is True
        assert cfg.store_path == Path("/tmp/nodes")

    def test_none_values_ignored(self):
        base = NodelinkConfig.model_validate({"site": {"site_identifier": "keep"}})
        cfg = merge_cli_overrides(base, site_identifier=None, workspace=None)
        assert cfg.site.site_identifier == "keep"

    def test_unknown_keys_ignored(self):
        assert merge_cli_overrides(NodelinkConfig(), bogus="x") == NodelinkConfig()
