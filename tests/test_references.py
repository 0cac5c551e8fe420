"""Tests for node reference classification."""

import pytest
from nodelink.errors import InvalidNodeAggregateIdentifier
from nodelink.models import Node, NodeAggregateIdentifier
from nodelink.references import (
    AbsolutePathReference,
    EmptyReference,
    NodeHandleReference,
    NodeUriReference,
    ReferenceKind,
    RelativePathReference,
    SitePathReference,
    SiteRootReference,
    parse_reference,
)
from pydantic import TypeAdapter


class TestParseReference:
    def test_node_object(self):
        node = Node(node_aggregate_identifier="abc")
        ref = parse_reference(node)
        assert isinstance(ref, NodeHandleReference)
        assert ref.node is node

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty(self, value):
        assert isinstance(parse_reference(value), EmptyReference)

    def test_tilde_is_site_root(self):
        assert isinstance(parse_reference("~"), SiteRootReference)

    def test_node_uri(self):
        ref = parse_reference("node://30e893c1-caef-0ca5-b53d-e5699bb8e506")
        assert isinstance(ref, NodeUriReference)
        assert ref.identifier == NodeAggregateIdentifier("30e893c1-caef-0ca5-b53d-e5699bb8e506")
        assert ref.uri == "node://30e893c1-caef-0ca5-b53d-e5699bb8e506"

    def test_node_uri_without_identifier(self):
        with pytest.raises(InvalidNodeAggregateIdentifier):
            parse_reference("node://")

    def test_site_path(self):
        ref = parse_reference("~/about/us")
        assert isinstance(ref, SitePathReference)
        assert ref.path == "about/us"
        assert ref.is_path

    def test_absolute_path(self):
        ref = parse_reference("/sites/acmecom/about/us")
        assert isinstance(ref, AbsolutePathReference)
        assert ref.path == "/sites/acmecom/about/us"

    @pytest.mark.parametrize("value", ["stapler", "../about", "./neos/info", "~about"])
    def test_relative_path(self, value):
        ref = parse_reference(value)
        assert isinstance(ref, RelativePathReference)
        assert ref.path == value

    def test_parsed_reference_passes_through(self):
        ref = SiteRootReference()
        assert parse_reference(ref) is ref

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            parse_reference(42)

    def test_non_path_variants(self):
        assert not parse_reference("~").is_path
        assert not parse_reference(None).is_path


class TestReferenceKind:
    def test_kinds(self):
        assert parse_reference("~").kind == ReferenceKind.SITE_ROOT
        assert parse_reference("node://abc").kind == ReferenceKind.NODE_URI
        assert parse_reference("/a").kind == ReferenceKind.ABSOLUTE_PATH
        assert parse_reference("~/a").kind == ReferenceKind.SITE_PATH
        assert parse_reference("a").kind == ReferenceKind.RELATIVE_PATH
        assert parse_reference(None).kind == ReferenceKind.EMPTY

    def test_discriminated_union_roundtrip(self):
        from nodelink.references import NodeReference

        adapter = TypeAdapter(NodeReference)
        ref = adapter.validate_python({"kind": "node_uri", "identifier": "abc"})
        assert isinstance(ref, NodeUriReference)
        assert str(ref.identifier) == "abc"
