"""Tests for NodeStore — in-memory node lookup with JSON persistence."""

from pathlib import Path

import pytest
from nodelink.errors import NodeNotFoundError
from nodelink.models import SHORTCUT_NODE_TYPE, Node
from nodelink.store import NODE_STORE_FILENAME, NodeStore


def _node(identifier: str, parent: str | None = None, **kwargs) -> Node:
    return Node(node_aggregate_identifier=identifier, parent_identifier=parent, **kwargs)


class TestUpsert:
    def test_insert_and_get(self):
        store = NodeStore()
        store.upsert(_node("home", name="home"))
        assert store.count() == 1
        assert store.get("home").name == "home"

    def test_replace_keeps_single_entry(self):
        store = NodeStore()
        store.upsert(_node("about", parent="home", name="about"))
        store.upsert(_node("about", parent="home", name="about-us"))
        assert store.count() == 1
        assert store.get("about").name == "about-us"
        assert [n.identifier for n in store.children("home")] == ["about"]

    def test_reparenting_updates_children(self):
        store = NodeStore()
        store.upsert(_node("about", parent="home"))
        store.upsert(_node("about", parent="company"))
        assert store.children("home") == []
        assert [n.identifier for n in store.children("company")] == ["about"]


class TestLookups:
    def test_get_missing_returns_none(self):
        assert NodeStore().get("nope") is None

    def test_require_missing_raises(self):
        with pytest.raises(NodeNotFoundError):
            NodeStore().require("nope")

    def test_not_found_is_key_error(self):
        with pytest.raises(KeyError):
            NodeStore().require("nope")

    def test_children_in_insertion_order(self):
        store = NodeStore()
        store.upsert(_node("home"))
        store.upsert(_node("b", parent="home"))
        store.upsert(_node("a", parent="home"))
        assert [n.identifier for n in store.children("home")] == ["b", "a"]

    def test_parent(self):
        store = NodeStore()
        store.upsert(_node("home"))
        store.upsert(_node("about", parent="home"))
        assert store.parent("about").identifier == "home"
        assert store.parent("home") is None
        assert store.parent("missing") is None

    def test_list_filters_by_type(self):
        store = NodeStore()
        store.upsert(_node("home"))
        store.upsert(_node("link", node_type=SHORTCUT_NODE_TYPE))
        assert len(store.list()) == 2
        assert [n.identifier for n in store.list(node_type=SHORTCUT_NODE_TYPE)] == ["link"]


class TestPersistence:
    def test_save_and_reload(self, tmp_path: Path):
        store = NodeStore(tmp_path)
        store.upsert(_node("home"))
        store.upsert(_node("about", parent="home", properties={"title": "About"}))
        store.save()

        assert (tmp_path / NODE_STORE_FILENAME).exists()

        reloaded = NodeStore(tmp_path)
        assert reloaded.count() == 2
        assert reloaded.get("about").properties == {"title": "About"}
        assert [n.identifier for n in reloaded.children("home")] == ["about"]

    def test_replaced_node_keeps_sibling_position(self, tmp_path: Path):
        store = NodeStore(tmp_path)
        store.upsert(_node("home"))
        store.upsert(_node("a", parent="home"))
        store.upsert(_node("b", parent="home"))
        store.upsert(_node("a", parent="home", name="renamed"))
        assert [n.identifier for n in store.children("home")] == ["a", "b"]

        store.save()
        reloaded = NodeStore(tmp_path)
        assert [n.identifier for n in reloaded.children("home")] == ["a", "b"]
        assert reloaded.get("a").name == "renamed"

    def test_reparented_node_order_survives_reload(self, tmp_path: Path):
        store = NodeStore(tmp_path)
        store.upsert(_node("home"))
        store.upsert(_node("a", parent="home"))
        store.upsert(_node("b", parent="home"))
        store.upsert(_node("a", parent="company"))
        store.upsert(_node("a", parent="home"))
        assert [n.identifier for n in store.children("home")] == ["b", "a"]

        store.save()
        assert [n.identifier for n in NodeStore(tmp_path).children("home")] == ["b", "a"]

    def test_save_without_path_is_noop(self, tmp_path: Path):
        NodeStore().save()
        assert list(tmp_path.iterdir()) == []

    def test_missing_file_starts_empty(self, tmp_path: Path):
        assert NodeStore(tmp_path).count() == 0

    def test_corrupt_file_starts_empty(self, tmp_path: Path):
        (tmp_path / NODE_STORE_FILENAME).write_text("{not json", encoding="utf-8")
        assert NodeStore(tmp_path).count() == 0

    def test_invalid_records_start_empty(self, tmp_path: Path):
        (tmp_path / NODE_STORE_FILENAME).write_text(
            '{"nodes": [{"node_aggregate_identifier": ""}]}', encoding="utf-8"
        )
        assert NodeStore(tmp_path).count() == 0
