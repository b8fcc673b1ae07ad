"""Tests for the _meta.json manifest builder."""

import json

from nextra_publish.core.manifest import build_manifest, manifest_items
from nextra_publish.models import ItemKind, PublishItem


def _pages(*paths: str) -> list[PublishItem]:
    return [PublishItem(path=p, kind=ItemKind.MARKDOWN, content="", message="") for p in paths]


def test_manifest_for_root_pages_and_one_directory() -> None:
    manifest = build_manifest(_pages("a.md", "b/c.md", "b/d.md"))

    assert manifest == {
        "_meta.json": {"a": "a", "b": "b"},
        "b/_meta.json": {"c": "c", "d": "d"},
    }


def test_root_level_page_only_lands_in_root_manifest() -> None:
    assert build_manifest(_pages("a.md")) == {"_meta.json": {"a": "a"}}


def test_nested_directories_each_get_a_manifest() -> None:
    manifest = build_manifest(_pages("x/y/z.md"))

    assert manifest == {
        "_meta.json": {"x": "x"},
        "x/_meta.json": {"y": "y"},
        "x/y/_meta.json": {"z": "z"},
    }


def test_child_names_are_uri_encoded_keys_with_raw_labels() -> None:
    manifest = build_manifest(_pages("My Notes/Hello World.md"))

    assert manifest["_meta.json"] == {"My%20Notes": "My Notes"}
    assert manifest["My Notes/_meta.json"] == {"Hello%20World": "Hello World"}


def test_children_keep_enumeration_order() -> None:
    manifest = build_manifest(_pages("b/z.md", "b/a.md", "b/m.md"))

    assert list(manifest["b/_meta.json"]) == ["z", "a", "m"]


def test_dotted_directory_gets_no_manifest() -> None:
    manifest = build_manifest(_pages("v1.0/intro.md"))

    assert manifest == {"_meta.json": {"v1.0": "v1.0"}}


def test_sibling_with_shared_name_prefix_is_not_a_child() -> None:
    manifest = build_manifest(_pages("b/c.md", "bx/d.md"))

    assert manifest["b/_meta.json"] == {"c": "c"}
    assert manifest["bx/_meta.json"] == {"d": "d"}


def test_empty_input_yields_empty_manifest() -> None:
    assert build_manifest([]) == {}


def test_manifest_items_serialize_entries_in_order() -> None:
    manifest = {"_meta.json": {"z": "z", "a": "a"}, "b/_meta.json": {"c": "c"}}

    items = manifest_items(manifest)

    assert [i.path for i in items] == ["_meta.json", "b/_meta.json"]
    assert all(i.kind is ItemKind.METADATA_MANIFEST for i in items)
    assert list(json.loads(items[0].content)) == ["z", "a"]
    assert items[1].message == "Update MetaJSON: b/_meta.json"


def test_manifest_items_keep_non_ascii_labels() -> None:
    items = manifest_items({"_meta.json": {"%C3%BCber": "über"}})

    assert "über" in items[0].content
