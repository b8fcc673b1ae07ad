"""Tests for the path/layout transformer."""

import pytest

from nextra_publish.core.paths import (
    commit_message,
    convert_to_upload_path,
    encode_uri,
    is_directory,
    markdown_upload_path,
    normalize_prefix,
    transform_item,
)
from nextra_publish.models import ItemKind, PublishItem
from tests.unit.fakes import make_note


def _item(path: str, kind: ItemKind) -> PublishItem:
    return PublishItem(path=path, kind=kind, content="x", message="m")


def test_encode_uri_keeps_separators_and_reserved_characters() -> None:
    assert encode_uri("a/b;c,d?e:f@g&h=i+j$k#l") == "a/b;c,d?e:f@g&h=i+j$k#l"
    assert encode_uri("it's (fine)!~*") == "it's%20(fine)!~*"


def test_encode_uri_escapes_spaces_and_unicode() -> None:
    assert encode_uri("My Notes/über.md") == "My%20Notes/%C3%BCber.md"


def test_convert_to_upload_path_normalizes_separators_and_leading_slash() -> None:
    assert convert_to_upload_path("/public") == "public"
    assert convert_to_upload_path("\\pages\\sub\\a.md") == "pages/sub/a.md"
    assert convert_to_upload_path("plain/path.md") == "plain/path.md"


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("b", True),
        ("b/c", True),
        ("a.md", False),
        ("b.c/d", False),
        ("README", True),  # extensionless files look like directories
    ],
)
def test_is_directory(path: str, expected: bool) -> None:
    assert is_directory(path) is expected


def test_normalize_prefix() -> None:
    assert normalize_prefix("/pages/") == "pages"
    assert normalize_prefix("\\public\\images") == "public/images"
    assert normalize_prefix("/my docs") == "my%20docs"
    assert normalize_prefix("/") == ""


@pytest.mark.parametrize("prefix", ["/public", "public", "\\public", "/public/"])
def test_transform_image_is_rooted_under_image_prefix(prefix: str) -> None:
    item = transform_item(
        _item("img\\my pic.png", ItemKind.IMAGE), image_prefix=prefix, markdown_prefix="/pages"
    )

    assert item.path.startswith(normalize_prefix(prefix))
    assert "\\" not in item.path
    assert item.path == "public/img/my%20pic.png"


def test_transform_markdown_and_manifest_use_markdown_prefix() -> None:
    md = transform_item(_item("notes/a b.md", ItemKind.MARKDOWN), image_prefix="/public", markdown_prefix="/pages")
    meta = transform_item(
        _item("notes/_meta.json", ItemKind.METADATA_MANIFEST), image_prefix="/public", markdown_prefix="/pages"
    )

    assert md.path == "pages/notes/a%20b.md"
    assert meta.path == "pages/notes/_meta.json"
    assert md.kind is ItemKind.MARKDOWN
    assert md.content == "x"


def test_transform_applied_twice_nests_prefix() -> None:
    once = transform_item(_item("a.md", ItemKind.MARKDOWN), image_prefix="/public", markdown_prefix="/pages")
    twice = transform_item(once, image_prefix="/public", markdown_prefix="/pages")

    assert twice.path == "pages/pages/a.md"


def test_commit_message_depends_on_kind_and_path() -> None:
    assert commit_message(ItemKind.MARKDOWN, "b/c.md") == "Upload File: c.md"
    assert commit_message(ItemKind.IMAGE, "img/x.png") == "Upload Image: x.png"
    assert commit_message(ItemKind.METADATA_MANIFEST, "b/_meta.json") == "Update MetaJSON: b/_meta.json"


def test_markdown_upload_path_defaults_to_note_path() -> None:
    assert markdown_upload_path(make_note("b/c.md")) == "b/c.md"


def test_markdown_upload_path_honours_filename_override() -> None:
    note = make_note("drafts/My Draft.md", frontmatter={"nextra-filename": "intro.md"})

    assert markdown_upload_path(note) == "drafts/intro.md"


def test_markdown_upload_path_override_at_root() -> None:
    note = make_note("My Draft.md", frontmatter={"nextra-filename": "index.mdx"})

    assert markdown_upload_path(note) == "index.mdx"
