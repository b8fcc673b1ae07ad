"""Mapping of local vault paths to the remote repository layout."""

import posixpath
from dataclasses import replace
from urllib.parse import quote

from nextra_publish.models import ItemKind, Note, PublishItem

# Characters ECMAScript's encodeURI leaves alone, beyond quote()'s "_.-~" and alphanumerics.
_URI_SAFE = ";,/?:@&=+$#!*'()"

# Front-matter key that overrides the published file name of a note.
FILENAME_FRONTMATTER_KEY = "nextra-filename"


def encode_uri(path: str) -> str:
    """Percent-encode a path the way encodeURI() does."""
    return quote(path, safe=_URI_SAFE)


def convert_to_upload_path(path: str) -> str:
    """Normalize separators to '/' and drop leading slashes."""
    return path.replace("\\", "/").lstrip("/")


def is_directory(path: str) -> bool:
    """Whether a manifest path names a directory.

    Any '.' disqualifies, so an extensionless file name counts as a directory
    and a dotted folder name ("v1.0") does not.
    """
    return "." not in path


def normalize_prefix(prefix: str) -> str:
    """Canonical, root-relative form of a configured publish prefix."""
    return encode_uri(convert_to_upload_path(prefix).rstrip("/"))


def markdown_upload_path(note: Note) -> str:
    """Local logical upload path of a note, honouring the nextra-filename override."""
    custom = note.frontmatter.get(FILENAME_FRONTMATTER_KEY)
    if not custom:
        return note.path
    return posixpath.join(posixpath.dirname(note.path), str(custom))


def commit_message(kind: ItemKind, path: str) -> str:
    """Commit message for an item, derived only from its kind and path."""
    if kind is ItemKind.METADATA_MANIFEST:
        return f"Update MetaJSON: {path}"
    name = path.rsplit("/", 1)[-1]
    if kind is ItemKind.IMAGE:
        return f"Upload Image: {name}"
    return f"Upload File: {name}"


def transform_item(item: PublishItem, *, image_prefix: str, markdown_prefix: str) -> PublishItem:
    """Root an item's path under its publish prefix and URI-encode it.

    Must be applied exactly once per item: the prefix is joined blindly, so a
    second application would nest it again.
    """
    prefix = image_prefix if item.kind is ItemKind.IMAGE else markdown_prefix
    base = convert_to_upload_path(prefix).rstrip("/")
    path = convert_to_upload_path(item.path)
    joined = f"{base}/{path}" if base else path
    return replace(item, path=encode_uri(joined))
