"""Domain models for nextra-publish."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class EmbedRef:
    """An embed inside a note, e.g. ``![[diagram.png]]``."""

    original: str
    link: str


@dataclass(frozen=True)
class Note:
    """A vault note as supplied by the note source. Never mutated."""

    path: str
    name: str
    content: str
    frontmatter: dict[str, Any] = field(default_factory=dict)
    embeds: tuple[EmbedRef, ...] = ()


@dataclass(frozen=True)
class Resource:
    """A local file an embed link resolved to."""

    path: str
    content: bytes


@dataclass(frozen=True)
class ResolvedImage:
    """An embedded image, ready to be rewritten and uploaded.

    ``upload_path`` is relative to the image publish prefix and not yet encoded.
    """

    original: str
    name: str
    upload_path: str
    markdown: str
    content: bytes


class ItemKind(Enum):
    """Asset class of a publish item; selects path rule and commit message."""

    MARKDOWN = "MarkDown"
    IMAGE = "Image"
    METADATA_MANIFEST = "MetadataManifest"


@dataclass(frozen=True)
class PublishItem:
    """One file to be written to the remote repository."""

    path: str
    kind: ItemKind
    content: str | bytes
    message: str


@dataclass(frozen=True)
class RemoteFile:
    """A blob in the remote tree. ``path`` is in canonical (URI-encoded) form."""

    path: str
    revision: str


# Manifest file path ("_meta.json" or "<dir>/_meta.json") -> {encoded child: label}
Manifest = dict[str, dict[str, str]]
