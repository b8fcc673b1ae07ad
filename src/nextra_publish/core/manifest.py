"""Build Nextra ``_meta.json`` navigation manifests from the published pages."""

import json

from nextra_publish.core.paths import commit_message, encode_uri, is_directory
from nextra_publish.models import ItemKind, Manifest, PublishItem

ROOT_MANIFEST = "_meta.json"


def _strip_md(name: str) -> str:
    return name[: -len(".md")] if name.endswith(".md") else name


def _register(manifest: Manifest, key: str, child: str) -> None:
    entries = manifest.setdefault(key, {})
    if child:
        entries[encode_uri(child)] = child


def build_manifest(markdown_items: list[PublishItem]) -> Manifest:
    """Derive one manifest per directory from local (untransformed) page paths.

    Every page's first segment lands in the root manifest. Each prefix of a
    page path that passes is_directory() gets a manifest listing the first
    segment of every page below it. A page is only a child when it sits
    below the directory boundary (`dir + "/"`), so `bx/d.md` is not listed
    under `b`. Children keep the order the pages were given in; nothing is
    sorted.
    """
    manifest: Manifest = {}

    for item in markdown_items:
        _register(manifest, ROOT_MANIFEST, _strip_md(item.path.split("/")[0]))

    for item in markdown_items:
        segments = item.path.split("/")
        for idx in range(len(segments)):
            current = "/".join(segments[: idx + 1])
            if not is_directory(current):
                continue

            key = f"{current}/{ROOT_MANIFEST}"
            for other in markdown_items:
                if not other.path.startswith(current + "/"):
                    continue
                child = other.path[len(current) + 1 :].split("/")[0]
                _register(manifest, key, _strip_md(child))

    return manifest


def manifest_items(manifest: Manifest) -> list[PublishItem]:
    """Serialize each manifest entry into a publish item (local path)."""
    return [
        PublishItem(
            path=key,
            kind=ItemKind.METADATA_MANIFEST,
            content=json.dumps(entries, ensure_ascii=False, indent=2),
            message=commit_message(ItemKind.METADATA_MANIFEST, key),
        )
        for key, entries in manifest.items()
    ]
