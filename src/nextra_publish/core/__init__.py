"""Publish synchronization engine: path layout, manifests, rewriting, diffing, remote writes."""

from nextra_publish.core.differ import compute_deletions
from nextra_publish.core.executor import MutationExecutor, ProgressCounter
from nextra_publish.core.manifest import build_manifest, manifest_items
from nextra_publish.core.paths import encode_uri, is_directory, transform_item
from nextra_publish.core.rewriter import collect_images, resolve_images, rewrite_note

__all__ = [
    "MutationExecutor",
    "ProgressCounter",
    "build_manifest",
    "collect_images",
    "compute_deletions",
    "encode_uri",
    "is_directory",
    "manifest_items",
    "resolve_images",
    "rewrite_note",
    "transform_item",
]
