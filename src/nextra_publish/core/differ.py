"""Compute which remote files a full publish removes."""

from collections.abc import Iterable

from nextra_publish.core.paths import normalize_prefix
from nextra_publish.models import PublishItem, RemoteFile


def compute_deletions(
    remote_files: Iterable[RemoteFile],
    publish_set: Iterable[PublishItem],
    prefixes: Iterable[str],
) -> list[RemoteFile]:
    """Return remote files that are inside a managed prefix but no longer published.

    The prefix check is the only thing keeping deletion away from the rest of
    the site, so an empty prefix is refused rather than matching everything.
    Remote order is preserved.
    """
    managed = []
    for prefix in prefixes:
        normalized = normalize_prefix(prefix)
        if not normalized:
            msg = f"Refusing to compute deletions for empty publish prefix {prefix!r}"
            raise ValueError(msg)
        managed.append(normalized + "/")

    published = {item.path for item in publish_set}
    return [
        remote
        for remote in remote_files
        if remote.path not in published and remote.path.startswith(tuple(managed))
    ]
