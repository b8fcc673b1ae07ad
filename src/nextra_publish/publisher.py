"""Publish orchestration: notes in, remote repository synchronized."""

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath

from loguru import logger

from nextra_publish.config import Settings
from nextra_publish.core.differ import compute_deletions
from nextra_publish.core.executor import MutationExecutor
from nextra_publish.core.manifest import build_manifest, manifest_items
from nextra_publish.core.paths import transform_item
from nextra_publish.core.rewriter import collect_images, resolve_images, rewrite_note
from nextra_publish.errors import PublishError, PublishInProgressError
from nextra_publish.models import Note, PublishItem
from nextra_publish.protocols import NoteSourceProtocol, RemoteProvider


class PublishState(Enum):
    IDLE = "idle"
    COLLECTING_NOTES = "collecting_notes"
    RESOLVING_IMAGES = "resolving_images"
    REWRITING = "rewriting"
    BUILDING_MANIFEST = "building_manifest"
    TRANSFORMING_PATHS = "transforming_paths"
    DIFFING_REMOTE = "diffing_remote"
    DELETING = "deleting"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ProgressEvent:
    """Progress of a run.

    kind is one of:
    - "deleted": one remote file removed
    - "deletions_done": delete phase finished, completed is the count
    - "written": one item written, completed is the running count
    - "done": every item written
    """

    kind: str
    completed: int
    total: int
    path: str | None = None


@dataclass
class PublishResult:
    """Result of a publish run."""

    published: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    state: PublishState = PublishState.IDLE
    dry_run: bool = False


class Publisher:
    """Drive one provider-agnostic publish run at a time.

    Full publish: collect eligible notes, resolve and rewrite images, build
    manifests, transform paths, delete stale remote files, write everything.
    Single-note publish skips the manifest and the delete phase.
    """

    def __init__(
        self,
        source: NoteSourceProtocol,
        provider: RemoteProvider,
        settings: Settings,
        *,
        on_progress: Callable[[ProgressEvent], None] | None = None,
        dry_run: bool = False,
    ) -> None:
        self.source = source
        self.provider = provider
        self.settings = settings
        self.on_progress = on_progress
        self.dry_run = dry_run
        self.state = PublishState.IDLE
        self._run_lock = threading.Lock()

    def is_eligible(self, note: Note) -> bool:
        """A note is published when its publish front-matter value is non-empty."""
        return bool(note.frontmatter.get(self.settings.publish_frontmatter_key))

    def eligible_notes(self) -> list[Note]:
        return [note for note in self.source.list_notes() if self.is_eligible(note)]

    def build_publish_set(self, notes: list[Note], *, with_manifest: bool = True) -> list[PublishItem]:
        """Turn notes into transformed publish items (markdown, images, manifests)."""
        self.state = PublishState.RESOLVING_IMAGES
        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as pool:
            resolved = list(pool.map(lambda note: resolve_images(note, self.source), notes))

        self.state = PublishState.REWRITING
        pages: dict[str, PublishItem] = {}
        for note, images in zip(notes, resolved, strict=True):
            page = rewrite_note(note, images)
            if page.path in pages:
                logger.warning("Two notes publish to {!r}; keeping the first", page.path)
                continue
            pages[page.path] = page
        markdown = list(pages.values())
        items = markdown + collect_images([image for images in resolved for image in images])

        if with_manifest:
            self.state = PublishState.BUILDING_MANIFEST
            items += manifest_items(build_manifest(markdown))

        self.state = PublishState.TRANSFORMING_PATHS
        return [
            transform_item(
                item,
                image_prefix=self.settings.image_publish_path,
                markdown_prefix=self.settings.markdown_publish_path,
            )
            for item in items
        ]

    def publish_all(self) -> PublishResult:
        """Publish every eligible note and remove stale files under the managed prefixes."""
        return self._run(self._publish_all)

    def publish_note(self, path: str) -> PublishResult:
        """Publish one note (and its images) by vault-relative path."""
        return self._run(lambda: self._publish_note(path))

    def _run(self, body: Callable[[], PublishResult]) -> PublishResult:
        self.settings.validate()
        if not self._run_lock.acquire(blocking=False):
            msg = "A publish run is already in progress"
            raise PublishInProgressError(msg)
        try:
            result = body()
        except Exception:
            self.state = PublishState.FAILED
            raise
        else:
            self.state = result.state = PublishState.DONE
            return result
        finally:
            self._run_lock.release()

    def _executor(self) -> MutationExecutor:
        return MutationExecutor(
            self.provider,
            branch=self.settings.branch_name,
            max_workers=self.settings.max_workers,
            dry_run=self.dry_run,
        )

    def _emit(self, kind: str, completed: int, total: int, path: str | None = None) -> None:
        if self.on_progress is not None:
            self.on_progress(ProgressEvent(kind=kind, completed=completed, total=total, path=path))

    def _publish_all(self) -> PublishResult:
        self.state = PublishState.COLLECTING_NOTES
        notes = self.eligible_notes()
        logger.info("Found {} note(s) to publish", len(notes))
        items = self.build_publish_set(notes)

        self.state = PublishState.DIFFING_REMOTE
        remote = self.provider.get_tree(self.settings.branch_name)
        deletions = compute_deletions(remote, items, self.settings.prefixes)
        logger.debug("Remote has {} file(s), {} to delete", len(remote), len(deletions))

        self.state = PublishState.DELETING
        executor = self._executor()
        deleted = executor.delete(
            deletions, lambda n, path: self._emit("deleted", n, len(deletions), path)
        )
        self._emit("deletions_done", deleted, len(deletions))

        result = self._write(executor, items)
        result.deleted = [remote_file.path for remote_file in deletions]
        return result

    def _publish_note(self, path: str) -> PublishResult:
        self.state = PublishState.COLLECTING_NOTES
        wanted = PurePosixPath(path.replace("\\", "/")).as_posix()
        note = next((n for n in self.source.list_notes() if n.path == wanted), None)
        if note is None:
            msg = f"Note {wanted!r} not found"
            raise PublishError(msg)
        if not self.is_eligible(note):
            msg = (
                f"Note {wanted!r} is not marked for publishing "
                f"(front-matter key {self.settings.publish_frontmatter_key!r})"
            )
            raise PublishError(msg)

        items = self.build_publish_set([note], with_manifest=False)
        return self._write(self._executor(), items)

    def _write(self, executor: MutationExecutor, items: list[PublishItem]) -> PublishResult:
        self.state = PublishState.WRITING
        total = len(items)
        written = executor.write(items, lambda n, path: self._emit("written", n, total, path))
        self._emit("done", written, total)
        logger.info("Published {} file(s) to {}", written, self.provider.name)
        return PublishResult(published=[item.path for item in items], dry_run=self.dry_run)
