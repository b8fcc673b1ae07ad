"""Apply a publish set to the remote repository."""

import base64
import threading
import uuid
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import UTC, datetime
from typing import cast

from loguru import logger

from nextra_publish.errors import ItemFailure, PartialPublishError, TransactionError
from nextra_publish.models import PublishItem, RemoteFile
from nextra_publish.protocols import RemoteProvider, TransactionalProvider

# Called with (completed count, path) after each remote mutation succeeds.
# May be invoked from worker threads.
ProgressCallback = Callable[[int, str], None]

BRANCH_PREFIX = "nextra-publish"


class ProgressCounter:
    """Monotonic counter shared by concurrent workers."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


def encode_content(content: str | bytes) -> str:
    """Base64 wire form of item content, for text and binary alike."""
    raw = content.encode("utf-8") if isinstance(content, str) else content
    return base64.b64encode(raw).decode("ascii")


def make_branch_name() -> str:
    """Unique name for a transactional publish branch."""
    return f"{BRANCH_PREFIX}-{datetime.now(UTC):%Y%m%d%H%M%S}-{uuid.uuid4().hex[:8]}"


class MutationExecutor:
    """Write and delete remote files, concurrently and with progress reporting.

    Providers with supports_transaction get the publish wrapped in
    branch-create, writes, merge request, merge, branch-delete. Those steps
    run strictly in sequence, and a failure leaves the branch on the remote.
    """

    def __init__(
        self,
        provider: RemoteProvider,
        *,
        branch: str | None = None,
        max_workers: int = 8,
        dry_run: bool = False,
    ) -> None:
        self.provider = provider
        self.branch = branch
        self.max_workers = max_workers
        self.dry_run = dry_run

    def delete(self, files: Iterable[RemoteFile], on_progress: ProgressCallback | None = None) -> int:
        """Delete remote files. Returns the number deleted."""
        tasks = [(f.path, self._delete_task(f)) for f in files]
        if tasks:
            logger.info("Deleting {} remote file(s)", len(tasks))
        return self._run_batch(tasks, on_progress)

    def write(self, items: Iterable[PublishItem], on_progress: ProgressCallback | None = None) -> int:
        """Write every item. Returns the number written."""
        items = list(items)
        if not items:
            return 0
        if self.provider.supports_transaction and not self.dry_run:
            return self._write_transaction(items, on_progress)
        return self._write_items(items, self.branch, on_progress)

    def _delete_task(self, remote: RemoteFile) -> Callable[[], None]:
        def task() -> None:
            if self.dry_run:
                logger.info("dry-run: would delete {!r}", remote.path)
                return
            logger.debug("Deleting {!r}", remote.path)
            self.provider.delete_file(
                remote.path, remote.revision, f"Delete File: {remote.path}", branch=self.branch
            )

        return task

    def _write_task(self, item: PublishItem, branch: str | None) -> Callable[[], None]:
        def task() -> None:
            if self.dry_run:
                logger.info("dry-run: would write {!r} ({})", item.path, item.kind.value)
                return
            revision = self.provider.get_revision(item.path, branch=branch)
            action = "update" if revision else "create"
            logger.debug("Writing ({}) {!r}", action, item.path)
            self.provider.write_file(
                item.path,
                encode_content(item.content),
                item.message,
                revision=revision,
                branch=branch,
            )

        return task

    def _write_items(
        self,
        items: list[PublishItem],
        branch: str | None,
        on_progress: ProgressCallback | None,
    ) -> int:
        return self._run_batch([(item.path, self._write_task(item, branch)) for item in items], on_progress)

    def _run_batch(
        self,
        tasks: list[tuple[str, Callable[[], None]]],
        on_progress: ProgressCallback | None,
    ) -> int:
        """Run tasks on the pool; every task is attempted before failures are raised."""
        if not tasks:
            return 0

        counter = ProgressCounter()

        def run(path: str, task: Callable[[], None]) -> None:
            task()
            completed = counter.increment()
            if on_progress is not None:
                on_progress(completed, path)

        failures: list[ItemFailure] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {pool.submit(run, path, task): path for path, task in tasks}
            for future in as_completed(futures):
                error = future.exception()
                if error is not None:
                    path = futures[future]
                    logger.error("Remote call failed for {!r}: {}", path, error)
                    failures.append(ItemFailure(path=path, error=str(error)))

        if failures:
            raise PartialPublishError(completed=counter.value, failures=failures)
        return counter.value

    def _write_transaction(self, items: list[PublishItem], on_progress: ProgressCallback | None) -> int:
        provider = cast(TransactionalProvider, self.provider)
        branch = make_branch_name()
        created: str | None = None
        step = "default_branch"
        try:
            target = self.branch or provider.default_branch()

            step = "get_ref"
            sha = provider.get_ref(target)

            step = "create_ref"
            provider.create_ref(branch, sha)
            created = branch
            logger.info("Created branch {!r} from {!r} at {}", branch, target, sha[:10])

            step = "write"
            completed = self._write_items(items, branch, on_progress)

            step = "create_merge_request"
            request_id = provider.create_merge_request(
                branch, target, f"Publish {len(items)} file(s) from Obsidian"
            )

            step = "merge_merge_request"
            provider.merge_merge_request(request_id)
            logger.info("Merged {!r} into {!r} ({})", branch, target, request_id)

            step = "delete_ref"
            provider.delete_ref(branch)
        except Exception as e:
            raise TransactionError(step=step, branch=created, cause=e) from e
        return completed
