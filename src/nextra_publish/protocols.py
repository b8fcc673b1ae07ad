"""Protocols for dependency injection in the publisher."""

from typing import Protocol, runtime_checkable

from nextra_publish.models import Note, RemoteFile, Resource


@runtime_checkable
class NoteSourceProtocol(Protocol):
    """Read-only access to the notes of a vault."""

    def list_notes(self) -> list[Note]:
        """Return every note, in a stable order."""
        ...

    def resolve_embed(self, note: Note, link: str) -> Resource | None:
        """Resolve an embed link relative to a note, or None if nothing matches."""
        ...


@runtime_checkable
class RemoteProvider(Protocol):
    """A Git hosting API that can list, write and delete repository files.

    All paths are in canonical form: root-relative and URI-encoded.
    """

    name: str
    supports_transaction: bool

    def get_revision(self, path: str, *, branch: str | None = None) -> str | None:
        """Return the revision token of an existing file, None if it does not exist."""
        ...

    def write_file(
        self,
        path: str,
        content_b64: str,
        message: str,
        *,
        revision: str | None = None,
        branch: str | None = None,
    ) -> None:
        """Create or update a file."""
        ...

    def delete_file(
        self, path: str, revision: str, message: str, *, branch: str | None = None
    ) -> None:
        """Delete a file."""
        ...

    def get_tree(self, ref: str | None = None) -> list[RemoteFile]:
        """List every blob in the repository, recursively."""
        ...


@runtime_checkable
class TransactionalProvider(RemoteProvider, Protocol):
    """Provider that can publish through branch + merge request + merge."""

    def default_branch(self) -> str:
        """Name of the branch publishes are merged into."""
        ...

    def get_ref(self, branch: str) -> str:
        """Return the commit id at the tip of a branch."""
        ...

    def create_ref(self, branch: str, sha: str) -> None:
        """Create a branch pointing at a commit."""
        ...

    def create_merge_request(self, source: str, target: str, title: str) -> str:
        """Open a merge request, return its id."""
        ...

    def merge_merge_request(self, request_id: str) -> None:
        """Merge an open merge request."""
        ...

    def delete_ref(self, branch: str) -> None:
        """Delete a branch."""
        ...
