"""GitLab REST (v4) client. Always publishes through a merge request."""

from typing import Any
from urllib.parse import quote, unquote

from nextra_publish.config import Settings
from nextra_publish.core.paths import encode_uri
from nextra_publish.models import RemoteFile
from nextra_publish.providers.base import HttpProvider

TREE_PAGE_SIZE = 100


def _quote_segment(value: str) -> str:
    """GitLab wants file paths and branch names fully encoded, slashes included."""
    return quote(value, safe="")


class GitLabProvider(HttpProvider):
    """Repository files API with branch + merge-request publishing.

    Canonical paths arrive URI-encoded; they are decoded and re-encoded as a
    single URL segment, which is what GitLab's files API expects.
    """

    name = "gitlab"
    supports_transaction = True

    def __init__(
        self,
        *,
        project: str,
        token: str,
        base_url: str,
        branch: str | None = None,
    ) -> None:
        super().__init__(
            f"{base_url.rstrip('/')}/api/v4/projects/{_quote_segment(project)}",
            {"PRIVATE-TOKEN": token},
        )
        self.branch = branch
        self._default_branch: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitLabProvider":
        project = settings.repository_name or ""
        if settings.user_name and not project.isdigit():
            project = f"{settings.user_name}/{project}"
        return cls(
            project=project,
            token=settings.access_token or "",
            base_url=settings.base_url or "",
            branch=settings.branch_name,
        )

    def _file_url(self, path: str) -> str:
        return f"repository/files/{_quote_segment(unquote(path))}"

    def get_revision(self, path: str, *, branch: str | None = None) -> str | None:
        data = self._request(
            "GET",
            self._file_url(path),
            missing_ok=True,
            params={"ref": branch or self.default_branch()},
        )
        if data is None:
            return None
        return data.get("last_commit_id")

    def write_file(
        self,
        path: str,
        content_b64: str,
        message: str,
        *,
        revision: str | None = None,
        branch: str | None = None,
    ) -> None:
        body: dict[str, Any] = {
            "branch": branch or self.default_branch(),
            "content": content_b64,
            "encoding": "base64",
            "commit_message": message,
        }
        if revision:
            body["last_commit_id"] = revision
        self._request("PUT" if revision else "POST", self._file_url(path), json=body)

    def delete_file(
        self, path: str, revision: str, message: str, *, branch: str | None = None
    ) -> None:
        # The tree's revision is a blob id; last_commit_id would expect a commit, so it is not sent.
        body = {"branch": branch or self.default_branch(), "commit_message": message}
        self._request("DELETE", self._file_url(path), json=body)

    def get_tree(self, ref: str | None = None) -> list[RemoteFile]:
        params: dict[str, Any] = {
            "recursive": "true",
            "ref": ref or self.default_branch(),
            "per_page": TREE_PAGE_SIZE,
        }
        files: list[RemoteFile] = []
        page: str | None = "1"
        while page:
            r = self._send("GET", "repository/tree", params={**params, "page": page})
            self._check(r, "GET", "repository/tree")
            files.extend(
                RemoteFile(path=encode_uri(entry["path"]), revision=entry["id"])
                for entry in r.json()
                if entry.get("type") == "blob"
            )
            page = r.headers.get("X-Next-Page") or None
        return files

    def default_branch(self) -> str:
        if self.branch:
            return self.branch
        if self._default_branch is None:
            self._default_branch = str(self._request("GET", "")["default_branch"])
        return self._default_branch

    def get_ref(self, branch: str) -> str:
        data = self._request("GET", f"repository/branches/{_quote_segment(branch)}")
        return str(data["commit"]["id"])

    def create_ref(self, branch: str, sha: str) -> None:
        self._request("POST", "repository/branches", params={"branch": branch, "ref": sha})

    def create_merge_request(self, source: str, target: str, title: str) -> str:
        data = self._request(
            "POST",
            "merge_requests",
            json={"source_branch": source, "target_branch": target, "title": title},
        )
        return str(data["iid"])

    def merge_merge_request(self, request_id: str) -> None:
        self._request("PUT", f"merge_requests/{request_id}/merge")

    def delete_ref(self, branch: str) -> None:
        self._request("DELETE", f"repository/branches/{_quote_segment(branch)}")
