"""GitHub REST client."""

from typing import Any
from urllib.parse import quote, unquote

from loguru import logger

from nextra_publish.config import Settings
from nextra_publish.core.paths import encode_uri
from nextra_publish.models import RemoteFile
from nextra_publish.providers.base import HttpProvider

DEFAULT_API_URL = "https://api.github.com"


def _contents_path(path: str) -> str:
    """Contents API path for a canonical file path.

    Each segment is fully percent-encoded so "#" and "?" in file names stay
    part of the path.
    """
    return "contents/" + "/".join(quote(unquote(segment), safe="") for segment in path.split("/"))


class GitHubProvider(HttpProvider):
    """Repository contents API, with an optional pull-request publish flow.

    Paths arrive URI-encoded and are re-encoded segment by segment.
    """

    name = "github"

    def __init__(
        self,
        *,
        owner: str,
        repo: str,
        token: str,
        base_url: str | None = None,
        branch: str | None = None,
        use_pull_request: bool = False,
    ) -> None:
        super().__init__(
            f"{(base_url or DEFAULT_API_URL).rstrip('/')}/repos/{owner}/{repo}",
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )
        self.branch = branch
        self.supports_transaction = use_pull_request

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubProvider":
        return cls(
            owner=settings.user_name or "",
            repo=settings.repository_name or "",
            token=settings.access_token or "",
            base_url=settings.base_url,
            branch=settings.branch_name,
            use_pull_request=settings.use_merge_request,
        )

    def get_revision(self, path: str, *, branch: str | None = None) -> str | None:
        params = {"ref": branch} if branch else None
        data = self._request("GET", _contents_path(path), missing_ok=True, params=params)
        if not isinstance(data, dict):
            # None for a missing file, a list for a directory
            return None
        return data.get("sha")

    def write_file(
        self,
        path: str,
        content_b64: str,
        message: str,
        *,
        revision: str | None = None,
        branch: str | None = None,
    ) -> None:
        body: dict[str, Any] = {"message": message, "content": content_b64}
        if revision:
            body["sha"] = revision
        if branch:
            body["branch"] = branch
        self._request("PUT", _contents_path(path), json=body)

    def delete_file(
        self, path: str, revision: str, message: str, *, branch: str | None = None
    ) -> None:
        body: dict[str, Any] = {"message": message, "sha": revision}
        if branch:
            body["branch"] = branch
        self._request("DELETE", _contents_path(path), json=body)

    def get_tree(self, ref: str | None = None) -> list[RemoteFile]:
        ref = ref or self.default_branch()
        data = self._request("GET", f"git/trees/{ref}", params={"recursive": "1"})
        if data.get("truncated"):
            logger.warning("GitHub truncated the tree listing of {!r}; some deletions may be missed", ref)
        return [
            RemoteFile(path=encode_uri(entry["path"]), revision=entry["sha"])
            for entry in data.get("tree", [])
            if entry.get("type") == "blob"
        ]

    def default_branch(self) -> str:
        if self.branch:
            return self.branch
        return str(self._request("GET", "")["default_branch"])

    def get_ref(self, branch: str) -> str:
        return str(self._request("GET", f"git/ref/heads/{branch}")["object"]["sha"])

    def create_ref(self, branch: str, sha: str) -> None:
        self._request("POST", "git/refs", json={"ref": f"refs/heads/{branch}", "sha": sha})

    def create_merge_request(self, source: str, target: str, title: str) -> str:
        data = self._request("POST", "pulls", json={"title": title, "head": source, "base": target})
        return str(data["number"])

    def merge_merge_request(self, request_id: str) -> None:
        self._request("PUT", f"pulls/{request_id}/merge", json={"merge_method": "merge"})

    def delete_ref(self, branch: str) -> None:
        self._request("DELETE", f"git/refs/heads/{branch}")
