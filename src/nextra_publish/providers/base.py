"""Shared HTTP plumbing for the hosting providers."""

from typing import Any

import requests
from loguru import logger

from nextra_publish.errors import ProviderError


class HttpProvider:
    """Session holder with JSON request helper. Subclasses set ``name`` and headers."""

    name = "http"
    supports_transaction = False

    def __init__(self, api_url: str, headers: dict[str, str]) -> None:
        self.api_url = api_url.rstrip("/")
        self.sess = requests.Session()
        self.sess.headers.update(headers)

    def _url(self, path: str) -> str:
        return f"{self.api_url}/{path}" if path else self.api_url

    def _send(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        logger.debug("{} request: {} {!r}", self.name, method, path)
        try:
            return self.sess.request(method, self._url(path), **kwargs)
        except requests.RequestException as e:
            msg = f"{self.name} API call failed: {method} {path!r}: {e}"
            raise ProviderError(msg) from e

    def _check(self, r: requests.Response, method: str, path: str) -> None:
        if not r.ok:
            msg = f"{self.name} API call failed: {method} {path!r} -> ({r.status_code}, {r.text[:200]!r})"
            raise ProviderError(msg, status_code=r.status_code)

    def _request(self, method: str, path: str, *, missing_ok: bool = False, **kwargs: Any) -> Any:
        """Invoke an API endpoint, return the decoded JSON body.

        With missing_ok, a 404 returns None instead of raising.
        """
        r = self._send(method, path, **kwargs)
        if missing_ok and r.status_code == 404:
            return None
        self._check(r, method, path)
        if r.status_code == 204 or not r.content:
            return {}
        return r.json()
