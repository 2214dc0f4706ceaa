"""
github_client.py

Responsibility: Isolate all direct GitHub REST API interaction.

This module must be the only place that:
- Constructs GitHub REST endpoints
- Sends HTTP requests to api.github.com (or a GitHub Enterprise API root)
- Maps transport failures onto branchguard errors

Responses are returned verbatim as `ApplyResult`; deciding what a status means
is left to the caller.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import requests

from branchguard import __version__
from branchguard.errors import DeadlineExceeded, NetworkError, ValidationError
from branchguard.models import ApplyResult, Target

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0


def _segment(value: str) -> str:
    # Branch names may contain "/"; each path segment is quoted on its own.
    return quote(value, safe="")


class GitHubClient:
    def __init__(
        self,
        token: str,
        api_base: str = DEFAULT_API_BASE,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if not token.strip():
            raise ValidationError("GitHub token is required.", field="credential")
        self._token = token
        self._api_base = api_base.rstrip("/")
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout

    def __repr__(self) -> str:
        return f"GitHubClient(api_base={self._api_base!r})"

    def close(self) -> None:
        """Close the session if this client created it; an injected session belongs to the caller."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _headers(self, *, with_body: bool = False) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"branchguard/{__version__}",
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    def url_for(self, path: str) -> str:
        return f"{self._api_base}{path}"

    def _request(self, method: str, path: str, *, body: bytes | None = None) -> ApplyResult:
        url = self.url_for(path)
        try:
            r = self._session.request(
                method,
                url,
                headers=self._headers(with_body=body is not None),
                data=body,
                timeout=self._timeout,
            )
        except requests.Timeout as e:
            raise DeadlineExceeded(f"{method} {path} timed out after {self._timeout:g}s") from e
        except requests.RequestException as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e
        logger.debug("%s %s -> %s", method, path, r.status_code)
        return ApplyResult(status_code=r.status_code, body=r.text)

    @staticmethod
    def protection_path(target: Target) -> str:
        return (
            f"/repos/{_segment(target.owner)}/{_segment(target.repo)}"
            f"/branches/{_segment(target.branch)}/protection"
        )

    def put_branch_protection(self, target: Target, body: bytes) -> ApplyResult:
        """
        Replace the branch protection of `target` with `body` (full replacement, not a merge).
        """
        return self._request("PUT", self.protection_path(target), body=body)

    def get_branch_protection(self, target: Target) -> ApplyResult:
        """
        Fetch the current branch protection of `target`. A 404 means the branch is unprotected
        (or not visible to the token); the caller decides.
        """
        return self._request("GET", self.protection_path(target))
