"""
errors.py

Error taxonomy. The CLI catches `BranchGuardError` and maps every subclass
to exit code 1; nothing here is retried.
"""

from __future__ import annotations

from branchguard.models import ApplyResult


class BranchGuardError(Exception):
    """Base exception for all branchguard failures."""


class UsageError(BranchGuardError):
    """Wrong number or shape of invocation parameters."""


class ValidationError(BranchGuardError):
    """An input was rejected before any network call was made."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NetworkError(BranchGuardError):
    """Transport-level failure (DNS, refused connection, TLS, timeout)."""


class DeadlineExceeded(NetworkError, TimeoutError):
    """The request did not complete within the caller's timeout."""


class RemoteRejection(BranchGuardError):
    """GitHub answered with a non-2xx status."""

    def __init__(self, result: ApplyResult, *, method: str = "PUT", path: str = "") -> None:
        super().__init__(f"GitHub API error {result.status_code} {method} {path}".rstrip())
        self.result = result

    @property
    def status_code(self) -> int:
        return self.result.status_code

    @property
    def body(self) -> str:
        return self.result.body
