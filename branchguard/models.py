"""
models.py

Value types shared by the client, the applier and the CLI.
All of them are immutable and live for a single invocation.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Target:
    """The branch whose protection is being replaced."""

    owner: str
    repo: str
    branch: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}@{self.branch}"


@dataclass(frozen=True)
class ApplyResult:
    """Status code and raw body of one GitHub response, uninterpreted."""

    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300
