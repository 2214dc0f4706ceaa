"""
config.py

Responsibility: Build the single configuration struct for one invocation.

Resolution order for every setting: CLI argument, then environment, then default.
The environment is read here and nowhere else.
"""

from __future__ import annotations

import argparse
import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from branchguard.errors import UsageError
from branchguard.github_client import DEFAULT_API_BASE, DEFAULT_TIMEOUT
from branchguard.models import Target

ENV_API_BASE = "GITHUB_API_URL"
ENV_TIMEOUT = "BRANCHGUARD_TIMEOUT"


@dataclass(frozen=True)
class ApplyConfig:
    """Everything one invocation needs, resolved once at the CLI boundary."""

    target: Target
    credential: str = field(repr=False)
    policy_path: Path
    api_base: str = DEFAULT_API_BASE
    timeout: float = DEFAULT_TIMEOUT
    variables: dict[str, str] = field(default_factory=dict)
    dry_run: bool = False
    show_current: bool = False
    quiet: bool = False

    def template_context(self) -> dict[str, Any]:
        # Deterministic keys; `.j2` policies should reference these.
        return {
            **self.variables,
            "owner": self.target.owner,
            "repo": self.target.repo,
            "branch": self.target.branch,
        }


def parse_vars(pairs: list[str] | None) -> dict[str, str]:
    """
    Parse repeated `KEY=VALUE` options into a dict (later keys win).
    """
    out: dict[str, str] = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise UsageError(f"--var expects KEY=VALUE, got: {pair!r}")
        k, v = pair.split("=", 1)
        k = k.strip()
        if not k:
            raise UsageError(f"--var has an empty key: {pair!r}")
        out[k] = v
    return dict(sorted(out.items()))


def _resolve_timeout(raw: float | str | None) -> float:
    if raw is None or raw == "":
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise UsageError(f"Timeout must be a number of seconds, got: {raw!r}") from e
    if not math.isfinite(value) or value <= 0:
        raise UsageError(f"Timeout must be a positive, finite number of seconds, got: {raw!r}")
    return value


def config_from_args(args: argparse.Namespace, environ: Mapping[str, str] | None = None) -> ApplyConfig:
    env = os.environ if environ is None else environ

    api_base = args.api_base or env.get(ENV_API_BASE) or DEFAULT_API_BASE
    timeout = _resolve_timeout(args.timeout if args.timeout is not None else env.get(ENV_TIMEOUT))

    return ApplyConfig(
        target=Target(owner=args.owner, repo=args.repo, branch=args.branch),
        credential=args.token,
        policy_path=Path(args.policy_file),
        api_base=api_base,
        timeout=timeout,
        variables=parse_vars(args.var),
        dry_run=bool(args.dry_run),
        show_current=bool(args.show_current),
        quiet=bool(args.quiet),
    )
