"""
applier.py

Responsibility: Apply one protection policy to one branch.

Flow:
1) Validate target, credential and policy (no I/O on failure)
2) PUT the policy to the branch protection endpoint (full replacement)
3) Return the response verbatim, or raise RemoteRejection for non-2xx

Nothing is retried. Re-running with the same target and policy is safe
because the remote operation replaces state instead of merging into it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Union

import requests

from branchguard.errors import RemoteRejection, ValidationError
from branchguard.github_client import DEFAULT_API_BASE, DEFAULT_TIMEOUT, GitHubClient
from branchguard.models import ApplyResult, Target
from branchguard.policy import dump_json_policy, parse_json_policy

logger = logging.getLogger(__name__)

PolicyInput = Union[bytes, str, Mapping[str, Any]]


def validate_target(target: Target) -> None:
    for field_name in ("owner", "repo", "branch"):
        value = getattr(target, field_name)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"Target {field_name} must be a non-empty string.", field=field_name)


def policy_body(policy: PolicyInput) -> bytes:
    """
    Return the bytes to send for `policy`.

    bytes/str are parsed only to prove they are a JSON object and then forwarded
    unchanged; a mapping is serialized to JSON.
    """
    if isinstance(policy, Mapping):
        return dump_json_policy(policy)
    if isinstance(policy, str):
        policy = policy.encode("utf-8")
    if not isinstance(policy, bytes):
        raise ValidationError(f"Unsupported policy type: {type(policy).__name__}", field="policy")
    parse_json_policy(policy)
    return policy


def validate_inputs(target: Target, credential: str) -> None:
    validate_target(target)
    if not isinstance(credential, str) or not credential.strip():
        raise ValidationError("Credential must be a non-empty token.", field="credential")


def apply_policy(
    target: Target,
    credential: str,
    policy: PolicyInput,
    *,
    api_base: str = DEFAULT_API_BASE,
    timeout: float = DEFAULT_TIMEOUT,
    session: requests.Session | None = None,
) -> ApplyResult:
    """
    Replace the branch protection of `target` with `policy`.

    Raises:
    - ValidationError: bad target, empty credential or malformed policy (no request sent)
    - NetworkError / DeadlineExceeded: the request never got a response
    - RemoteRejection: GitHub answered with a non-2xx status

    Without `session`, one is opened for this call and closed before returning.
    """
    validate_inputs(target, credential)
    body = policy_body(policy)
    if session is None:
        with requests.Session() as owned:
            return _put(target, credential, body, api_base=api_base, timeout=timeout, session=owned)
    return _put(target, credential, body, api_base=api_base, timeout=timeout, session=session)


def _put(
    target: Target,
    credential: str,
    body: bytes,
    *,
    api_base: str,
    timeout: float,
    session: requests.Session,
) -> ApplyResult:
    client = GitHubClient(credential, api_base, session=session, timeout=timeout)
    logger.info("Applying branch protection to %s", target)
    result = client.put_branch_protection(target, body)
    if not result.ok:
        logger.warning("GitHub rejected protection for %s with status %s", target, result.status_code)
        raise RemoteRejection(result, method="PUT", path=client.protection_path(target))
    logger.info("Branch protection applied to %s (status %s)", target, result.status_code)
    return result
