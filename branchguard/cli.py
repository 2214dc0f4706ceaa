"""
cli.py

Responsibility: CLI entrypoint for branchguard.

High-level flow (single invocation):
1) Parse the five positional parameters + options -> `ApplyConfig`
2) Load and validate the policy file -> `PolicyDocument`
3) PUT the policy via the applier (or print it with --dry-run)
4) Echo the response body; exit 0 on 2xx, 1 on any failure

This module should orchestrate behavior but keep concerns isolated:
- Configuration: `config.py`
- Policy loading: `policy.py`
- Apply semantics: `applier.py`
- GitHub API: `github_client.py`
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

import requests

from branchguard import __version__
from branchguard.applier import apply_policy, validate_inputs
from branchguard.config import ApplyConfig, config_from_args
from branchguard.errors import BranchGuardError, RemoteRejection, UsageError
from branchguard.github_client import GitHubClient
from branchguard.policy import PolicyDocument, load_policy

logger = logging.getLogger(__name__)

_EXAMPLE = "example:\n  branchguard ghp_123TOKENabc octocat hello-world main branch-protection.json"


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def _open_session() -> requests.Session:
    return requests.Session()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _banner(config: ApplyConfig) -> None:
    if config.quiet:
        return
    lines = [
        "Applying branch protection...",
        "-" * 47,
        f"User:       {config.target.owner}",
        f"Repository: {config.target.repo}",
        f"Branch:     {config.target.branch}",
        f"JSON File:  {config.policy_path}",
        "-" * 47,
    ]
    print("\n".join(lines), file=sys.stderr)


def _dry_run(config: ApplyConfig, doc: PolicyDocument) -> int:
    # Never includes the token.
    url = config.api_base.rstrip("/") + GitHubClient.protection_path(config.target)
    out = {"method": "PUT", "url": url, "rendered": doc.rendered, "payload": json.loads(doc.body)}
    print(json.dumps(out, indent=2, ensure_ascii=False))
    return 0


def apply_cmd(config: ApplyConfig) -> int:
    validate_inputs(config.target, config.credential)
    _banner(config)
    doc = load_policy(config.policy_path, context=config.template_context())
    logger.debug("Loaded policy %s (%d bytes, rendered=%s)", doc.path, len(doc.body), doc.rendered)

    if config.dry_run:
        return _dry_run(config, doc)

    with _open_session() as session:
        result = apply_policy(
            config.target,
            config.credential,
            doc.body,
            api_base=config.api_base,
            timeout=config.timeout,
            session=session,
        )
        print(result.body)

        if config.show_current:
            gh = GitHubClient(config.credential, config.api_base, session=session, timeout=config.timeout)
            try:
                current = gh.get_branch_protection(config.target)
                if not current.ok:
                    raise RemoteRejection(current, method="GET", path=gh.protection_path(config.target))
            except BranchGuardError:
                print("Protection was applied, but reading it back failed.", file=sys.stderr)
                raise
            print(current.body)

    if not config.quiet:
        print("Done!", file=sys.stderr)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(
        prog="branchguard",
        description="Apply a GitHub branch protection policy (full replacement via PUT)",
        epilog=_EXAMPLE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("token", help="GitHub token (sent as a bearer token)")
    p.add_argument("owner", help="Repository owner (user or org)")
    p.add_argument("repo", help="Repository name")
    p.add_argument("branch", help="Branch to protect")
    p.add_argument("policy_file", help="Policy file: .json, .yaml/.yml, or a .j2 template of either")

    p.add_argument("--api-base", default=None, help="GitHub API root (default: $GITHUB_API_URL or https://api.github.com)")
    p.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds (default: $BRANCHGUARD_TIMEOUT or 30)")
    p.add_argument("--var", action="append", default=None, metavar="KEY=VALUE", help="Template variable for .j2 policies (repeatable)")
    p.add_argument("--dry-run", action="store_true", help="Validate and print the request without calling GitHub")
    p.add_argument("--show-current", action="store_true", help="After applying, fetch and print the branch protection")
    p.add_argument("--quiet", action="store_true", help="Do not print the progress banner")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
        _configure_logging(bool(args.verbose))
        config = config_from_args(args)
        logger.debug("Resolved %r", config)
        return apply_cmd(config)
    except UsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        print(_EXAMPLE, file=sys.stderr)
        return 1
    except RemoteRejection as e:
        print(f"Error: {e}", file=sys.stderr)
        print(e.body, file=sys.stderr)
        return 1
    except BranchGuardError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
