"""
branchguard package

This package implements a CLI-first client that applies a declarative
branch-protection policy to a GitHub branch.

Key responsibilities are split across modules:
- `policy.py`: load a policy file and confirm it is a well-formed JSON object
- `renderer.py`: render `*.j2` policy templates with Jinja2
- `github_client.py`: isolated GitHub REST API interactions (protection PUT / GET)
- `applier.py`: validate inputs and issue the single full-replace request
- `config.py`: the configuration struct built once from CLI args and env
- `cli.py`: CLI entrypoint and orchestration (args -> config -> load -> apply)
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
