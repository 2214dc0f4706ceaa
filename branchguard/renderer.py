"""
renderer.py

Responsibility: Render a templated policy file (`*.j2`) into plain text.

Rules:
- Templates are rendered with `StrictUndefined`; a missing variable is an error,
  never an empty string in the payload.
- Trailing newlines are kept so the rendered policy matches what was authored.

This module intentionally does NOT know about JSON, YAML or GitHub.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

TEMPLATE_SUFFIX = ".j2"


class RenderError(RuntimeError):
    pass


def is_template(path: str | Path) -> bool:
    return Path(path).suffix == TEMPLATE_SUFFIX


def template_format_suffix(path: str | Path) -> str:
    """
    Suffix that decides how the rendered output is parsed.

    `protection.yaml.j2` -> `.yaml`; a non-template path returns its own suffix.
    """
    p = Path(path)
    if p.suffix == TEMPLATE_SUFFIX:
        p = p.with_suffix("")
    return p.suffix.lower()


def render_policy_text(text: str, context: dict[str, Any], *, name: str = "<policy>") -> str:
    """
    Render `text` with `context`.

    Raises RenderError when the template is malformed or references a variable
    missing from `context`.
    """
    env = Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    try:
        template = env.from_string(text)
        return template.render(**context)
    except TemplateError as e:
        raise RenderError(f"Failed rendering policy template {name}: {e}") from e
