"""
policy.py

Responsibility: Load a protection-policy file and confirm it is well-formed.

The policy is validated but never interpreted:
- JSON files are parsed only to prove they hold a JSON object; the original
  bytes are what gets sent.
- YAML files (`.yaml` / `.yml`) are parsed with `yaml.safe_load` and re-serialized
  as JSON, since the remote only accepts JSON.
- `*.j2` files are rendered first; the inner suffix picks JSON or YAML.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from branchguard.errors import ValidationError
from branchguard.renderer import RenderError, is_template, render_policy_text, template_format_suffix

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


@dataclass(frozen=True)
class PolicyDocument:
    """Validated policy bytes ready to be sent as the request body."""

    path: Path
    body: bytes
    rendered: bool = False


def _require_object(data: Any, *, source: str) -> None:
    if not isinstance(data, Mapping):
        raise ValidationError(
            f"Policy {source} must be a JSON object at the top level, got {type(data).__name__}.",
            field="policy",
        )


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a JSON value")


def _check_keys(data: Any, *, source: str, where: str = "$") -> None:
    # Keys must survive a JSON round trip unchanged; YAML 1.1 reads `on:` as True.
    if isinstance(data, Mapping):
        for key, value in data.items():
            if not isinstance(key, str):
                raise ValidationError(
                    f"Policy {source} has a non-string key {key!r} at {where}.",
                    field="policy",
                )
            _check_keys(value, source=source, where=f"{where}.{key}")
    elif isinstance(data, (list, tuple)):
        for i, item in enumerate(data):
            _check_keys(item, source=source, where=f"{where}[{i}]")


def parse_json_policy(raw: bytes | str, *, source: str = "payload") -> dict[str, Any]:
    """
    Parse `raw` as strict JSON and return it, raising ValidationError if it is not a JSON object.

    `NaN` and `Infinity` are rejected even though the json module accepts them.
    """
    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, TypeError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors.
        raise ValidationError(f"Policy {source} is not valid JSON: {e}", field="policy") from e
    _require_object(data, source=source)
    return data


def dump_json_policy(data: Any, *, source: str = "payload") -> bytes:
    """
    Serialize an in-memory policy to strict JSON bytes.
    """
    _require_object(data, source=source)
    _check_keys(data, source=source)
    try:
        return json.dumps(data, ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        # e.g. YAML timestamps or .nan, which have no JSON form.
        raise ValidationError(f"Policy {source} has values that cannot be sent as JSON: {e}", field="policy") from e


def _yaml_to_json_bytes(text: str, *, source: str) -> bytes:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValidationError(f"Policy {source} is not valid YAML: {e}", field="policy") from e
    return dump_json_policy(data, source=source)


def load_policy(policy_path: str | Path, *, context: dict[str, Any] | None = None) -> PolicyDocument:
    """
    Read and validate a policy file.

    `context` supplies the variables for `*.j2` templates (typically owner, repo,
    branch plus any `--var` values). It is ignored for plain files.
    """
    path = Path(policy_path)
    if not path.is_file():
        raise ValidationError(f"Policy file not found: {path}", field="policy_file")

    raw = path.read_bytes()
    source = str(path)
    rendered = False
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError(f"Policy file is not UTF-8 text: {path}", field="policy_file") from e

    if is_template(path):
        try:
            text = render_policy_text(text, dict(context or {}), name=path.name)
        except RenderError as e:
            raise ValidationError(str(e), field="policy_file") from e
        raw = text.encode("utf-8")
        rendered = True
        logger.debug("Rendered policy template %s", path)

    if template_format_suffix(path) in YAML_SUFFIXES:
        body = _yaml_to_json_bytes(text, source=source)
    else:
        parse_json_policy(raw, source=source)
        body = raw

    return PolicyDocument(path=path, body=body, rendered=rendered)
