"""Writing the provider and model settings into the review config file."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError


def _scalar_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return ""
    return str(value)


def _make_yaml() -> YAML:
    yaml = YAML()
    yaml.indent(mapping=2, sequence=4, offset=2)
    yaml.preserve_quotes = True
    return yaml


def write_config(
    provider: str, review_model: str, triage_model: str, config_path: str | Path
) -> bool:
    """Create or update the config file, keeping comments and other keys.

    Returns True when the file was written, False when it was already up to date.
    """
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if not provider:
        raise ValueError("provider is required")
    if not review_model:
        raise ValueError("review_model is required")
    if not triage_model:
        raise ValueError("triage_model is required")

    try:
        existing = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        existing = ""

    if not existing.strip():
        text = (
            f"version: 1\n\nprovider: {provider}\n"
            f"review_model: {review_model}\n"
            f"triage_model: {triage_model}\n"
        )
        path.write_text(text, encoding="utf-8")
        print(f"Created {path}", file=sys.stderr)
        return True

    yaml = _make_yaml()
    try:
        doc = yaml.load(existing)
    except YAMLError as exc:
        raise ValueError(f"parsing existing {path}: {exc}") from exc
    if not isinstance(doc, dict):
        raise ValueError(f"{path} is not a valid YAML mapping")

    updates: list[tuple[str, Any]] = [
        ("version", 1),
        ("provider", provider),
        ("review_model", review_model),
        ("triage_model", triage_model),
    ]

    diffs: list[str] = []
    for key, value in updates:
        old = _scalar_text(doc.get(key))
        new = _scalar_text(value)
        if old == new:
            continue
        if old == "":
            diffs.append(f"  {key}: {new} (new)")
        else:
            diffs.append(f"  {key}: {old} → {new}")

    if not diffs:
        print(f"{path} is up to date", file=sys.stderr)
        return False

    for key, value in updates:
        doc[key] = value

    buf = io.StringIO()
    yaml.dump(doc, buf)
    path.write_text(buf.getvalue(), encoding="utf-8")
    print(f"Updated {path}:", file=sys.stderr)
    for line in diffs:
        print(line, file=sys.stderr)
    return True