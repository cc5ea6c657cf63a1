"""Review findings, review threads and the persisted local review state."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class Finding:
    """A single issue raised by a review."""

    id: str = ""
    file: str = ""
    line: int = 0
    severity: str = ""
    title: str = ""
    description: str = ""
    suggestion: str = ""
    fix_ref: str = ""
    status: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "file": self.file,
            "line": self.line,
            "severity": self.severity,
            "title": self.title,
            "description": self.description,
            "suggestion": self.suggestion,
            "fix_ref": self.fix_ref,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Finding":
        return cls(
            id=str(data.get("id") or ""),
            file=str(data.get("file") or ""),
            line=int(data.get("line") or 0),
            severity=str(data.get("severity") or ""),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            suggestion=str(data.get("suggestion") or ""),
            fix_ref=str(data.get("fix_ref") or ""),
            status=str(data.get("status") or ""),
        )


@dataclass
class ThreadReply:
    """A reply posted in a review thread."""

    author: str = ""
    body: str = ""


@dataclass
class ReviewThread:
    """An unresolved review thread anchored to a file and line."""

    path: str = ""
    line: int = 0
    body: str = ""
    outdated: bool = False
    replies: list[ThreadReply] = field(default_factory=list)


@dataclass
class FixedThread:
    """A thread resolved this cycle, with the reason and evaluator rationale."""

    index: int
    reason: str = ""
    rationale: str = ""


@dataclass
class LocalState:
    """State persisted after a local review, used for incremental reruns."""

    sha: str = ""
    branch: str = ""
    findings: list[Finding] = field(default_factory=list)
    reviewed_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "sha": self.sha,
            "branch": self.branch,
            "findings": [f.to_dict() for f in self.findings],
            "reviewed_at": self.reviewed_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LocalState":
        return cls(
            sha=str(data.get("sha") or ""),
            branch=str(data.get("branch") or ""),
            findings=[Finding.from_dict(f) for f in data.get("findings") or []],
            reviewed_at=str(data.get("reviewed_at") or ""),
        )


def state_file_path(branch: str) -> Path:
    """Return ~/.codecanary/state/<branch>.json, with slashes in the branch replaced by dashes."""
    try:
        home = Path.home()
    except (RuntimeError, KeyError):
        home = Path(".")
    safe = branch.replace("/", "-")
    return home / ".codecanary" / "state" / f"{safe}.json"


def load_local_state(branch: str) -> LocalState | None:
    """Read the state file for a branch; return None if there is none."""
    path = state_file_path(branch)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"parsing local state: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("parsing local state: expected a JSON object")
    return LocalState.from_dict(data)


def save_local_state(branch: str, state: LocalState) -> None:
    """Write the state file for a branch, stamping the review time."""
    path = state_file_path(branch)
    path.parent.mkdir(parents=True, exist_ok=True)
    state.reviewed_at = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    text = json.dumps(state.to_dict(), indent=2, ensure_ascii=False) + "\n"
    path.write_text(text, encoding="utf-8")


def _finding_key(finding: Finding) -> tuple[str, str, int]:
    return (finding.id, finding.file, finding.line)


def merge_findings(existing: list[Finding], new: list[Finding]) -> list[Finding]:
    """Append new findings to existing ones, skipping duplicates by id, file and line."""
    seen = {_finding_key(f) for f in existing}
    merged = list(existing)
    for finding in new:
        key = _finding_key(finding)
        if key not in seen:
            merged.append(finding)
            seen.add(key)
    return merged


def findings_to_known_issues(findings: list[Finding]) -> list[ReviewThread]:
    """Convert saved findings into review threads for use as known issues."""
    return [
        ReviewThread(
            path=f.file,
            line=f.line,
            body=f"**{f.title}** ({f.severity}): {f.description}",
        )
        for f in findings
    ]