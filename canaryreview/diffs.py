"""Helpers for reading unified diffs and windowing file content around findings."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from itertools import takewhile

_INT_RE = re.compile(r"[+-]?\d+")

_FINDING_PAD = 50
_HUNK_PAD = 30


@dataclass(frozen=True)
class LineRange:
    """An inclusive range of 1-based line numbers."""

    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start + 1


def _parse_int(text: str) -> int | None:
    if _INT_RE.fullmatch(text):
        return int(text)
    return None


def extract_file_diff(full_diff: str, file_path: str) -> str:
    """Return all diff lines belonging to file_path in a unified diff."""
    lines = full_diff.split("\n")
    result: list[str] = []
    capturing = False
    header = "+++ b/" + file_path

    for i, line in enumerate(lines):
        if line.startswith("diff --git"):
            if capturing:
                break
            section = takewhile(lambda ln: not ln.startswith("diff --git"), lines[i + 1 :])
            if any(ln.startswith(header) for ln in section):
                capturing = True
                result.append(line)
            continue
        if capturing:
            result.append(line)

    return "\n".join(result)


def parse_hunk_new_ranges(diff_text: str) -> list[LineRange]:
    """Return the new-file line ranges named by the hunk headers of a diff."""
    ranges: list[LineRange] = []
    for line in diff_text.split("\n"):
        if not line.startswith("@@ "):
            continue
        idx = line.find("+")
        if idx < 0:
            continue
        rest = line[idx + 1 :]
        cut = min((p for p in (rest.find(" "), rest.find("@")) if p >= 0), default=-1)
        if cut >= 0:
            rest = rest[:cut]
        parts = rest.split(",", 1)
        start = _parse_int(parts[0])
        if start is None:
            continue
        count = 1
        if len(parts) == 2:
            parsed = _parse_int(parts[1])
            if parsed is not None:
                if parsed == 0:
                    continue  # pure deletion: no new lines
                if parsed > 0:
                    count = parsed
        ranges.append(LineRange(start, start + count - 1))
    return ranges


def merge_ranges(ranges: list[LineRange]) -> list[LineRange]:
    """Merge overlapping or adjacent ranges, sorted by start."""
    merged: list[LineRange] = []
    for r in sorted(ranges, key=lambda item: item.start):
        if merged and r.start <= merged[-1].end + 1:
            if r.end > merged[-1].end:
                merged[-1] = replace(merged[-1], end=r.end)
        else:
            merged.append(r)
    return merged


def extract_file_snippet(content: str, finding_line: int, diff_text: str, max_lines: int) -> str:
    """Return numbered lines of content around the finding and the diff hunks, capped at max_lines."""
    if content == "":
        return ""
    lines = content.split("\n")
    total_lines = len(lines)

    ranges: list[LineRange] = []
    if finding_line > 0:
        ranges.append(
            LineRange(
                max(1, finding_line - _FINDING_PAD),
                min(total_lines, finding_line + _FINDING_PAD),
            )
        )
    for hunk in parse_hunk_new_ranges(diff_text):
        ranges.append(
            LineRange(max(1, hunk.start - _HUNK_PAD), min(total_lines, hunk.end + _HUNK_PAD))
        )
    if not ranges:
        ranges.append(LineRange(1, min(total_lines, max_lines)))

    merged = merge_ranges(ranges)

    if sum(r.size for r in merged) > max_lines:
        finding_idx = 0
        if finding_line > 0:
            finding_idx = next(
                (i for i, r in enumerate(merged) if r.start <= finding_line <= r.end), 0
            )
        budget = max_lines
        kept = {finding_idx}
        primary = merged[finding_idx]
        if primary.size > budget and finding_line > 0:
            half = budget // 2
            primary = LineRange(
                max(1, finding_line - half), min(total_lines, finding_line + half)
            )
        elif primary.size > budget:
            primary = LineRange(primary.start, min(total_lines, primary.start + budget - 1))
        merged[finding_idx] = primary
        budget -= primary.size
        for i, r in enumerate(merged):
            if i in kept:
                continue
            if r.size <= budget:
                kept.add(i)
                budget -= r.size
        merged = [r for i, r in enumerate(merged) if i in kept]

    out: list[str] = []
    previous: LineRange | None = None
    for r in merged:
        if previous is not None:
            gap = r.start - previous.end - 1
            out.append(f"... ({gap} lines omitted) ...\n")
        for ln in range(r.start, min(r.end, total_lines) + 1):
            out.append(f"{ln}: {lines[ln - 1]}\n")
        previous = r
    return "".join(out)


def file_in_diff(diff: str, path: str) -> bool:
    """Report whether the diff changes the given file."""
    target = "+++ b/" + path
    return target + "\n" in diff or target + "\t" in diff or diff.endswith(target)


def file_deleted_in_diff(diff: str, path: str) -> bool:
    """Report whether the diff deletes the given file ("--- a/<path>" then "+++ /dev/null")."""
    marker = "--- a/" + path
    idx = diff.find(marker)
    if idx < 0:
        return False
    rest = diff[idx + len(marker) :]
    if rest and rest[0] not in "\n\r":
        return False
    nl = rest.find("\n")
    if nl < 0:
        return False
    rest = rest[nl + 1 :]
    next_line = rest.split("\n", 1)[0]
    return next_line == "+++ /dev/null"