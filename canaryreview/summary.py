"""Per-cycle status block shown at the top of each review body."""

from __future__ import annotations

from dataclasses import dataclass

from canaryreview.state import Finding, FixedThread, ReviewThread

STATUS_BLOCK_OPEN = "<!-- codecanary:status -->"
STATUS_BLOCK_CLOSE = "<!-- /codecanary:status -->"


@dataclass(frozen=True)
class ReviewSummary:
    """Counts of what happened to findings during one review cycle."""

    new_findings: int = 0
    resolved_by_code: int = 0
    file_removed: int = 0
    dismissed: int = 0
    acknowledged: int = 0
    rebutted: int = 0
    still_open: int = 0

    def has_content(self) -> bool:
        return (
            self.new_findings
            + self.resolved_by_code
            + self.file_removed
            + self.dismissed
            + self.acknowledged
            + self.rebutted
            + self.still_open
        ) > 0


def render_summary_block(summary: ReviewSummary) -> str:
    """Render the Markdown status block listing non-zero counts, or "" if all are zero."""
    if not summary.has_content():
        return ""
    rows = [
        ("New findings", summary.new_findings),
        ("Resolved by code", summary.resolved_by_code),
        ("File removed", summary.file_removed),
        ("Dismissed by author", summary.dismissed),
        ("Acknowledged by author", summary.acknowledged),
        ("Rebutted by author", summary.rebutted),
        ("Still unresolved", summary.still_open),
    ]
    parts = [f"\n{STATUS_BLOCK_OPEN}\n### Status\n\n"]
    parts.extend(f"- {label}: **{count}**\n" for label, count in rows if count)
    parts.append(f"{STATUS_BLOCK_CLOSE}\n")
    return "".join(parts)


def replace_summary_block(body: str, summary: ReviewSummary) -> str:
    """Replace the status block in body, appending it if absent and stripping it if empty."""
    new_block = render_summary_block(summary)
    open_idx = body.find(STATUS_BLOCK_OPEN)
    if open_idx < 0:
        return body + new_block
    start = open_idx
    if start > 0 and body[start - 1] == "\n":
        start -= 1
    close_idx = body.find(STATUS_BLOCK_CLOSE, open_idx)
    if close_idx < 0:
        return body[:start] + new_block
    end = close_idx + len(STATUS_BLOCK_CLOSE)
    if end < len(body) and body[end] == "\n":
        end += 1
    return body[:start] + new_block + body[end:]


def compute_review_summary(
    threads: list[ReviewThread],
    fixed: list[FixedThread],
    new_findings: list[Finding],
) -> ReviewSummary:
    """Count resolutions by reason; threads left unclassified are still open."""
    counts = {
        "code_change": 0,
        "file_removed": 0,
        "dismissed": 0,
        "acknowledged": 0,
        "rebutted": 0,
    }
    fixed_indices: set[int] = set()
    for item in fixed:
        if not 0 <= item.index < len(threads):
            continue
        fixed_indices.add(item.index)
        if item.reason in counts:
            counts[item.reason] += 1
    return ReviewSummary(
        new_findings=len(new_findings),
        resolved_by_code=counts["code_change"],
        file_removed=counts["file_removed"],
        dismissed=counts["dismissed"],
        acknowledged=counts["acknowledged"],
        rebutted=counts["rebutted"],
        still_open=len(threads) - len(fixed_indices),
    )