"""Triage of previously raised review threads before re-evaluation."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from enum import IntEnum

from canaryreview.diffs import (
    extract_file_diff,
    extract_file_snippet,
    file_deleted_in_diff,
    file_in_diff,
)
from canaryreview.state import FixedThread, ReviewThread

_JSON_FENCE_RE = re.compile(r"```json\s*(.*?)\s*```", re.DOTALL)

_SAME_FILE_SNIPPET_LINES = 300
_CROSS_FILE_SNIPPET_LINES = 200


class ThreadClassification(IntEnum):
    """How an unresolved thread should be handled this cycle."""

    SKIP = 0  # no code changes at all
    CODE_CHANGED = 1  # diff touches the finding location
    HAS_REPLY = 2  # thread has human replies
    CODE_CHANGED_REPLY = 3  # both code changed and replies
    CROSS_FILE_CHANGE = 4  # changes exist, but not in this thread's file
    FILE_REMOVED_FROM_PR = 5  # file is no longer part of the PR


_CODE_CHANGE_ONLY = (ThreadClassification.CODE_CHANGED, ThreadClassification.CROSS_FILE_CHANGE)
_NOT_EVALUATED = (ThreadClassification.SKIP, ThreadClassification.FILE_REMOVED_FROM_PR)


@dataclass
class TriagedThread:
    """A review thread together with its classification and evaluation context."""

    thread: ReviewThread
    index: int
    classification: ThreadClassification
    file_diff: str = ""
    full_diff: str = ""
    file_snippet: str = ""
    bot_login: str = ""


@dataclass
class ThreadResolution:
    """Outcome of evaluating one thread."""

    index: int
    resolved: bool = False
    reason: str = ""
    rationale: str = ""
    error: BaseException | None = None


def has_human_reply(thread: ReviewThread, bot_login: str) -> bool:
    """Report whether any reply comes from someone other than the bot."""
    return any(reply.author != bot_login for reply in thread.replies)


def _is_ack_reply(body: str, ack_markers: Iterable[str]) -> bool:
    return any(marker and marker in body for marker in ack_markers)


def has_new_human_reply(
    thread: ReviewThread, bot_login: str, ack_markers: Iterable[str] = ()
) -> bool:
    """Report whether a human replied after the bot's last acknowledgment reply.

    Without any acknowledgment reply this is the same as has_human_reply.
    """
    markers = tuple(ack_markers)
    last_ack = -1
    for i, reply in enumerate(thread.replies):
        if reply.author == bot_login and _is_ack_reply(reply.body, markers):
            last_ack = i
    if last_ack == -1:
        return has_human_reply(thread, bot_login)
    return any(reply.author != bot_login for reply in thread.replies[last_ack + 1 :])


def _classify(
    thread: ReviewThread,
    activity_diff: str,
    context_diff: str,
    has_reply: bool,
) -> ThreadClassification:
    if file_deleted_in_diff(context_diff, thread.path):
        # Evaluate against the whole diff: the code may have moved elsewhere.
        return ThreadClassification.CROSS_FILE_CHANGE
    if thread.outdated and has_reply:
        return ThreadClassification.CODE_CHANGED_REPLY
    if thread.outdated:
        return ThreadClassification.CODE_CHANGED
    if has_reply:
        return ThreadClassification.HAS_REPLY
    if activity_diff == "":
        return ThreadClassification.SKIP
    if file_in_diff(context_diff, thread.path):
        return ThreadClassification.CODE_CHANGED
    return ThreadClassification.CROSS_FILE_CHANGE


def classify_threads(
    threads: list[ReviewThread],
    activity_diff: str,
    context_diff: str,
    bot_login: str,
    pr_files: Iterable[str] | None,
    file_contents: Mapping[str, str] | None,
    ack_markers: Iterable[str] = (),
) -> list[TriagedThread]:
    """Classify unresolved threads and attach the diff and file context for evaluation.

    activity_diff (changes since the last review) decides whether there is anything
    new; context_diff (the whole PR diff) decides the classification and supplies
    the context. Threads on files no longer in the PR are marked as removed, unless
    the file list is empty.
    """
    pr_file_set = set(pr_files or ())
    contents = file_contents or {}
    markers = tuple(ack_markers)
    result: list[TriagedThread] = []

    for i, thread in enumerate(threads):
        if pr_file_set and thread.path not in pr_file_set:
            result.append(
                TriagedThread(
                    thread=thread,
                    index=i,
                    classification=ThreadClassification.FILE_REMOVED_FROM_PR,
                )
            )
            continue

        has_reply = has_new_human_reply(thread, bot_login, markers)
        classification = _classify(thread, activity_diff, context_diff, has_reply)

        file_diff = ""
        full_diff = ""
        if classification in (
            ThreadClassification.CODE_CHANGED,
            ThreadClassification.CODE_CHANGED_REPLY,
        ):
            file_diff = extract_file_diff(context_diff, thread.path)
            full_diff = context_diff
        elif classification == ThreadClassification.CROSS_FILE_CHANGE:
            file_diff = context_diff

        file_snippet = ""
        content = contents.get(thread.path)
        if content is not None:
            if classification in (
                ThreadClassification.CODE_CHANGED,
                ThreadClassification.CODE_CHANGED_REPLY,
            ):
                file_snippet = extract_file_snippet(
                    content, thread.line, file_diff, _SAME_FILE_SNIPPET_LINES
                )
            elif classification == ThreadClassification.CROSS_FILE_CHANGE:
                file_snippet = extract_file_snippet(
                    content, thread.line, "", _CROSS_FILE_SNIPPET_LINES
                )

        result.append(
            TriagedThread(
                thread=thread,
                index=i,
                classification=classification,
                file_diff=file_diff,
                full_diff=full_diff,
                file_snippet=file_snippet,
                bot_login=bot_login,
            )
        )

    return result


def parse_thread_resolution(output: str, index: int) -> ThreadResolution:
    """Parse the first well-formed JSON fence of an evaluation; unparseable output means unresolved."""
    for raw in _JSON_FENCE_RE.findall(output):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            continue
        if data is None:
            return ThreadResolution(index=index)
        if not isinstance(data, dict):
            continue
        resolved = data.get("resolved", False)
        reason = data.get("reason", "")
        rationale = data.get("rationale", "")
        if resolved is None:
            resolved = False
        if reason is None:
            reason = ""
        if rationale is None:
            rationale = ""
        if not isinstance(resolved, bool) or not isinstance(reason, str) or not isinstance(
            rationale, str
        ):
            continue
        return ThreadResolution(
            index=index,
            resolved=resolved,
            reason=reason,
            rationale=rationale.strip(),
        )
    return ThreadResolution(index=index)


def validate_resolution_reason(
    resolution: ThreadResolution, classification: ThreadClassification
) -> ThreadResolution:
    """Reject reply-based reasons for threads that had no author reply."""
    if (
        resolution.resolved
        and resolution.reason != "code_change"
        and classification in _CODE_CHANGE_ONLY
    ):
        return replace(resolution, resolved=False, reason="")
    return resolution


def count_non_skipped(triaged: Iterable[TriagedThread]) -> int:
    """Count threads that need a model evaluation."""
    return sum(1 for t in triaged if t.classification not in _NOT_EVALUATED)


def to_fixed_threads(resolutions: Iterable[ThreadResolution]) -> list[FixedThread]:
    """Turn resolved evaluations into fixed-thread records."""
    return [
        FixedThread(index=r.index, reason=r.reason, rationale=r.rationale)
        for r in resolutions
        if r.resolved
    ]