import pytest

from canaryreview.state import ReviewThread, ThreadReply
from canaryreview.triage import (
    ThreadClassification,
    ThreadResolution,
    TriagedThread,
    classify_threads,
    count_non_skipped,
    has_human_reply,
    has_new_human_reply,
    parse_thread_resolution,
    to_fixed_threads,
    validate_resolution_reason,
)

B_DIFF = "diff --git a/b.go b/b.go\n--- a/b.go\n+++ b/b.go\n@@ -5,3 +5,3 @@\n-old b\n+new b\n"
A_DIFF = "diff --git a/a.go b/a.go\n--- a/a.go\n+++ b/a.go\n@@ -10,3 +10,3 @@\n-old\n+new\n"


def test_file_scoped_diff_for_code_changed():
    threads = [ReviewThread(path="a.go", line=10, body="Issue in a.go", outdated=True)]
    full = A_DIFF + B_DIFF
    triaged = classify_threads(threads, full, full, "bot", ["a.go", "b.go"], None)
    assert triaged[0].classification == ThreadClassification.CODE_CHANGED
    assert "b.go" not in triaged[0].file_diff
    assert "a.go" in triaged[0].file_diff
    assert "b.go" in triaged[0].full_diff


def test_no_full_diff_for_cross_file():
    threads = [ReviewThread(path="a.go", line=10, body="Issue in a.go")]
    triaged = classify_threads(threads, B_DIFF, B_DIFF, "bot", ["a.go", "b.go"], None)
    assert triaged[0].classification == ThreadClassification.CROSS_FILE_CHANGE
    assert triaged[0].full_diff == ""


def test_full_diff_as_file_diff_for_cross_file():
    threads = [ReviewThread(path="a.go", line=10, body="Issue in a.go")]
    triaged = classify_threads(threads, B_DIFF, B_DIFF, "bot", ["a.go", "b.go"], None)
    assert triaged[0].classification == ThreadClassification.CROSS_FILE_CHANGE
    assert "b.go" in triaged[0].file_diff


def test_file_removed_from_pr():
    threads = [ReviewThread(path="gone.go", line=3)]
    triaged = classify_threads(threads, B_DIFF, B_DIFF, "bot", ["b.go"], None)
    assert triaged[0].classification == ThreadClassification.FILE_REMOVED_FROM_PR
    assert triaged[0].index == 0


def test_empty_pr_files_disables_removal_check():
    threads = [ReviewThread(path="gone.go", line=3)]
    triaged = classify_threads(threads, "", B_DIFF, "bot", [], None)
    assert triaged[0].classification == ThreadClassification.SKIP


def test_skip_when_no_activity():
    threads = [ReviewThread(path="a.go", line=10)]
    triaged = classify_threads(threads, "", A_DIFF, "bot", ["a.go"], None)
    assert triaged[0].classification == ThreadClassification.SKIP
    assert triaged[0].file_diff == ""


def test_not_outdated_but_file_in_diff_is_code_changed():
    threads = [ReviewThread(path="a.go", line=10)]
    triaged = classify_threads(threads, A_DIFF, A_DIFF, "bot", ["a.go"], None)
    assert triaged[0].classification == ThreadClassification.CODE_CHANGED


def test_reply_classifications():
    reply = [ThreadReply(author="user1", body="Will fix later")]
    threads = [
        ReviewThread(path="a.go", line=10, replies=reply),
        ReviewThread(path="a.go", line=12, outdated=True, replies=reply),
    ]
    triaged = classify_threads(threads, "", A_DIFF, "bot", ["a.go"], None)
    assert triaged[0].classification == ThreadClassification.HAS_REPLY
    assert triaged[1].classification == ThreadClassification.CODE_CHANGED_REPLY
    assert triaged[1].bot_login == "bot"


def test_deleted_file_is_cross_file():
    diff = "diff --git a/a.go b/a.go\n--- a/a.go\n+++ /dev/null\n@@ -1,2 +0,0 @@\n-x\n"
    threads = [ReviewThread(path="a.go", line=1, outdated=True)]
    triaged = classify_threads(threads, diff, diff, "bot", ["a.go"], None)
    assert triaged[0].classification == ThreadClassification.CROSS_FILE_CHANGE
    assert triaged[0].file_diff == diff


def test_snippet_built_from_file_contents():
    content = "\n".join(f"line {i}" for i in range(1, 21))
    threads = [ReviewThread(path="a.go", line=10, outdated=True)]
    triaged = classify_threads(threads, A_DIFF, A_DIFF, "bot", ["a.go"], {"a.go": content})
    assert "10: line 10" in triaged[0].file_snippet


def test_has_human_reply():
    thread = ReviewThread(replies=[ThreadReply(author="bot", body="hi")])
    assert has_human_reply(thread, "bot") is False
    thread.replies.append(ThreadReply(author="dev", body="ok"))
    assert has_human_reply(thread, "bot") is True


def test_has_new_human_reply_after_ack():
    thread = ReviewThread(
        replies=[
            ThreadReply(author="dev", body="intentional"),
            ThreadReply(author="bot", body="ACK noted"),
        ]
    )
    assert has_new_human_reply(thread, "bot", ["ACK"]) is False
    assert has_new_human_reply(thread, "bot") is True
    thread.replies.append(ThreadReply(author="dev", body="actually, fixed"))
    assert has_new_human_reply(thread, "bot", ["ACK"]) is True


def test_validate_resolution_reason_rejects_invalid_reason_for_code_change_only():
    output = '```json\n{"resolved": true, "reason": "acknowledged"}\n```'
    parsed = parse_thread_resolution(output, 0)
    assert parsed.resolved and parsed.reason == "acknowledged"

    for cls in (ThreadClassification.CODE_CHANGED, ThreadClassification.CROSS_FILE_CHANGE):
        res = validate_resolution_reason(parsed, cls)
        assert res.resolved is False
        assert res.reason == ""

    for cls in (ThreadClassification.HAS_REPLY, ThreadClassification.CODE_CHANGED_REPLY):
        res = validate_resolution_reason(parsed, cls)
        assert res.resolved is True
        assert res.reason == "acknowledged"


def test_parse_thread_resolution_captures_rationale():
    output = (
        '```json\n{"resolved": true, "reason": "code_change", '
        '"rationale": "  Removed the three original_error_* fields  "}\n```'
    )
    parsed = parse_thread_resolution(output, 7)
    assert parsed.resolved and parsed.reason == "code_change"
    assert parsed.rationale == "Removed the three original_error_* fields"
    assert parsed.index == 7


def test_parse_thread_resolution_skips_bad_fence():
    output = '```json\n{not json}\n```\ntext\n```json\n{"resolved": true, "reason": "code_change"}\n```'
    parsed = parse_thread_resolution(output, 2)
    assert parsed.resolved is True
    assert parsed.reason == "code_change"


@pytest.mark.parametrize("output", ["no fence here", "```json\n[1, 2]\n```", ""])
def test_parse_thread_resolution_unparseable_is_unresolved(output):
    parsed = parse_thread_resolution(output, 4)
    assert parsed == ThreadResolution(index=4)


def test_to_fixed_threads_propagates_rationale():
    resolutions = [
        ThreadResolution(index=0, resolved=True, reason="code_change", rationale="dropped dead fields"),
        ThreadResolution(index=1, resolved=False),
        ThreadResolution(index=2, resolved=True, reason="dismissed"),
    ]
    fixed = to_fixed_threads(resolutions)
    assert len(fixed) == 2
    assert fixed[0].rationale == "dropped dead fields"
    assert fixed[1].rationale == ""
    assert [f.index for f in fixed] == [0, 2]


def test_count_non_skipped():
    t = ReviewThread()
    triaged = [
        TriagedThread(thread=t, index=0, classification=ThreadClassification.SKIP),
        TriagedThread(thread=t, index=1, classification=ThreadClassification.FILE_REMOVED_FROM_PR),
        TriagedThread(thread=t, index=2, classification=ThreadClassification.HAS_REPLY),
        TriagedThread(thread=t, index=3, classification=ThreadClassification.CODE_CHANGED),
    ]
    assert count_non_skipped(triaged) == 2