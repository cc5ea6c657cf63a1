# canaryreview

Building blocks for an automated, LLM-assisted pull request reviewer.

The package covers the parts of a review cycle that do not depend on a
particular hosting platform:

- **Diff handling** (`canaryreview.diffs`): pull one file's hunks out of a
  unified diff, read new-file line ranges from hunk headers, and cut a
  line-numbered snippet of a file around a finding and the changed hunks.
- **Thread triage** (`canaryreview.triage`): sort the review threads left open
  by a previous run into "skip", "code changed", "has reply", "code changed and
  reply", "cross-file change" or "file removed from the PR", and parse the
  evaluator's JSON verdicts.
- **Evaluation** (`canaryreview.evaluation`): build the per-thread prompts and
  run them in parallel against any object that provides `ModelProvider.run`,
  widening to the full PR diff when a file-scoped check finds no fix.
- **Review state** (`canaryreview.state`): save and reload the findings of a
  local review per branch, so the next run can work incrementally.
- **Status block** (`canaryreview.summary`): render and replace the status
  section at the top of a review comment.
- **Usage and budget** (`canaryreview.usage`): track tokens and cost per call,
  stop once a budget is spent, and write a usage report.
- **Setup helpers**: model choices per provider, writing the review config and
  the review policy template, API key validation, workflow generation, and a
  small terminal wizard.
- **Self-update** (`canaryreview.selfupdate`): version comparison, checksum
  verification and binary replacement from release archives.
- **Telemetry** (`canaryreview.telemetry`): anonymous, opt-out usage events.

## Examples

Extract the part of a diff that touches one file and look at the code around a
finding:

```python
from canaryreview.diffs import extract_file_diff, extract_file_snippet

file_diff = extract_file_diff(full_diff, "api/handler.go")
snippet = extract_file_snippet(source_text, 42, file_diff, 300)
```

Triage open threads and count how many need an evaluator call:

```python
from canaryreview.triage import classify_threads, count_non_skipped

triaged = classify_threads(
    threads, incremental_diff, pr_diff, "review-bot",
    pr_files, file_contents, ack_markers,
)
print(count_non_skipped(triaged), "thread(s) need evaluation")
```

Keep track of spending across calls:

```python
from canaryreview.usage import UsageTracker, check_budget

tracker = UsageTracker()
# ... tracker.add(call) after each model call ...
check_budget(tracker, 2.50)   # raises BudgetExceededError once the limit is passed
print(tracker.total_cost())
```

Summarise a review cycle for the top of the review comment:

```python
from canaryreview.summary import compute_review_summary, replace_summary_block

summary = compute_review_summary(threads, fixed, new_findings)
body = replace_summary_block(body, summary)
```

Compare release versions:

```python
from canaryreview.selfupdate import is_newer

is_newer("v0.1.0", "v0.2.0")      # True
is_newer("v1.0.0-rc1", "v1.0.0")  # False: pre-release suffixes are ignored
```

## Local review state

Findings from a local review are stored as JSON under
`~/.codecanary/state/<branch>.json`, with slashes in the branch name replaced
by dashes. `load_local_state` returns `None` when no state exists yet.

## Telemetry

Events carry only a one-way hash of the repository name, the version, the
operating system, the provider and aggregate counts; never code, paths or
credentials. Set `DO_NOT_TRACK=1` or `CODECANARY_NO_TELEMETRY=1` to turn it off.