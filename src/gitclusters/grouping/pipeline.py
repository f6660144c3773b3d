"""Multi-signal grouping pipeline.

Tiers run in strict priority order and each one only sees the commits the
previous tiers left behind:

1. pull request membership
2. issue-tracker epic (with optional caller overrides)
3. sprint plus time proximity
4. changed-file overlap

A commit placed by an earlier tier is never reconsidered.
"""

from typing import Dict, List, Mapping, Optional, Sequence

import structlog

from gitclusters.grouping.graph import group_by_file_overlap
from gitclusters.grouping.signals import collect_epic_names, merge_labels, resolve_issues
from gitclusters.grouping.tiers import (
    GroupOverrides,
    group_by_epic,
    group_by_pr,
    group_by_sprint_and_time,
)
from gitclusters.models import (
    Commit,
    CommitGroup,
    GroupingOptions,
    GroupingResult,
    GroupType,
    Issue,
    PullRequest,
    UngroupedEntry,
)

logger = structlog.get_logger(__name__)

MAX_INDIVIDUAL_NAME_LENGTH = 60


def _unique_commits(commits: Sequence[Commit]) -> List[Commit]:
    """Drop repeated hashes, keeping the first occurrence."""
    seen = set()
    unique: List[Commit] = []
    for commit in commits:
        if commit.hash in seen:
            logger.warning("duplicate_commit_hash_dropped", commit_hash=commit.hash)
            continue
        seen.add(commit.hash)
        unique.append(commit)
    return unique


def group_commits_multi_signal(
    commits: Sequence[Commit],
    issue_table: Mapping[str, Issue],
    pr_table: Mapping[str, PullRequest],
    options: Optional[GroupingOptions] = None,
    overrides: Optional[GroupOverrides] = None,
) -> GroupingResult:
    """Partition commits into disjoint groups using every available signal.

    Args:
        commits: Commits to group; hashes must be unique within the batch
        issue_table: Ticket id -> issue (may be empty)
        pr_table: Commit hash -> pull request (may be empty)
        options: Time window and file-overlap threshold
        overrides: Optional hash -> epic key (or None) applied in the epic tier

    Returns:
        GroupingResult whose groups are ordered by tier, then by size
    """
    options = options or GroupingOptions()
    commits = _unique_commits(commits)

    entries = [
        UngroupedEntry(commit=c, issues=resolve_issues(c.message, issue_table))
        for c in commits
    ]

    # Group keys are unique across tiers
    used_keys: Dict[str, int] = {}
    pr_groups, remaining = group_by_pr(entries, pr_table, used_keys)
    epic_groups, remaining, forced = group_by_epic(
        remaining, collect_epic_names(commits, issue_table), overrides, used_keys
    )
    sprint_groups, remaining = group_by_sprint_and_time(
        remaining, options.time_window_days, used_keys
    )
    file_groups, remaining = group_by_file_overlap(
        remaining, options.overlap_threshold, used_keys
    )

    groups = pr_groups + epic_groups + sprint_groups + file_groups

    # Keep the caller's commit order for everything left over
    leftover = {e.commit.hash for e in remaining} | {e.commit.hash for e in forced}
    ungrouped = [e for e in entries if e.commit.hash in leftover]

    logger.info(
        "commits_grouped",
        commits=len(commits),
        pr_groups=len(pr_groups),
        epic_groups=len(epic_groups),
        sprint_groups=len(sprint_groups),
        file_overlap_groups=len(file_groups),
        ungrouped=len(ungrouped),
    )

    return GroupingResult(groups=groups, ungrouped_commits=ungrouped)


def to_individual_group(entry: UngroupedEntry) -> CommitGroup:
    """Present an ungrouped commit as a single-commit ``individual`` group.

    The key is the first ticket id (or the short hash) and the name is the
    first ticket summary (or the first message line), truncated.
    """
    first_issue = entry.issues[0] if entry.issues else None
    key = first_issue.key if first_issue else entry.commit.short_hash
    name = first_issue.summary if first_issue and first_issue.summary else entry.commit.summary
    if len(name) > MAX_INDIVIDUAL_NAME_LENGTH:
        name = name[:MAX_INDIVIDUAL_NAME_LENGTH] + "..."

    return CommitGroup(
        group_key=key,
        group_type=GroupType.INDIVIDUAL,
        group_name=name,
        commits=[entry.commit],
        issues=list(entry.issues),
        sprint=first_issue.sprint if first_issue else None,
        labels=merge_labels(entry.issues),
    )
