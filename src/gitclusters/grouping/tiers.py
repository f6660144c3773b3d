"""Deterministic grouping tiers: pull request, epic and sprint+time.

Each tier takes the commits left over by the previous one and returns the
groups it formed plus whatever it could not place. Groups always have at
least two commits; a bucket of one falls through to the next tier.
"""

from collections import OrderedDict
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import structlog

from gitclusters.grouping.graph import unique_key
from gitclusters.grouping.signals import (
    collect_epic_names,
    merge_issues,
    merge_labels,
    resolve_epic,
    resolve_issues,
)
from gitclusters.grouping.similarity import within_window
from gitclusters.models import (
    Commit,
    CommitGroup,
    GroupingResult,
    GroupType,
    Issue,
    PullRequest,
    UngroupedEntry,
)

logger = structlog.get_logger(__name__)

TierOutput = Tuple[List[CommitGroup], List[UngroupedEntry]]

# hash -> epic key to force, or None to force the commit ungrouped
GroupOverrides = Mapping[str, Optional[str]]


def sort_by_size(groups: List[CommitGroup]) -> List[CommitGroup]:
    """Largest groups first; ties keep discovery order."""
    return sorted(groups, key=lambda g: len(g.commits), reverse=True)


def group_by_pr(
    entries: Sequence[UngroupedEntry],
    pr_table: Mapping[str, PullRequest],
    used_keys: Optional[Dict[str, int]] = None,
) -> TierOutput:
    """Bucket commits by the pull request they belong to.

    Args:
        entries: Candidate commits
        pr_table: Commit hash -> pull request
        used_keys: Group keys already handed out in this result

    Returns:
        Tuple of (pr groups, commits without a multi-commit PR)
    """
    used_keys = {} if used_keys is None else used_keys
    buckets: "OrderedDict[int, List[UngroupedEntry]]" = OrderedDict()
    ungrouped: List[UngroupedEntry] = []

    for entry in entries:
        pr = pr_table.get(entry.commit.hash)
        if pr is None:
            ungrouped.append(entry)
        else:
            buckets.setdefault(pr.number, []).append(entry)

    groups: List[CommitGroup] = []
    for number, members in buckets.items():
        if len(members) < 2:
            ungrouped.extend(members)
            continue
        pr = pr_table[members[0].commit.hash]
        issues = merge_issues(issue for m in members for issue in m.issues)
        groups.append(
            CommitGroup(
                group_key=unique_key(f"PR-{number}", used_keys),
                group_type=GroupType.PR,
                group_name=pr.title,
                commits=[m.commit for m in members],
                issues=issues,
                sprint=issues[0].sprint if issues else None,
                labels=list(dict.fromkeys(pr.labels)),
                pr_number=number,
            )
        )

    return sort_by_size(groups), ungrouped


def group_by_epic(
    entries: Sequence[UngroupedEntry],
    epic_names: Mapping[str, str],
    overrides: Optional[GroupOverrides] = None,
    used_keys: Optional[Dict[str, int]] = None,
) -> Tuple[List[CommitGroup], List[UngroupedEntry], List[UngroupedEntry]]:
    """Bucket commits by the epic of their first epic-bearing ticket.

    Args:
        entries: Candidate commits with their resolved issues
        epic_names: Epic key -> display name for the whole batch
        overrides: Optional hash -> epic key (or None) forced by the caller
        used_keys: Group keys already handed out in this result

    Returns:
        Tuple of (epic groups, commits that fall through, commits forced
        ungrouped by a None override)
    """
    overrides = overrides or {}
    used_keys = {} if used_keys is None else used_keys
    buckets: "OrderedDict[str, List[UngroupedEntry]]" = OrderedDict()
    bucket_names: Dict[str, str] = {}
    fall_through: List[UngroupedEntry] = []
    forced: List[UngroupedEntry] = []

    for entry in entries:
        epic = resolve_epic(entry.issues)

        if entry.commit.hash in overrides:
            target = overrides[entry.commit.hash]
            logger.debug("epic_override_applied", commit_hash=entry.commit.hash, epic_key=target)
            if target is None:
                forced.append(entry)
                continue
            epic = (target, epic_names.get(target, target))

        if epic is None:
            fall_through.append(entry)
            continue

        epic_key, epic_name = epic
        buckets.setdefault(epic_key, []).append(entry)
        bucket_names.setdefault(epic_key, epic_name)

    groups: List[CommitGroup] = []
    for epic_key, members in buckets.items():
        if len(members) < 2:
            fall_through.extend(members)
            continue
        issues = merge_issues(issue for m in members for issue in m.issues)
        groups.append(
            CommitGroup(
                group_key=unique_key(epic_key, used_keys),
                group_type=GroupType.EPIC,
                group_name=bucket_names[epic_key],
                commits=[m.commit for m in members],
                issues=issues,
                sprint=issues[0].sprint if issues else None,
                labels=merge_labels(issues),
            )
        )

    return sort_by_size(groups), fall_through, forced


def group_by_sprint_and_time(
    entries: Sequence[UngroupedEntry],
    time_window_days: float,
    used_keys: Optional[Dict[str, int]] = None,
) -> TierOutput:
    """Group commits of the same sprint that were made close together.

    Commits are bucketed by the sprint of their first resolved issue, sorted
    by timestamp, and split wherever two consecutive commits are more than
    ``time_window_days`` apart.

    Args:
        entries: Candidate commits with their resolved issues
        time_window_days: Maximum gap between consecutive commits of a run
        used_keys: Group keys already handed out in this result

    Returns:
        Tuple of (sprint groups, commits left ungrouped)
    """
    buckets: "OrderedDict[str, List[UngroupedEntry]]" = OrderedDict()
    ungrouped: List[UngroupedEntry] = []

    for entry in entries:
        sprint = entry.issues[0].sprint if entry.issues else None
        if not sprint:
            ungrouped.append(entry)
        else:
            buckets.setdefault(sprint, []).append(entry)

    groups: List[CommitGroup] = []
    used_keys = {} if used_keys is None else used_keys

    for sprint, members in buckets.items():
        ordered = sorted(members, key=lambda m: m.commit.timestamp)
        runs: List[List[UngroupedEntry]] = [[ordered[0]]]
        for previous, current in zip(ordered, ordered[1:]):
            if within_window(previous.commit.timestamp, current.commit.timestamp, time_window_days):
                runs[-1].append(current)
            else:
                runs.append([current])

        for run in runs:
            if len(run) < 2:
                ungrouped.extend(run)
                continue
            issues = merge_issues(issue for m in run for issue in m.issues)
            start = run[0].commit.timestamp
            end = run[-1].commit.timestamp
            groups.append(
                CommitGroup(
                    group_key=unique_key(sprint, used_keys),
                    group_type=GroupType.SPRINT,
                    group_name=f"{sprint} ({start:%Y-%m-%d} to {end:%Y-%m-%d})",
                    commits=[m.commit for m in run],
                    issues=issues,
                    sprint=sprint,
                    labels=merge_labels(issues),
                )
            )

    return sort_by_size(groups), ungrouped


def group_commits_by_feature(
    commits: Sequence[Commit],
    issue_table: Mapping[str, Issue],
    overrides: Optional[GroupOverrides] = None,
) -> GroupingResult:
    """Group commits by epic only.

    Commits without an epic, in a single-commit epic, or forced out by a
    None override are returned ungrouped with their resolved issues.

    Args:
        commits: Commits to group
        issue_table: Ticket id -> issue
        overrides: Optional hash -> epic key (or None)

    Returns:
        GroupingResult with epic groups and the ungrouped remainder
    """
    entries = [
        UngroupedEntry(commit=c, issues=resolve_issues(c.message, issue_table))
        for c in commits
    ]
    groups, fall_through, forced = group_by_epic(
        entries, collect_epic_names(commits, issue_table), overrides
    )

    remaining = {e.commit.hash for e in fall_through} | {e.commit.hash for e in forced}
    return GroupingResult(
        groups=groups,
        ungrouped_commits=[e for e in entries if e.commit.hash in remaining],
    )
