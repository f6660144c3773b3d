"""Confidence filtering of AI-proposed commit clusters.

The model proposes groups over 1-based commit numbers with a confidence per
membership and per group. Filtering is deterministic and independent of
the model: each proposed commit ends up either kept in its group, evicted
for low confidence, or evicted because its group dissolved.
"""

from collections import Counter
from typing import Dict, List, Mapping, Optional, Sequence, Union

import structlog

from gitclusters.grouping.signals import merge_issues, merge_labels, resolve_issues
from gitclusters.llm.parsing import ClusteringResponse, ParseFailure, parse_clustering_response
from gitclusters.models import (
    ClusteredGroup,
    ClusteringResult,
    Commit,
    CommitEvidence,
    CommitGroup,
    ConfidenceThresholds,
    GroupingResult,
    GroupType,
    Issue,
    Sensitivity,
    UngroupedEntry,
    thresholds_for,
)

logger = structlog.get_logger(__name__)


def _resolve_thresholds(
    policy: Union[Sensitivity, str, ConfidenceThresholds],
) -> ConfidenceThresholds:
    if isinstance(policy, ConfidenceThresholds):
        return policy
    return thresholds_for(Sensitivity(policy))


def filter_clustering_response(
    response: ClusteringResponse,
    commits: Sequence[CommitEvidence],
    thresholds: ConfidenceThresholds,
) -> ClusteringResult:
    """Apply confidence thresholds to a validated clustering response.

    Rules, in order:

    * numbers outside ``[1, len(commits)]`` are dropped;
    * a commit proposed in more than one group is evicted from all of them;
    * members below ``thresholds.per_commit`` are evicted individually;
    * a group survives only if its overall confidence reaches
      ``thresholds.per_group`` and it still has two members, otherwise all
      its members are evicted.

    Every commit not kept in a group, including commits the model never
    mentioned, is reported once in ``ungrouped``.

    Args:
        response: Validated model output
        commits: Evidence in the order it was numbered in the prompt
        thresholds: Per-commit and per-group cut-offs

    Returns:
        ClusteringResult with commit hashes instead of numbers
    """
    n = len(commits)

    def in_range(index: int) -> bool:
        return 1 <= index <= n

    # Duplicate numbers inside one group count once (first mention wins)
    proposals: List[Dict[int, float]] = []
    for group in response.groups:
        members: Dict[int, float] = {}
        for ref in group.commits:
            if in_range(ref.index) and ref.index not in members:
                members[ref.index] = ref.confidence
        proposals.append(members)

    membership = Counter(index for members in proposals for index in members)
    ambiguous = {index for index, count in membership.items() if count > 1}
    if ambiguous:
        logger.debug("ambiguous_commits_evicted", indices=sorted(ambiguous))

    evicted: List[int] = [i for i in response.ungrouped if in_range(i)]
    kept_groups: List[ClusteredGroup] = []

    for group, members in zip(response.groups, proposals):
        confident: List[int] = []
        for index, confidence in members.items():
            if index in ambiguous or not confidence >= thresholds.per_commit:
                evicted.append(index)
            else:
                confident.append(index)

        if group.overall_confidence >= thresholds.per_group and len(confident) >= 2:
            kept_groups.append(
                ClusteredGroup(
                    name=group.name,
                    theme=group.theme,
                    commit_hashes=[commits[i - 1].hash for i in confident],
                    reasoning=group.reasoning,
                    confidence=group.overall_confidence,
                )
            )
        else:
            logger.debug(
                "proposed_group_dissolved",
                name=group.name,
                overall_confidence=group.overall_confidence,
                confident_members=len(confident),
            )
            evicted.extend(confident)

    grouped = {h for g in kept_groups for h in g.commit_hashes}
    ordered = [commits[i - 1].hash for i in evicted] + [c.hash for c in commits]
    ungrouped = [h for h in dict.fromkeys(ordered) if h not in grouped]

    return ClusteringResult(groups=kept_groups, ungrouped=ungrouped)


def apply_clustering_response(
    commits: Sequence[CommitEvidence],
    response_text: str,
    policy: Union[Sensitivity, str, ConfidenceThresholds] = Sensitivity.BALANCED,
) -> ClusteringResult:
    """Turn raw model text into a safe grouping decision.

    Fewer than two commits, or a response that does not parse, yields every
    commit ungrouped. This never raises for bad model output.

    Args:
        commits: Evidence in the order it was numbered in the prompt
        response_text: Raw model text
        policy: Sensitivity level or explicit thresholds

    Returns:
        Filtered ClusteringResult
    """
    hashes = [c.hash for c in commits]
    if len(commits) < 2:
        return ClusteringResult.all_ungrouped(hashes)

    parsed = parse_clustering_response(response_text)
    if isinstance(parsed, ParseFailure):
        logger.warning("clustering_response_rejected", reason=parsed.reason, commits=len(commits))
        return ClusteringResult.all_ungrouped(hashes)

    thresholds = _resolve_thresholds(policy)
    result = filter_clustering_response(parsed, commits, thresholds)

    logger.info(
        "clustering_response_filtered",
        proposed_groups=len(parsed.groups),
        kept_groups=len(result.groups),
        ungrouped=len(result.ungrouped),
        per_commit=thresholds.per_commit,
        per_group=thresholds.per_group,
    )
    return result


def clustering_result_to_grouping(
    result: ClusteringResult,
    commits: Sequence[Commit],
    issue_table: Optional[Mapping[str, Issue]] = None,
) -> GroupingResult:
    """Express an AI clustering result in the same shape as the pipeline's.

    Hashes the result mentions that are not in ``commits`` are ignored;
    commits the result does not place are returned ungrouped.

    Args:
        result: Filtered clustering result
        commits: The commits the evidence was built from
        issue_table: Optional ticket id -> issue, to attach ticket context

    Returns:
        GroupingResult with ``ai-suggested`` groups
    """
    issue_table = issue_table or {}
    by_hash = {c.hash: c for c in commits}
    issues_by_hash = {c.hash: resolve_issues(c.message, issue_table) for c in commits}

    groups: List[CommitGroup] = []
    placed = set()
    for number, clustered in enumerate(result.groups, start=1):
        members = [by_hash[h] for h in clustered.commit_hashes if h in by_hash and h not in placed]
        if len(members) < 2:
            continue
        placed.update(c.hash for c in members)
        issues = merge_issues(i for c in members for i in issues_by_hash[c.hash])
        groups.append(
            CommitGroup(
                group_key=f"ai-{number}",
                group_type=GroupType.AI_SUGGESTED,
                group_name=clustered.name,
                commits=members,
                issues=issues,
                sprint=issues[0].sprint if issues else None,
                labels=merge_labels(issues),
                theme=clustered.theme,
                reasoning=clustered.reasoning,
                confidence=clustered.confidence,
            )
        )

    ungrouped = [
        UngroupedEntry(commit=c, issues=issues_by_hash[c.hash])
        for c in commits
        if c.hash not in placed
    ]
    return GroupingResult(groups=groups, ungrouped_commits=ungrouped)
