"""Deterministic multi-signal commit grouping."""

from gitclusters.grouping.graph import common_path_prefix, connected_components, group_by_file_overlap
from gitclusters.grouping.pipeline import group_commits_multi_signal, to_individual_group
from gitclusters.grouping.signals import (
    collect_epic_names,
    extract_ticket_keys,
    resolve_epic,
    resolve_issues,
)
from gitclusters.grouping.similarity import file_overlap, within_window
from gitclusters.grouping.tiers import (
    group_by_epic,
    group_by_pr,
    group_by_sprint_and_time,
    group_commits_by_feature,
)

__all__ = [
    "extract_ticket_keys",
    "resolve_issues",
    "resolve_epic",
    "collect_epic_names",
    "file_overlap",
    "within_window",
    "connected_components",
    "common_path_prefix",
    "group_by_file_overlap",
    "group_by_pr",
    "group_by_epic",
    "group_by_sprint_and_time",
    "group_commits_by_feature",
    "group_commits_multi_signal",
    "to_individual_group",
]
