"""Data models for commit grouping."""

from gitclusters.models.commit import Commit, CommitEvidence, CommitTags, Issue, PullRequest
from gitclusters.models.config import (
    DEFAULT_THRESHOLDS,
    ConfidenceThresholds,
    GroupingOptions,
    Sensitivity,
    Settings,
    thresholds_for,
)
from gitclusters.models.enrichment import (
    EnrichmentData,
    IssueEnrichment,
    IssueTable,
    PullRequestEnrichment,
    PullRequestTable,
    build_lookup_tables,
)
from gitclusters.models.group import (
    ClusteredGroup,
    ClusteringResult,
    CommitGroup,
    GroupingResult,
    GroupType,
    UngroupedEntry,
)

__all__ = [
    "Commit",
    "CommitEvidence",
    "CommitTags",
    "Issue",
    "PullRequest",
    "EnrichmentData",
    "IssueEnrichment",
    "PullRequestEnrichment",
    "IssueTable",
    "PullRequestTable",
    "build_lookup_tables",
    "CommitGroup",
    "GroupType",
    "UngroupedEntry",
    "GroupingResult",
    "ClusteredGroup",
    "ClusteringResult",
    "Sensitivity",
    "ConfidenceThresholds",
    "DEFAULT_THRESHOLDS",
    "thresholds_for",
    "GroupingOptions",
    "Settings",
]
