"""Typed enrichment records supplied by the issue-tracker and PR collaborators."""

from typing import Annotated, Dict, Iterable, List, Literal, Tuple, Union

from pydantic import BaseModel, Field, TypeAdapter

from gitclusters.models.commit import Issue, PullRequest


class IssueEnrichment(BaseModel):
    """An issue fetched from the ticket tracker."""

    kind: Literal["issue"] = "issue"
    issue: Issue


class PullRequestEnrichment(BaseModel):
    """A pull request fetched for a specific commit."""

    kind: Literal["pull_request"] = "pull_request"
    commit_hash: str = Field(..., description="Commit the PR was resolved for")
    pull_request: PullRequest


EnrichmentData = Annotated[
    Union[IssueEnrichment, PullRequestEnrichment],
    Field(discriminator="kind"),
]

IssueTable = Dict[str, Issue]
PullRequestTable = Dict[str, PullRequest]

enrichment_list_adapter: TypeAdapter = TypeAdapter(List[EnrichmentData])


def build_lookup_tables(
    enrichments: Iterable[Union[IssueEnrichment, PullRequestEnrichment]],
) -> Tuple[IssueTable, PullRequestTable]:
    """Fold enrichment records into the issue and PR lookup tables.

    Issue keys are uppercased so they match extracted ticket ids. When the
    same key or commit hash appears twice, the first record wins.

    Args:
        enrichments: Issue and pull request records in any order

    Returns:
        Tuple of (ticket id -> Issue, commit hash -> PullRequest)
    """
    issues: IssueTable = {}
    pull_requests: PullRequestTable = {}

    for record in enrichments:
        if isinstance(record, IssueEnrichment):
            issues.setdefault(record.issue.key.upper(), record.issue)
        else:
            pull_requests.setdefault(record.commit_hash, record.pull_request)

    return issues, pull_requests
