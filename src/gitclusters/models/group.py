"""Data models for grouping and clustering results."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from gitclusters.models.commit import Commit, Issue


class GroupType(str, Enum):
    """Signal that produced a group."""

    PR = "pr"
    EPIC = "epic"
    SPRINT = "sprint"
    FILE_OVERLAP = "file-overlap"
    INDIVIDUAL = "individual"
    AI_SUGGESTED = "ai-suggested"


class CommitGroup(BaseModel):
    """A coherent unit of work made of related commits."""

    group_key: str = Field(..., description="Key unique within one result")
    group_type: GroupType = Field(..., description="Signal that produced the group")
    group_name: str = Field(..., description="Human readable label")
    commits: List[Commit] = Field(default_factory=list, description="Members in discovery order")
    issues: List[Issue] = Field(default_factory=list, description="Unique issues across members")
    sprint: Optional[str] = Field(None, description="Dominant sprint label")
    labels: List[str] = Field(default_factory=list, description="Unique labels across members")
    pr_number: Optional[int] = Field(None, description="PR number for pr groups")

    # Populated for ai-suggested groups only
    theme: Optional[str] = Field(None, description="Theme proposed by the model")
    reasoning: Optional[str] = Field(None, description="Model explanation for the grouping")
    confidence: Optional[float] = Field(None, description="Model confidence, 0-1")

    @property
    def commit_hashes(self) -> List[str]:
        return [c.hash for c in self.commits]


class UngroupedEntry(BaseModel):
    """A commit no tier could place, with whatever issues were resolved for it."""

    commit: Commit
    issues: List[Issue] = Field(default_factory=list)


class GroupingResult(BaseModel):
    """Disjoint groups plus the ungrouped remainder."""

    groups: List[CommitGroup] = Field(default_factory=list)
    ungrouped_commits: List[UngroupedEntry] = Field(default_factory=list)

    def grouped_hashes(self) -> List[str]:
        return [h for group in self.groups for h in group.commit_hashes]

    def ungrouped_hashes(self) -> List[str]:
        return [entry.commit.hash for entry in self.ungrouped_commits]

    def all_hashes(self) -> List[str]:
        return self.grouped_hashes() + self.ungrouped_hashes()


class ClusteredGroup(BaseModel):
    """A group that survived confidence filtering."""

    name: str
    theme: str = "other"
    commit_hashes: List[str] = Field(default_factory=list)
    reasoning: str = ""
    confidence: float = Field(..., description="Model-stated overall confidence")


class ClusteringResult(BaseModel):
    """Outcome of one AI-assisted clustering pass."""

    groups: List[ClusteredGroup] = Field(default_factory=list)
    ungrouped: List[str] = Field(default_factory=list)

    @classmethod
    def all_ungrouped(cls, hashes: List[str]) -> "ClusteringResult":
        """Result that trusts nothing: every commit stays ungrouped."""
        return cls(groups=[], ungrouped=list(dict.fromkeys(hashes)))
