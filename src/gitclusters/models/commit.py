"""Data models for commits and the metadata attached to them."""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Commit(BaseModel):
    """Represents a single commit as supplied by the VCS reader."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "hash": "abc123def456",
                "message": "ES1-1234: Fix authentication bug",
                "author": "John Doe",
                "email": "john@example.com",
                "timestamp": "2024-01-15T10:30:00Z",
                "files_changed": ["src/auth.py", "tests/test_auth.py"],
                "remote_url": "https://github.com/acme/app.git",
            }
        },
    )

    hash: str = Field(..., description="Commit SHA, unique within a batch")
    message: str = Field(..., description="Full commit message")
    author: str = Field("", description="Author name")
    email: str = Field("", description="Author email")
    timestamp: datetime = Field(..., description="Commit timestamp")
    files_changed: Optional[List[str]] = Field(
        None, description="Changed file paths (None until populated)"
    )
    remote_url: Optional[str] = Field(None, description="Source remote URL")

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Treat timestamps without an offset as UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def short_hash(self) -> str:
        """First 7 characters of the hash."""
        return self.hash[:7]

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]


class Issue(BaseModel):
    """A ticket-tracker record keyed by its ticket id."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "key": "ES1-1234",
                "summary": "Token validation rejects empty tokens",
                "issue_type": "Bug",
                "status": "Done",
                "epic_key": "ES1-1000",
                "epic_name": "Authentication Hardening",
                "sprint": "Sprint 5",
                "story_points": 3,
                "labels": ["security"],
            }
        },
    )

    key: str = Field(..., description="Ticket id, e.g. ABC-123")
    summary: str = Field("", description="Ticket summary")
    issue_type: str = Field("", description="Story, Bug, Task, ...")
    status: str = Field("", description="Workflow status")
    description: Optional[str] = Field(None, description="Ticket description")
    priority: Optional[str] = Field(None, description="Ticket priority")
    epic_key: Optional[str] = Field(None, description="Parent epic id")
    epic_name: Optional[str] = Field(None, description="Parent epic name")
    sprint: Optional[str] = Field(None, description="Sprint label")
    story_points: Optional[float] = Field(None, description="Story point estimate")
    labels: List[str] = Field(default_factory=list, description="Ticket labels")


class PullRequest(BaseModel):
    """A pull request that a commit belongs to."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., description="PR number")
    title: str = Field(..., description="PR title")
    description: str = Field("", description="PR body")
    state: str = Field("", description="open, closed or merged")
    labels: List[str] = Field(default_factory=list, description="PR labels")
    linked_issues: List[str] = Field(default_factory=list, description="Linked ticket ids")


class CommitEvidence(BaseModel):
    """Already-summarized evidence for one commit, used for AI clustering."""

    hash: str = Field(..., description="Commit SHA")
    message: str = Field(..., description="Full commit message")
    files_changed: List[str] = Field(default_factory=list, description="Changed file paths")
    diff_sample: str = Field("", description="Bounded excerpt of the commit diff")

    @classmethod
    def from_commit(cls, commit: Commit, diff_sample: str = "") -> "CommitEvidence":
        """Build evidence from a commit and an optional diff excerpt."""
        return cls(
            hash=commit.hash,
            message=commit.message,
            files_changed=list(commit.files_changed or []),
            diff_sample=diff_sample,
        )


class CommitTags(BaseModel):
    """Topic tags assigned to a commit."""

    hash: str
    message: str
    tags: List[str] = Field(default_factory=list)
