"""Shared fixtures for unit tests."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from gitclusters.models import Commit, CommitEvidence, Issue, PullRequest

BASE_TIME = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_commit():
    """Factory for commits; ``days`` offsets the timestamp from a fixed base."""

    def _make(
        hash: str,
        message: str = "Commit",
        files: Optional[List[str]] = None,
        days: float = 0,
    ) -> Commit:
        return Commit(
            hash=hash,
            message=message,
            author="Test Author",
            email="test@example.com",
            timestamp=BASE_TIME + timedelta(days=days),
            files_changed=files,
        )

    return _make


@pytest.fixture
def make_issue():
    """Factory for issues."""

    def _make(
        key: str,
        epic_key: Optional[str] = None,
        epic_name: Optional[str] = None,
        sprint: Optional[str] = None,
        labels: Optional[List[str]] = None,
    ) -> Issue:
        return Issue(
            key=key,
            summary=f"Summary for {key}",
            issue_type="Story",
            status="Done",
            epic_key=epic_key,
            epic_name=epic_name,
            sprint=sprint,
            labels=labels or [],
        )

    return _make


@pytest.fixture
def make_pr():
    """Factory for pull requests."""

    def _make(number: int, title: str = "Feature PR", labels: Optional[List[str]] = None) -> PullRequest:
        return PullRequest(
            number=number,
            title=title,
            description=f"Description for PR #{number}",
            state="merged",
            labels=labels or [],
        )

    return _make


@pytest.fixture
def evidence():
    """Four commits of clustering evidence, hashes h1..h4."""
    return [
        CommitEvidence(
            hash=f"h{i}",
            message=f"Commit {i}\n\nDetails",
            files_changed=[f"src/module{i}.py"],
            diff_sample=f"+line {i}",
        )
        for i in range(1, 5)
    ]
