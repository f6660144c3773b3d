"""Tests for clustering processor."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from gitclusters.llm.processor import ClusteringProcessor
from gitclusters.llm.prompts import PromptTemplates
from gitclusters.models import CommitEvidence, ConfidenceThresholds, Sensitivity, Settings

CLUSTERING_RESPONSE = json.dumps(
    {
        "groups": [
            {
                "name": "Modules one and two",
                "theme": "refactor",
                "commits": [{"index": 1, "confidence": 0.95}, {"index": 2, "confidence": 0.9}],
                "overall_confidence": 0.92,
                "reasoning": "Same refactor",
            }
        ],
        "ungrouped": [3, 4],
    }
)


@pytest.fixture
def mock_provider():
    """Create mock LLM provider."""
    provider = MagicMock()
    provider.model = "test-model"
    provider.complete = AsyncMock(return_value=CLUSTERING_RESPONSE)
    return provider


@pytest.fixture
def processor(mock_provider):
    """Create processor around the mock provider."""
    return ClusteringProcessor(mock_provider)


@pytest.mark.asyncio
async def test_analyze_commits_for_grouping(processor, mock_provider, evidence):
    """Test clustering round trip through the provider."""
    result = await processor.analyze_commits_for_grouping(evidence)

    assert [g.commit_hashes for g in result.groups] == [["h1", "h2"]]
    assert result.groups[0].theme == "refactor"
    assert result.ungrouped == ["h3", "h4"]

    mock_provider.complete.assert_called_once()
    prompt = mock_provider.complete.call_args[0][0]
    assert "COMMIT 1: Commit 1" in prompt
    assert "COMMIT 4: Commit 4" in prompt


@pytest.mark.asyncio
async def test_analyze_respects_sensitivity(processor, evidence):
    """Test a strict policy rejects the same response."""
    result = await processor.analyze_commits_for_grouping(
        evidence, ConfidenceThresholds(per_commit=0.99, per_group=0.99)
    )

    assert result.groups == []
    assert sorted(result.ungrouped) == ["h1", "h2", "h3", "h4"]


@pytest.mark.asyncio
async def test_analyze_skips_model_for_single_commit(processor, mock_provider, evidence):
    """Test the provider is not called for fewer than two commits."""
    result = await processor.analyze_commits_for_grouping(evidence[:1], Sensitivity.LOOSE)

    assert result.groups == []
    assert result.ungrouped == ["h1"]
    mock_provider.complete.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_provider_error(processor, mock_provider, evidence):
    """Test a failing provider leaves every commit ungrouped."""
    mock_provider.complete.side_effect = Exception("API Error")

    result = await processor.analyze_commits_for_grouping(evidence)

    assert result.groups == []
    assert result.ungrouped == ["h1", "h2", "h3", "h4"]


@pytest.mark.asyncio
async def test_analyze_malformed_response(processor, mock_provider, evidence):
    """Test prose instead of JSON leaves every commit ungrouped."""
    mock_provider.complete.return_value = "These all look like refactors to me."

    result = await processor.analyze_commits_for_grouping(evidence)

    assert result.groups == []
    assert len(result.ungrouped) == 4


@pytest.mark.asyncio
async def test_assign_topic_tags_batches(mock_provider, evidence):
    """Test tagging splits commits into batches and reports progress."""
    mock_provider.complete.side_effect = [
        json.dumps({"tags": [[1, ["api"]], [2, ["ui", "bugfix"]], [3, ["testing"]]]}),
        json.dumps({"tags": [[1, ["documentation"]]]}),
    ]
    processor = ClusteringProcessor(mock_provider)
    progress = []

    tags = await processor.assign_topic_tags(
        evidence, batch_size=3, on_progress=lambda done, total: progress.append((done, total))
    )

    assert [t.hash for t in tags] == ["h1", "h2", "h3", "h4"]
    assert [t.tags for t in tags] == [["api"], ["ui", "bugfix"], ["testing"], ["documentation"]]
    assert mock_provider.complete.call_count == 2
    assert progress == [(3, 4), (4, 4)]


@pytest.mark.asyncio
async def test_assign_topic_tags_provider_error(processor, mock_provider, evidence):
    """Test a failed batch falls back to the other tag."""
    mock_provider.complete.side_effect = Exception("timeout")

    tags = await processor.assign_topic_tags(evidence)

    assert [t.tags for t in tags] == [["other"]] * 4


@pytest.mark.asyncio
async def test_custom_prompt_limits(mock_provider):
    """Test prompt templates passed to the processor are used."""
    commits = [
        CommitEvidence(hash=f"x{i}", message=f"Change {i}", files_changed=[f"f{j}.py" for j in range(4)])
        for i in range(2)
    ]
    processor = ClusteringProcessor(mock_provider, PromptTemplates(max_files=2))

    await processor.analyze_commits_for_grouping(commits)

    prompt = mock_provider.complete.call_args[0][0]
    assert "Files: f0.py, f1.py (+2 more)" in prompt


@pytest.mark.asyncio
async def test_from_settings(mock_provider, evidence, monkeypatch, tmp_path):
    """Test batch size and prompt budgets come from settings."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITCLUSTERS_TAG_BATCH_SIZE", "2")
    monkeypatch.setenv("GITCLUSTERS_MAX_PROMPT_FILES", "1")
    mock_provider.complete.return_value = json.dumps({"tags": [[1, ["api"]], [2, ["ui"]]]})

    processor = ClusteringProcessor.from_settings(mock_provider, Settings())
    tags = await processor.assign_topic_tags(evidence)

    assert processor.prompts.max_files == 1
    assert mock_provider.complete.call_count == 2
    assert [t.tags for t in tags] == [["api"], ["ui"], ["api"], ["ui"]]
