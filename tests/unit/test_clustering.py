"""Tests for confidence filtering of AI-proposed clusters."""

import json

import pytest

from gitclusters.llm.clustering import (
    apply_clustering_response,
    clustering_result_to_grouping,
    filter_clustering_response,
)
from gitclusters.llm.parsing import (
    ClusteringResponse,
    ProposedCommit,
    ProposedGroup,
    parse_clustering_response,
)
from gitclusters.models import (
    ClusteredGroup,
    ClusteringResult,
    ConfidenceThresholds,
    GroupType,
    Sensitivity,
)


def _response(*groups, ungrouped=None):
    """Build a clustering response; each group is (name, [(index, conf)], overall)."""
    return json.dumps(
        {
            "groups": [
                {
                    "name": name,
                    "theme": "other",
                    "commits": [{"index": i, "confidence": c} for i, c in members],
                    "overall_confidence": overall,
                    "reasoning": f"{name} reasoning",
                }
                for name, members, overall in groups
            ],
            "ungrouped": ungrouped or [],
        }
    )


@pytest.fixture
def two_group_response():
    """A confident group and a weak one over four commits."""
    return _response(
        ("Strong", [(1, 0.95), (2, 0.85)], 0.9),
        ("Weak", [(3, 0.75), (4, 0.7)], 0.72),
    )


class TestSensitivityLevels:
    """Test the same response under each sensitivity level."""

    def test_strict(self, evidence, two_group_response):
        result = apply_clustering_response(evidence, two_group_response, Sensitivity.STRICT)

        assert result.groups == []
        assert result.ungrouped == ["h2", "h1", "h3", "h4"]

    def test_balanced(self, evidence, two_group_response):
        result = apply_clustering_response(evidence, two_group_response, Sensitivity.BALANCED)

        assert [g.commit_hashes for g in result.groups] == [["h1", "h2"]]
        assert result.groups[0].name == "Strong"
        assert result.groups[0].confidence == 0.9
        assert result.ungrouped == ["h3", "h4"]

    def test_loose(self, evidence, two_group_response):
        result = apply_clustering_response(evidence, two_group_response, "loose")

        assert [g.commit_hashes for g in result.groups] == [["h1", "h2"], ["h3", "h4"]]
        assert result.ungrouped == []

    def test_looser_never_groups_fewer(self, evidence, two_group_response):
        grouped = {}
        for level in Sensitivity:
            result = apply_clustering_response(evidence, two_group_response, level)
            grouped[level] = {h for g in result.groups for h in g.commit_hashes}

        assert grouped[Sensitivity.STRICT] <= grouped[Sensitivity.BALANCED]
        assert grouped[Sensitivity.BALANCED] <= grouped[Sensitivity.LOOSE]


class TestFilterRules:
    """Test individual filtering rules."""

    def test_partition_of_input(self, evidence, two_group_response):
        for level in Sensitivity:
            result = apply_clustering_response(evidence, two_group_response, level)
            hashes = [h for g in result.groups for h in g.commit_hashes] + result.ungrouped
            assert sorted(hashes) == ["h1", "h2", "h3", "h4"]
            assert len(hashes) == len(set(hashes))

    def test_out_of_range_numbers_dropped(self, evidence):
        text = _response(("G", [(0, 1.0), (1, 1.0), (2, 1.0), (99, 1.0)], 1.0), ungrouped=[42])

        result = apply_clustering_response(evidence, text)

        assert [g.commit_hashes for g in result.groups] == [["h1", "h2"]]
        assert result.ungrouped == ["h3", "h4"]

    def test_commit_in_two_groups_is_evicted(self, evidence):
        text = _response(
            ("A", [(1, 1.0), (2, 1.0), (3, 1.0)], 1.0),
            ("B", [(3, 1.0), (4, 1.0)], 1.0),
        )

        result = apply_clustering_response(evidence, text)

        assert [g.commit_hashes for g in result.groups] == [["h1", "h2"]]
        assert result.ungrouped == ["h3", "h4"]

    def test_duplicate_number_within_group_counts_once(self, evidence):
        text = _response(("A", [(1, 1.0), (1, 0.1), (2, 1.0)], 1.0))

        result = apply_clustering_response(evidence, text)

        assert [g.commit_hashes for g in result.groups] == [["h1", "h2"]]

    def test_group_shrunk_below_two_dissolves(self, evidence):
        text = _response(("A", [(1, 0.99), (2, 0.1)], 0.95))

        result = apply_clustering_response(evidence, text)

        assert result.groups == []
        assert result.ungrouped == ["h2", "h1", "h3", "h4"]

    def test_low_overall_confidence_dissolves(self, evidence):
        text = _response(("A", [(1, 0.99), (2, 0.99)], 0.5))

        result = apply_clustering_response(evidence, text)

        assert result.groups == []

    def test_thresholds_are_inclusive(self, evidence):
        text = _response(("A", [(1, 0.8), (2, 0.8)], 0.7))

        result = apply_clustering_response(evidence, text, Sensitivity.BALANCED)

        assert len(result.groups) == 1

    def test_explicit_thresholds(self, evidence):
        response = parse_clustering_response(_response(("A", [(1, 0.5), (2, 0.5)], 0.5)))

        result = filter_clustering_response(
            response, evidence, ConfidenceThresholds(per_commit=0.4, per_group=0.4)
        )

        assert len(result.groups) == 1

    def test_model_ungrouped_listed_first(self, evidence):
        text = _response(("A", [(1, 1.0), (2, 1.0)], 1.0), ungrouped=[4])

        result = apply_clustering_response(evidence, text)

        assert result.ungrouped == ["h4", "h3"]


class TestDegenerateInput:
    """Test inputs that must leave everything ungrouped."""

    def test_malformed_response(self, evidence):
        result = apply_clustering_response(evidence, "The commits look related!")

        assert result.groups == []
        assert result.ungrouped == ["h1", "h2", "h3", "h4"]

    def test_single_commit(self, evidence):
        text = _response(("A", [(1, 1.0)], 1.0))

        result = apply_clustering_response(evidence[:1], text)

        assert result == ClusteringResult(groups=[], ungrouped=["h1"])

    def test_no_commits(self):
        assert apply_clustering_response([], "{}") == ClusteringResult()


class TestClusteringResultToGrouping:
    """Test conversion into ai-suggested groups."""

    def test_builds_ai_groups(self, make_commit, make_issue):
        commits = [
            make_commit("h1", "ES1-1: one"),
            make_commit("h2", "two"),
            make_commit("h3", "three"),
        ]
        table = {"ES1-1": make_issue("ES1-1", sprint="Sprint 2", labels=["auth"])}
        result = ClusteringResult(
            groups=[
                ClusteredGroup(
                    name="Auth",
                    theme="authentication",
                    commit_hashes=["h1", "h2"],
                    reasoning="same flow",
                    confidence=0.9,
                )
            ],
            ungrouped=["h3"],
        )

        grouping = clustering_result_to_grouping(result, commits, table)

        group = grouping.groups[0]
        assert group.group_key == "ai-1"
        assert group.group_type == GroupType.AI_SUGGESTED
        assert group.group_name == "Auth"
        assert group.theme == "authentication"
        assert group.confidence == 0.9
        assert group.sprint == "Sprint 2"
        assert group.labels == ["auth"]
        assert grouping.ungrouped_hashes() == ["h3"]

    def test_unknown_hashes_ignored(self, make_commit):
        commits = [make_commit("h1"), make_commit("h2")]
        result = ClusteringResult(
            groups=[ClusteredGroup(name="G", commit_hashes=["h1", "zzz"], confidence=0.9)]
        )

        grouping = clustering_result_to_grouping(result, commits)

        assert grouping.groups == []
        assert grouping.ungrouped_hashes() == ["h1", "h2"]


class TestOutOfRangeConfidence:
    """Test confidences the model should never produce leave everything ungrouped."""

    def test_nan_confidences(self, evidence):
        text = _response(("A", [(1, float("nan")), (2, float("nan"))], 0.95))

        result = apply_clustering_response(evidence, text, Sensitivity.STRICT)

        assert result.groups == []
        assert result.ungrouped == ["h1", "h2", "h3", "h4"]

    def test_confidences_above_one(self, evidence):
        text = _response(("A", [(1, 7), (2, 7)], 42))

        result = apply_clustering_response(evidence, text, Sensitivity.STRICT)

        assert result.groups == []
        assert result.ungrouped == ["h1", "h2", "h3", "h4"]

    def test_filter_evicts_nan_member(self, evidence):
        response = ClusteringResponse.model_construct(
            groups=[
                ProposedGroup.model_construct(
                    name="A",
                    theme="other",
                    commits=[
                        ProposedCommit.model_construct(index=1, confidence=float("nan")),
                        ProposedCommit.model_construct(index=2, confidence=1.0),
                        ProposedCommit.model_construct(index=3, confidence=1.0),
                    ],
                    overall_confidence=1.0,
                    reasoning="",
                )
            ],
            ungrouped=[],
        )

        result = filter_clustering_response(
            response, evidence, ConfidenceThresholds(per_commit=0.5, per_group=0.5)
        )

        assert [g.commit_hashes for g in result.groups] == [["h2", "h3"]]
        assert result.ungrouped == ["h1", "h4"]
