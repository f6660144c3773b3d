"""AI-assisted clustering and tagging around a caller-supplied provider."""

from typing import Callable, List, Optional, Sequence, Union

import structlog

from gitclusters.llm.base import BaseLLMProvider
from gitclusters.llm.clustering import apply_clustering_response
from gitclusters.llm.parsing import parse_topic_tags
from gitclusters.llm.prompts import PromptTemplates
from gitclusters.models import (
    ClusteringResult,
    CommitEvidence,
    CommitTags,
    ConfidenceThresholds,
    Sensitivity,
    Settings,
)

logger = structlog.get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


class ClusteringProcessor:
    """Runs clustering and tagging prompts through an LLM provider."""

    def __init__(
        self,
        provider: BaseLLMProvider,
        prompts: Optional[PromptTemplates] = None,
        batch_size: int = 10,
    ) -> None:
        """Initialize clustering processor.

        Args:
            provider: Text-generation provider
            prompts: Prompt templates (defaults to PromptTemplates())
            batch_size: Default commits per tagging call
        """
        self.provider = provider
        self.prompts = prompts or PromptTemplates()
        self.batch_size = batch_size

    @classmethod
    def from_settings(cls, provider: BaseLLMProvider, settings: Settings) -> "ClusteringProcessor":
        """Build a processor with prompt budgets and batch size from settings."""
        return cls(
            provider,
            prompts=PromptTemplates(
                max_files=settings.max_prompt_files,
                max_diff_lines=settings.max_diff_lines,
            ),
            batch_size=settings.tag_batch_size,
        )

    async def analyze_commits_for_grouping(
        self,
        commits: Sequence[CommitEvidence],
        sensitivity: Union[Sensitivity, str, ConfidenceThresholds] = Sensitivity.BALANCED,
    ) -> ClusteringResult:
        """Ask the model to cluster commits and filter its answer.

        The model is not called for fewer than two commits. A failed call is
        treated like an unparseable answer: every commit stays ungrouped.

        Args:
            commits: Evidence for each commit
            sensitivity: Sensitivity level or explicit thresholds

        Returns:
            Filtered ClusteringResult
        """
        if len(commits) < 2:
            return ClusteringResult.all_ungrouped([c.hash for c in commits])

        prompt = self.prompts.commit_clustering(commits)
        try:
            response = await self.provider.complete(prompt)
        except Exception as e:
            logger.error("clustering_completion_failed", error=str(e), model=self.provider.model)
            return ClusteringResult.all_ungrouped([c.hash for c in commits])

        return apply_clustering_response(commits, response, sensitivity)

    async def assign_topic_tags(
        self,
        commits: Sequence[CommitEvidence],
        batch_size: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[CommitTags]:
        """Tag commits with topics from TOPIC_TAGS, one model call per batch.

        Args:
            commits: Commits to tag
            batch_size: Commits per model call (defaults to the processor's)
            on_progress: Called with (completed, total) after each batch

        Returns:
            One CommitTags per commit, in input order
        """
        batch_size = batch_size or self.batch_size
        results: List[CommitTags] = []

        for i in range(0, len(commits), batch_size):
            batch = commits[i : i + batch_size]
            try:
                response = await self.provider.complete(self.prompts.topic_tagging(batch))
            except Exception as e:
                logger.error("tagging_completion_failed", error=str(e), batch_start=i)
                response = ""
            results.extend(parse_topic_tags(response, batch))

            if on_progress:
                on_progress(len(results), len(commits))

        return results
