"""LLM-assisted clustering: prompts, response parsing and confidence filtering."""

from gitclusters.llm.base import BaseLLMProvider
from gitclusters.llm.clustering import (
    apply_clustering_response,
    clustering_result_to_grouping,
    filter_clustering_response,
)
from gitclusters.llm.parsing import (
    ClusteringResponse,
    ParseFailure,
    parse_clustering_response,
    parse_topic_tags,
)
from gitclusters.llm.processor import ClusteringProcessor
from gitclusters.llm.prompts import TOPIC_TAGS, PromptTemplates

__all__ = [
    "BaseLLMProvider",
    "ClusteringProcessor",
    "PromptTemplates",
    "TOPIC_TAGS",
    "ClusteringResponse",
    "ParseFailure",
    "parse_clustering_response",
    "parse_topic_tags",
    "filter_clustering_response",
    "apply_clustering_response",
    "clustering_result_to_grouping",
]
