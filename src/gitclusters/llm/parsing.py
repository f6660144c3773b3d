"""Parsing of untrusted model output.

Model text is never trusted partially: it either validates completely into
a response model or becomes a :class:`ParseFailure`.
"""

import json
import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

import structlog
from pydantic import BaseModel, Field, ValidationError

from gitclusters.llm.prompts import TOPIC_TAGS
from gitclusters.models import CommitEvidence, CommitTags

logger = structlog.get_logger(__name__)

THINKING_TAG_PATTERNS = [
    re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<thinking>.*?</thinking>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<thought>.*?</thought>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<reasoning>.*?</reasoning>", re.DOTALL | re.IGNORECASE),
]


@dataclass(frozen=True)
class ParseFailure:
    """Model output that could not be turned into a response."""

    reason: str


class ProposedCommit(BaseModel):
    """A commit reference inside a proposed group."""

    index: int = Field(..., description="1-based commit number from the prompt")
    confidence: float = Field(
        ..., ge=0.0, le=1.0, allow_inf_nan=False, description="Model confidence for this membership"
    )


class ProposedGroup(BaseModel):
    """A group as proposed by the model, before any filtering."""

    name: str
    theme: str = "other"
    commits: List[ProposedCommit]
    overall_confidence: float = Field(..., ge=0.0, le=1.0, allow_inf_nan=False)
    reasoning: str = ""


class ClusteringResponse(BaseModel):
    """Validated model answer to the clustering prompt."""

    groups: List[ProposedGroup]
    ungrouped: List[int] = Field(default_factory=list)


class TaggingResponse(BaseModel):
    """Validated model answer to the tagging prompt."""

    tags: List[Tuple[int, List[str]]]


def strip_thinking_tags(text: str) -> str:
    """Remove ``<think>``-style reasoning blocks some models emit."""
    for pattern in THINKING_TAG_PATTERNS:
        text = pattern.sub("", text)
    return text.strip()


def extract_json_text(response: str) -> str:
    """Pull the JSON payload out of a model response.

    Handles fenced blocks (```json or plain ```) around the payload.
    """
    text = strip_thinking_tags(response)
    if "```json" in text:
        text = text.split("```json", 1)[1].split("```", 1)[0]
    elif "```" in text:
        parts = text.split("```")
        if len(parts) >= 2:
            text = parts[1]
    return text.strip()


def parse_clustering_response(response: str) -> Union[ClusteringResponse, ParseFailure]:
    """Decode and validate a clustering response.

    Args:
        response: Raw model text

    Returns:
        The validated response, or a ParseFailure describing what went wrong
    """
    try:
        payload = json.loads(extract_json_text(response))
    except json.JSONDecodeError as e:
        return ParseFailure(reason=f"invalid JSON: {e}")

    try:
        return ClusteringResponse.model_validate(payload)
    except ValidationError as e:
        return ParseFailure(reason=f"unexpected structure: {e.error_count()} validation errors")


def parse_topic_tags(response: str, batch: Sequence[CommitEvidence]) -> List[CommitTags]:
    """Map a tagging response back onto the commits of its batch.

    Unknown tags are discarded. Commits the model skipped, or whose tags were
    all invalid, get ``["other"]``. An unparseable response tags the whole
    batch ``["other"]``.

    Args:
        response: Raw model text
        batch: Commits in the order they were numbered in the prompt

    Returns:
        One CommitTags per commit in ``batch``, in batch order
    """
    tags_by_index = {}
    try:
        parsed = TaggingResponse.model_validate(json.loads(extract_json_text(response)))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("topic_tags_parse_failed", error=str(e), batch_size=len(batch))
    else:
        for index, tags in parsed.tags:
            if 1 <= index <= len(batch) and index not in tags_by_index:
                tags_by_index[index] = [t for t in dict.fromkeys(tags) if t in TOPIC_TAGS]

    return [
        CommitTags(
            hash=commit.hash,
            message=commit.message.split("\n", 1)[0],
            tags=tags_by_index.get(i) or ["other"],
        )
        for i, commit in enumerate(batch, start=1)
    ]
