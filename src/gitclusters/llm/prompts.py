"""Prompt templates for commit clustering and tagging."""

from typing import List, Sequence

from gitclusters.models import CommitEvidence

TOPIC_TAGS = (
    "authentication",
    "api",
    "ui",
    "database",
    "testing",
    "documentation",
    "config",
    "deployment",
    "ci-cd",
    "bugfix",
    "refactor",
    "performance",
    "security",
    "logging",
    "email",
    "payments",
    "other",
)


class PromptTemplates:
    """Collection of prompt templates for commit clustering."""

    def __init__(self, max_files: int = 5, max_diff_lines: int = 20) -> None:
        """Initialize templates.

        Args:
            max_files: Changed files listed per commit
            max_diff_lines: Diff lines shown per commit
        """
        self.max_files = max_files
        self.max_diff_lines = max_diff_lines

    def _describe_commit(self, ordinal: int, evidence: CommitEvidence) -> str:
        first_line = evidence.message.split("\n", 1)[0]

        if evidence.files_changed:
            shown = ", ".join(evidence.files_changed[: self.max_files])
            extra = len(evidence.files_changed) - self.max_files
            files = f"Files: {shown}" + (f" (+{extra} more)" if extra > 0 else "")
        else:
            files = "Files: (none)"

        diff = ""
        if evidence.diff_sample:
            diff_lines = "\n".join(evidence.diff_sample.split("\n")[: self.max_diff_lines])
            diff = f"\n   Changes:\n   ```diff\n{diff_lines}\n   ```"

        return f"COMMIT {ordinal}: {first_line}\n   {files}{diff}"

    def commit_clustering(self, commits: Sequence[CommitEvidence]) -> str:
        """Generate prompt for clustering commits into logical groups.

        Commits are referenced by 1-based number, never by hash.

        Args:
            commits: Evidence for each commit, in the order numbers are assigned

        Returns:
            Formatted prompt
        """
        descriptions = "\n\n".join(
            self._describe_commit(i, c) for i, c in enumerate(commits, start=1)
        )

        return f"""Analyze these git commits and group them by feature, component, or logical change.

{descriptions}

OUTPUT FORMAT - Respond with ONLY valid JSON, no other text.
IMPORTANT: Use commit NUMBERS (1, 2, 3, etc.) to reference commits, NOT hashes.

{{
  "groups": [
    {{
      "name": "Short descriptive name (2-5 words)",
      "theme": "authentication|api|ui|testing|refactor|bugfix|docs|config|other",
      "commits": [
        {{"index": 1, "confidence": 0.95}},
        {{"index": 5, "confidence": 0.82}}
      ],
      "overall_confidence": 0.88,
      "reasoning": "Brief explanation (1 sentence)"
    }}
  ],
  "ungrouped": [3, 7, 12]
}}

CONFIDENCE SCORING (0.0 to 1.0):
- 0.9+ = Very confident - commits clearly belong together (same feature, same files)
- 0.8-0.9 = Confident - strong connection (related functionality, similar patterns)
- 0.7-0.8 = Moderate - some connection but not certain
- Below 0.7 = Low confidence - leave in ungrouped

RULES:
1. Group by logical feature or component, not just file path
2. Minimum 2 commits per group (otherwise leave ungrouped)
3. Use clear, descriptive group names (e.g., "User Authentication", "API Error Handling")
4. Be CONSERVATIVE with confidence scores - when in doubt, score lower
5. Consider: shared files, related functionality, sequential work on same feature
6. overall_confidence = average of commit confidences in that group
7. Each commit belongs to at most one group

Respond with only the JSON:"""

    def topic_tagging(self, commits: Sequence[CommitEvidence]) -> str:
        """Generate prompt for assigning topic tags to a batch of commits.

        Args:
            commits: Evidence for each commit in the batch

        Returns:
            Formatted prompt
        """
        lines: List[str] = []
        for i, commit in enumerate(commits, start=1):
            first_line = commit.message.split("\n", 1)[0]
            files = ", ".join(commit.files_changed[: self.max_files])
            lines.append(f'{i}. "{first_line}"' + (f" [Files: {files}]" if files else ""))
        commit_list = "\n".join(lines)

        return f"""Assign 1-3 topic tags to each commit from this list: {", ".join(TOPIC_TAGS)}

COMMITS:
{commit_list}

OUTPUT FORMAT - Respond with ONLY valid JSON, no other text:
{{
  "tags": [
    [1, ["api", "testing"]],
    [2, ["ui", "bugfix"]],
    [3, ["documentation"]]
  ]
}}

RULES:
1. Each commit gets 1-3 tags maximum
2. Use ONLY tags from the provided list
3. Choose tags based on the commit message AND file paths
4. If unsure, use "other"

Respond with only the JSON:"""
