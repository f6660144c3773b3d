"""Signal extraction from commit messages and their resolved tickets."""

import re
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from gitclusters.models import Commit, Issue

# PROJECT-123 style keys; matched case-insensitively and uppercased
TICKET_KEY_PATTERN = re.compile(r"\b([A-Z][A-Z0-9]+-\d+)\b", re.IGNORECASE)


def extract_ticket_keys(message: str) -> List[str]:
    """Extract ticket ids from a commit message.

    Args:
        message: Free-text commit message

    Returns:
        Uppercased ticket ids, deduplicated, in order of first appearance
    """
    keys = (match.group(1).upper() for match in TICKET_KEY_PATTERN.finditer(message))
    return list(dict.fromkeys(keys))


def resolve_issues(message: str, issue_table: Mapping[str, Issue]) -> List[Issue]:
    """Look up the issues referenced by a commit message.

    Ticket ids missing from the table are skipped.
    """
    return [issue_table[key] for key in extract_ticket_keys(message) if key in issue_table]


def resolve_epic(issues: Iterable[Issue]) -> Optional[Tuple[str, str]]:
    """Return ``(epic_key, epic_name)`` for the first issue that has an epic.

    The first issue in message order wins when several tickets point at
    different epics. The epic key doubles as the name when no name is set.
    """
    for issue in issues:
        if issue.epic_key:
            return issue.epic_key, issue.epic_name or issue.epic_key
    return None


def collect_epic_names(
    commits: Iterable[Commit],
    issue_table: Mapping[str, Issue],
) -> Dict[str, str]:
    """Map every epic seen in the batch to its display name.

    Used to label override targets that a commit does not reference itself.
    """
    names: Dict[str, str] = {}
    for commit in commits:
        for issue in resolve_issues(commit.message, issue_table):
            if issue.epic_key and issue.epic_key not in names:
                names[issue.epic_key] = issue.epic_name or issue.epic_key
    return names


def merge_labels(issues: Iterable[Issue], into: Optional[List[str]] = None) -> List[str]:
    """Union of issue labels, keeping first-seen order."""
    labels = list(into or [])
    for issue in issues:
        for label in issue.labels:
            if label not in labels:
                labels.append(label)
    return labels


def merge_issues(issues: Iterable[Issue], into: Optional[List[Issue]] = None) -> List[Issue]:
    """Union of issues by key, keeping first-seen order."""
    merged = list(into or [])
    seen = {issue.key for issue in merged}
    for issue in issues:
        if issue.key not in seen:
            seen.add(issue.key)
            merged.append(issue)
    return merged
