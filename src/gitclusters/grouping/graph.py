"""Connected-component clustering over file-change overlap."""

from collections import deque
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

import structlog

from gitclusters.grouping.signals import merge_issues, merge_labels
from gitclusters.grouping.similarity import file_overlap
from gitclusters.models import CommitGroup, GroupType, UngroupedEntry

logger = structlog.get_logger(__name__)

T = TypeVar("T")

FALLBACK_GROUP_NAME = "Related file changes"


def connected_components(
    items: Sequence[T],
    is_adjacent: Callable[[T, T], bool],
) -> List[List[int]]:
    """Split items into connected components of an implicit undirected graph.

    Items ``i`` and ``j`` (``i != j``) are joined when ``is_adjacent`` holds.
    Traversal is breadth-first, starting from each unvisited item in input
    order, so the output is deterministic.

    Args:
        items: Graph nodes
        is_adjacent: Symmetric pairwise predicate

    Returns:
        Components as lists of item indices, in discovery order
    """
    n = len(items)
    adjacency: List[List[int]] = [[] for _ in range(n)]
    for i in range(n):
        for j in range(i + 1, n):
            if is_adjacent(items[i], items[j]):
                adjacency[i].append(j)
                adjacency[j].append(i)

    visited = [False] * n
    components: List[List[int]] = []
    for start in range(n):
        if visited[start]:
            continue
        visited[start] = True
        queue = deque([start])
        component: List[int] = []
        while queue:
            node = queue.popleft()
            component.append(node)
            for neighbor in adjacency[node]:
                if not visited[neighbor]:
                    visited[neighbor] = True
                    queue.append(neighbor)
        components.append(component)

    return components


def common_path_prefix(paths: Sequence[str]) -> str:
    """Longest run of leading path segments shared by every path.

    >>> common_path_prefix(["src/api/auth.ts", "src/api/users.ts"])
    'src/api'
    """
    if not paths:
        return ""
    split_paths = [[segment for segment in path.split("/") if segment] for path in paths]
    prefix: List[str] = []
    for segments in zip(*split_paths):
        if len(set(segments)) != 1:
            break
        prefix.append(segments[0])
    return "/".join(prefix)


def unique_key(key: str, used: Dict[str, int]) -> str:
    """Suffix ``key`` with ``#n`` if it was already handed out."""
    count = used.get(key, 0) + 1
    used[key] = count
    return key if count == 1 else f"{key}#{count}"


def group_by_file_overlap(
    entries: Sequence[UngroupedEntry],
    threshold: float,
    used_keys: Optional[Dict[str, int]] = None,
) -> Tuple[List[CommitGroup], List[UngroupedEntry]]:
    """Group commits whose changed files overlap by at least ``threshold``.

    Args:
        entries: Commits still ungrouped, with their resolved issues
        threshold: Minimum Jaccard similarity for two commits to be adjacent
        used_keys: Group keys already handed out in this result

    Returns:
        Tuple of (file-overlap groups, commits left ungrouped)
    """
    components = connected_components(
        entries,
        lambda a, b: file_overlap(a.commit.files_changed, b.commit.files_changed) >= threshold,
    )

    groups: List[CommitGroup] = []
    ungrouped: List[UngroupedEntry] = []
    used_keys = {} if used_keys is None else used_keys

    for component in components:
        members = [entries[i] for i in component]
        if len(members) < 2:
            ungrouped.extend(members)
            continue

        all_files = list(
            dict.fromkeys(f for m in members for f in (m.commit.files_changed or []))
        )
        prefix = common_path_prefix(all_files)
        issues = merge_issues(issue for m in members for issue in m.issues)

        groups.append(
            CommitGroup(
                group_key=unique_key(f"files:{prefix or '*'}", used_keys),
                group_type=GroupType.FILE_OVERLAP,
                group_name=f"Changes in {prefix}" if prefix else FALLBACK_GROUP_NAME,
                commits=[m.commit for m in members],
                issues=issues,
                sprint=issues[0].sprint if issues else None,
                labels=merge_labels(issues),
            )
        )

    logger.debug(
        "file_overlap_clustered",
        commits=len(entries),
        components=len(components),
        groups=len(groups),
        threshold=threshold,
    )
    return groups, ungrouped
