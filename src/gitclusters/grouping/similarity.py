"""Similarity predicates used by the grouping tiers."""

from datetime import datetime, timedelta
from typing import Iterable, Optional


def file_overlap(files_a: Optional[Iterable[str]], files_b: Optional[Iterable[str]]) -> float:
    """Jaccard similarity of two file sets.

    Returns 0.0 when either side is empty or missing.
    """
    set_a = set(files_a or ())
    set_b = set(files_b or ())
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / len(set_a | set_b)


def within_window(t1: datetime, t2: datetime, window_days: float) -> bool:
    """True if two timestamps are at most ``window_days`` apart."""
    return abs(t1 - t2) <= timedelta(days=window_days)
