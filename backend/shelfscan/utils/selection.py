"""
Selection functions for date candidates.

Candidates from competing probes can describe the same piece of text
(e.g. "01/02/24" read day-first and month-first). Overlapping candidates are
resolved by probe priority first; the earliest surviving date is then chosen.
"""

from typing import List, Optional

from .candidates import DateCandidate

__all__ = ['suppress_overlapping', 'select_earliest_date']


def suppress_overlapping(candidates: List[DateCandidate]) -> List[DateCandidate]:
    """
    Drop candidates whose span overlaps a candidate from a higher-priority probe.

    Candidates with equal priority never suppress each other.

    Args:
        candidates: List of DateCandidate objects

    Returns:
        Surviving candidates, ordered by priority
    """
    kept: List[DateCandidate] = []

    for candidate in sorted(candidates, key=lambda c: c.priority):
        shadowed = any(
            other.priority < candidate.priority and other.overlaps(candidate)
            for other in kept
        )
        if not shadowed:
            kept.append(candidate)

    return kept


def select_earliest_date(
    candidates: List[DateCandidate]
) -> Optional[DateCandidate]:
    """
    Select the chronologically earliest date candidate.

    Earliest-wins is a heuristic: spurious numeric matches on a label tend to
    be later or nonsensical dates, but a label with several genuine dates in
    one span (manufacture and expiry) resolves to the earlier one.

    Args:
        candidates: List of DateCandidate objects

    Returns:
        Earliest candidate or None

    Example:
        >>> best = select_earliest_date(resolver.find_candidates("EXP 2026-01-15"))
    """
    survivors = suppress_overlapping(candidates)
    if not survivors:
        return None

    # Ties: priority, then position
    return min(survivors, key=lambda c: (c.value, c.priority, c.match_span))
