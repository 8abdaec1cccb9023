"""
Candidate dataclasses for date selection.

Each candidate represents one successfully parsed date together with the
probe that produced it and where in the text it was found.
"""

from dataclasses import dataclass
from datetime import date


@dataclass
class DateCandidate:
    """
    Candidate for a resolved date.

    Selection factors:
    - priority: Probe precedence when spans overlap (lower wins)
    - value: Calendar date (earliest surviving candidate is chosen)
    """
    value: date
    pattern_name: str
    match_span: tuple[int, int]  # (start, end) character positions
    priority: int = 100  # Lower is better (like CSS priority)
    raw_text: str = ""  # Original matched text

    def overlaps(self, other: "DateCandidate") -> bool:
        start, end = self.match_span
        other_start, other_end = other.match_span
        return start < other_end and other_start < end


def create_date_candidate(
    value: date,
    pattern_name: str,
    match_span: tuple[int, int],
    raw_text: str,
    priority: int
) -> DateCandidate:
    """
    Create DateCandidate from a probe match.

    Args:
        value: Parsed calendar date
        pattern_name: Name of probe that matched
        match_span: Character span of match
        raw_text: Original matched text
        priority: Probe priority

    Returns:
        DateCandidate
    """
    return DateCandidate(
        value=value,
        pattern_name=pattern_name,
        match_span=match_span,
        priority=priority,
        raw_text=raw_text.strip(),
    )
