"""
Date candidate resolver for noisy label text.

Every probe in DATE_PROBES runs over the whole input. Each probe pairs a regex
with either a list of format templates or a builder function; every date that
parses becomes a candidate, and the earliest candidate wins.
"""

import re
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple

from shelfscan.utils.candidates import DateCandidate, create_date_candidate
from shelfscan.utils.dates import (
    build_date,
    end_of_month,
    expand_year,
    month_number,
    parse_with_template,
)
from shelfscan.utils.selection import select_earliest_date

logger = logging.getLogger(__name__)

MONTH_WORD = r'(JAN|FEB|MAR|APR|MAY|JUN|JUL|AUG|SEP|OCT|NOV|DEC)[A-Z]*'


@dataclass(frozen=True)
class DateProbe:
    """A named date notation: regex plus the templates or builder that parse its matches."""
    name: str
    pattern: str
    example: str
    formats: Tuple[str, ...] = ()
    builder: Optional[Callable[[re.Match], Optional[date]]] = None
    priority: int = 100
    flags: int = re.IGNORECASE
    compiled: re.Pattern = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.pattern, self.flags))

    def parse(self, match: re.Match) -> List[date]:
        """Return every distinct valid date this probe reads from a match."""
        if self.builder is not None:
            value = self.builder(match)
            return [value] if value is not None else []

        dates: List[date] = []
        for fmt in self.formats:
            value = parse_with_template(match.group(0), fmt)
            if value is not None and value not in dates:
                dates.append(value)
        return dates


def _month_word_date(match: re.Match) -> Optional[date]:
    day_str, month_name, year_str = match.group(1), match.group(2), match.group(3)
    month = month_number(month_name)
    if month is None:
        return None
    day = int(day_str) if day_str else 1
    return build_date(expand_year(year_str), month, day)


def _best_before_month_date(match: re.Match) -> Optional[date]:
    # A best-before month is good through the last day of that month
    month = month_number(match.group(1))
    if month is None:
        return None
    return end_of_month(expand_year(match.group(2)), month)


def _iso_date(match: re.Match) -> Optional[date]:
    try:
        return date.fromisoformat(match.group(0))
    except ValueError:
        return None


# Numeric probes never start or end inside a longer digit run, so
# "2026-01-15" is not also read as "26-01-15".
DATE_PROBES: Tuple[DateProbe, ...] = (
    DateProbe(
        name='iso_like',
        pattern=r'(?<!\d)(20\d{2})[/.\-](1[0-2]|0?[1-9])[/.\-](3[01]|[12]\d|0?[1-9])(?!\d)',
        example='2026/1/15',
        formats=('yyyy-MM-dd', 'yyyy/M/d', 'yyyy.M.d', 'yyyy-M-d', 'yyyy/MM/dd'),
        priority=10,
    ),
    DateProbe(
        name='day_month_year',
        pattern=r'(?<!\d)(3[01]|[12]\d|0?[1-9])[/.\-](1[0-2]|0?[1-9])[/.\-](\d{4}|\d{2})(?!\d)',
        example='12/01/2026',
        formats=('d-M-yyyy', 'd-M-yy', 'd/M/yyyy', 'd/M/yy', 'dd-MM-yyyy', 'dd/MM/yyyy', 'dd.MM.yyyy'),
        priority=20,
    ),
    DateProbe(
        name='month_day_year',
        pattern=r'(?<!\d)(1[0-2]|0?[1-9])[/.\-](3[01]|[12]\d|0?[1-9])[/.\-](\d{4}|\d{2})(?!\d)',
        example='01/31/2026',
        formats=('M-d-yyyy', 'M/d/yy', 'M/d/yyyy', 'MM-dd-yyyy', 'MM/dd/yyyy'),
        priority=30,
    ),
    DateProbe(
        name='month_word',
        pattern=r'(?:(?<!\d)(\d{1,2})[\s.\-/]*)?(?<![A-Z])' + MONTH_WORD + r'\.?[\s.\-/,\']*(\d{4}|\d{2})(?!\d)',
        example='12 JAN 2026',
        builder=_month_word_date,
        priority=40,
    ),
    DateProbe(
        name='best_before_month',
        pattern=r'BEST\s*BEFORE[^A-Z0-9]*' + MONTH_WORD + r'\.?[\s.\-/,\']*(\d{4}|\d{2})(?!\d)',
        example='Best Before Mar 2026',
        builder=_best_before_month_date,
        priority=5,
    ),
    DateProbe(
        name='iso_date',
        pattern=r'\b\d{4}-\d{2}-\d{2}\b',
        example='2026-01-15',
        builder=_iso_date,
        priority=10,
    ),
)


class DateResolver:
    """Resolves the most plausible date from arbitrary text."""

    def __init__(self, probes: Optional[Sequence[DateProbe]] = None):
        self.probes = tuple(probes) if probes is not None else DATE_PROBES

    def find_candidates(self, text: str) -> List[DateCandidate]:
        """
        Run every probe over the text and collect all valid dates.

        Args:
            text: Arbitrary text, possibly with OCR noise

        Returns:
            All date candidates, in probe order
        """
        candidates: List[DateCandidate] = []
        if not text:
            return candidates

        for probe in self.probes:
            for match in probe.compiled.finditer(text):
                for value in probe.parse(match):
                    candidates.append(create_date_candidate(
                        value=value,
                        pattern_name=probe.name,
                        match_span=(match.start(), match.end()),
                        raw_text=match.group(0),
                        priority=probe.priority,
                    ))

        return candidates

    def resolve(self, text: str) -> Optional[date]:
        """
        Return the earliest valid date found in the text.

        Args:
            text: Arbitrary text

        Returns:
            date or None if nothing parses under any probe
        """
        candidates = self.find_candidates(text)
        best = select_earliest_date(candidates)
        if best is None:
            return None

        logger.debug(
            "Resolved %s via %s from %r (%d candidates)",
            best.value, best.pattern_name, best.raw_text, len(candidates)
        )
        return best.value


_resolver = DateResolver()


def resolve_date(text: str) -> Optional[date]:
    """Resolve the earliest valid date in text using the default probe table."""
    return _resolver.resolve(text)
