"""
Shared date parsing utilities for label notations.

Format templates use date-fns style tokens:
- yyyy: four-digit year
- yy: two-digit year, always read as 20yy (no pivot-year windowing)
- MM / dd: two-digit month / day
- M / d: one- or two-digit month / day
Every other character in a template is matched literally.
"""

from datetime import date
from functools import lru_cache
from typing import Optional
import calendar
import re


MONTHS = {
    'JAN': 1, 'FEB': 2, 'MAR': 3, 'APR': 4, 'MAY': 5, 'JUN': 6,
    'JUL': 7, 'AUG': 8, 'SEP': 9, 'OCT': 10, 'NOV': 11, 'DEC': 12,
}

_TOKEN_PATTERNS = {
    'yyyy': r'(?P<year>\d{4})',
    'yy': r'(?P<year>\d{2})',
    'MM': r'(?P<month>\d{2})',
    'M': r'(?P<month>\d{1,2})',
    'dd': r'(?P<day>\d{2})',
    'd': r'(?P<day>\d{1,2})',
}

# Longest tokens first so "yyyy" is never read as two "yy"
_TOKEN_RE = re.compile(r'yyyy|yy|MM|M|dd|d')


@lru_cache(maxsize=None)
def compile_template(template: str) -> re.Pattern:
    """
    Compile a format template such as "dd/MM/yyyy" into an anchored regex.

    Args:
        template: Format template

    Returns:
        Compiled pattern with year/month/day named groups
    """
    parts = []
    position = 0
    for token in _TOKEN_RE.finditer(template):
        parts.append(re.escape(template[position:token.start()]))
        parts.append(_TOKEN_PATTERNS[token.group(0)])
        position = token.end()
    parts.append(re.escape(template[position:]))
    return re.compile(''.join(parts))


def expand_year(year_str: str) -> int:
    """Expand a 2-digit year to 20yy; longer years are taken as written."""
    year_str = year_str.strip()
    if len(year_str) == 2:
        return 2000 + int(year_str)
    return int(year_str)


def month_number(name: str) -> Optional[int]:
    """
    Map a month word to its number.

    Examples:
        >>> month_number("Sept")
        9
        >>> month_number("JANUARY")
        1
    """
    if not name or len(name) < 3:
        return None
    return MONTHS.get(name[:3].upper())


def build_date(year: int, month: int, day: int) -> Optional[date]:
    """Construct a date, returning None for impossible combinations (Feb 30, month 13)."""
    try:
        return date(year, month, day)
    except ValueError:
        return None


def end_of_month(year: int, month: int) -> Optional[date]:
    """Last calendar day of the given month, or None if the month is invalid."""
    if not 1 <= month <= 12 or not date.min.year <= year <= date.max.year:
        return None
    return date(year, month, calendar.monthrange(year, month)[1])


def parse_with_template(value: str, template: str) -> Optional[date]:
    """
    Parse a date string against a single format template.

    Args:
        value: Date string (e.g., "01/02/24")
        template: Format template (e.g., "d/M/yy")

    Returns:
        date or None if the string does not fit the template or the
        resulting date does not exist

    Examples:
        >>> parse_with_template("01/02/24", "d/M/yy")
        datetime.date(2024, 2, 1)
        >>> parse_with_template("30/02/2026", "dd/MM/yyyy") is None
        True
    """
    match = compile_template(template).fullmatch(value.strip())
    if not match:
        return None

    return build_date(
        expand_year(match.group('year')),
        int(match.group('month')),
        int(match.group('day')),
    )
