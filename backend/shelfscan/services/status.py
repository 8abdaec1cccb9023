"""
Expiry status derived from an extracted expiry date.
"""

from datetime import date
from typing import Optional

from shelfscan.models.label import ExpiryStatus


def _days(count: int) -> str:
    return f"{count} day{'' if count == 1 else 's'}"


def expiry_status(expiry_date: Optional[date], today: Optional[date] = None) -> ExpiryStatus:
    """
    Describe how far away an expiry date is.

    Plain calendar-day subtraction; callers that care about timezones pass
    their own `today`.

    Args:
        expiry_date: Extracted expiry date, if any
        today: Reference day (defaults to date.today())

    Returns:
        ExpiryStatus with display label, tone and signed day count
    """
    if expiry_date is None:
        return ExpiryStatus(label="No expiry date detected", tone="muted")

    today = today or date.today()
    days_left = (expiry_date - today).days

    if days_left < 0:
        return ExpiryStatus(label=f"Expired {_days(-days_left)} ago", tone="destructive", days_left=days_left)
    if days_left == 0:
        return ExpiryStatus(label="Expires today", tone="secondary", days_left=0)
    return ExpiryStatus(label=f"{_days(days_left)} left", tone="primary", days_left=days_left)
