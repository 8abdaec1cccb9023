"""
Test suite for expiry status labels.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from datetime import date, timedelta
import pytest

from shelfscan.services.status import expiry_status

TODAY = date(2026, 1, 10)


class TestExpiryStatus:
    """Days-left wording and tone."""

    @pytest.mark.parametrize("expiry, label, tone, days_left", [
        (date(2026, 1, 20), "10 days left", "primary", 10),
        (date(2026, 1, 11), "1 day left", "primary", 1),
        (date(2026, 1, 10), "Expires today", "secondary", 0),
        (date(2026, 1, 9), "Expired 1 day ago", "destructive", -1),
        (date(2025, 12, 31), "Expired 10 days ago", "destructive", -10),
    ])
    def test_relative_to_reference_day(self, expiry, label, tone, days_left):
        status = expiry_status(expiry, today=TODAY)

        assert status.label == label
        assert status.tone == tone
        assert status.days_left == days_left

    def test_missing_expiry(self):
        status = expiry_status(None, today=TODAY)

        assert status.label == "No expiry date detected"
        assert status.tone == "muted"
        assert status.days_left is None

    def test_defaults_to_today(self):
        status = expiry_status(date.today() + timedelta(days=3))
        assert status.days_left == 3
