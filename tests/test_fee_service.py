# tests/test_fee_service.py
"""Unit tests for fee computation (per started hour, daily cap)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta
from app.config import settings
from app.models.enums import SpotType
from app.services.fee_service import calculate_fee

ENTRY = datetime(2026, 3, 1, 8, 0, 0)


def fee_after(spot_type, **duration):
    return calculate_fee(spot_type, ENTRY, ENTRY + timedelta(**duration))


class TestCalculateFee:
    def test_minimum_one_hour(self):
        assert fee_after(SpotType.COMPACT, minutes=0) == settings.RATE_COMPACT
        assert fee_after(SpotType.COMPACT, minutes=10) == settings.RATE_COMPACT

    def test_started_hour_is_billed(self):
        assert fee_after(SpotType.COMPACT, hours=1, minutes=1) == 2 * settings.RATE_COMPACT

    def test_rate_depends_on_spot_type(self):
        assert fee_after("MOTORCYCLE", hours=3) == 3 * settings.RATE_MOTORCYCLE
        assert fee_after("LARGE", hours=3) == 3 * settings.RATE_LARGE

    def test_daily_cap(self):
        daily_max = settings.RATE_COMPACT * settings.DAILY_CAP_HOURS
        assert fee_after(SpotType.COMPACT, hours=20) == daily_max
        assert fee_after(SpotType.COMPACT, hours=24) == daily_max

    def test_multi_day_stay(self):
        daily_max = settings.RATE_LARGE * settings.DAILY_CAP_HOURS
        assert fee_after(SpotType.LARGE, days=2, hours=2) == 2 * daily_max + 2 * settings.RATE_LARGE

    def test_exit_before_entry(self):
        with pytest.raises(ValueError):
            calculate_fee(SpotType.COMPACT, ENTRY, ENTRY - timedelta(seconds=1))
