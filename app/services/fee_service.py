# app/services/fee_service.py
"""
Parking fee computation.
Billed per started hour at the spot type's hourly rate (minimum one hour).
Every full 24h block is capped at DAILY_CAP_HOURS × rate, and so is the
remainder.
"""

import math
from datetime import datetime

from app.config import settings
from app.models.enums import SpotType


def calculate_fee(spot_type, entry_time: datetime, exit_time: datetime) -> float:
    if exit_time < entry_time:
        raise ValueError(f"Exit time {exit_time} is before entry time {entry_time}")

    rate = settings.HOURLY_RATES[SpotType(spot_type).value]
    hours = max(1, math.ceil((exit_time - entry_time).total_seconds() / 3600))
    days, rest_hours = divmod(hours, 24)

    daily_max = rate * settings.DAILY_CAP_HOURS
    fee = days * daily_max + min(rest_hours * rate, daily_max)
    return round(fee, 2)
