"""Display helpers for fees, distances and durations."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

from .geospatial import METERS_PER_MILE

FEET_PER_MILE = 5280


def round_currency(amount: float) -> float:
    """Round to cents, halves away from zero."""
    return float(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_currency(amount: float) -> str:
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_distance(meters: float) -> str:
    miles = meters / METERS_PER_MILE
    if miles < 0.1:
        return f"{round(meters)} m"
    if miles < 1:
        return f"{miles * FEET_PER_MILE:.0f} ft"
    return f"{miles:.1f} mi"


def format_duration(seconds: float) -> str:
    minutes = math.ceil(seconds / 60)
    return format_minutes(minutes, short=True)


def format_minutes(total_minutes: int, short: bool = False) -> str:
    """``N min``/``N minutes`` under an hour, ``Hh Mm`` (or ``Hh``) otherwise."""
    if total_minutes < 60:
        return f"{total_minutes} min" if short else f"{total_minutes} minutes"
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes}m" if minutes > 0 else f"{hours}h"
