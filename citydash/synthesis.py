"""Shared building blocks for synthetic city data.

Everything here except the jitter callable is a pure function of its inputs,
so a per-city baseline computed for a fixed instant is reproducible.
"""

from __future__ import annotations

import datetime as dt
import math
import random
from enum import Enum
from typing import Callable, Sequence, Tuple

SECONDS_PER_DAY = 86_400

# Inclusive hour ranges.
NIGHT_START_HOUR = 22
NIGHT_END_HOUR = 5
TRANSPORT_RUSH_WINDOWS: Tuple[Tuple[int, int], ...] = ((7, 10), (17, 20))
AIR_RUSH_WINDOWS: Tuple[Tuple[int, int], ...] = ((7, 10), (18, 21))

Jitter = Callable[[float, float], float]
"""Returns a noise value in [low, high]; `random.uniform` in production."""

default_jitter: Jitter = random.uniform


def no_jitter(low: float, high: float) -> float:
    """Jitter that always returns zero (for reproducible output)."""
    return 0.0


class Daypart(str, Enum):
    """Coarse time-of-day band driving the modulation rules."""
    RUSH = "rush"
    NIGHT = "night"
    OFF_PEAK = "off_peak"


def is_night(hour: int) -> bool:
    """True for hours 22:00 through 05:59."""
    return hour >= NIGHT_START_HOUR or hour <= NIGHT_END_HOUR


def classify_hour(hour: int, rush_windows: Sequence[Tuple[int, int]] = TRANSPORT_RUSH_WINDOWS) -> Daypart:
    """Map an hour of day to night, rush or off-peak. Night wins over rush."""
    if is_night(hour):
        return Daypart.NIGHT
    for start, end in rush_windows:
        if start <= hour <= end:
            return Daypart.RUSH
    return Daypart.OFF_PEAK


def is_weekend(moment: dt.datetime) -> bool:
    """True on Saturday and Sunday."""
    return moment.weekday() >= 5


def daily_drift(moment: dt.datetime, amplitude: float) -> float:
    """Slow sinusoidal oscillation with a 24h period keyed off wall-clock time."""
    phase = 2 * math.pi * (moment.timestamp() % SECONDS_PER_DAY) / SECONDS_PER_DAY
    return math.sin(phase) * amplitude


def clamp(value: float, low: float, high: float) -> float:
    """Limit `value` to [low, high]."""
    return max(low, min(high, value))


def clamp_int(value: float, low: int, high: int) -> int:
    """Round to the nearest int, then clamp."""
    return int(clamp(round(value), low, high))


def iso_utc(moment: dt.datetime) -> str:
    """ISO-8601 timestamp in UTC for `updatedAt` fields."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt.timezone.utc)
    return moment.astimezone(dt.timezone.utc).isoformat().replace("+00:00", "Z")
