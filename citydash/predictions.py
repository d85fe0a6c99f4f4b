"""Short-horizon prediction helpers shared by the domain generators.

Predictions are a presentation heuristic: each future hour re-applies the same
time-of-day modulation the synthetic generator uses, shifted from "now" to the
target hour, plus a little noise. The confidence figure is a fixed per-domain
number shown by the UI, not a statistical interval.
"""

from __future__ import annotations

import datetime as dt
from statistics import fmean
from typing import Callable, List, Sequence

from citydash.domain import PREDICTION_HOURS
from citydash.synthesis import Jitter, clamp_int

Modulation = Callable[[dt.datetime], float]


def forecast_instants(now: dt.datetime, hours: int = PREDICTION_HOURS) -> List[dt.datetime]:
    """The next `hours` hourly instants after `now`."""
    return [now + dt.timedelta(hours=i) for i in range(1, hours + 1)]


def project_hourly(
    current: float,
    now: dt.datetime,
    modulation: Modulation,
    *,
    jitter: Jitter,
    noise: float,
    low: int,
    high: int,
) -> List[int]:
    """Project `current` over the next six hours.

    Each value removes the modulation active at `now` and applies the one
    active at the target hour.
    """
    base = current - modulation(now)
    return [
        clamp_int(base + modulation(moment) + jitter(-noise, noise), low, high)
        for moment in forecast_instants(now)
    ]


def classify_trend(
    current: float,
    values: Sequence[float],
    threshold: float,
    *,
    rising: str,
    falling: str,
    steady: str = "stable",
) -> str:
    """Compare the mean of `values` with `current` against a fixed band."""
    if not values:
        return steady
    mean = fmean(values)
    if mean > current + threshold:
        return rising
    if mean < current - threshold:
        return falling
    return steady
