import math
from typing import Optional
from cropsim.schema import ThresholdRange

NEUTRAL_FIT = 0.5
# suboptimal values bottom out at 1 - SUBOPTIMAL_DROP
SUBOPTIMAL_DROP = 0.6


def is_known(v: Optional[float]) -> bool:
    return v is not None and math.isfinite(v)


def range_fit(value: Optional[float], rng: Optional[ThresholdRange]) -> float:
    """Suitability of one observation against a tolerance band, in [0, 1].

    Unknown value or band -> 0.5, outside [min, max] -> 0, inside the ideal
    band -> 1, and linear decay toward 0.4 across the tolerable band.
    """
    if not is_known(value) or rng is None:
        return NEUTRAL_FIT
    if value < rng.min or value > rng.max:
        return 0.0
    if rng.idealMin <= value <= rng.idealMax:
        return 1.0

    if value < rng.idealMin:
        dist, span = rng.idealMin - value, rng.idealMin - rng.min
    else:
        dist, span = value - rng.idealMax, rng.max - rng.idealMax

    if span > 0:
        penalty = min(1.0, dist / span)
    else:
        penalty = 1.0 if dist > 0 else 0.0
    return 1.0 - SUBOPTIMAL_DROP * penalty
