import math
from typing import List, NamedTuple, Optional, Sequence
from cropsim.schema import FitScores, SoilTexture, Status, TimelineFrame
from .soil import is_too_clayey, is_too_sandy

# fit below these -> listed as a limiting factor
CLIMATE_LIMIT = 0.4
PH_LIMIT = 0.5
FAIL_BIOMASS = 0.2

class Outcome(NamedTuple):
    score: int
    status: Status
    limits: List[str]

def final_score(env: float) -> int:
    # half-up, not banker's rounding
    return int(math.floor(env * 100 + 0.5))

def status_for(score: int, last: TimelineFrame) -> Status:
    if not last.alive and last.biomass < FAIL_BIOMASS:
        return "fail"
    if score < 60:
        return "struggle"
    if score < 80:
        return "good"
    return "great"

def limiting_factors(
    fits: FitScores,
    ph_fit: float,
    clay: Optional[float],
    sand: Optional[float],
    texture: SoilTexture,
) -> List[str]:
    limits: List[str] = []
    if fits.temperature < CLIMATE_LIMIT:
        limits.append("Temperature outside comfortable range")
    if fits.rainfall < CLIMATE_LIMIT:
        limits.append("Insufficient or excessive rainfall")
    if fits.solar < CLIMATE_LIMIT:
        limits.append("Suboptimal solar radiation")
    if ph_fit < PH_LIMIT:
        limits.append("Soil pH unsuitable")
    if is_too_clayey(clay, texture):
        limits.append("Soil too clayey (poor drainage)")
    if is_too_sandy(sand, texture):
        limits.append("Soil too sandy (low water retention)")
    return limits

def classify(
    env: float,
    timeline: Sequence[TimelineFrame],
    fits: FitScores,
    ph_fit: float,
    clay: Optional[float],
    sand: Optional[float],
    texture: SoilTexture,
) -> Outcome:
    score = final_score(env)
    return Outcome(
        score=score,
        status=status_for(score, timeline[-1]),
        limits=limiting_factors(fits, ph_fit, clay, sand, texture),
    )
