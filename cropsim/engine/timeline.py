from typing import List, Optional
from cropsim.schema import Stage, TimelineFrame
from .constants import SimulationConstants, StageMarkers
from .fit import is_known


def stage_for_day(day: int, markers: StageMarkers, grainfill_stage: bool = False) -> Stage:
    if day < markers.germination:
        return "pre-germination"
    if day < markers.vegetative:
        return "germination"
    if day < markers.flowering:
        return "flowering"
    if grainfill_stage and day >= markers.grainfill:
        return "grainfill"
    return "maturity"


def simulate(
    env_score: float,
    stress: float,
    annual_rain_mm: Optional[float],
    min_rain_mm: Optional[float],
    c: SimulationConstants,
) -> List[TimelineFrame]:
    """Run the daily growth/decay recurrence for ``c.days`` days.

    Biomass grows with the environmental score, decays once stress passes
    the threshold, and loses a fixed amount per day when annual rain is
    below the crop minimum. A plant whose biomass hits zero after the
    establishment window under heavy stress dies and stays dead.
    """
    g = c.growth
    growth_rate = g.baseRate + g.envFactor * env_score
    decay = (stress - g.stressThreshold) * g.decayFactor if stress > g.stressThreshold else 0.0

    min_rain = min_rain_mm if is_known(min_rain_mm) else c.defaultMinRainMm
    # unknown rainfall never triggers the shock
    shock = c.rainShock if is_known(annual_rain_mm) and annual_rain_mm < min_rain else 0.0

    timeline: List[TimelineFrame] = []
    biomass = 0.0
    alive = True
    for day in range(1, c.days + 1):
        biomass = max(0.0, min(1.0, biomass + growth_rate - decay))
        biomass = max(0.0, biomass - shock)

        if alive and biomass == 0 and day > c.mortalityAfterDay and stress > c.mortalityStress:
            alive = False

        timeline.append(TimelineFrame(
            day=day,
            biomass=round(biomass, 3),
            stage=stage_for_day(day, c.stageMarkers, c.grainfill_stage),
            alive=alive,
        ))
    return timeline
