from typing import Any, Mapping, Optional, Union
from pydantic import ValidationError
from cropsim.schema import (
    ClimateObservation, CropRequirements, SimulationResult, SoilObservation,
)
from .classifier import classify
from .constants import DEFAULT_CONSTANTS, SimulationConstants
from .errors import InvalidCropRequirements
from .fit import range_fit
from .scorer import env_score, score_fits, stress
from .timeline import simulate

REQUIRED_KEYS = ("temperatureC", "soilPh", "soilTexture")

def parse_requirements(reqs: Union[CropRequirements, Mapping[str, Any], None]) -> CropRequirements:
    if isinstance(reqs, CropRequirements):
        return reqs
    if not isinstance(reqs, Mapping):
        raise InvalidCropRequirements("crop requirements are missing")
    missing = [k for k in REQUIRED_KEYS if not reqs.get(k)]
    if missing:
        raise InvalidCropRequirements(f"crop requirements missing: {', '.join(missing)}")
    try:
        return CropRequirements.model_validate(reqs)
    except ValidationError as e:
        raise InvalidCropRequirements(f"malformed crop requirements: {e}") from e

def evaluate(
    climate: Union[ClimateObservation, Mapping[str, Any]],
    soil: Union[SoilObservation, Mapping[str, Any]],
    requirements: Union[CropRequirements, Mapping[str, Any]],
    constants: Optional[SimulationConstants] = None,
) -> SimulationResult:
    """Score one location for one crop and simulate its season.

    Pure and synchronous. Unknown observations degrade to neutral fits;
    only incomplete crop requirements raise ``InvalidCropRequirements``.
    """
    c = constants or DEFAULT_CONSTANTS
    reqs = parse_requirements(requirements)
    clim = ClimateObservation.model_validate(climate)
    soil_obs = SoilObservation.model_validate(soil)

    fits = score_fits(clim, soil_obs, reqs, c)
    env = env_score(fits, c.weights)
    st = stress(env)

    min_rain = reqs.annualRainfallMm.min if reqs.annualRainfallMm else None
    timeline = simulate(env, st, clim.annualRainMm, min_rain, c)

    outcome = classify(
        env, timeline, fits,
        ph_fit=range_fit(soil_obs.ph, reqs.soilPh),
        clay=soil_obs.clay,
        sand=soil_obs.sand,
        texture=reqs.soilTexture,
    )
    return SimulationResult(
        score=outcome.score,
        status=outcome.status,
        timeline=timeline,
        fits=fits,
        limits=outcome.limits,
    )
