from cropsim.schema import ClimateObservation, CropRequirements, FitScores, SoilObservation
from .constants import SimulationConstants, Weights
from .fit import range_fit
from .soil import soil_quality

def score_fits(
    climate: ClimateObservation,
    soil: SoilObservation,
    reqs: CropRequirements,
    c: SimulationConstants,
) -> FitScores:
    return FitScores(
        temperature=range_fit(climate.tempC, reqs.temperatureC),
        rainfall=range_fit(climate.annualRainMm, reqs.annualRainfallMm),
        solar=range_fit(climate.solarMJm2day, reqs.solarMJm2day),
        soil=soil_quality(soil.ph, soil.clay, soil.sand, soil.soc, reqs, c.soil),
    )

def env_score(fits: FitScores, w: Weights) -> float:
    s = (fits.temperature * w.temperature
         + fits.rainfall * w.rainfall
         + fits.solar * w.solar
         + fits.soil * w.soil)
    return max(0.0, min(1.0, s))

def stress(env: float) -> float:
    return 1.0 - env
