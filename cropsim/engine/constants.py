import math
from pydantic import BaseModel, Field, model_validator


class Weights(BaseModel):
    temperature: float = 0.35
    rainfall: float = 0.30
    solar: float = 0.15
    soil: float = 0.20

    @model_validator(mode="after")
    def _sum_to_one(self):
        total = self.temperature + self.rainfall + self.solar + self.soil
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"weights must sum to 1, got {total}")
        return self

class Growth(BaseModel):
    baseRate: float = 0.012
    envFactor: float = 0.018
    stressThreshold: float = 0.6
    decayFactor: float = 0.04

class SoilConstants(BaseModel):
    socContributionFactor: float = 150
    maxSocBonus: float = 0.2
    texturePenalty: float = 0.2

class StageMarkers(BaseModel):
    germination: int = 7
    vegetative: int = 45
    flowering: int = 80
    grainfill: int = 110   # only read when grainfill_stage is on

class SimulationConstants(BaseModel):
    weights: Weights = Weights()
    growth: Growth = Growth()
    soil: SoilConstants = SoilConstants()
    days: int = Field(default=120, ge=1)
    stageMarkers: StageMarkers = StageMarkers()

    # daily biomass loss when annual rain is under the crop minimum
    rainShock: float = 0.003
    defaultMinRainMm: float = 400
    # death latch: biomass at 0 after this day under stress above this
    mortalityAfterDay: int = 20
    mortalityStress: float = 0.7

    grainfill_stage: bool = False


DEFAULT_CONSTANTS = SimulationConstants()
