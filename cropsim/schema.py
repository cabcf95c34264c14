import math
from pydantic import AfterValidator, BaseModel, Field, ValidationError, field_validator, model_validator
from typing import Annotated, Any, Literal, Optional, List

Stage = Literal["pre-germination", "germination", "flowering", "grainfill", "maturity"]
Status = Literal["fail", "struggle", "good", "great"]


def _unknown_to_none(v: Optional[float]) -> Optional[float]:
    # NaN / inf mean "unknown", same as a missing value
    if v is None or not math.isfinite(v):
        return None
    return v

MaybeFloat = Annotated[Optional[float], AfterValidator(_unknown_to_none)]


# ---------- crop thresholds ----------
class ThresholdRange(BaseModel):
    min: float
    max: float
    idealMin: float
    idealMax: float

    @model_validator(mode="after")
    def _ordered(self):
        if not (self.min <= self.idealMin <= self.idealMax <= self.max):
            raise ValueError("expected min <= idealMin <= idealMax <= max")
        return self

class SoilTexture(BaseModel):
    clayMax: float
    sandMax: float

class CropRequirements(BaseModel):
    temperatureC: ThresholdRange
    annualRainfallMm: Optional[ThresholdRange] = None
    solarMJm2day: Optional[ThresholdRange] = None
    soilPh: ThresholdRange
    soilTexture: SoilTexture

    @field_validator("annualRainfallMm", "solarMJm2day", mode="wrap")
    @classmethod
    def _drop_bad_optional_range(cls, v, handler):
        # a malformed optional band is treated as absent (neutral fit)
        try:
            return handler(v)
        except ValidationError:
            return None


# ---------- observations ----------
class ClimateObservation(BaseModel):
    tempC: MaybeFloat = None
    annualRainMm: MaybeFloat = None
    solarMJm2day: MaybeFloat = None
    rhPct: MaybeFloat = None
    windMps: MaybeFloat = None
    rainMmPerDay: MaybeFloat = None
    source: Optional[str] = None

class SoilObservation(BaseModel):
    ph: MaybeFloat = None
    soc: MaybeFloat = None     # g/kg
    clay: MaybeFloat = None    # %
    silt: MaybeFloat = None    # %
    sand: MaybeFloat = None    # %
    source: Optional[str] = None
    error: Optional[str] = None


# ---------- results ----------
class FitScores(BaseModel):
    temperature: float = Field(ge=0, le=1)
    rainfall: float = Field(ge=0, le=1)
    solar: float = Field(ge=0, le=1)
    soil: float = Field(ge=0, le=1)

class TimelineFrame(BaseModel):
    day: int
    biomass: float
    stage: Stage
    alive: bool

class SimulationResult(BaseModel):
    score: int = Field(ge=0, le=100)
    status: Status
    timeline: List[TimelineFrame]
    fits: FitScores
    limits: List[str]


# ---------- HTTP ----------
class SimulateRequest(BaseModel):
    # validated by hand in the endpoint so bad input is a 400, not a 422
    lat: Any = None
    lon: Any = None
    crop: Any = None

class Sources(BaseModel):
    power: Optional[str] = None
    soilgrids: Optional[str] = None

class SimulateResponse(SimulationResult):
    climate: ClimateObservation
    soil: SoilObservation
    sources: Sources
