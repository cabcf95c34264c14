import asyncio
import logging
import math
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from cropsim.config import settings
from cropsim.schema import SimulateRequest, SimulateResponse, Sources
from cropsim.engine.errors import InvalidCropRequirements
from cropsim.engine.simulator import evaluate
from cropsim.providers.climate import ClimateUnavailable, fetch_climate
from cropsim.providers.crop_data import get_crop_requirements
from cropsim.providers.soil import fetch_soil

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="SDG15 Crop Simulator", version="1.0.0")
app.state.settings = settings

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins, allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"]
)

def _as_float(v) -> float | None:
    if isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None

async def _observe(lat: float, lon: float):
    climate_task = asyncio.create_task(fetch_climate(lat, lon))
    soil_task = asyncio.create_task(fetch_soil(lat, lon))
    try:
        return await asyncio.gather(climate_task, soil_task)
    except BaseException:
        # do not leave the other lookup retrying after the request is over
        for t in (climate_task, soil_task):
            t.cancel()
        await asyncio.gather(climate_task, soil_task, return_exceptions=True)
        raise

def _no_data(crop: str) -> HTTPException:
    return HTTPException(
        404,
        detail=f'Could not find agronomic data for "{crop}". Please check the spelling or try another crop.',
    )

@app.get("/health")
def health():
    return {"ok": True}

@app.post("/api/simulate", response_model=SimulateResponse)
async def simulate(body: SimulateRequest):
    lat, lon = _as_float(body.lat), _as_float(body.lon)
    crop = body.crop.strip() if isinstance(body.crop, str) else ""
    if lat is None or lon is None or not crop:
        raise HTTPException(400, detail="lat, lon, and crop are required")

    reqs = await get_crop_requirements(crop)
    if reqs is None:
        raise _no_data(crop)

    try:
        climate, soil = await _observe(lat, lon)
    except ClimateUnavailable as e:
        raise HTTPException(502, detail=str(e))

    try:
        result = evaluate(climate, soil, reqs)
    except InvalidCropRequirements:
        raise _no_data(crop)

    logger.info(f"Simulated {crop} at ({lat}, {lon}): score={result.score} status={result.status}")
    return SimulateResponse(
        **result.model_dump(),
        climate=climate,
        soil=soil,
        sources=Sources(power=climate.source, soilgrids=soil.source),
    )
