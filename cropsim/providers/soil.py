import asyncio
import math
import logging
from typing import Any, Awaitable, Callable, Dict, Optional
import httpx
from cropsim.config import settings
from cropsim.schema import SoilObservation

logger = logging.getLogger(__name__)

PROPERTIES = ["phh2o", "soc", "clay", "silt", "sand"]
# SoilGrids mapped units -> pH, g/kg, %
CONVERSIONS = {"phh2o": 10.0, "soc": 10.0, "clay": 10.0, "silt": 10.0, "sand": 10.0}
FIELDS = {"phh2o": "ph", "soc": "soc", "clay": "clay", "silt": "silt", "sand": "sand"}

DEFAULT_SOIL = {"ph": 6.5, "soc": 15.0, "clay": 25.0, "silt": 35.0, "sand": 40.0}
RETRY_STATUSES = {408, 429}
MAX_BACKOFF_S = 10.0


class MalformedSoilResponse(ValueError):
    pass


def default_soil(source: str, error: str) -> SoilObservation:
    return SoilObservation(**DEFAULT_SOIL, source=source, error=error)


def backoff_delay(attempt: int) -> float:
    return min(1.0 * 2 ** (attempt - 1), MAX_BACKOFF_S)


def should_retry(status: int) -> bool:
    return 500 <= status < 600 or status in RETRY_STATUSES


def _as_dict(v: Any) -> Dict[str, Any]:
    return v if isinstance(v, dict) else {}


def _layer_mean(layer: Dict[str, Any]) -> Optional[float]:
    depths = layer.get("depths")
    if not isinstance(depths, list) or not depths:
        return None
    v = _as_dict(_as_dict(depths[0]).get("values")).get("mean")
    # anything non-numeric counts as a missing value
    if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
        return None
    return float(v)


def parse_layers(data: Any, source: str) -> SoilObservation:
    layers = _as_dict(_as_dict(data).get("properties")).get("layers")
    if not isinstance(layers, list) or not layers:
        raise MalformedSoilResponse("Invalid response structure from SoilGrids API")

    by_name = {l.get("name"): l for l in layers if isinstance(l, dict)}
    values: Dict[str, Optional[float]] = {}
    for name in PROPERTIES:
        v = _layer_mean(by_name.get(name, {}))
        values[FIELDS[name]] = v / CONVERSIONS[name] if v is not None else None

    if all(v is None for v in values.values()):
        raise MalformedSoilResponse("No valid soil data received from API")
    return SoilObservation(**values, source=source)


async def fetch_soil(
    lat: float,
    lon: float,
    client: httpx.AsyncClient | None = None,
    max_retries: int | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> SoilObservation:
    """Topsoil properties from SoilGrids.

    Never raises: invalid coordinates, client errors and exhausted retries
    all fall back to a neutral default soil with ``error`` set.
    """
    retries = max_retries or settings.soil_max_retries
    params = {
        "lat": str(lat),
        "lon": str(lon),
        "property": PROPERTIES,
        "depth": "sl1",
        "value": "mean",
    }
    source = str(httpx.URL(settings.soilgrids_base_url, params=params))

    if lat < -90 or lat > 90 or lon < -180 or lon > 180:
        logger.warning(f"Invalid coordinates: lat={lat}, lon={lon}. Using default soil values.")
        return default_soil(source, "Invalid coordinates - using defaults")

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(
            timeout=settings.soil_timeout_s,
            headers={"User-Agent": settings.user_agent, "Accept": "application/json", "Cache-Control": "no-cache"},
        )
    try:
        for attempt in range(1, retries + 1):
            logger.info(f"SoilGrids attempt {attempt}/{retries} for lat={lat}, lon={lon}")
            try:
                r = await client.get(settings.soilgrids_base_url, params=params)
                if r.status_code != 200:
                    logger.error(f"SoilGrids error (attempt {attempt}/{retries}): status {r.status_code} {r.text[:200]}")
                    if should_retry(r.status_code) and attempt < retries:
                        delay = backoff_delay(attempt)
                        logger.info(f"Retrying in {delay:.0f}s...")
                        await sleep(delay)
                        continue
                    logger.warning(f"SoilGrids failed with status {r.status_code}, using default soil values")
                    return default_soil(source, f"API error {r.status_code} - using defaults")

                soil = parse_layers(r.json(), source)
                logger.info(f"SoilGrids success on attempt {attempt}")
                return soil
            except (httpx.HTTPError, ValueError) as e:
                kind = "timeout" if isinstance(e, httpx.TimeoutException) else e.__class__.__name__
                logger.error(f"SoilGrids fetch failed (attempt {attempt}/{retries}): {e} ({kind})")
                if attempt == retries:
                    break
                await sleep(backoff_delay(attempt))
    finally:
        if own_client:
            await client.aclose()

    logger.warning("SoilGrids failed after all retries, using default soil values")
    return default_soil(source, f"API unavailable after {retries} attempts - using defaults")
