import logging
from typing import Any, Dict, Optional
import httpx
from cropsim.config import settings
from cropsim.schema import ClimateObservation

logger = logging.getLogger(__name__)

PARAMETERS = ["T2M", "PRECTOTCORR", "ALLSKY_SFC_SW_DWN", "RH2M", "WS10M"]
POWER_FILL_VALUE = -999.0


class ClimateUnavailable(RuntimeError):
    pass


def _mean(values: Dict[str, Any] | None) -> Optional[float]:
    # POWER returns JAN..DEC plus ANN; all are averaged
    vals = [float(v) for v in (values or {}).values()
            if isinstance(v, (int, float)) and v != POWER_FILL_VALUE]
    if not vals:
        return None
    return sum(vals) / len(vals)


def parse_climatology(data: Dict[str, Any], source: str) -> ClimateObservation:
    p = (data.get("properties") or {}).get("parameter") or {}
    rain_per_day = _mean(p.get("PRECTOTCORR"))
    return ClimateObservation(
        source=source,
        tempC=_mean(p.get("T2M")),
        rainMmPerDay=rain_per_day,
        annualRainMm=round((rain_per_day or 0) * 365),
        solarMJm2day=_mean(p.get("ALLSKY_SFC_SW_DWN")),
        rhPct=_mean(p.get("RH2M")),
        windMps=_mean(p.get("WS10M")),
    )


async def fetch_climate(lat: float, lon: float, client: httpx.AsyncClient | None = None) -> ClimateObservation:
    """Long-term climatology for a point from NASA POWER."""
    params = {
        "parameters": ",".join(PARAMETERS),
        "community": "AG",
        "latitude": str(lat),
        "longitude": str(lon),
        "format": "JSON",
    }
    source = str(httpx.URL(settings.power_base_url, params=params))

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(timeout=settings.climate_timeout_s)
    try:
        r = await client.get(settings.power_base_url, params=params)
    except httpx.HTTPError as e:
        logger.error(f"POWER request failed for lat={lat}, lon={lon}: {e}")
        raise ClimateUnavailable(f"POWER fetch failed ({e.__class__.__name__})") from e
    finally:
        if own_client:
            await client.aclose()

    if r.status_code != 200:
        logger.error(f"POWER returned {r.status_code} for lat={lat}, lon={lon}")
        raise ClimateUnavailable(f"POWER fetch failed ({r.status_code})")
    return parse_climatology(r.json(), source)
