import pytest
from cropsim.providers.crop_data import cache


@pytest.fixture
def maize_reqs():
    """Plain-dict thresholds, the shape the LLM returns."""
    return {
        "temperatureC": {"min": 10, "max": 40, "idealMin": 18, "idealMax": 30},
        "annualRainfallMm": {"min": 400, "max": 2000, "idealMin": 600, "idealMax": 1200},
        "solarMJm2day": {"min": 8, "max": 30, "idealMin": 15, "idealMax": 25},
        "soilPh": {"min": 5.0, "max": 8.0, "idealMin": 5.8, "idealMax": 7.0},
        "soilTexture": {"clayMax": 40, "sandMax": 70},
    }


@pytest.fixture
def good_climate():
    return {"tempC": 24.0, "annualRainMm": 900, "solarMJm2day": 20.0, "rhPct": 60.0, "windMps": 2.5}


@pytest.fixture
def good_soil():
    return {"ph": 6.5, "soc": 15.0, "clay": 25.0, "silt": 35.0, "sand": 40.0}


@pytest.fixture
def hostile_climate():
    return {"tempC": 50.0, "annualRainMm": 100, "solarMJm2day": 2.0, "rhPct": 10.0, "windMps": 9.0}


@pytest.fixture
def hostile_soil():
    return {"ph": 3.0, "soc": None, "clay": 60.0, "silt": 5.0, "sand": 80.0}


@pytest.fixture(autouse=True)
def _empty_crop_cache():
    cache.clear()
    yield
    cache.clear()
