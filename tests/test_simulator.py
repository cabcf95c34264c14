import pytest
from cropsim.engine.constants import SimulationConstants
from cropsim.engine.errors import InvalidCropRequirements
from cropsim.engine.simulator import evaluate, parse_requirements
from cropsim.providers.soil import DEFAULT_SOIL
from cropsim.schema import ClimateObservation, CropRequirements, SoilObservation


def test_perfect_site_is_great(maize_reqs, good_climate, good_soil):
    res = evaluate(good_climate, good_soil, maize_reqs)
    assert res.score == 100
    assert res.status == "great"
    assert res.limits == []
    assert len(res.timeline) == 120
    assert all(f.alive for f in res.timeline)
    assert res.timeline[-1].biomass == 1.0


def test_hostile_site_fails(maize_reqs, hostile_climate, hostile_soil):
    res = evaluate(hostile_climate, hostile_soil, maize_reqs)
    assert res.score == 0
    assert res.status == "fail"
    assert res.fits.soil == 0.0
    assert res.timeline[19].alive
    assert not res.timeline[20].alive
    assert len(res.limits) == 6


def test_deterministic(maize_reqs, good_climate, hostile_soil):
    a = evaluate(good_climate, hostile_soil, maize_reqs)
    b = evaluate(good_climate, hostile_soil, maize_reqs)
    assert a.model_dump_json() == b.model_dump_json()


def test_unknown_ph_is_neutral(maize_reqs, good_climate, good_soil):
    good_soil["ph"] = float("nan")
    res = evaluate(good_climate, good_soil, maize_reqs)
    # 0.5 pH fit + 0.1 carbon bonus
    assert res.fits.soil == pytest.approx(0.6)
    assert "Soil pH unsuitable" not in res.limits


def test_all_unknown_observations_do_not_raise(maize_reqs):
    nan = float("nan")
    res = evaluate(
        {"tempC": nan, "annualRainMm": nan, "solarMJm2day": nan, "rhPct": nan, "windMps": nan},
        {"ph": None, "soc": None, "clay": None, "silt": None, "sand": None},
        maize_reqs,
    )
    assert res.fits.temperature == res.fits.rainfall == res.fits.solar == res.fits.soil == 0.5
    assert res.score == 50
    assert res.status == "struggle"
    assert res.limits == []


def test_default_soil_is_valid_input(maize_reqs, good_climate):
    res = evaluate(good_climate, DEFAULT_SOIL, maize_reqs)
    assert res.fits.soil == 1.0


def test_accepts_models(maize_reqs, good_climate, good_soil):
    res = evaluate(
        ClimateObservation(**good_climate),
        SoilObservation(**good_soil),
        CropRequirements.model_validate(maize_reqs),
    )
    assert res.status == "great"


@pytest.mark.parametrize("key", ["temperatureC", "soilPh", "soilTexture"])
def test_incomplete_requirements_fail_fast(maize_reqs, good_climate, good_soil, key):
    del maize_reqs[key]
    with pytest.raises(InvalidCropRequirements, match=key):
        evaluate(good_climate, good_soil, maize_reqs)


def test_malformed_requirements(maize_reqs, good_climate, good_soil):
    maize_reqs["temperatureC"] = {"min": 30, "max": 10, "idealMin": 18, "idealMax": 25}
    with pytest.raises(InvalidCropRequirements):
        evaluate(good_climate, good_soil, maize_reqs)
    with pytest.raises(InvalidCropRequirements):
        parse_requirements(None)


def test_optional_ranges_may_be_absent(maize_reqs, good_climate, good_soil):
    del maize_reqs["annualRainfallMm"]
    good_climate["annualRainMm"] = 350
    res = evaluate(good_climate, good_soil, maize_reqs)
    assert res.fits.rainfall == 0.5
    # still shocked against the 400 mm default minimum
    assert res.timeline[0].biomass < evaluate(
        {**good_climate, "annualRainMm": 450}, good_soil, maize_reqs
    ).timeline[0].biomass


def test_custom_constants(maize_reqs, good_climate, good_soil):
    c = SimulationConstants(days=115, grainfill_stage=True)
    res = evaluate(good_climate, good_soil, maize_reqs, c)
    assert len(res.timeline) == 115
    assert res.timeline[108].stage == "maturity"
    assert res.timeline[-1].stage == "grainfill"


def test_disordered_optional_range_is_ignored(maize_reqs, good_climate, good_soil):
    maize_reqs["solarMJm2day"] = {"min": 8, "max": 30, "idealMin": 25, "idealMax": 15}
    res = evaluate(good_climate, good_soil, maize_reqs)
    assert res.fits.solar == 0.5
    assert res.fits.temperature == 1.0
