import pytest
from cropsim.engine.constants import SoilConstants
from cropsim.engine.soil import soc_bonus, soil_quality, texture_penalty
from cropsim.schema import CropRequirements

C = SoilConstants()


@pytest.fixture
def reqs(maize_reqs):
    return CropRequirements.model_validate(maize_reqs)


def test_ideal_soil_with_carbon_clamps_to_one(reqs):
    assert soil_quality(6.5, 25, 40, 15, reqs, C) == 1.0


def test_unknown_ph_and_soc_is_neutral(reqs):
    assert soil_quality(float("nan"), 25, 40, None, reqs, C) == 0.5


def test_soc_bonus_capped():
    assert soc_bonus(15, C) == pytest.approx(0.1)
    assert soc_bonus(300, C) == 0.2
    assert soc_bonus(float("nan"), C) == 0.0
    assert soc_bonus(None, C) == 0.0


def test_texture_penalty_per_excess(reqs):
    tex = reqs.soilTexture
    assert texture_penalty(25, 40, tex, C) == 0.0
    assert texture_penalty(55, 40, tex, C) == pytest.approx(0.2)
    assert texture_penalty(25, 85, tex, C) == pytest.approx(0.2)
    assert texture_penalty(55, 85, tex, C) == pytest.approx(0.4)


def test_missing_texture_never_penalised(reqs):
    assert texture_penalty(None, float("nan"), reqs.soilTexture, C) == 0.0


def test_monotone_in_soc(reqs):
    qs = [soil_quality(5.4, 25, 40, soc, reqs, C) for soc in (0, 5, 10, 20, 40, 80)]
    assert qs == sorted(qs)


def test_non_increasing_once_texture_exceeds_max(reqs):
    clays = [soil_quality(6.5, clay, 40, 0, reqs, C) for clay in (40, 41, 60, 90)]
    sands = [soil_quality(6.5, 25, sand, 0, reqs, C) for sand in (70, 71, 85, 99)]
    assert clays == sorted(clays, reverse=True)
    assert sands == sorted(sands, reverse=True)


def test_never_below_zero(reqs):
    assert soil_quality(3.0, 60, 80, None, reqs, C) == 0.0
