from typing import Optional
from cropsim.schema import CropRequirements, SoilTexture
from .constants import SoilConstants
from .fit import is_known, range_fit


def is_too_clayey(clay: Optional[float], texture: SoilTexture) -> bool:
    return is_known(clay) and clay > texture.clayMax

def is_too_sandy(sand: Optional[float], texture: SoilTexture) -> bool:
    return is_known(sand) and sand > texture.sandMax

def texture_penalty(clay: Optional[float], sand: Optional[float],
                    texture: SoilTexture, c: SoilConstants) -> float:
    p = 0.0
    if is_too_clayey(clay, texture):
        p += c.texturePenalty
    if is_too_sandy(sand, texture):
        p += c.texturePenalty
    return p

def soc_bonus(soc: Optional[float], c: SoilConstants) -> float:
    if not is_known(soc):
        return 0.0
    return min(c.maxSocBonus, soc / c.socContributionFactor)

def soil_quality(
    ph: Optional[float],
    clay: Optional[float],
    sand: Optional[float],
    soc: Optional[float],
    reqs: CropRequirements,
    c: SoilConstants,
) -> float:
    """pH fit minus texture penalties plus organic-carbon bonus, clamped to [0, 1]."""
    q = range_fit(ph, reqs.soilPh) - texture_penalty(clay, sand, reqs.soilTexture, c) + soc_bonus(soc, c)
    return max(0.0, min(1.0, q))
