import json
import logging
from functools import lru_cache
from typing import Any, Dict, Optional
from langchain_openai import ChatOpenAI
from langchain_core.prompts import ChatPromptTemplate
from cropsim.config import settings
from cropsim.engine.errors import InvalidCropRequirements
from cropsim.engine.simulator import parse_requirements
from cropsim.schema import CropRequirements

logger = logging.getLogger(__name__)

# IMPORTANT: escape literal JSON braces with {{ }}
_PROMPT = ChatPromptTemplate.from_messages([
    ("system",
     "You are an agronomist. Be conservative. "
     "Respond ONLY with valid JSON, no markdown, comments or explanations."),
    ("user",
     """Provide conservative agronomic thresholds for growing {crop}.

Return EXACT JSON with these keys:
{{
  "temperatureC": {{ "min": float, "max": float, "idealMin": float, "idealMax": float }},
  "annualRainfallMm": {{ "min": float, "max": float, "idealMin": float, "idealMax": float }},
  "solarMJm2day": {{ "min": float, "max": float, "idealMin": float, "idealMax": float }},
  "soilPh": {{ "min": float, "max": float, "idealMin": float, "idealMax": float }},
  "soilTexture": {{ "clayMax": float (percent), "sandMax": float (percent) }}
}}"""
    )
])

@lru_cache(maxsize=1)
def _llm() -> ChatOpenAI:
    # built lazily so importing the app never needs a key
    return ChatOpenAI(
        model=settings.openai_model,
        temperature=0.2,
        api_key=settings.openai_api_key,
        model_kwargs={"response_format": {"type": "json_object"}},
        timeout=settings.llm_timeout_s,
        max_retries=1,
    )

def _safe_json(s: str) -> Dict[str, Any]:
    s = s.strip()
    if s.startswith("```"):
        s = s.strip("`")
        if s.startswith("json"):
            s = s[4:]
    return json.loads(s or "{}")


class CropRequirementsCache:
    """In-process thresholds cache keyed by crop name."""

    def __init__(self):
        self._items: Dict[str, CropRequirements] = {}

    @staticmethod
    def key(crop: str) -> str:
        return " ".join(crop.lower().split())

    def get(self, crop: str) -> Optional[CropRequirements]:
        return self._items.get(self.key(crop))

    def set(self, crop: str, reqs: CropRequirements) -> None:
        self._items[self.key(crop)] = reqs

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

cache = CropRequirementsCache()


async def ask_llm(crop: str) -> Dict[str, Any]:
    msg = _PROMPT.format_messages(crop=crop)
    resp = await _llm().ainvoke(msg)
    content = getattr(resp, "content", "") or ""
    return _safe_json(content)


async def get_crop_requirements(crop: str) -> Optional[CropRequirements]:
    """Thresholds for ``crop``, or None when none could be obtained."""
    hit = cache.get(crop)
    if hit is not None:
        logger.info(f'CACHE HIT: Reusing data for "{crop}".')
        return hit
    logger.info(f'CACHE MISS: Fetching new data for "{crop}" from the LLM.')

    if not settings.openai_api_key:
        logger.error("OpenAI API key is missing.")
        return None
    try:
        data = await ask_llm(crop)
        reqs = parse_requirements(data)
    except InvalidCropRequirements as e:
        logger.error(f'Invalid thresholds for crop "{crop}": {e}')
        return None
    except Exception as e:
        logger.error(f'LLM helper error for crop "{crop}": {e}')
        return None

    cache.set(crop, reqs)
    logger.info(f'CACHE SET: Saved new data for "{crop}".')
    return reqs
