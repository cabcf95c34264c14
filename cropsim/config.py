# cropsim/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseModel):
    # 🤖 LLM (crop thresholds)
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    llm_timeout_s: float = float(os.getenv("LLM_TIMEOUT_S", "20"))

    # 🌦 NASA POWER climatology
    power_base_url: str = os.getenv(
        "POWER_BASE_URL", "https://power.larc.nasa.gov/api/temporal/climatology/point"
    )
    climate_timeout_s: float = float(os.getenv("CLIMATE_TIMEOUT_S", "30"))

    # 🌱 SoilGrids
    soilgrids_base_url: str = os.getenv(
        "SOILGRIDS_BASE_URL", "https://rest.isric.org/soilgrids/v2.0/properties/query"
    )
    soil_timeout_s: float = float(os.getenv("SOIL_TIMEOUT_S", "15"))
    soil_max_retries: int = int(os.getenv("SOIL_MAX_RETRIES", "5"))

    user_agent: str = os.getenv("USER_AGENT", "SDG15-Crop-Simulator/1.0")
    cors_origins: list[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

settings = Settings()
