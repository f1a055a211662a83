"""
FarmerAid - Runtime configuration.
Values come from the environment or an optional .env file next to the process.
"""
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Upstream services
    GEOCODE_URL: str = "https://geocoding-api.open-meteo.com/v1/search"
    FORECAST_URL: str = "https://api.open-meteo.com/v1/forecast"
    UPSTREAM_TIMEOUT: float = 10.0

    # Generative text endpoint
    GEMINI_API_KEY: str = ""
    GEMINI_API_URL: str = (
        "https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-flash:generateContent"
    )
    GEMINI_MODELS_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    GEMINI_TIMEOUT: float = 20.0

    # Access control for the generative endpoint
    FRONTEND_API_KEY: Optional[str] = None
    RATE_LIMIT_MAX: int = 20
    RATE_LIMIT_WINDOW_SECONDS: float = 60.0

    # Custom threshold persistence
    THRESHOLD_STORE_PATH: str = "data/thresholds.json"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
