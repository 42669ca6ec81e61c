"""
Centralized configuration management for TripCraft backend.

Loads environment variables from .env file and provides typed settings
to all backend modules. Includes validation for required configuration.

Usage:
    from config.settings import settings
    api_key = settings.GEMINI_KEY
"""

import os
import logging
from dataclasses import dataclass
from typing import List
from pathlib import Path

from dotenv import load_dotenv

# Load .env from backend directory
_backend_dir = Path(__file__).resolve().parent.parent
load_dotenv(_backend_dir / ".env")

logger = logging.getLogger(__name__)


class Settings:
    """Centralized configuration singleton for all backend services."""

    # ===== FastAPI Configuration =====
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "True").lower() == "true"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # ===== Gemini API Configuration (Primary LLM) =====
    GEMINI_KEY: str = os.getenv("GEMINI_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    GEMINI_TEMPERATURE: float = float(os.getenv("GEMINI_TEMPERATURE", "0.8"))
    GEMINI_TIMEOUT: int = int(os.getenv("GEMINI_TIMEOUT", "120"))
    GEMINI_MAX_RETRIES: int = int(os.getenv("GEMINI_MAX_RETRIES", "2"))

    # ===== Groq API Configuration (Fallback LLM) =====
    GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")
    GROQ_MODEL: str = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    GROQ_TIMEOUT: int = int(os.getenv("GROQ_TIMEOUT", "60"))

    # ===== Enrichment Providers (each optional) =====
    GOOGLE_MAPS_API_KEY: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    OPENWEATHER_API_KEY: str = os.getenv("OPENWEATHER_API_KEY", "")
    STAYAPI_API_KEY: str = os.getenv("STAYAPI_API_KEY", "")
    BOOKINGAPI_DEV_API_KEY: str = os.getenv("BOOKINGAPI_DEV_API_KEY", "")
    UNSPLASH_ACCESS_KEY: str = os.getenv("UNSPLASH_ACCESS_KEY", "")
    PROVIDER_TIMEOUT: float = float(os.getenv("PROVIDER_TIMEOUT", "15"))

    # ===== Plan / Credit Database =====
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        f"sqlite:///{_backend_dir / 'tripcraft.db'}",
    )

    # ===== Authentication =====
    JWT_SECRET: str = os.getenv("JWT_SECRET", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    # ===== Application Constants =====
    CREDITS_PER_PLAN: int = int(os.getenv("CREDITS_PER_PLAN", "100"))
    STARTING_CREDITS: int = int(os.getenv("STARTING_CREDITS", "1000"))
    MAX_TRIP_DAYS: int = int(os.getenv("MAX_TRIP_DAYS", "20"))
    DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "INR")

    # ===== Logging =====
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> List[str]:
        """Validate required configuration. Returns list of errors (empty = valid)."""
        errors = []

        if not cls.GEMINI_KEY and not cls.GROQ_API_KEY:
            errors.append(
                "At least one of GEMINI_KEY or GROQ_API_KEY is required - "
                "set it in backend/.env"
            )

        if not cls.JWT_SECRET:
            errors.append("JWT_SECRET is required to authenticate plan requests")

        if not 0 <= cls.GEMINI_TEMPERATURE <= 2:
            errors.append(
                f"GEMINI_TEMPERATURE must be 0-2, got {cls.GEMINI_TEMPERATURE}"
            )

        if cls.CREDITS_PER_PLAN < 0:
            errors.append(f"CREDITS_PER_PLAN must be >= 0, got {cls.CREDITS_PER_PLAN}")

        if cls.MAX_TRIP_DAYS < 1:
            errors.append(f"MAX_TRIP_DAYS must be >= 1, got {cls.MAX_TRIP_DAYS}")

        if not 1 <= cls.PORT <= 65535:
            errors.append(f"PORT must be 1-65535, got {cls.PORT}")

        return errors

    @classmethod
    def configured_providers(cls) -> List[str]:
        """Names of the enrichment providers that have an API key."""
        providers = {
            "google_maps": cls.GOOGLE_MAPS_API_KEY,
            "openweather": cls.OPENWEATHER_API_KEY,
            "stayapi": cls.STAYAPI_API_KEY,
            "bookingapi": cls.BOOKINGAPI_DEV_API_KEY,
            "unsplash": cls.UNSPLASH_ACCESS_KEY,
        }
        return [name for name, key in providers.items() if key]


@dataclass(frozen=True)
class PipelineConfig:
    """Tunables of the trip-plan pipeline, injected into TripPlanService."""

    credits_per_plan: int = 100
    max_trip_days: int = 20
    base_tokens: int = 2000
    tokens_per_day: int = 1000
    min_tokens: int = 4000
    max_tokens: int = 16000
    provider_timeout: float = 15.0
    default_currency: str = "INR"

    @classmethod
    def from_settings(cls, s: "Settings" = None) -> "PipelineConfig":
        s = s or settings
        return cls(
            credits_per_plan=s.CREDITS_PER_PLAN,
            max_trip_days=s.MAX_TRIP_DAYS,
            provider_timeout=s.PROVIDER_TIMEOUT,
            default_currency=s.DEFAULT_CURRENCY,
        )


def redact_api_key(key: str) -> str:
    """Redact API key to show only last 4 characters."""
    if not key or len(key) < 8:
        return "***INVALID***"
    return f"***...{key[-4:]}"


# Singleton instance - import this everywhere
settings = Settings()
