"""
AI trip-plan text generation.

Calls Google Gemini (primary, JSON response mode) and falls back to Groq
when Gemini is not configured or fails.  Returns the raw model text;
parsing and repair live in services/ai_response_parser.py.

Usage:
    from services.itinerary_service import ItineraryService

    service = ItineraryService()
    raw = await service.generate(prompt, days=5, request_id="req-001")
"""

import asyncio
import logging
from typing import Optional

from clients.gemini_client import ExternalAPIError, GeminiClient
from clients.groq_client import GroqClient
from config.settings import PipelineConfig, settings
from services.prompt_builder import calculate_max_tokens
from utils.errors import AIServiceError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# System instruction for trip-plan generation
# ---------------------------------------------------------------------------

TRIP_PLAN_SYSTEM_INSTRUCTION = """\
You are an expert travel planner with extensive knowledge of destinations worldwide.
You create detailed, realistic, and personalized travel itineraries.
Always respond with valid JSON only - no markdown, no code blocks, no explanations.
Just pure JSON matching the exact structure requested.
IMPORTANT: Always include ALL sections:
tripHighlights, itinerary (each day with morning, afternoon and evening broken
into specific times like "07:00 AM", "10:30 AM", "03:00 PM"), bestTimeToVisit,
and packingSuggestions.
Do not truncate any section.
"""


class ItineraryService:
    """Generates raw trip-plan JSON text via Gemini (primary) or Groq (fallback)."""

    def __init__(
        self,
        gemini_client: Optional[GeminiClient] = None,
        groq_client: Optional[GroqClient] = None,
        config: Optional[PipelineConfig] = None,
    ):
        """
        Args:
            gemini_client: Injected client (useful for testing).
                           Created from settings if omitted and configured.
            groq_client: Injected fallback client.
            config: Pipeline tunables (token budget).
        """
        self.config = config or PipelineConfig.from_settings()
        self.gemini_client = gemini_client
        self.groq_client = groq_client

        if self.gemini_client is None and settings.GEMINI_KEY:
            try:
                self.gemini_client = GeminiClient()
            except ValueError as e:
                logger.warning(f"ItineraryService: Gemini unavailable ({e})")

        if self.groq_client is None and settings.GROQ_API_KEY:
            try:
                self.groq_client = GroqClient()
            except ValueError as e:
                logger.warning(f"ItineraryService: Groq unavailable ({e})")

        if self.gemini_client is not None:
            logger.info("ItineraryService: Using Gemini as primary LLM")
        elif self.groq_client is not None:
            logger.info("ItineraryService: Using Groq as LLM")
        else:
            logger.error("ItineraryService: No LLM configured")

    @property
    def primary_llm(self) -> str:
        if self.gemini_client is not None:
            return "Gemini"
        if self.groq_client is not None:
            return "Groq"
        return "None"

    def is_available(self) -> bool:
        return self.gemini_client is not None or self.groq_client is not None

    async def generate(self, prompt: str, days: int, request_id: Optional[str] = None) -> str:
        """
        Generate the raw plan text for a ``days``-long trip.

        Raises:
            AIServiceError: no LLM is configured or every configured LLM failed.
        """
        if not self.is_available():
            raise AIServiceError(
                "AI service is not configured. Please add GEMINI_KEY or GROQ_API_KEY to your .env file."
            )

        max_tokens = calculate_max_tokens(days, self.config)
        logger.info(
            "Calling AI service",
            extra={
                "request_id": request_id,
                "prompt_length": len(prompt),
                "max_tokens": max_tokens,
                "days": days,
            },
        )

        last_error: Optional[Exception] = None

        if self.gemini_client is not None:
            try:
                return await self.gemini_client.generate_content(
                    prompt=prompt,
                    system_instruction=TRIP_PLAN_SYSTEM_INSTRUCTION,
                    temperature=settings.GEMINI_TEMPERATURE,
                    max_tokens=max_tokens,
                    json_output=True,
                    request_id=request_id,
                )
            except ExternalAPIError as e:
                last_error = e
                logger.warning(
                    f"Gemini API failed: {e}",
                    extra={"request_id": request_id},
                )

        if self.groq_client is not None:
            try:
                logger.info("Calling Groq API for trip plan", extra={"request_id": request_id})
                loop = asyncio.get_running_loop()
                return await loop.run_in_executor(
                    None,
                    lambda: self.groq_client.generate_json_content(
                        prompt=prompt,
                        system_instruction=TRIP_PLAN_SYSTEM_INSTRUCTION,
                        temperature=settings.GEMINI_TEMPERATURE,
                        max_tokens=max_tokens,
                    ),
                )
            except ExternalAPIError as e:
                last_error = e
                logger.error("Groq API failed", extra={"request_id": request_id}, exc_info=True)

        raise AIServiceError(f"AI service request failed: {last_error}", original_error=last_error)
