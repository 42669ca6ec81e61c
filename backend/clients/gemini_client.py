"""
Gemini client for trip-plan generation (google-genai SDK).

The SDK call is blocking, so each attempt runs in the default executor
under a per-attempt timeout.  Attempts are retried with a fixed one
second pause; after the last one an ``ExternalAPIError`` is raised.

Usage:
    from clients.gemini_client import GeminiClient

    client = GeminiClient()
    text = await client.generate_content(
        prompt="Plan a 5-day trip to Paris...",
        system_instruction="You are an expert travel planner.",
        json_output=True,
        request_id="req_20250601_ab12cd34",
    )
"""

import asyncio
import logging
from typing import Optional

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)

RETRY_PAUSE_SECONDS = 1


class ExternalAPIError(Exception):
    """An LLM provider could not produce a response."""

    def __init__(self, service: str, error: str, retry_count: int = 0):
        self.service = service
        self.error = error
        self.retry_count = retry_count
        super().__init__(f"{service} API failed: {error} (retries: {retry_count})")


class GeminiClient:
    """Async wrapper around ``genai.Client`` with timeout and retry."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        max_retries: Optional[int] = None,
        timeout: Optional[int] = None,
    ):
        # Lazy import to avoid circular dependency at module level
        from config.settings import settings

        self.api_key = api_key or settings.GEMINI_KEY
        if not self.api_key:
            raise ValueError("Gemini API key required - set GEMINI_KEY in .env")

        self.model_name = model_name or settings.GEMINI_MODEL
        attempts = max_retries if max_retries is not None else settings.GEMINI_MAX_RETRIES
        self.max_retries = max(1, attempts)
        self.timeout = timeout if timeout is not None else settings.GEMINI_TIMEOUT
        self.default_temperature = settings.GEMINI_TEMPERATURE
        self.client = genai.Client(api_key=self.api_key)

    def build_config(
        self,
        system_instruction: Optional[str],
        temperature: Optional[float],
        max_tokens: Optional[int],
        json_output: bool,
    ) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.default_temperature if temperature is None else temperature,
            max_output_tokens=max_tokens,
            system_instruction=system_instruction,
            response_mime_type="application/json" if json_output else None,
        )

    async def generate_content(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_output: bool = False,
        request_id: Optional[str] = None,
    ) -> str:
        """
        Generate text for ``prompt``.

        Args:
            json_output: Ask for an ``application/json`` response body.
            request_id: Id for log correlation.

        Raises:
            ExternalAPIError: every attempt timed out, failed or came back empty.
        """
        config = self.build_config(system_instruction, temperature, max_tokens, json_output)
        logger.debug(
            "Calling Gemini API",
            extra={
                "request_id": request_id,
                "model": self.model_name,
                "prompt_length": len(prompt),
                "max_tokens": max_tokens,
                "json_output": json_output,
            },
        )

        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                text = await asyncio.wait_for(self._call(prompt, config), timeout=self.timeout)
            except asyncio.TimeoutError:
                last_error = TimeoutError(f"Gemini API timeout after {self.timeout}s")
                logger.warning(
                    "Gemini API timeout (attempt %d/%d)",
                    attempt,
                    self.max_retries,
                    extra={"request_id": request_id},
                )
            except Exception as exc:
                last_error = exc
                logger.warning(
                    "Gemini API error (attempt %d/%d): %s",
                    attempt,
                    self.max_retries,
                    exc,
                    extra={"request_id": request_id, "error_type": type(exc).__name__},
                )
            else:
                logger.info(
                    "Gemini API success",
                    extra={"request_id": request_id, "response_length": len(text)},
                )
                return text

            if attempt < self.max_retries:
                await asyncio.sleep(RETRY_PAUSE_SECONDS)

        logger.error(
            "Gemini API failed after %d attempts",
            self.max_retries,
            extra={"request_id": request_id},
        )
        raise ExternalAPIError("Gemini", str(last_error), retry_count=self.max_retries)

    async def _call(self, prompt: str, config: types.GenerateContentConfig) -> str:
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(
            None,
            lambda: self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=config,
            ),
        )
        if not response.text:
            raise ValueError("Gemini returned an empty response")
        return response.text
