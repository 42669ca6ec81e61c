"""
Client for Groq API using OpenAI-compatible interface.
"""
import logging
from typing import Optional

from groq import Groq

from clients.gemini_client import ExternalAPIError
from config.settings import settings

logger = logging.getLogger(__name__)

JSON_ONLY_INSTRUCTION = (
    "You must respond with valid JSON only. Do not include any explanatory text, "
    "markdown formatting, or code blocks. Return only the raw JSON object."
)


class GroqClient:
    """Client for interacting with Groq API."""

    def __init__(self, api_key: Optional[str] = None, timeout: Optional[int] = None):
        """
        Initialize Groq client.

        Args:
            api_key: Optional API key. If not provided, uses settings.GROQ_API_KEY
            timeout: Request timeout in seconds. Defaults to settings.GROQ_TIMEOUT
        """
        self.api_key = api_key or settings.GROQ_API_KEY
        self.model = settings.GROQ_MODEL
        self.timeout = timeout if timeout is not None else settings.GROQ_TIMEOUT

        if not self.api_key:
            raise ValueError("Groq API key is required")

        logger.info("GroqClient initialized with model %s (timeout %ss)", self.model, self.timeout)
        self.client = Groq(api_key=self.api_key, timeout=self.timeout)

    def generate_json_content(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.8,
        max_tokens: int = 8192,
    ) -> str:
        """
        Generate JSON content using Groq API with JSON mode enforcement.

        Args:
            prompt: The user prompt/question
            system_instruction: Optional system instruction for behavior control
            temperature: Controls randomness (0.0-2.0)
            max_tokens: Maximum tokens in response

        Returns:
            Generated JSON text content (as string, not parsed)

        Raises:
            ExternalAPIError: If the request fails.
        """
        if system_instruction:
            full_system = f"{system_instruction}\n\n{JSON_ONLY_INSTRUCTION}"
        else:
            full_system = JSON_ONLY_INSTRUCTION

        messages = [
            {"role": "system", "content": full_system},
            {"role": "user", "content": prompt},
        ]

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise ExternalAPIError(service="Groq", error=str(e)) from e

        content = response.choices[0].message.content
        if not content:
            raise ExternalAPIError(service="Groq", error="empty response")
        return content
