"""Tests for LLM selection and fallback in ItineraryService."""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from unittest.mock import AsyncMock, MagicMock

import pytest

from clients.gemini_client import ExternalAPIError
from config.settings import PipelineConfig
from services.itinerary_service import ItineraryService
from utils.errors import AIServiceError


def _service(gemini=None, groq=None):
    """Build without touching settings-driven client construction."""
    service = ItineraryService.__new__(ItineraryService)
    service.config = PipelineConfig()
    service.gemini_client = gemini
    service.groq_client = groq
    return service


@pytest.mark.asyncio
async def test_gemini_used_first_with_json_output_and_token_budget():
    gemini = MagicMock()
    gemini.generate_content = AsyncMock(return_value='{"itinerary": []}')
    groq = MagicMock()

    raw = await _service(gemini, groq).generate("prompt", days=5)

    assert raw == '{"itinerary": []}'
    kwargs = gemini.generate_content.call_args.kwargs
    assert kwargs["json_output"] is True
    assert kwargs["max_tokens"] == 7000
    groq.generate_json_content.assert_not_called()


@pytest.mark.asyncio
async def test_groq_fallback_when_gemini_fails():
    gemini = MagicMock()
    gemini.generate_content = AsyncMock(side_effect=ExternalAPIError("Gemini", "quota exceeded", 2))
    groq = MagicMock()
    groq.generate_json_content.return_value = '{"itinerary": [1]}'

    raw = await _service(gemini, groq).generate("prompt", days=1)

    assert raw == '{"itinerary": [1]}'
    assert groq.generate_json_content.call_args.kwargs["max_tokens"] == 4000


@pytest.mark.asyncio
async def test_all_llms_failing_raises_ai_service_error():
    groq = MagicMock()
    groq.generate_json_content.side_effect = ExternalAPIError("Groq", "timeout")

    with pytest.raises(AIServiceError) as excinfo:
        await _service(groq=groq).generate("prompt", days=3)
    assert "AI service request failed" in excinfo.value.message
    assert isinstance(excinfo.value.original_error, ExternalAPIError)


@pytest.mark.asyncio
async def test_no_llm_configured():
    service = _service()
    assert service.is_available() is False
    assert service.primary_llm == "None"
    with pytest.raises(AIServiceError, match="not configured"):
        await service.generate("prompt", days=3)


def test_primary_llm_reporting():
    assert _service(gemini=MagicMock()).primary_llm == "Gemini"
    assert _service(groq=MagicMock()).primary_llm == "Groq"


# ---------------------------------------------------------------------------
# GeminiClient retry
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_gemini_client_retries_then_succeeds(monkeypatch):
    import clients.gemini_client as gemini_module

    monkeypatch.setattr(gemini_module, "RETRY_PAUSE_SECONDS", 0)
    client = gemini_module.GeminiClient(api_key="test-key", max_retries=2, timeout=5)
    client.client = MagicMock()
    client.client.models.generate_content.side_effect = [
        RuntimeError("503 overloaded"),
        MagicMock(text='{"itinerary": []}'),
    ]

    text = await client.generate_content("prompt", json_output=True, max_tokens=4000)

    assert text == '{"itinerary": []}'
    config = client.client.models.generate_content.call_args.kwargs["config"]
    assert config.response_mime_type == "application/json"
    assert config.max_output_tokens == 4000


@pytest.mark.asyncio
async def test_gemini_client_empty_responses_exhaust_retries(monkeypatch):
    import clients.gemini_client as gemini_module

    monkeypatch.setattr(gemini_module, "RETRY_PAUSE_SECONDS", 0)
    client = gemini_module.GeminiClient(api_key="test-key", max_retries=2, timeout=5)
    client.client = MagicMock()
    client.client.models.generate_content.return_value = MagicMock(text="")

    with pytest.raises(ExternalAPIError) as excinfo:
        await client.generate_content("prompt")
    assert excinfo.value.retry_count == 2
    assert client.client.models.generate_content.call_count == 2
