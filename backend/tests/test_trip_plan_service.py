"""
End-to-end tests for TripPlanService.

The credit ledger and plan store run on a throwaway SQLite database; the
AI, enrichment and image providers are mocked.
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import update

from config.settings import PipelineConfig
from lib.db import CreditAccount, init_db, make_engine, make_session_factory
from models.enrichment import EnrichmentBundle, Place, PlacesData
from services.credit_service import CreditService
from services.plan_repository import PlanRepository
from services.trip_plan_service import GENERIC_FAILURE_MESSAGE, TripPlanService
from clients.gemini_client import ExternalAPIError
from services.itinerary_service import ItineraryService
from utils.auth import Principal
from utils.errors import AIServiceError, DatabaseError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

USER = Principal(id="user-1", email="traveller@example.com")


def _form(**overrides):
    form = {
        "startCity": "Mumbai",
        "destination": "Paris, FR",
        "startDate": "2025-06-01",
        "endDate": "2025-06-05",
        "currency": "USD",
        "budget": 3000,
        "adults": 2,
        "travelThemes": ["culture", "food"],
    }
    form.update(overrides)
    return form


def _ai_text(days=5):
    return json.dumps({
        "tripHighlights": {"title": "Paris Unveiled", "description": "Art, food and river walks."},
        "itinerary": [
            {
                "day": n,
                "date": f"2025-06-0{n}",
                "title": f"Day {n}",
                "morning": {"activities": ["09:00 AM - Cafe"], "description": "Slow start"},
                "afternoon": {"activities": ["02:00 PM - Museum"], "description": "Culture"},
                "evening": {"activities": ["07:30 PM - Bistro"], "description": "Dinner"},
                "foodRecommendations": ["Crepes"],
                "stayOptions": ["Value Stay"],
                "optionalActivities": [],
                "quickBookings": [],
                "tip": "Buy a museum pass",
            }
            for n in range(1, days + 1)
        ],
        "bestTimeToVisit": {
            "description": "Late spring.",
            "peakSeason": "Jun - Aug",
            "shoulderSeason": "Apr - May",
            "offSeason": "Nov - Feb",
        },
        "packingSuggestions": {"clothing": ["Light jacket"], "documents": ["Passport"]},
    })


@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'pipeline.db'}")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def pipeline(session_factory):
    itinerary = MagicMock()
    itinerary.generate = AsyncMock(return_value=_ai_text())
    enrichment = MagicMock()
    enrichment.enrich = AsyncMock(return_value=EnrichmentBundle(
        places_data=PlacesData(hotels=[Place(place_id="h1", name="Hotel Le Marais", rating=4.2)]),
        destination_lat=48.8566,
        destination_lng=2.3522,
    ))
    image = MagicMock()
    image.find_image.return_value = "https://img.example/paris.jpg"

    return TripPlanService(
        credit_service=CreditService(session_factory, starting_credits=1000),
        itinerary_service=itinerary,
        enrichment_service=enrichment,
        image_service=image,
        plan_repository=PlanRepository(session_factory),
        config=PipelineConfig(credits_per_plan=100, max_trip_days=20),
    )


def _set_balance(session_factory, owner_id, credits):
    with session_factory() as session:
        session.execute(
            update(CreditAccount).where(CreditAccount.owner_id == owner_id).values(credits=credits)
        )
        session.commit()


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_generates_and_stores_plan(pipeline):
    plan_id = await pipeline.generate_trip_plan(_form(), USER)

    assert isinstance(plan_id, str) and plan_id
    record = pipeline.plan_repository.get_plan(plan_id)
    assert record.destination == "Paris"
    assert record.destination_country == "FR"
    assert record.currency == "USD"
    assert record.destination_image == "https://img.example/paris.jpg"
    assert record.destination_lat == 48.8566
    plan = json.loads(record.text)
    assert len(plan["itinerary"]) == 5
    assert plan["packingSuggestions"]["electronics"] == []
    assert pipeline.credit_service.get_balance("user-1") == 900


@pytest.mark.asyncio
async def test_ai_called_with_prompt_and_day_count(pipeline):
    await pipeline.generate_trip_plan(_form(), USER)

    args, kwargs = pipeline.itinerary_service.generate.call_args
    prompt, days = args
    assert days == 5
    assert "Paris, FR" in prompt
    assert "Estimated Daily Budget: USD 600" in prompt
    pipeline.enrichment_service.enrich.assert_awaited_once()
    enrich_args = pipeline.enrichment_service.enrich.call_args
    assert enrich_args.args[:4] == ("Paris", "FR", date(2025, 6, 1), date(2025, 6, 5))


@pytest.mark.asyncio
async def test_image_failure_does_not_fail_plan(pipeline):
    pipeline.image_service.find_image.side_effect = RuntimeError("unsplash down")

    plan_id = await pipeline.generate_trip_plan(_form(), USER)

    assert pipeline.plan_repository.get_plan(plan_id).destination_image is None


# ---------------------------------------------------------------------------
# Failures before the debit
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_unauthenticated_caller_rejected(pipeline):
    result = await pipeline.generate_trip_plan(_form(), None)

    assert result == {"error": "Please sign in to generate a travel plan."}
    assert result.status_code == 401
    pipeline.itinerary_service.generate.assert_not_called()


@pytest.mark.asyncio
async def test_insufficient_credits_rejected_without_ai_call(pipeline, session_factory):
    pipeline.credit_service.get_balance("user-1")
    _set_balance(session_factory, "user-1", 50)

    result = await pipeline.generate_trip_plan(_form(), USER)

    assert "100" in result["error"] and "50" in result["error"]
    assert result.code == "INSUFFICIENT_CREDITS"
    assert result.status_code == 402
    pipeline.itinerary_service.generate.assert_not_called()
    assert pipeline.credit_service.get_balance("user-1") == 50


@pytest.mark.asyncio
async def test_lost_deduct_race_reports_insufficient_credits(pipeline):
    pipeline.credit_service = MagicMock()
    pipeline.credit_service.get_balance.side_effect = [1000, 50]
    pipeline.credit_service.deduct.return_value = False

    result = await pipeline.generate_trip_plan(_form(), USER)

    assert result.code == "INSUFFICIENT_CREDITS"
    assert result.status_code == 402
    assert "50" in result["error"]
    pipeline.credit_service.add.assert_not_called()
    pipeline.itinerary_service.generate.assert_not_called()


@pytest.mark.asyncio
async def test_deduct_failure_with_enough_credits_asks_to_retry(pipeline):
    pipeline.credit_service = MagicMock()
    pipeline.credit_service.get_balance.side_effect = [1000, 1000]
    pipeline.credit_service.deduct.return_value = False

    result = await pipeline.generate_trip_plan(_form(), USER)

    assert result == {"error": "Failed to deduct credits. Please try again."}
    assert result.status_code == 400
    pipeline.credit_service.add.assert_not_called()
    pipeline.itinerary_service.generate.assert_not_called()


# ---------------------------------------------------------------------------
# Failures after the debit are refunded
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_ai_failure_refunds_credits(pipeline):
    pipeline.itinerary_service.generate.side_effect = AIServiceError("AI service request failed: quota")

    result = await pipeline.generate_trip_plan(_form(), USER)

    assert result == {"error": GENERIC_FAILURE_MESSAGE}
    assert result.code == "AI_SERVICE_ERROR"
    assert result.status_code == 503
    assert pipeline.credit_service.get_balance("user-1") == 1000
    assert pipeline.plan_repository.get_plans_by_user("user-1") == []


@pytest.mark.asyncio
async def test_unparseable_ai_output_refunds_credits(pipeline):
    pipeline.itinerary_service.generate.return_value = "Sorry, I cannot help with that."

    result = await pipeline.generate_trip_plan(_form(), USER)

    assert result == {"error": GENERIC_FAILURE_MESSAGE}
    assert result.status_code == 503
    assert pipeline.credit_service.get_balance("user-1") == 1000


@pytest.mark.asyncio
async def test_invalid_form_refunds_credits(pipeline):
    result = await pipeline.generate_trip_plan(_form(endDate="2025-06-25"), USER)

    assert "Maximum trip duration is 20 days" in result["error"]
    assert result.status_code == 400
    assert pipeline.credit_service.get_balance("user-1") == 1000
    pipeline.itinerary_service.generate.assert_not_called()


@pytest.mark.asyncio
async def test_unexpected_error_gets_generic_message(pipeline):
    pipeline.enrichment_service.enrich.side_effect = KeyError("boom")

    result = await pipeline.generate_trip_plan(_form(), USER)

    assert result == {"error": GENERIC_FAILURE_MESSAGE}
    assert result.status_code == 500
    assert pipeline.credit_service.get_balance("user-1") == 1000


@pytest.mark.asyncio
async def test_persistence_failure_refunds_credits(pipeline):
    pipeline.plan_repository = MagicMock()
    pipeline.plan_repository.save_plan.side_effect = DatabaseError("Failed to save plan")

    result = await pipeline.generate_trip_plan(_form(), USER)

    assert result == {"error": GENERIC_FAILURE_MESSAGE}
    assert result.code == "DATABASE_ERROR"
    assert result.status_code == 500
    assert pipeline.credit_service.get_balance("user-1") == 1000


@pytest.mark.asyncio
async def test_refund_failure_is_logged_not_raised(pipeline):
    pipeline.itinerary_service.generate.side_effect = AIServiceError("AI down")
    pipeline.credit_service.add = MagicMock(return_value=False)

    result = await pipeline.generate_trip_plan(_form(), USER)

    assert result == {"error": GENERIC_FAILURE_MESSAGE}
    assert pipeline.credit_service.add.call_count == 2
    assert pipeline.credit_service.get_balance("user-1") == 900


@pytest.mark.asyncio
async def test_provider_error_text_not_returned(pipeline):
    gemini = MagicMock()
    gemini.generate_content = AsyncMock(
        side_effect=ExternalAPIError("Gemini", "401 invalid key sk-live-abc123", 2)
    )
    itinerary = ItineraryService.__new__(ItineraryService)
    itinerary.config = pipeline.config
    itinerary.gemini_client = gemini
    itinerary.groq_client = None
    pipeline.itinerary_service = itinerary

    result = await pipeline.generate_trip_plan(_form(), USER)

    assert result == {"error": GENERIC_FAILURE_MESSAGE}
    assert result.status_code == 503
    assert "sk-live-abc123" not in result["error"]
    assert pipeline.credit_service.get_balance("user-1") == 1000


# ---------------------------------------------------------------------------
# Configured default currency
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_configured_default_currency_used_when_form_has_none(pipeline):
    pipeline.config = PipelineConfig(credits_per_plan=100, max_trip_days=20, default_currency="EUR")
    form = _form()
    del form["currency"]

    plan_id = await pipeline.generate_trip_plan(form, USER)

    assert pipeline.plan_repository.get_plan(plan_id).currency == "EUR"
    prompt = pipeline.itinerary_service.generate.call_args.args[0]
    assert "Currency Code: EUR" in prompt
