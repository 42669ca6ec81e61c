"""
TripCraft Trip Planner - FastAPI application.

Generates AI trip plans for signed-in users, charging credits per plan,
and serves stored plans and credit balances under ``/api/*``.

Run:
    python backend/app.py          # starts uvicorn with reload
    uvicorn app:app --reload       # (from the backend/ directory)

Auto-generated API docs:
    http://localhost:8000/docs      (Swagger UI)
    http://localhost:8000/redoc     (ReDoc)
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

# ---------------------------------------------------------------------------
# Path setup - allow short imports like ``from config.settings import …``
# ---------------------------------------------------------------------------
sys.path.insert(0, os.path.dirname(__file__))

from fastapi import Body, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import PipelineConfig, redact_api_key, settings
from lib.db import init_db
from utils.auth import Principal, get_current_principal
from utils.errors import TripPlanError
from services.credit_service import CreditService
from services.plan_repository import PlanRepository
from services.trip_plan_service import TripPlanService
from schemas.api_models import (
    CreditsResponse,
    ErrorResponse,
    GenerateTripPlanResponse,
    HealthResponse,
    PlanListResponse,
    PlanResponse,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Module-level service instances (set during lifespan startup)
# ---------------------------------------------------------------------------
trip_plan_service: Optional[TripPlanService] = None
credit_service: Optional[CreditService] = None
plan_repository: Optional[PlanRepository] = None
database_error: Optional[str] = None


# ---------------------------------------------------------------------------
# Lifespan - initialise / tear down services
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Initialise services on startup; clean up on shutdown."""
    global trip_plan_service, credit_service, plan_repository, database_error

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        init_db()
        logger.info("Database initialized")
    except Exception as exc:
        database_error = str(exc)
        logger.error("Failed to initialize database: %s", exc, exc_info=True)

    if credit_service is None:
        credit_service = CreditService()
    if plan_repository is None:
        plan_repository = PlanRepository()
    if trip_plan_service is None:
        trip_plan_service = TripPlanService(
            credit_service=credit_service,
            plan_repository=plan_repository,
            config=PipelineConfig.from_settings(),
        )
    logger.info("Trip Plan Service initialized")

    yield  # ── application runs here ──

    logger.info("Shutting down TripCraft")


# ---------------------------------------------------------------------------
# App creation
# ---------------------------------------------------------------------------
app = FastAPI(
    title="TripCraft Trip Planner",
    version="1.0.0",
    description="AI trip-plan generation with credits, weather, places and hotel prices.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Global exception handlers
# ---------------------------------------------------------------------------
@app.exception_handler(TripPlanError)
async def _trip_plan_error(request: Request, exc: TripPlanError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/api/health", response_model=HealthResponse, tags=["system"])
async def health():
    """Service status, primary LLM and configured enrichment providers."""
    itinerary = trip_plan_service.itinerary_service if trip_plan_service else None
    primary = itinerary.primary_llm if itinerary else "None"
    return HealthResponse(
        status="healthy" if itinerary and itinerary.is_available() and not database_error else "degraded",
        service="TripCraft Trip Planner",
        primary_llm=primary,
        model=settings.GEMINI_MODEL if primary == "Gemini" else settings.GROQ_MODEL,
        database_ready=database_error is None,
        providers=settings.configured_providers(),
        error=database_error,
    )


# ── Trip plans ─────────────────────────────────────────────────

@app.post(
    "/api/trip-plans",
    response_model=GenerateTripPlanResponse,
    responses={code: {"model": ErrorResponse} for code in (400, 401, 402, 500, 503)},
    tags=["plans"],
)
async def create_trip_plan(
    form_data: Dict[str, Any] = Body(...),
    principal: Optional[Principal] = Depends(get_current_principal),
):
    """
    Generate a trip plan from the trip-planner form.

    Costs ``CREDITS_PER_PLAN`` credits, refunded when generation fails.
    """
    if not trip_plan_service:
        return JSONResponse(
            status_code=503,
            content={"success": False, "error": "Trip plan service not initialized"},
        )

    result = await trip_plan_service.generate_trip_plan(form_data, principal)
    if isinstance(result, dict):
        return JSONResponse(
            status_code=getattr(result, "status_code", 500),
            content={"success": False, "error": result["error"]},
        )
    return GenerateTripPlanResponse(success=True, plan_id=result)


@app.get("/api/trip-plans", response_model=PlanListResponse, tags=["plans"])
def list_trip_plans(principal: Optional[Principal] = Depends(get_current_principal)):
    """The caller's plans, newest first."""
    if principal is None or not plan_repository:
        return PlanListResponse(success=True, plans=[])
    plans = plan_repository.get_plans_by_user(principal.id)
    return PlanListResponse(success=True, plans=[p.to_dict() for p in plans])


@app.get("/api/trip-plans/{plan_id}", response_model=PlanResponse, tags=["plans"])
def get_trip_plan(
    plan_id: str,
    principal: Optional[Principal] = Depends(get_current_principal),
):
    """One of the caller's stored plans; other owners' plans read as missing."""
    plan = None
    if principal is not None and plan_repository:
        if plan_repository.get_plan_owner(plan_id) == principal.id:
            plan = plan_repository.get_plan(plan_id)
    if plan is None:
        return JSONResponse(
            status_code=404,
            content={"success": False, "error": "Plan not found"},
        )
    return PlanResponse(success=True, plan=plan.to_dict())


# ── Credits ────────────────────────────────────────────────────

@app.get("/api/credits", response_model=CreditsResponse, tags=["credits"])
def get_credits(principal: Optional[Principal] = Depends(get_current_principal)):
    """The caller's credit balance (0 when signed out)."""
    balance = 0
    if principal is not None and credit_service:
        balance = credit_service.get_balance(principal.id)
    return CreditsResponse(success=True, credits=balance, credits_per_plan=settings.CREDITS_PER_PLAN)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    import uvicorn

    errors = settings.validate()
    if errors:
        for err in errors:
            print(f"❌ Configuration error: {err}")
        print("\n📝 Setup Instructions:")
        print("1. Copy backend/.env.example to backend/.env")
        print("2. Add your Gemini API key from https://aistudio.google.com/apikey")
        print("3. (Optional) Add your Groq API key from https://console.groq.com/keys")
        print("4. Set JWT_SECRET to the secret your auth provider signs tokens with")
        print("5. Run the server again")
        sys.exit(1)

    print("✅ Settings validated")
    if settings.GEMINI_KEY:
        print(f"🔑 Gemini key: {redact_api_key(settings.GEMINI_KEY)}")
    if settings.GROQ_API_KEY:
        print(f"🔑 Groq key: {redact_api_key(settings.GROQ_API_KEY)}")
    print(f"🌐 Starting server on http://{settings.HOST}:{settings.PORT}")
    print(f"📖 API docs at http://{settings.HOST}:{settings.PORT}/docs")

    uvicorn.run(
        "app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
