"""
Pydantic models for the trip form and the FastAPI responses.

``TripRequest`` is the structural schema of the trip-planner form: the whole
object graph (required fields, numeric bounds, date ordering and the maximum
trip length) is checked in one ``model_validate`` call.  Internal business
logic works on the dataclasses in models/trip_plan.py and models/enrichment.py.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError


DateInput = Union[datetime, date, str]


# ── Request Models ─────────────────────────────────────────────


class TripRequest(BaseModel):
    """Trip-planner form as submitted by the client (camelCase keys)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    start_city: str = Field(..., alias="startCity", min_length=1)
    destination: str = Field(
        ...,
        min_length=1,
        description='Free text, possibly "City, CountryCode"',
        json_schema_extra={"examples": ["Paris, FR"]},
    )
    start_date: DateInput = Field(..., alias="startDate")
    end_date: DateInput = Field(..., alias="endDate")
    travel_themes: Optional[List[str]] = Field(None, alias="travelThemes")
    travel_pace: Optional[str] = Field(None, alias="travelPace")
    weather: Optional[str] = None
    accommodation: Optional[str] = None
    food: Optional[str] = None
    transport: Optional[str] = None
    currency: Optional[str] = None
    budget: Optional[float] = Field(None, ge=0)
    passengers: Optional[str] = None
    adults: Optional[int] = Field(None, ge=0)
    children: Optional[int] = Field(None, ge=0)
    infants: Optional[int] = Field(None, ge=0)
    additional_preferences: Optional[str] = Field(None, alias="additionalPreferences")

    @field_validator("start_date", "end_date")
    @classmethod
    def _parseable_date(cls, value: DateInput) -> DateInput:
        # Lazy import to avoid circular dependency at module level
        from services.trip_validation import normalize_date
        from utils.errors import ValidationError as TripValidationError

        try:
            normalize_date(value)
        except TripValidationError:
            raise PydanticCustomError("invalid_trip_date", "Invalid date: {value}", {"value": str(value)})
        return value

    @field_validator("end_date")
    @classmethod
    def _date_range(cls, end: DateInput, info: ValidationInfo) -> DateInput:
        from services.trip_validation import normalize_date

        start = info.data.get("start_date")
        if start is None:
            return end

        start_day = normalize_date(start)
        end_day = normalize_date(end)
        if end_day < start_day:
            raise PydanticCustomError(
                "end_before_start",
                "End date must be after or equal to start date",
            )

        max_days = (info.context or {}).get("max_trip_days", 20)
        days = (end_day - start_day).days + 1
        if days > max_days:
            raise PydanticCustomError(
                "trip_too_long",
                "Maximum trip duration is {max_days} days. Please select dates within "
                "{max_days} days. Your selected trip duration is {days} days.",
                {"max_days": max_days, "days": days},
            )
        return end


# ── Response Models ────────────────────────────────────────────


class HealthResponse(BaseModel):
    """GET /api/health response."""

    status: str
    service: str
    primary_llm: str
    model: str
    database_ready: bool
    providers: List[str] = []
    error: Optional[str] = None


class GenerateTripPlanResponse(BaseModel):
    """POST /api/trip-plans response."""

    success: bool
    plan_id: Optional[str] = None
    error: Optional[str] = None


class PlanResponse(BaseModel):
    """GET /api/trip-plans/{plan_id} response."""

    success: bool
    plan: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class PlanListResponse(BaseModel):
    """GET /api/trip-plans response."""

    success: bool
    plans: List[Dict[str, Any]] = []


class CreditsResponse(BaseModel):
    """GET /api/credits response."""

    success: bool
    credits: int = Field(ge=0)
    credits_per_plan: int


class ErrorResponse(BaseModel):
    """Generic error envelope returned on failure."""

    success: bool = False
    error: str
