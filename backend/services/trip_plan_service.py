"""
Trip-plan generation pipeline.

Authenticates the caller, debits the plan cost, validates the form, asks
the AI for a plan, enriches it with provider data and persists it.  Any
failure after the debit refunds the credits.  The caller always gets
either the new plan id or ``{"error": message}``; nothing is raised.

Usage:
    from services.trip_plan_service import TripPlanService

    service = TripPlanService()
    result = await service.generate_trip_plan(form_data, principal)
    if isinstance(result, dict):
        print(result["error"])
"""

import asyncio
import functools
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, TypeVar, Union

from config.settings import PipelineConfig
from models.trip_plan import DestinationInfo
from schemas.api_models import TripRequest
from services.ai_response_parser import parse_ai_response
from services.credit_service import CreditService
from services.enrichment_service import EnrichmentService
from services.image_service import DestinationImageService
from services.itinerary_service import ItineraryService
from services.plan_repository import PlanRepository
from services.prompt_builder import build_trip_prompt
from services.trip_validation import (
    extract_destination_info,
    validate_dates_and_calculate_duration,
    validate_form_data,
)
from utils.auth import Principal
from utils.errors import (
    AuthenticationError,
    InsufficientCreditsError,
    TripPlanError,
    ValidationError,
)
from utils.id_generator import generate_request_id

logger = logging.getLogger(__name__)

T = TypeVar("T")

GENERIC_FAILURE_MESSAGE = "Failed to generate trip plan. Please try again."
REFUND_ATTEMPTS = 2

# Errors whose message is safe to show; anything else is logged and replaced.
USER_FACING_ERRORS = (AuthenticationError, InsufficientCreditsError, ValidationError)


class FailedPlan(dict):
    """``{"error": message}`` that also carries the error code and HTTP status."""

    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500):
        super().__init__(error=message)
        self.code = code
        self.status_code = status_code


class PipelineStage(str, Enum):
    AUTHENTICATING = "Authenticating"
    CREDIT_CHECKING = "CreditChecking"
    CREDIT_DEDUCTING = "CreditDeducting"
    VALIDATING = "Validating"
    PROMPT_BUILDING = "PromptBuilding"
    AI_CALLING = "AICalling"
    AI_PARSING = "AIParsing"
    DESTINATION_RESOLVING = "DestinationResolving"
    IMAGE_GENERATING = "ImageGenerating"
    ENRICHING = "Enriching"
    PERSISTING = "Persisting"
    DONE = "Done"
    FAILED = "Failed"


class TripPlanService:
    """Runs one trip-plan generation end to end."""

    def __init__(
        self,
        credit_service: Optional[CreditService] = None,
        itinerary_service: Optional[ItineraryService] = None,
        enrichment_service: Optional[EnrichmentService] = None,
        image_service: Optional[DestinationImageService] = None,
        plan_repository: Optional[PlanRepository] = None,
        config: Optional[PipelineConfig] = None,
    ):
        self.config = config or PipelineConfig.from_settings()
        self.credit_service = credit_service or CreditService()
        self.itinerary_service = itinerary_service or ItineraryService(config=self.config)
        self.enrichment_service = enrichment_service or EnrichmentService(
            provider_timeout=self.config.provider_timeout
        )
        self.image_service = image_service or DestinationImageService()
        self.plan_repository = plan_repository or PlanRepository()

    async def generate_trip_plan(
        self,
        form_data: Any,
        user: Optional[Principal],
    ) -> Union[str, Dict[str, str]]:
        """
        Generate and store a plan for ``user``.

        Returns:
            The new plan id, or ``{"error": message}``.
        """
        request_id = generate_request_id()
        cost = self.config.credits_per_plan
        owner_id: Optional[str] = None
        debited = False
        stage = PipelineStage.AUTHENTICATING

        logger.info("Trip plan generation started", extra={"request_id": request_id})

        try:
            if user is None or not user.id:
                raise AuthenticationError()
            owner_id = user.id

            stage = PipelineStage.CREDIT_CHECKING
            balance = await self._run(self.credit_service.get_balance, owner_id)
            if balance < cost:
                raise InsufficientCreditsError(cost, balance)

            stage = PipelineStage.CREDIT_DEDUCTING
            if not await self._run(self.credit_service.deduct, owner_id, cost):
                current = await self._run(self.credit_service.get_balance, owner_id)
                if current < cost:
                    raise InsufficientCreditsError(cost, current)
                raise ValidationError("Failed to deduct credits. Please try again.")
            debited = True
            logger.info(
                "Deducted %d credits. Remaining: %d",
                cost,
                balance - cost,
                extra={"request_id": request_id},
            )

            stage = PipelineStage.VALIDATING
            request = validate_form_data(form_data, self.config.max_trip_days)
            dates = validate_dates_and_calculate_duration(
                request.start_date, request.end_date, self.config.max_trip_days
            )

            stage = PipelineStage.PROMPT_BUILDING
            prompt = build_trip_prompt(request, dates, self.config.default_currency)

            stage = PipelineStage.AI_CALLING
            raw = await self.itinerary_service.generate(prompt, dates.days, request_id=request_id)

            stage = PipelineStage.AI_PARSING
            ai_plan = parse_ai_response(raw, dates.days, request_id=request_id)

            stage = PipelineStage.DESTINATION_RESOLVING
            destination = extract_destination_info(request.destination)
            logger.info(
                "Extracted destination",
                extra={
                    "request_id": request_id,
                    "original": request.destination,
                    "city": destination.city,
                    "country": destination.country,
                },
            )

            stage = PipelineStage.IMAGE_GENERATING
            image = await self._find_image(request, destination, request_id)

            stage = PipelineStage.ENRICHING
            enrichment = await self.enrichment_service.enrich(
                destination.city,
                destination.country,
                dates.start,
                dates.end,
                adults=request.adults or 1,
                children=request.children or 0,
                request_id=request_id,
            )

            stage = PipelineStage.PERSISTING
            plan_id = await self._run(
                functools.partial(
                    self.plan_repository.save_plan,
                    ai_plan,
                    owner_id,
                    request,
                    dates,
                    destination,
                    enrichment,
                    image,
                    request_id=request_id,
                    default_currency=self.config.default_currency,
                )
            )

            stage = PipelineStage.DONE
            logger.info(
                "Plan generation completed. Credits deducted: %d",
                cost,
                extra={"request_id": request_id, "plan_id": plan_id},
            )
            return plan_id

        except Exception as exc:
            return await self._fail(exc, stage, owner_id, debited, request_id)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        """Run a blocking call (SQLAlchemy, HTTP) in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def _find_image(
        self,
        request: TripRequest,
        destination: DestinationInfo,
        request_id: str,
    ) -> Optional[str]:
        """Best effort: any failure yields no image."""
        city = destination.city or request.destination
        if not city:
            return None
        try:
            return await asyncio.wait_for(
                self._run(self.image_service.find_image, city, destination.country),
                timeout=self.config.provider_timeout,
            )
        except Exception:
            logger.error(
                "Error generating destination image",
                extra={"request_id": request_id},
                exc_info=True,
            )
            return None

    async def _fail(
        self,
        exc: Exception,
        stage: PipelineStage,
        owner_id: Optional[str],
        debited: bool,
        request_id: str,
    ) -> FailedPlan:
        logger.error(
            "Trip plan generation failed at %s: %s",
            stage.value,
            exc,
            extra={
                "request_id": request_id,
                "stage": stage.value,
                "error_type": type(exc).__name__,
            },
            exc_info=not isinstance(exc, TripPlanError),
        )

        if debited and owner_id:
            await self._refund(owner_id, request_id)

        if isinstance(exc, USER_FACING_ERRORS):
            failure = FailedPlan(exc.message, exc.code, exc.status_code)
        elif isinstance(exc, TripPlanError):
            failure = FailedPlan(GENERIC_FAILURE_MESSAGE, exc.code, exc.status_code)
        else:
            failure = FailedPlan(GENERIC_FAILURE_MESSAGE)
        logger.error(
            "Returning error to client: %s",
            failure["error"],
            extra={"request_id": request_id, "stage": PipelineStage.FAILED.value},
        )
        return failure

    async def _refund(self, owner_id: str, request_id: str) -> bool:
        """Return the plan cost; failures are logged, never raised."""
        cost = self.config.credits_per_plan
        for attempt in range(1, REFUND_ATTEMPTS + 1):
            logger.info(
                "Attempting to refund %d credits (attempt %d/%d)",
                cost,
                attempt,
                REFUND_ATTEMPTS,
                extra={"request_id": request_id},
            )
            try:
                if await self._run(self.credit_service.add, owner_id, cost):
                    logger.info("Successfully refunded %d credits", cost, extra={"request_id": request_id})
                    return True
            except Exception:
                logger.error("Error refunding credits", extra={"request_id": request_id}, exc_info=True)

        logger.error(
            "Failed to refund %d credits to %s - manual intervention may be required",
            cost,
            owner_id,
            extra={"request_id": request_id},
        )
        return False
