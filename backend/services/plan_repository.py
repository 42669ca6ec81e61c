"""
Persistence of generated trip plans.

Plans are insert-only from the generation pipeline; the read helpers back
the plan viewer and "my plans" listing.
"""

import json
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from lib.db import Plan, get_session_factory
from models.enrichment import EnrichmentBundle
from models.trip_plan import AIPlanData, DestinationInfo, PlanRecord, TripDates
from schemas.api_models import TripRequest
from utils.errors import DatabaseError

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "INR"


def _to_record(row: Plan) -> PlanRecord:
    return PlanRecord(
        id=str(row.id),
        text=row.text,
        budget=row.budget,
        start_date=row.start_date,
        end_date=row.end_date,
        destination=row.destination,
        destination_country=row.destination_country,
        destination_lat=row.destination_lat,
        destination_lng=row.destination_lng,
        destination_image=row.destination_image,
        currency=row.currency,
        weather_data=row.weather_data,
        places_data=row.places_data,
        created_at=row.created_at,
    )


class PlanRepository:
    """Stores and loads ``Plan`` rows."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory or get_session_factory()

    def save_plan(
        self,
        ai_plan: AIPlanData,
        owner_id: str,
        request: TripRequest,
        dates: TripDates,
        destination: DestinationInfo,
        enrichment: EnrichmentBundle,
        destination_image: Optional[str] = None,
        request_id: Optional[str] = None,
        default_currency: str = DEFAULT_CURRENCY,
    ) -> str:
        """Insert a plan and return its id.

        Raises:
            DatabaseError: the write failed or produced no id.
        """
        currency = request.currency or default_currency
        bundle = enrichment.to_dict()

        logger.info(
            "Saving plan",
            extra={
                "request_id": request_id,
                "destination": destination.city,
                "destination_country": destination.country,
                "currency": currency,
                "budget": request.budget,
                "has_weather_data": enrichment.weather_data is not None,
                "has_places_data": enrichment.places_data is not None,
            },
        )

        row = Plan(
            owner_id=owner_id,
            text=json.dumps(ai_plan.to_dict()),
            budget=request.budget or 0,
            currency=currency,
            start_date=dates.start.isoformat(),
            end_date=dates.end.isoformat(),
            destination=destination.city,
            destination_country=destination.country or None,
            destination_lat=enrichment.destination_lat,
            destination_lng=enrichment.destination_lng,
            destination_image=destination_image or None,
            weather_data=bundle["weatherData"],
            places_data=bundle["placesData"],
        )

        try:
            with self.session_factory() as session:
                session.add(row)
                session.commit()
                plan_id = row.id
        except SQLAlchemyError as exc:
            logger.error("Failed to save plan", extra={"request_id": request_id}, exc_info=True)
            raise DatabaseError("Failed to save plan", original_error=exc) from exc

        if not plan_id:
            raise DatabaseError("Failed to save plan - no ID returned")

        logger.info("Plan saved successfully with ID: %s", plan_id, extra={"request_id": request_id})
        return str(plan_id)

    def get_plan(self, plan_id: str) -> Optional[PlanRecord]:
        try:
            key = int(plan_id)
        except (TypeError, ValueError):
            return None

        try:
            with self.session_factory() as session:
                row = session.get(Plan, key)
                return _to_record(row) if row else None
        except SQLAlchemyError:
            logger.error("Error fetching plan %s", plan_id, exc_info=True)
            return None

    def get_plan_owner(self, plan_id: str) -> Optional[str]:
        try:
            key = int(plan_id)
        except (TypeError, ValueError):
            return None

        try:
            with self.session_factory() as session:
                return session.scalar(select(Plan.owner_id).where(Plan.id == key))
        except SQLAlchemyError:
            logger.error("Error fetching owner of plan %s", plan_id, exc_info=True)
            return None

    def get_plans_by_user(self, owner_id: str) -> List[PlanRecord]:
        """Owner's plans, newest first; empty on error."""
        if not owner_id:
            return []

        try:
            with self.session_factory() as session:
                rows = session.scalars(
                    select(Plan)
                    .where(Plan.owner_id == owner_id)
                    .order_by(Plan.created_at.desc(), Plan.id.desc())
                ).all()
                return [_to_record(r) for r in rows]
        except SQLAlchemyError:
            logger.error("Error fetching plans for %s", owner_id, exc_info=True)
            return []
