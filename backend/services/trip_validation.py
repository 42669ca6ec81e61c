"""
Trip form validation and calendar-date normalisation.

The client serialises dates as plain ``YYYY-MM-DD`` strings so that a
calendar day never shifts across a UTC boundary; the normaliser reproduces
the day the user picked, not the literal instant.

Usage:
    from services.trip_validation import validate_form_data, validate_dates_and_calculate_duration

    request = validate_form_data(raw_form)
    dates = validate_dates_and_calculate_duration(request.start_date, request.end_date)
    print(dates.days, dates.date_list)
"""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional, Union

import pydantic
from dateutil import parser as dateparser

from models.trip_plan import DestinationInfo, TripDates
from schemas.api_models import TripRequest
from utils.errors import ValidationError

logger = logging.getLogger(__name__)

MAX_TRIP_DAYS = 20

_DATE_ONLY = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")


# ---------------------------------------------------------------------------
# Form schema
# ---------------------------------------------------------------------------

def validate_form_data(raw: Any, max_days: int = MAX_TRIP_DAYS) -> TripRequest:
    """Validate the raw form against ``TripRequest``.

    Raises:
        ValidationError: on any schema violation.  The duration-cap and
            date-order violations keep their specific message; everything
            else gets a generic one.  The pydantic error is the ``cause``.
    """
    try:
        return TripRequest.model_validate(raw, context={"max_trip_days": max_days})
    except pydantic.ValidationError as exc:
        logger.error("Form validation error: %s", exc)
        message = "Invalid form data. Please check all required fields and try again."
        for err in exc.errors():
            if err["type"] in ("trip_too_long", "end_before_start"):
                message = err["msg"]
                break
        raise ValidationError(
            message,
            cause=exc,
            context={"validation_error": str(exc)},
        ) from exc


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def normalize_date(value: Union[date, datetime, str]) -> date:
    """Pin ``value`` to a calendar day independent of the server time zone.

    ``datetime`` values keep their own wall-clock date; strings are tried as
    strict ``YYYY-MM-DD``, then as an ISO prefix ``YYYY-MM-DD...``, then with
    a generic parser.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"Unsupported date value: {value!r}")

    text = value.strip()
    match = _DATE_ONLY.match(text) or _ISO_PREFIX.match(text)
    try:
        if match:
            year, month, day = (int(g) for g in match.groups())
            return date(year, month, day)
        return dateparser.parse(text).date()
    except (ValueError, OverflowError) as exc:
        raise ValidationError(f"Invalid date: {value}", cause=exc) from exc


def calculate_itinerary_dates(start: date, days: int) -> list:
    """``days`` consecutive ISO dates beginning at ``start``."""
    return [(start + timedelta(days=i)).isoformat() for i in range(days)]


def derive_duration(start: date, end: date, max_days: int = MAX_TRIP_DAYS) -> TripDates:
    """Inclusive trip length and the per-day date list."""
    days = (end - start).days + 1

    if days <= 0:
        raise ValidationError("Invalid date range. End date must be after start date.")

    if days > max_days:
        raise ValidationError(
            f"Maximum trip duration is {max_days} days. Please select dates within "
            f"{max_days} days. Your selected trip duration is {days} days."
        )

    return TripDates(
        start=start,
        end=end,
        days=days,
        date_list=calculate_itinerary_dates(start, days),
    )


def validate_dates_and_calculate_duration(
    start: Optional[Union[date, datetime, str]],
    end: Optional[Union[date, datetime, str]],
    max_days: int = MAX_TRIP_DAYS,
) -> TripDates:
    if not start or not end:
        raise ValidationError("Start date and end date are required.")

    trip_dates = derive_duration(normalize_date(start), normalize_date(end), max_days)
    logger.info("Trip duration calculated: %d days", trip_dates.days)
    return trip_dates


# ---------------------------------------------------------------------------
# Destination
# ---------------------------------------------------------------------------

def extract_destination_info(destination: Optional[str]) -> DestinationInfo:
    """Split ``"City, Country"`` / ``"City, CC"`` into its parts.

    The country part is kept as typed: geocoding providers accept both ISO
    codes and full names.
    """
    if not destination:
        return DestinationInfo()

    cleaned = destination.strip()
    if "," not in cleaned:
        return DestinationInfo(city=cleaned)

    parts = [p.strip() for p in cleaned.split(",") if p.strip()]
    if not parts:
        return DestinationInfo()
    return DestinationInfo(city=parts[0], country=", ".join(parts[1:]))
