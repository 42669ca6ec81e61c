"""
Exception hierarchy for the trip-plan pipeline.

Every error raised at or after the credit debit is caught by
``TripPlanService`` and turned into an ``{"error": ...}`` value; the HTTP
layer uses ``code`` / ``status_code`` to pick a response status.  Only
authentication, credit and validation messages reach the caller; AI and
database messages stay in the logs.
"""

from typing import Any, Dict, Optional


class TripPlanError(Exception):
    """Base class for pipeline errors that carry a code and HTTP status."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 500,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.context = context or {}
        super().__init__(message)


class AuthenticationError(TripPlanError):
    """No authenticated principal."""

    def __init__(
        self,
        message: str = "Please sign in to generate a travel plan.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, "AUTHENTICATION_ERROR", 401, context)


class InsufficientCreditsError(TripPlanError):
    """Balance is below the cost of one plan."""

    def __init__(
        self,
        required_credits: int,
        current_credits: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.required_credits = required_credits
        self.current_credits = current_credits
        message = (
            f"INSUFFICIENT_CREDITS: You need {required_credits} credits to generate "
            f"a plan, but you only have {current_credits} credits. "
            "Please purchase more credits to continue."
        )
        super().__init__(message, "INSUFFICIENT_CREDITS", 402, context)


class ValidationError(TripPlanError):
    """Malformed input or a violated internal invariant."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.cause = cause
        super().__init__(message, "VALIDATION_ERROR", 400, context)


class AIServiceError(TripPlanError):
    """The AI call or its output could not be used."""

    def __init__(
        self,
        message: str,
        original_error: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.original_error = original_error
        super().__init__(message, "AI_SERVICE_ERROR", 503, context)


class DatabaseError(TripPlanError):
    """Persistence reported success but broke its contract, or failed outright."""

    def __init__(
        self,
        message: str,
        original_error: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.original_error = original_error
        super().__init__(message, "DATABASE_ERROR", 500, context)
