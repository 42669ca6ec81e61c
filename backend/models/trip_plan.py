"""
Trip plan data models - structured output of the AI itinerary generator.

Defines TimeBlock, ItineraryDay, TripHighlights, BestTimeToVisit,
PackingSuggestions and AIPlanData dataclasses, plus the TripDates /
DestinationInfo values derived from the trip form and the PlanRecord read
view of a persisted plan.

``to_dict()`` emits the camelCase JSON shape that the AI is asked to
produce (and that the plan viewer reads back from ``Plan.text``).

Usage:
    plan = AIPlanData.from_dict(repaired_payload)
    json_data = plan.to_dict()
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional


PACKING_CATEGORIES = (
    "clothing",
    "essentials",
    "toiletries",
    "electronics",
    "documents",
    "other",
)


def _str_list(value: Any) -> List[str]:
    """Coerce an untyped JSON value into a list of strings."""
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ("" if value is None else str(value))


@dataclass
class TimeBlock:
    """Morning / afternoon / evening / night section of a day."""

    activities: List[str] = field(default_factory=list)
    description: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "TimeBlock":
        if not isinstance(data, dict):
            return cls()
        return cls(
            activities=_str_list(data.get("activities")),
            description=_str(data.get("description")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"activities": list(self.activities), "description": self.description}


@dataclass
class ItineraryDay:
    """Single day in the AI itinerary."""

    day: int = 0
    date: str = ""                      # YYYY-MM-DD
    title: str = ""
    morning: TimeBlock = field(default_factory=TimeBlock)
    afternoon: TimeBlock = field(default_factory=TimeBlock)
    evening: TimeBlock = field(default_factory=TimeBlock)
    night: Optional[TimeBlock] = None
    food_recommendations: List[str] = field(default_factory=list)
    stay_options: List[str] = field(default_factory=list)
    optional_activities: List[str] = field(default_factory=list)
    quick_bookings: List[str] = field(default_factory=list)
    tip: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any], position: int) -> "ItineraryDay":
        try:
            day_number = int(data.get("day", position))
        except (TypeError, ValueError):
            day_number = position
        night = data.get("night")
        return cls(
            day=day_number,
            date=_str(data.get("date")),
            title=_str(data.get("title")),
            morning=TimeBlock.from_dict(data.get("morning")),
            afternoon=TimeBlock.from_dict(data.get("afternoon")),
            evening=TimeBlock.from_dict(data.get("evening")),
            night=TimeBlock.from_dict(night) if isinstance(night, dict) else None,
            food_recommendations=_str_list(data.get("foodRecommendations")),
            stay_options=_str_list(data.get("stayOptions")),
            optional_activities=_str_list(data.get("optionalActivities")),
            quick_bookings=_str_list(data.get("quickBookings")),
            tip=_str(data.get("tip")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "day": self.day,
            "date": self.date,
            "title": self.title,
            "morning": self.morning.to_dict(),
            "afternoon": self.afternoon.to_dict(),
            "evening": self.evening.to_dict(),
        }
        if self.night is not None:
            out["night"] = self.night.to_dict()
        out.update(
            {
                "foodRecommendations": list(self.food_recommendations),
                "stayOptions": list(self.stay_options),
                "optionalActivities": list(self.optional_activities),
                "quickBookings": list(self.quick_bookings),
                "tip": self.tip,
            }
        )
        return out


@dataclass
class TripHighlights:
    title: str = "Your Travel Adventure"
    description: str = "A carefully planned trip based on your preferences."

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "description": self.description}


@dataclass
class BestTimeToVisit:
    description: str = "Based on your travel dates."
    peak_season: str = "Dec - Mar"
    shoulder_season: str = "Apr - Jun, Sep - Nov"
    off_season: str = "Jul - Aug"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "peakSeason": self.peak_season,
            "shoulderSeason": self.shoulder_season,
            "offSeason": self.off_season,
        }


@dataclass
class PackingSuggestions:
    clothing: List[str] = field(default_factory=list)
    essentials: List[str] = field(default_factory=list)
    toiletries: List[str] = field(default_factory=list)
    electronics: List[str] = field(default_factory=list)
    documents: List[str] = field(default_factory=list)
    other: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {name: list(getattr(self, name)) for name in PACKING_CATEGORIES}


@dataclass
class AIPlanData:
    """Complete, repaired AI plan - every section is always present."""

    trip_highlights: TripHighlights = field(default_factory=TripHighlights)
    itinerary: List[ItineraryDay] = field(default_factory=list)
    best_time_to_visit: BestTimeToVisit = field(default_factory=BestTimeToVisit)
    packing_suggestions: PackingSuggestions = field(default_factory=PackingSuggestions)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AIPlanData":
        """Build from an already-repaired payload (see services.ai_response_parser)."""
        highlights = data["tripHighlights"]
        best = data["bestTimeToVisit"]
        packing = data["packingSuggestions"]

        days = [
            ItineraryDay.from_dict(raw, position)
            for position, raw in enumerate(
                (d for d in data["itinerary"] if isinstance(d, dict)), start=1
            )
        ]

        return cls(
            trip_highlights=TripHighlights(
                title=_str(highlights.get("title")),
                description=_str(highlights.get("description")),
            ),
            itinerary=days,
            best_time_to_visit=BestTimeToVisit(
                description=_str(best.get("description")),
                peak_season=_str(best.get("peakSeason")),
                shoulder_season=_str(best.get("shoulderSeason")),
                off_season=_str(best.get("offSeason")),
            ),
            packing_suggestions=PackingSuggestions(
                **{name: _str_list(packing.get(name)) for name in PACKING_CATEGORIES}
            ),
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serialisable dictionary."""
        return {
            "tripHighlights": self.trip_highlights.to_dict(),
            "itinerary": [day.to_dict() for day in self.itinerary],
            "bestTimeToVisit": self.best_time_to_visit.to_dict(),
            "packingSuggestions": self.packing_suggestions.to_dict(),
        }


@dataclass(frozen=True)
class TripDates:
    """Trip date range at calendar-day granularity (no time zone)."""

    start: date
    end: date
    days: int
    date_list: List[str]


@dataclass(frozen=True)
class DestinationInfo:
    city: str = ""
    country: str = ""               # ISO code or full country name


@dataclass
class PlanRecord:
    """Read view of a persisted plan."""

    id: str
    text: str                       # JSON string of AIPlanData.to_dict()
    budget: float
    start_date: str
    end_date: str
    destination: Optional[str] = None
    destination_country: Optional[str] = None
    destination_lat: Optional[float] = None
    destination_lng: Optional[float] = None
    destination_image: Optional[str] = None
    currency: Optional[str] = None
    weather_data: Optional[Dict[str, Any]] = None
    places_data: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "budget": self.budget,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "destination": self.destination,
            "destinationCountry": self.destination_country,
            "destinationLat": self.destination_lat,
            "destinationLng": self.destination_lng,
            "destinationImage": self.destination_image,
            "currency": self.currency,
            "weatherData": self.weather_data,
            "placesData": self.places_data,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
