"""
Enrichment data models - weather, points of interest and hotel prices
fetched from third-party providers to augment an AI itinerary.

Every field of ``EnrichmentBundle`` is independently optional: a provider
failure leaves its field ``None`` without affecting the others.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Place:
    """Single point of interest from the places provider."""

    place_id: str = ""
    name: str = ""
    address: str = ""
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None
    photo_url: Optional[str] = None
    types: List[str] = field(default_factory=list)
    lat: Optional[float] = None
    lng: Optional[float] = None

    # Filled in for hotels by the price merge
    price: Optional[float] = None
    price_currency: Optional[str] = None
    stars: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "placeId": self.place_id,
            "name": self.name,
            "address": self.address,
            "rating": self.rating,
            "userRatingsTotal": self.user_ratings_total,
            "photoUrl": self.photo_url,
            "types": list(self.types),
            "location": {"lat": self.lat, "lng": self.lng},
        }
        if self.price is not None:
            out["price"] = self.price
            out["priceCurrency"] = self.price_currency
        if self.stars is not None:
            out["stars"] = self.stars
        return out


@dataclass
class PlacesData:
    attractions: List[Place] = field(default_factory=list)
    restaurants: List[Place] = field(default_factory=list)
    hotels: List[Place] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attractions": [p.to_dict() for p in self.attractions],
            "restaurants": [p.to_dict() for p in self.restaurants],
            "hotels": [p.to_dict() for p in self.hotels],
        }


@dataclass
class HotelOffer:
    """Priced hotel result from a hotel-search provider."""

    id: str = ""
    name: str = ""
    address: str = ""
    rating: Optional[float] = None
    price: Optional[float] = None
    price_currency: str = "USD"
    image_url: Optional[str] = None
    amenities: List[str] = field(default_factory=list)
    stars: Optional[int] = None
    booking_url: Optional[str] = None


@dataclass
class ForecastDay:
    date: str                       # YYYY-MM-DD (trip date, not forecast date)
    temp_min: int
    temp_max: int
    description: str
    icon: str


@dataclass
class WeatherData:
    temp_current: int
    temp_min: int
    temp_max: int
    humidity: int
    wind_speed_kmh: int
    description: str
    icon: str
    forecast: Optional[List[ForecastDay]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "temperature": {
                "current": self.temp_current,
                "min": self.temp_min,
                "max": self.temp_max,
            },
            "humidity": self.humidity,
            "windSpeed": self.wind_speed_kmh,
            "description": self.description,
            "icon": self.icon,
        }
        if self.forecast is not None:
            out["forecast"] = [
                {
                    "date": f.date,
                    "temp": {"min": f.temp_min, "max": f.temp_max},
                    "description": f.description,
                    "icon": f.icon,
                }
                for f in self.forecast
            ]
        return out


@dataclass
class EnrichmentBundle:
    weather_data: Optional[WeatherData] = None
    places_data: Optional[PlacesData] = None
    destination_lat: Optional[float] = None
    destination_lng: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weatherData": self.weather_data.to_dict() if self.weather_data else None,
            "placesData": self.places_data.to_dict() if self.places_data else None,
            "destinationLat": self.destination_lat,
            "destinationLng": self.destination_lng,
        }
