"""
Clients for hotel-price search providers.

StayAPI (Google Hotels endpoint) and BookingAPI.dev return differently
shaped payloads; both are normalised to ``HotelOffer``.
"""

from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from config.settings import settings
from models.enrichment import HotelOffer

STAYAPI_SEARCH_URL = "https://api.stayapi.com/v1/google_hotels/search"
BOOKINGAPI_SEARCH_URL = "https://api.bookingapi.dev/v1/hotels/search"


def _first(*values: Any) -> Any:
    """First truthy value, else None."""
    for value in values:
        if value:
            return value
    return None


class StayAPIClient:
    """Hotel search via StayAPI's Google Hotels endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 15,
    ):
        self.api_key = api_key or settings.STAYAPI_API_KEY
        if not self.api_key:
            raise ValueError("STAYAPI_API_KEY is required")
        self.http = http or httpx.Client(timeout=timeout)

    def search(
        self,
        destination: str,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
        adults: int = 2,
        currency: str = "USD",
    ) -> List[HotelOffer]:
        params: Dict[str, Any] = {"location": destination, "adults": adults or 2, "currency": currency}
        if check_in:
            params["check_in"] = check_in.isoformat()
        if check_out:
            params["check_out"] = check_out.isoformat()

        resp = self.http.get(
            STAYAPI_SEARCH_URL,
            params=params,
            headers={"x-api-key": self.api_key, "Content-Type": "application/json"},
        )
        resp.raise_for_status()
        data = resp.json()

        hotels = data.get("hotels") or data.get("results") or data.get("data") or []
        if not isinstance(hotels, list):
            return []
        return [self._parse_hotel(h) for h in hotels if isinstance(h, dict)]

    @staticmethod
    def _parse_hotel(hotel: Dict[str, Any]) -> HotelOffer:
        price = None
        price_currency = "USD"
        raw_price = hotel.get("price")
        if isinstance(raw_price, dict):
            # {"current": 172, "price_per_night": 172, "currency": "USD"}
            price = _first(raw_price.get("current"), raw_price.get("price_per_night"), raw_price.get("regular"))
            price_currency = raw_price.get("currency") or "USD"
        elif isinstance(raw_price, (int, float)):
            price = raw_price

        rating = None
        raw_rating = hotel.get("rating")
        if isinstance(raw_rating, dict):
            # {"value": 4, "votes": 662, "rating_max": 5}
            rating = raw_rating.get("value")
        elif isinstance(raw_rating, (int, float)):
            rating = raw_rating

        location = hotel.get("location")
        location_address = location.get("address") if isinstance(location, dict) else location
        photos = hotel.get("photos") or []
        first_photo = photos[0] if photos else None
        photo_url = first_photo.get("url") if isinstance(first_photo, dict) else None

        pricing = hotel.get("pricing") or {}
        reviews = hotel.get("reviews") or {}
        rating = _first(rating, hotel.get("review_score"), reviews.get("score"))

        return HotelOffer(
            id=str(_first(hotel.get("id"), hotel.get("hotel_id"), hotel.get("place_id"), hotel.get("link")) or ""),
            name=_first(hotel.get("name"), hotel.get("hotel_name")) or "",
            address=_first(hotel.get("address"), location_address, hotel.get("formatted_address")) or "",
            rating=rating,
            price=_first(price, hotel.get("min_price"), pricing.get("amount")),
            price_currency=price_currency,
            image_url=_first(hotel.get("image"), hotel.get("image_url"), photo_url, hotel.get("photo"), hotel.get("thumbnail")),
            amenities=list(hotel.get("amenities") or []),
            stars=_first(hotel.get("stars"), hotel.get("star_rating"), round(rating) if rating else None),
            booking_url=_first(hotel.get("booking_url"), hotel.get("link"), hotel.get("deep_link"), hotel.get("url")),
        )


class BookingAPIClient:
    """Hotel search via BookingAPI.dev."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 15,
    ):
        self.api_key = api_key or settings.BOOKINGAPI_DEV_API_KEY
        if not self.api_key:
            raise ValueError("BOOKINGAPI_DEV_API_KEY is required")
        self.http = http or httpx.Client(timeout=timeout)

    def search(
        self,
        destination: str,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
        adults: int = 2,
        children: int = 0,
        rooms: int = 1,
        sort_by: Optional[str] = "price",
    ) -> List[HotelOffer]:
        params: Dict[str, Any] = {"q": destination, "adults": adults or 2, "rooms": rooms or 1}
        if check_in:
            params["checkin"] = check_in.isoformat()
        if check_out:
            params["checkout"] = check_out.isoformat()
        if children:
            params["children"] = children
        if sort_by:
            params["sort_by"] = sort_by

        resp = self.http.get(
            BOOKINGAPI_SEARCH_URL,
            params=params,
            headers={"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"},
        )
        resp.raise_for_status()
        hotels = resp.json().get("hotels")
        if not isinstance(hotels, list):
            return []
        return [self._parse_hotel(h) for h in hotels if isinstance(h, dict)]

    @staticmethod
    def _parse_hotel(hotel: Dict[str, Any]) -> HotelOffer:
        price = hotel.get("price") if isinstance(hotel.get("price"), dict) else {}
        location = hotel.get("location") if isinstance(hotel.get("location"), dict) else {}
        photos = hotel.get("photos") or []
        return HotelOffer(
            id=str(_first(hotel.get("id"), hotel.get("hotel_id")) or ""),
            name=hotel.get("name") or "",
            address=_first(hotel.get("address"), location.get("address")) or "",
            rating=_first(hotel.get("rating"), hotel.get("review_score")),
            price=_first(price.get("amount"), hotel.get("min_price")),
            price_currency=_first(price.get("currency"), hotel.get("currency")) or "USD",
            image_url=_first(hotel.get("image_url"), photos[0] if photos else None),
            amenities=list(hotel.get("amenities") or []),
            stars=_first(hotel.get("star_rating"), hotel.get("stars")),
            booking_url=hotel.get("booking_url"),
        )
