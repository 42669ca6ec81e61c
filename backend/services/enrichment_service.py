"""
External-data enrichment for a generated plan.

Geocodes the destination, then fetches weather, points of interest and
hotel prices concurrently with settle-all semantics: every source is
bounded by the provider timeout and a failure of one source leaves only
its own field empty.

Usage:
    from services.enrichment_service import EnrichmentService

    service = EnrichmentService()
    bundle = await service.enrich("Paris", "FR", start, end, adults=2, children=0)
"""

import asyncio
import dataclasses
import logging
from datetime import date
from typing import Callable, List, Optional, TypeVar

from models.enrichment import EnrichmentBundle, HotelOffer, Place, PlacesData, WeatherData
from services.google_maps_service import GoogleMapsService
from services.hotel_search_service import HotelSearchService
from services.weather_service import WeatherService

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PROVIDER_TIMEOUT = 15.0


def _find_offer(hotel_name: str, offers: List[HotelOffer]) -> Optional[HotelOffer]:
    name = hotel_name.lower()
    if not name:
        return None
    for offer in offers:
        offer_name = offer.name.lower()
        if offer_name and (name in offer_name or offer_name in name):
            return offer
    return None


def merge_hotel_prices(hotels: List[Place], offers: Optional[List[HotelOffer]]) -> List[Place]:
    """Attach offer prices to places-provider hotels matched by name.

    Names match case-insensitively when either contains the other.  Star
    rating falls back to the rounded review rating.
    """
    if not offers:
        return hotels

    merged = []
    for hotel in hotels:
        offer = _find_offer(hotel.name, offers)
        fallback_stars = round(hotel.rating) if hotel.rating is not None else None
        merged.append(
            dataclasses.replace(
                hotel,
                price=offer.price if offer else None,
                price_currency=offer.price_currency if offer else None,
                stars=(offer.stars if offer and offer.stars else None) or fallback_stars,
            )
        )
    return merged


class EnrichmentService:
    """Fans out to the enrichment providers for one destination."""

    def __init__(
        self,
        weather_service: Optional[WeatherService] = None,
        maps_service: Optional[GoogleMapsService] = None,
        hotel_service: Optional[HotelSearchService] = None,
        provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT,
    ):
        self.weather_service = weather_service or WeatherService()
        self.maps_service = maps_service or GoogleMapsService()
        self.hotel_service = hotel_service or HotelSearchService()
        self.provider_timeout = provider_timeout

    async def enrich(
        self,
        city: str,
        country: str = "",
        start: Optional[date] = None,
        end: Optional[date] = None,
        adults: int = 2,
        children: int = 0,
        request_id: Optional[str] = None,
    ) -> EnrichmentBundle:
        """Collect weather, places and coordinates.  Never raises."""
        bundle = EnrichmentBundle()
        if not city:
            logger.warning(
                "No destination city found, skipping weather and places data",
                extra={"request_id": request_id},
            )
            return bundle

        try:
            coords = await self._bounded(lambda: self.maps_service.geocode_destination(city, country))
        except Exception as exc:
            logger.warning("Geocoding raised: %r", exc, extra={"request_id": request_id})
            coords = None
        if coords:
            bundle.destination_lat = coords["lat"]
            bundle.destination_lng = coords["lng"]

        weather, places, offers = await asyncio.gather(
            self._bounded(lambda: self.weather_service.get_weather_data(city, country, start, end)),
            self._bounded(lambda: self.maps_service.get_places_data(city, country)),
            self._bounded(
                lambda: self.hotel_service.search_hotels(
                    city, start, end, adults=adults or 2, children=children or 0
                ),
            ),
            return_exceptions=True,
        )

        # Unwrap exceptions from gather
        if isinstance(weather, BaseException):
            logger.warning("Weather fetch raised: %r", weather, extra={"request_id": request_id})
            weather = None
        if isinstance(places, BaseException):
            logger.warning("Places fetch raised: %r", places, extra={"request_id": request_id})
            places = None
        if isinstance(offers, BaseException):
            logger.warning("Hotel search raised: %r", offers, extra={"request_id": request_id})
            offers = None

        bundle.weather_data = weather if isinstance(weather, WeatherData) else None
        if isinstance(places, PlacesData):
            places.hotels = merge_hotel_prices(places.hotels, offers)
            bundle.places_data = places

        logger.info(
            "Enrichment finished",
            extra={
                "request_id": request_id,
                "weather": bundle.weather_data is not None,
                "places": bundle.places_data is not None,
                "hotel_offers": len(offers) if offers else 0,
                "coordinates": coords is not None,
            },
        )
        return bundle

    async def _bounded(self, call: Callable[[], T]) -> T:
        """Run a blocking provider call in the executor under the provider timeout."""
        loop = asyncio.get_running_loop()
        return await asyncio.wait_for(loop.run_in_executor(None, call), timeout=self.provider_timeout)
