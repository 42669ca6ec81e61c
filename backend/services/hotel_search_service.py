"""
Unified hotel-price search.

Priority: StayAPI (if configured), then BookingAPI.dev.  When neither
returns offers the plan keeps the unpriced Google Places hotels.
"""

import logging
from datetime import date
from typing import List, Optional

import httpx

from clients.hotel_client import BookingAPIClient, StayAPIClient
from models.enrichment import HotelOffer

logger = logging.getLogger(__name__)


def _try_client(factory, name: str):
    try:
        return factory()
    except ValueError as e:
        logger.warning(f"{name} client unavailable: {e}")
        return None


class HotelSearchService:
    """Searches hotel prices across the configured providers."""

    def __init__(
        self,
        stayapi_client: Optional[StayAPIClient] = None,
        bookingapi_client: Optional[BookingAPIClient] = None,
    ):
        self.stayapi = stayapi_client or _try_client(StayAPIClient, "StayAPI")
        self.bookingapi = bookingapi_client or _try_client(BookingAPIClient, "BookingAPI.dev")

    def is_available(self) -> bool:
        return self.stayapi is not None or self.bookingapi is not None

    def search_hotels(
        self,
        destination: str,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
        adults: int = 2,
        children: int = 0,
    ) -> Optional[List[HotelOffer]]:
        """Offers from the first provider that returns any, else None."""
        if self.stayapi is not None:
            try:
                offers = self.stayapi.search(destination, check_in, check_out, adults=adults)
            except httpx.HTTPError as e:
                logger.error(f"StayAPI error: {e}")
                offers = []
            if offers:
                logger.info("StayAPI returned %d hotels", len(offers))
                return offers

        if self.bookingapi is not None:
            try:
                offers = self.bookingapi.search(
                    destination, check_in, check_out, adults=adults, children=children
                )
            except httpx.HTTPError as e:
                logger.error(f"BookingAPI.dev error: {e}")
                offers = []
            if offers:
                logger.info("BookingAPI.dev returned %d hotels", len(offers))
                return offers

        logger.info("No hotel API data available, will use Google Places data")
        return None
