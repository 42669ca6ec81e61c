"""
Google Maps service for destination geocoding and nearby places.

Usage:
    from services.google_maps_service import GoogleMapsService

    service = GoogleMapsService()
    coords = service.geocode_destination("Paris", "FR")
    places = service.get_places_data("Paris", "FR")
"""

import logging
from typing import Dict, List, Optional

import httpx

from clients.google_maps_client import GoogleMapsClient
from models.enrichment import Place, PlacesData

logger = logging.getLogger(__name__)


class GoogleMapsService:
    """Service for geocoding and points of interest using Google Maps API."""

    def __init__(self, client: Optional[GoogleMapsClient] = None):
        """
        Initialize Google Maps service.

        Args:
            client: Optional GoogleMapsClient instance for dependency injection.
        """
        try:
            self.client = client or GoogleMapsClient()
            self._available = True
        except ValueError as e:
            logger.warning(f"Google Maps client unavailable: {e}")
            self._available = False
            self.client = None

    def is_available(self) -> bool:
        """Check if Google Maps API is configured and available."""
        return self._available

    def geocode_destination(self, city: str, country: Optional[str] = None) -> Optional[Dict[str, float]]:
        """
        Coordinates of ``"city,country"`` (or ``city``).

        Returns:
            ``{"lat": ..., "lng": ...}`` or None.
        """
        if not self._available:
            return None

        address = f"{city},{country}" if country else city
        try:
            return self.client.geocode(address)
        except httpx.HTTPError as e:
            logger.error(f"Error geocoding {address}: {e}")
            return None

    def get_places_data(self, city: str, country: Optional[str] = None) -> Optional[PlacesData]:
        """
        Attractions, restaurants and hotels around the destination.

        ``"City,Country"`` is geocoded first; when the country looks like an
        ISO code the bare city is tried too.

        Returns:
            PlacesData, or None when unavailable or the location is unknown.
        """
        if not self._available:
            return None

        queries = [f"{city},{country}"] if country and country.strip() else [city]
        if country and len(country.strip()) <= 3:
            queries.append(city)

        coords = None
        for query in queries:
            try:
                coords = self.client.geocode(query)
            except httpx.HTTPError as e:
                logger.error(f"Error geocoding {query}: {e}")
                continue
            if coords:
                break

        if not coords:
            logger.error("Location not found for places search, tried: %s", ", ".join(queries))
            return None

        return PlacesData(
            attractions=self._nearby(coords, "tourist_attraction"),
            restaurants=self._nearby(coords, "restaurant"),
            hotels=self._nearby(coords, "lodging"),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _nearby(self, coords: Dict[str, float], place_type: str) -> List[Place]:
        try:
            results = self.client.nearby_search(coords["lat"], coords["lng"], place_type)
        except httpx.HTTPError as e:
            logger.error(f"Error fetching {place_type}: {e}")
            return []
        return [Place(**r) for r in results]
