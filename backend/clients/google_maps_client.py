"""
Client for the Google Maps Geocoding and Places (Nearby Search) APIs.
"""

from typing import Any, Dict, List, Optional

import httpx

from config.settings import settings


GEOCODE_API_URL = "https://maps.googleapis.com/maps/api/geocode/json"
NEARBY_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"
PLACE_PHOTO_URL = "https://maps.googleapis.com/maps/api/place/photo"

# Place types fetched for a destination
PLACE_TYPES = ["tourist_attraction", "restaurant", "lodging"]


class GoogleMapsClient:
    """Client for geocoding a destination and listing places around it."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 15,
    ):
        self.api_key = api_key or settings.GOOGLE_MAPS_API_KEY
        if not self.api_key:
            raise ValueError(
                "GOOGLE_MAPS_API_KEY is required. "
                "Get one at https://console.cloud.google.com/apis/credentials"
            )
        self.http = http or httpx.Client(timeout=timeout)

    def geocode(self, address: str) -> Optional[Dict[str, float]]:
        """
        Resolve an address to coordinates.

        Returns:
            ``{"lat": ..., "lng": ...}`` of the first result, or None.
        """
        resp = self.http.get(GEOCODE_API_URL, params={"address": address, "key": self.api_key})
        resp.raise_for_status()
        results = resp.json().get("results") or []
        if not results:
            return None
        location = results[0]["geometry"]["location"]
        return {"lat": location["lat"], "lng": location["lng"]}

    def nearby_search(
        self,
        lat: float,
        lng: float,
        place_type: str,
        radius: int = 5000,
        limit: int = 10,
    ) -> List[Dict[str, Any]]:
        """
        Places of ``place_type`` within ``radius`` metres.

        Returns:
            Up to ``limit`` places as ``Place`` keyword arguments.
        """
        if place_type not in PLACE_TYPES:
            raise ValueError(f"place_type must be one of {PLACE_TYPES}, got '{place_type}'")

        params = {
            "location": f"{lat},{lng}",
            "radius": radius,
            "type": place_type,
            "key": self.api_key,
        }
        resp = self.http.get(NEARBY_SEARCH_URL, params=params)
        resp.raise_for_status()
        results = resp.json().get("results") or []
        return [self._parse_place(p) for p in results[:limit]]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _parse_place(self, place: Dict[str, Any]) -> Dict[str, Any]:
        location = (place.get("geometry") or {}).get("location") or {}
        photos = place.get("photos") or []
        return {
            "place_id": place.get("place_id", ""),
            "name": place.get("name", ""),
            "address": place.get("vicinity") or place.get("formatted_address") or "",
            "rating": place.get("rating"),
            "user_ratings_total": place.get("user_ratings_total"),
            "photo_url": self._build_photo_url(photos[0]["photo_reference"]) if photos else None,
            "types": place.get("types") or [],
            "lat": location.get("lat"),
            "lng": location.get("lng"),
        }

    def _build_photo_url(self, photo_reference: str) -> str:
        return (
            f"{PLACE_PHOTO_URL}?maxwidth=400"
            f"&photoreference={photo_reference}&key={self.api_key}"
        )
