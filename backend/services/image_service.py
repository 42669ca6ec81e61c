"""
Destination hero image lookup on Unsplash.

Landscape photos are preferred whose tags or description mention travel
scenery and no people.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from clients.unsplash_client import UnsplashClient

logger = logging.getLogger(__name__)

TRAVEL_TERMS = (
    "travel", "tourism", "vacation", "landmark", "city", "landscape",
    "architecture", "monument", "beach", "nature", "scenic", "view",
)
AVOID_TERMS = ("portrait", "person", "people", "face", "man", "woman", "guy", "girl", "boy")


def build_queries(city: str, country: Optional[str] = None) -> List[str]:
    base = f"{city} {country}" if country else city
    return [
        f"{base} travel vacation",
        f"{base} tourism landmark",
        f"{base} cityscape landscape",
        f"{base} travel destination",
        base,
    ]


def is_travel_photo(photo: Dict[str, Any]) -> bool:
    tags = " ".join(((t or {}).get("title") or "").lower() for t in photo.get("tags") or [])
    description = (photo.get("description") or photo.get("alt_description") or "").lower()
    combined = f"{tags} {description}"
    return any(t in combined for t in TRAVEL_TERMS) and not any(t in combined for t in AVOID_TERMS)


class DestinationImageService:
    """Finds a representative image URL for a destination."""

    def __init__(self, client: Optional[UnsplashClient] = None):
        try:
            self.client = client or UnsplashClient()
            self._available = True
        except ValueError as e:
            logger.warning(f"Unsplash client unavailable: {e}")
            self._available = False
            self.client = None

    def is_available(self) -> bool:
        return self._available

    def find_image(self, city: str, country: Optional[str] = None) -> Optional[str]:
        """URL of the best matching photo, or None."""
        if not self._available or not city:
            return None

        for query in build_queries(city, country):
            try:
                results = self.client.search_photos(query)
            except httpx.HTTPError as e:
                logger.warning(f'Error with image search query "{query}": {e}')
                continue
            if not results:
                continue

            candidates = [r for r in results if is_travel_photo(r)]
            selected = candidates[0] if candidates else results[0]
            urls = selected.get("urls") or {}
            url = urls.get("regular") or urls.get("full")
            if url:
                logger.info("Fetched destination image for query: %s", query)
                return url

        logger.warning("No suitable travel image found for %s", city)
        return None
