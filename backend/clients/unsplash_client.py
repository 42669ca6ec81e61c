"""
Client for the Unsplash photo search API.
"""

from typing import Any, Dict, List, Optional

import httpx

from config.settings import settings

SEARCH_PHOTOS_URL = "https://api.unsplash.com/search/photos"


class UnsplashClient:
    """Searches landscape photos on Unsplash."""

    def __init__(
        self,
        access_key: Optional[str] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 15,
    ):
        self.access_key = access_key or settings.UNSPLASH_ACCESS_KEY
        if not self.access_key:
            raise ValueError(
                "UNSPLASH_ACCESS_KEY is required. "
                "Get one at https://unsplash.com/oauth/applications"
            )
        self.http = http or httpx.Client(timeout=timeout)

    def search_photos(self, query: str, per_page: int = 10) -> List[Dict[str, Any]]:
        """Raw photo results for ``query``."""
        resp = self.http.get(
            SEARCH_PHOTOS_URL,
            params={
                "query": query,
                "orientation": "landscape",
                "per_page": per_page,
                "client_id": self.access_key,
            },
        )
        resp.raise_for_status()
        return resp.json().get("results") or []
