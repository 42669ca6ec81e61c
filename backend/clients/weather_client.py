"""
Client for the OpenWeather API.
Resolves a city to coordinates, then fetches current conditions and the
5-day / 3-hour forecast.
"""

from typing import Any, Dict, List, Optional

import httpx

from config.settings import settings

GEO_DIRECT_URL = "https://api.openweathermap.org/geo/1.0/direct"
CURRENT_WEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"
FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"


class WeatherClient:
    """Client for fetching weather via OpenWeather (metric units)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 15,
    ):
        self.api_key = api_key or settings.OPENWEATHER_API_KEY
        if not self.api_key:
            raise ValueError(
                "OPENWEATHER_API_KEY is required. "
                "Get one at https://home.openweathermap.org/api_keys"
            )
        self.http = http or httpx.Client(timeout=timeout)

    def geocode(self, city: str, country: Optional[str] = None) -> Optional[Dict[str, float]]:
        """First matching location for ``city`` as ``{"lat", "lon"}``.

        ``"City,Country"`` is tried first; when the country looks like an ISO
        code the bare city is tried as well.
        """
        queries: List[str] = []
        if country and country.strip():
            queries.append(f"{city},{country}")
            if len(country.strip()) <= 3:
                queries.append(city)
        else:
            queries.append(city)

        for query in queries:
            resp = self.http.get(
                GEO_DIRECT_URL,
                params={"q": query, "limit": 1, "appid": self.api_key},
            )
            if resp.status_code != 200:
                continue
            results = resp.json()
            if results:
                return {"lat": results[0]["lat"], "lon": results[0]["lon"]}

        return None

    def get_current(self, lat: float, lon: float) -> Dict[str, Any]:
        """Raw current-weather payload."""
        resp = self.http.get(
            CURRENT_WEATHER_URL,
            params={"lat": lat, "lon": lon, "units": "metric", "appid": self.api_key},
        )
        resp.raise_for_status()
        return resp.json()

    def get_forecast(self, lat: float, lon: float) -> List[Dict[str, Any]]:
        """Raw 3-hour forecast entries (``list`` of the forecast payload)."""
        resp = self.http.get(
            FORECAST_URL,
            params={"lat": lat, "lon": lon, "units": "metric", "appid": self.api_key},
        )
        resp.raise_for_status()
        return resp.json().get("list", [])
