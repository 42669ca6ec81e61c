"""
Weather service that fetches current conditions and a per-trip-day forecast.

OpenWeather's free forecast covers five days in 3-hour steps; entries are
grouped by calendar day and mapped onto the first five trip dates (exact
day, else the closest forecast day).
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx

from clients.weather_client import WeatherClient
from models.enrichment import ForecastDay, WeatherData

logger = logging.getLogger(__name__)

FORECAST_DAYS = 5


class WeatherService:
    """Service for fetching weather for a destination and trip dates."""

    def __init__(self, client: Optional[WeatherClient] = None):
        try:
            self.client = client or WeatherClient()
            self._available = True
        except ValueError as e:
            logger.warning(f"Weather client unavailable: {e}")
            self._available = False
            self.client = None

    def is_available(self) -> bool:
        """Check if the weather API is configured."""
        return self._available

    def get_weather_data(
        self,
        city: str,
        country: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Optional[WeatherData]:
        """
        Current weather plus, when both dates are given, a forecast for up to
        the first five trip days.

        Returns:
            WeatherData, or None when unavailable or the location is unknown.
        """
        if not self._available:
            return None

        try:
            coords = self.client.geocode(city, country)
            if coords is None:
                logger.error("Location not found for: %s", f"{city},{country}" if country else city)
                return None

            current = self.client.get_current(coords["lat"], coords["lon"])

            forecast = None
            if start and end:
                entries = self.client.get_forecast(coords["lat"], coords["lon"])
                forecast = self.build_trip_forecast(entries, _trip_dates(start, end))

            main = current["main"]
            conditions = current["weather"][0]
            return WeatherData(
                temp_current=round(main["temp"]),
                temp_min=round(main["temp_min"]),
                temp_max=round(main["temp_max"]),
                humidity=main["humidity"],
                # m/s -> km/h
                wind_speed_kmh=round(((current.get("wind") or {}).get("speed") or 0) * 3.6),
                description=conditions["description"],
                icon=conditions["icon"],
                forecast=forecast,
            )
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning(f"Error fetching weather for {city}: {e}")
            return None

    @staticmethod
    def build_trip_forecast(entries: List[Dict[str, Any]], trip_dates: List[str]) -> List[ForecastDay]:
        """Map 3-hour forecast entries onto trip dates."""
        daily: Dict[str, List[Dict[str, Any]]] = {}
        for item in entries:
            moment = datetime.fromtimestamp(item["dt"], tz=timezone.utc)
            daily.setdefault(moment.date().isoformat(), []).append(
                {
                    "temp": item["main"]["temp"],
                    "description": item["weather"][0]["description"],
                    "icon": item["weather"][0]["icon"],
                    "hour": moment.hour,
                }
            )

        forecast = []
        for trip_date in trip_dates[:FORECAST_DAYS]:
            items = daily.get(trip_date)
            if items is None and daily:
                target = date.fromisoformat(trip_date)
                closest = min(daily, key=lambda key: abs((date.fromisoformat(key) - target).days))
                items = daily[closest]

            if not items:
                forecast.append(ForecastDay(trip_date, 0, 0, "No forecast available", "01d"))
                continue

            temps = [i["temp"] for i in items]
            midday = min(items, key=lambda i: abs(i["hour"] - 12))
            forecast.append(
                ForecastDay(
                    date=trip_date,
                    temp_min=round(min(temps)),
                    temp_max=round(max(temps)),
                    description=midday["description"],
                    icon=midday["icon"],
                )
            )
        return forecast


def _trip_dates(start: date, end: date) -> List[str]:
    days = (end - start).days + 1
    return [(start + timedelta(days=i)).isoformat() for i in range(max(days, 0))]
