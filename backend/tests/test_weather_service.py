"""Tests for the OpenWeather client and trip-day forecast mapping."""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date, datetime, timezone

import httpx

from clients.weather_client import WeatherClient
from services.weather_service import WeatherService


def _entry(day, hour, temp, description="clear sky", icon="01d"):
    moment = datetime.fromisoformat(day).replace(hour=hour, tzinfo=timezone.utc)
    return {
        "dt": int(moment.timestamp()),
        "main": {"temp": temp},
        "weather": [{"description": description, "icon": icon}],
    }


# ---------------------------------------------------------------------------
# build_trip_forecast
# ---------------------------------------------------------------------------

def test_forecast_picks_exact_day_and_midday_conditions():
    entries = [
        _entry("2025-06-01", 6, 14.2, "mist", "50d"),
        _entry("2025-06-01", 12, 22.6, "few clouds", "02d"),
        _entry("2025-06-01", 18, 19.0, "light rain", "10d"),
    ]
    [day] = WeatherService.build_trip_forecast(entries, ["2025-06-01"])
    assert (day.date, day.temp_min, day.temp_max) == ("2025-06-01", 14, 23)
    assert (day.description, day.icon) == ("few clouds", "02d")


def test_forecast_uses_closest_day_when_date_not_covered():
    entries = [_entry("2025-06-01", 12, 20.0), _entry("2025-06-03", 12, 25.0, "rain", "10d")]
    forecast = WeatherService.build_trip_forecast(entries, ["2025-06-09"])
    assert forecast[0].date == "2025-06-09"
    assert forecast[0].description == "rain"


def test_forecast_limited_to_five_trip_days():
    entries = [_entry("2025-06-01", 12, 20.0)]
    trip = [f"2025-06-0{d}" for d in range(1, 8)]
    assert len(WeatherService.build_trip_forecast(entries, trip)) == 5


def test_forecast_without_entries_is_placeholder():
    [day] = WeatherService.build_trip_forecast([], ["2025-06-01"])
    assert (day.temp_min, day.temp_max, day.description, day.icon) == (0, 0, "No forecast available", "01d")


# ---------------------------------------------------------------------------
# get_weather_data over a mock transport
# ---------------------------------------------------------------------------

def _client(handler):
    return WeatherClient(api_key="test-key", http=httpx.Client(transport=httpx.MockTransport(handler)))


def test_weather_data_from_provider():
    def handler(request):
        if request.url.path.endswith("/geo/1.0/direct"):
            return httpx.Response(200, json=[{"lat": 48.85, "lon": 2.35}])
        if request.url.path.endswith("/weather"):
            return httpx.Response(200, json={
                "main": {"temp": 21.4, "temp_min": 15.6, "temp_max": 24.2, "humidity": 60},
                "weather": [{"description": "clear sky", "icon": "01d"}],
                "wind": {"speed": 5.0},
            })
        return httpx.Response(200, json={"list": [_entry("2025-06-01", 12, 22.0)]})

    data = WeatherService(_client(handler)).get_weather_data("Paris", "FR", date(2025, 6, 1), date(2025, 6, 2))

    assert (data.temp_current, data.temp_min, data.temp_max) == (21, 16, 24)
    assert data.wind_speed_kmh == 18
    assert [f.date for f in data.forecast] == ["2025-06-01", "2025-06-02"]
    assert data.to_dict()["forecast"][0]["temp"] == {"min": 22, "max": 22}


def test_iso_country_retries_bare_city():
    queries = []

    def handler(request):
        queries.append(request.url.params["q"])
        if request.url.params["q"] == "Paris":
            return httpx.Response(200, json=[{"lat": 48.85, "lon": 2.35}])
        return httpx.Response(200, json=[])

    assert _client(handler).geocode("Paris", "FR") == {"lat": 48.85, "lon": 2.35}
    assert queries == ["Paris,FR", "Paris"]


def test_unknown_location_returns_none():
    handler = lambda request: httpx.Response(200, json=[])
    assert WeatherService(_client(handler)).get_weather_data("Atlantis", "Ocean") is None


def test_provider_error_returns_none():
    def handler(request):
        if request.url.path.endswith("/geo/1.0/direct"):
            return httpx.Response(200, json=[{"lat": 1.0, "lon": 2.0}])
        return httpx.Response(500)

    assert WeatherService(_client(handler)).get_weather_data("Paris", "FR") is None


def test_malformed_current_weather_returns_none():
    def handler(request):
        if request.url.path.endswith("/geo/1.0/direct"):
            return httpx.Response(200, json=[{"lat": 48.85, "lon": 2.35}])
        return httpx.Response(200, json={
            "main": {"temp": 21.4, "temp_min": 15.6, "temp_max": 24.2, "humidity": 60},
            "weather": [],
        })

    assert WeatherService(_client(handler)).get_weather_data("Paris", "FR") is None


def test_service_unavailable_without_key(monkeypatch):
    from config.settings import settings

    monkeypatch.setattr(settings, "OPENWEATHER_API_KEY", "")
    service = WeatherService()
    assert service.is_available() is False
    assert service.get_weather_data("Paris") is None
