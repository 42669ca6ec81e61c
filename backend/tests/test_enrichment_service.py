"""Tests for concurrent enrichment and the hotel price merge."""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import time
from datetime import date
from unittest.mock import MagicMock

import pytest

from models.enrichment import HotelOffer, Place, PlacesData, WeatherData
from services.enrichment_service import EnrichmentService, merge_hotel_prices


def _weather():
    return WeatherData(
        temp_current=21, temp_min=15, temp_max=24, humidity=60,
        wind_speed_kmh=11, description="clear sky", icon="01d",
    )


def _places():
    return PlacesData(
        attractions=[Place(place_id="a1", name="Louvre Museum", rating=4.7)],
        restaurants=[Place(place_id="r1", name="Le Comptoir", rating=4.4)],
        hotels=[
            Place(place_id="h1", name="Hotel Le Marais", rating=4.2),
            Place(place_id="h2", name="Grand Hotel Paris", rating=3.6),
        ],
    )


def _service(weather=None, places=None, offers=None, coords=None, timeout=5.0):
    weather_service = MagicMock()
    weather_service.get_weather_data.return_value = weather
    maps_service = MagicMock()
    maps_service.geocode_destination.return_value = coords
    maps_service.get_places_data.return_value = places
    hotel_service = MagicMock()
    hotel_service.search_hotels.return_value = offers
    return EnrichmentService(weather_service, maps_service, hotel_service, provider_timeout=timeout)


# ---------------------------------------------------------------------------
# merge_hotel_prices
# ---------------------------------------------------------------------------

def test_merge_matches_by_substring_either_way():
    hotels = _places().hotels
    offers = [
        HotelOffer(name="Le Marais", price=180.0, price_currency="EUR", stars=4),
        HotelOffer(name="The Grand Hotel Paris Opera", price=320.0, price_currency="EUR"),
    ]
    merged = merge_hotel_prices(hotels, offers)
    assert (merged[0].price, merged[0].price_currency, merged[0].stars) == (180.0, "EUR", 4)
    assert merged[1].price == 320.0
    assert merged[1].stars == 4  # round(3.6)


def test_merge_is_case_insensitive():
    merged = merge_hotel_prices([Place(name="hotel le marais")], [HotelOffer(name="HOTEL LE MARAIS", price=99.0)])
    assert merged[0].price == 99.0


def test_merge_without_offers_returns_hotels_unchanged():
    hotels = _places().hotels
    assert merge_hotel_prices(hotels, None) is hotels
    assert merge_hotel_prices(hotels, []) is hotels


def test_unmatched_hotel_keeps_rating_based_stars():
    merged = merge_hotel_prices([Place(name="Ibis Budget", rating=3.2)], [HotelOffer(name="Ritz", price=900.0)])
    assert merged[0].price is None
    assert merged[0].stars == 3


def test_empty_names_never_match():
    merged = merge_hotel_prices([Place(name="")], [HotelOffer(name="", price=10.0)])
    assert merged[0].price is None


# ---------------------------------------------------------------------------
# enrich
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_enrich_collects_every_source():
    service = _service(
        weather=_weather(),
        places=_places(),
        offers=[HotelOffer(name="Hotel Le Marais", price=150.0)],
        coords={"lat": 48.8566, "lng": 2.3522},
    )
    bundle = await service.enrich("Paris", "FR", date(2025, 6, 1), date(2025, 6, 5), adults=2)

    assert bundle.weather_data.description == "clear sky"
    assert bundle.places_data.hotels[0].price == 150.0
    assert (bundle.destination_lat, bundle.destination_lng) == (48.8566, 2.3522)
    service.hotel_service.search_hotels.assert_called_once_with(
        "Paris", date(2025, 6, 1), date(2025, 6, 5), adults=2, children=0
    )


@pytest.mark.asyncio
async def test_weather_failure_leaves_other_fields():
    service = _service(places=_places(), coords={"lat": 48.8566, "lng": 2.3522})
    service.weather_service.get_weather_data.side_effect = RuntimeError("weather down")

    bundle = await service.enrich("Paris", "FR", date(2025, 6, 1), date(2025, 6, 5))

    assert bundle.weather_data is None
    assert bundle.places_data is not None
    assert bundle.destination_lat == 48.8566


@pytest.mark.asyncio
async def test_geocode_failure_does_not_block_sources():
    service = _service(weather=_weather(), places=_places())
    service.maps_service.geocode_destination.side_effect = RuntimeError("quota")

    bundle = await service.enrich("Paris", "FR")

    assert bundle.destination_lat is None
    assert bundle.weather_data is not None
    assert bundle.places_data is not None


@pytest.mark.asyncio
async def test_slow_provider_times_out():
    def slow(*args, **kwargs):
        time.sleep(0.5)
        return _weather()

    service = _service(places=_places(), timeout=0.05)
    service.weather_service.get_weather_data.side_effect = slow

    bundle = await service.enrich("Paris", "FR")

    assert bundle.weather_data is None
    assert bundle.places_data is not None


@pytest.mark.asyncio
async def test_no_city_skips_providers():
    service = _service(weather=_weather(), places=_places())
    bundle = await service.enrich("")
    assert bundle.to_dict() == {
        "weatherData": None,
        "placesData": None,
        "destinationLat": None,
        "destinationLng": None,
    }
    service.weather_service.get_weather_data.assert_not_called()
