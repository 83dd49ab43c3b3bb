"""Tests for hotel search pass-through."""

import pytest

from errors import UpstreamSearchFailure
from hotels import HotelSearch


def test_search_passes_parameters(fake):
    fake.hotels = [{"hotel": {"hotelId": "H1"}}]
    assert HotelSearch(fake).search_hotels("PAR", "2024-01-01", "2024-01-03") == fake.hotels
    assert fake.calls == [("hotel_offers_search", "PAR", "2024-01-01", "2024-01-03", 1)]


def test_search_failure_propagates(fake):
    fake.search_error = UpstreamSearchFailure("Amadeus 400", upstream_status=400)
    with pytest.raises(UpstreamSearchFailure):
        HotelSearch(fake).search_hotels("PAR", "2024-01-01", "2024-01-03")


def test_suggest_uses_city_and_hotel(fake):
    fake.locations[("ROM", "CITY,HOTEL")] = [{"subType": "CITY", "iataCode": "ROM", "name": "ROME"}]
    assert HotelSearch(fake).suggest(" ROM ") == [{"name": "ROME", "iataCode": "ROM"}]


def test_blank_suggest(fake):
    assert HotelSearch(fake).suggest("") == []
    assert fake.calls == []
