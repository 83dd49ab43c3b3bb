"""Search, book and retrieve against the generated mock API."""

import pytest
from fastapi.testclient import TestClient

import mock_flight_api
from errors import NotFoundFailure, UpstreamSearchFailure
from mock_flight_api import MockAmadeusClient, city_airports
from travix import Services, create_app


@pytest.fixture(autouse=True)
def no_delays(monkeypatch):
    monkeypatch.setattr(mock_flight_api.config, "MOCK_DELAYS", False)


@pytest.fixture
def services():
    return Services(MockAmadeusClient(seed=7), workers=4)


def test_city_airports():
    assert city_airports("LON") == ["LHR", "LGW"]
    assert city_airports("jfk") == ["JFK"]
    assert city_airports("QQQ") == []


def test_exact_code_ranks_first():
    matches = MockAmadeusClient(seed=1).search_locations("JFK")
    assert matches[0]["iataCode"] == "JFK"
    assert matches[0]["subType"] == "AIRPORT"


def test_city_expands_to_airports(services):
    assert services.locations.resolve_related_airport_codes("LON") == ["LHR", "LGW"]


def test_search_only_keeps_destination_airports(services):
    for flight in services.flights.search_flights("JFK", "LON", "2026-06-20"):
        first = flight["itineraries"][0]["segments"][0]
        assert first["departure"]["iataCode"] == "JFK"
        assert first["arrival"]["iataCode"] in ("LHR", "LGW")


def test_book_and_retrieve(services):
    offers = services.flights.fetch_offers("JFK", "LON", "2026-06-20")
    assert offers

    confirmation = services.booking.confirm_booking({
        "travelerName": "Grace Hopper",
        "travelerEmail": "grace@example.com",
        "travelerPhone": "5550100",
        "travelerDOB": "1906-12-09",
        "travelerGender": "female",
        "offerId": offers[0]["id"],
        "originCode": "JFK",
        "destinationCode": "LON",
        "departureDate": "2026-06-20",
    })
    booking = services.booking.get_booking(confirmation.booking_id)

    details = booking["bookingDetails"]
    assert details["id"] == confirmation.booking_id
    assert details["travelers"][0]["name"] == {"firstName": "Grace", "lastName": "Hopper"}
    assert details["segments"]
    for seg in details["segments"]:
        assert seg["airlineName"] != seg["carrierCode"]
        assert seg["departure"]["airportName"] != "Unknown Airport"
        assert seg["flightDuration"] != "N/A"


def test_priced_offer_has_taxes(services):
    offers = services.flights.fetch_offers("JFK", "LON", "2026-06-20")
    result = services.booking.price_offer(offers[0]["id"], "JFK", "LON", "2026-06-20")
    assert result["totalTax"] != "N/A"
    assert float(result["totalPrice"]) > 0


def test_unknown_booking(services):
    with pytest.raises(NotFoundFailure):
        services.booking.get_booking("eJzdoesnotexist")


def test_hotels(services):
    hotels = services.hotels.search_hotels("PAR", "2026-06-20", "2026-06-22", adults=2)
    assert hotels
    assert all(h["hotel"]["cityCode"] == "PAR" for h in hotels)
    assert hotels[0]["offers"][0]["guests"] == {"adults": 2}


def test_malformed_departure_date_is_an_upstream_failure():
    with pytest.raises(UpstreamSearchFailure) as exc:
        MockAmadeusClient(seed=7).flight_offers_search("JFK", "LON", "20-06-2026")
    assert exc.value.upstream_status == 400
    assert exc.value.errors[0]["source"] == {"parameter": "departureDate"}


def test_malformed_departure_date_over_http():
    http = TestClient(create_app(client=MockAmadeusClient(seed=7)))
    response = http.get("/flight-offers", params={
        "originCode": "JFK", "destinationCode": "LON", "departureDate": "tomorrow",
    })
    assert response.status_code == 500
    assert response.json() == {"error": "Amadeus 400 on GET /v2/shopping/flight-offers"}
