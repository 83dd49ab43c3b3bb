"""Shared fixtures: an in-memory Amadeus stand-in that records every call."""

import threading

import pytest

from errors import UpstreamLookupFailure, UpstreamSearchFailure


def location(code, city, airport, sub_type="AIRPORT"):
    return {
        "type": "location",
        "subType": sub_type,
        "iataCode": code,
        "name": airport,
        "address": {"cityName": city},
    }


def segment(dep, arr, carrier="BA", dep_at="2024-01-01T10:00:00",
            arr_at="2024-01-01T12:30:00", dep_terminal=None, arr_terminal=None, number="117"):
    departure = {"iataCode": dep, "at": dep_at}
    arrival = {"iataCode": arr, "at": arr_at}
    if dep_terminal:
        departure["terminal"] = dep_terminal
    if arr_terminal:
        arrival["terminal"] = arr_terminal
    return {"departure": departure, "arrival": arrival, "carrierCode": carrier, "number": number}


def offer(offer_id, *itineraries, total="420.50"):
    return {
        "type": "flight-offer",
        "id": offer_id,
        "itineraries": [{"segments": list(segs)} for segs in itineraries],
        "price": {"currency": "EUR", "total": total, "grandTotal": total},
    }


class FakeAmadeus:
    """Stands in for AmadeusClient.

    ``locations`` maps ``(keyword, sub_type)`` to a result list or an
    exception; ``airlines`` maps a carrier code to a record or an exception.
    """

    def __init__(self, locations=None, airlines=None, offers=None, orders=None, hotels=None):
        self.locations = locations or {}
        self.airlines = airlines or {}
        self.offers = offers or []
        self.orders = orders or {}
        self.hotels = hotels or []
        self.priced = None
        self.created = None
        self.search_error = None
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, name, *args):
        with self._lock:
            self.calls.append((name,) + args)

    def calls_to(self, name):
        return [c for c in self.calls if c[0] == name]

    def search_locations(self, keyword, sub_type="AIRPORT,CITY", limit=None):
        self._record("search_locations", keyword, sub_type)
        result = self.locations.get((keyword, sub_type), [])
        if isinstance(result, Exception):
            raise result
        return result

    def lookup_airlines(self, codes):
        self._record("lookup_airlines", tuple(codes))
        records = []
        for code in codes:
            record = self.airlines.get(code)
            if isinstance(record, Exception):
                raise record
            if record:
                records.append(record)
        return records

    def flight_offers_search(self, origin, destination, departure_date, adults=1):
        self._record("flight_offers_search", origin, destination, departure_date, adults)
        if self.search_error:
            raise self.search_error
        return self.offers

    def flight_offers_price(self, offer):
        self._record("flight_offers_price", offer["id"])
        if self.priced is not None:
            return self.priced
        priced = dict(offer)
        priced["price"] = dict(offer["price"], totalTaxes="61.20")
        return {"type": "flight-offers-pricing", "flightOffers": [priced]}

    def flight_create_order(self, offer, travelers):
        self._record("flight_create_order", offer["id"], travelers)
        if self.created is not None:
            return self.created
        order = {"type": "flight-order", "id": "ORDER1", "flightOffers": [offer],
                 "travelers": travelers}
        self.orders["ORDER1"] = order
        return order

    def flight_order(self, order_id):
        self._record("flight_order", order_id)
        if order_id not in self.orders:
            raise UpstreamSearchFailure("Amadeus 404", upstream_status=404)
        return self.orders[order_id]

    def hotel_offers_search(self, city_code, check_in, check_out, adults=1):
        self._record("hotel_offers_search", city_code, check_in, check_out, adults)
        if self.search_error:
            raise self.search_error
        return self.hotels


LONDON_AIRPORTS = [
    location("LHR", "LONDON", "HEATHROW"),
    location("LGW", "LONDON", "GATWICK"),
]


@pytest.fixture
def fake():
    """A fake upstream with New York and London reference data."""
    return FakeAmadeus(
        locations={
            ("JFK", "AIRPORT,CITY"): [location("JFK", "NEW YORK", "JOHN F KENNEDY INTL")],
            ("LGA", "AIRPORT,CITY"): [location("LGA", "NEW YORK", "LAGUARDIA")],
            ("LHR", "AIRPORT,CITY"): [location("LHR", "LONDON", "HEATHROW")],
            ("LGW", "AIRPORT,CITY"): [location("LGW", "LONDON", "GATWICK")],
            ("CDG", "AIRPORT,CITY"): [location("CDG", "PARIS", "CHARLES DE GAULLE")],
            ("LON", "AIRPORT,CITY"): [location("LON", "LONDON", "LONDON", sub_type="CITY")]
            + LONDON_AIRPORTS,
            ("LON", "AIRPORT"): LONDON_AIRPORTS,
            ("LHR", "AIRPORT"): [location("LHR", "LONDON", "HEATHROW")],
        },
        airlines={
            "BA": {"iataCode": "BA", "commonName": "BRITISH AIRWAYS", "businessName": "BRITISH AIRWAYS PLC"},
            "AA": {"iataCode": "AA", "businessName": "AMERICAN AIRLINES"},
            "VS": {"iataCode": "VS", "officialName": "VIRGIN ATLANTIC AIRWAYS"},
            "XX": UpstreamLookupFailure("Amadeus 500", upstream_status=500),
        },
    )
