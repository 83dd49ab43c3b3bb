"""Mock Amadeus API: a drop-in replacement for AmadeusClient.

Generates realistic reference data and flight offers on the fly so
development and tests never depend on the sandbox.

Response shapes match the Amadeus Self-Service JSON API (v1 locations and
airlines, v2 flight-offers, v1 pricing, v1 flight-orders, v2 hotel-offers).
When MOCK_DELAYS=true, each call sleeps 1-5 s to simulate upstream latency.
"""

import math
import random
import string
import time
import zoneinfo
from datetime import datetime, timedelta
from uuid import uuid4

import config
from errors import UpstreamSearchFailure

# ── Airport database ──────────────────────────────────────────────────

AIRPORTS = {
    # US
    "ATL": {"name": "Hartsfield-Jackson Atlanta International", "city": "Atlanta", "city_code": "ATL", "lat": 33.6407, "lng": -84.4277, "tz": "America/New_York"},
    "LAX": {"name": "Los Angeles International", "city": "Los Angeles", "city_code": "LAX", "lat": 33.9425, "lng": -118.4081, "tz": "America/Los_Angeles"},
    "ORD": {"name": "O'Hare International", "city": "Chicago", "city_code": "CHI", "lat": 41.9742, "lng": -87.9073, "tz": "America/Chicago"},
    "MDW": {"name": "Midway International", "city": "Chicago", "city_code": "CHI", "lat": 41.7868, "lng": -87.7522, "tz": "America/Chicago"},
    "DFW": {"name": "Dallas/Fort Worth International", "city": "Dallas", "city_code": "DFW", "lat": 32.8998, "lng": -97.0403, "tz": "America/Chicago"},
    "DEN": {"name": "Denver International", "city": "Denver", "city_code": "DEN", "lat": 39.8561, "lng": -104.6737, "tz": "America/Denver"},
    "JFK": {"name": "John F Kennedy International", "city": "New York", "city_code": "NYC", "lat": 40.6413, "lng": -73.7781, "tz": "America/New_York"},
    "LGA": {"name": "LaGuardia", "city": "New York", "city_code": "NYC", "lat": 40.7772, "lng": -73.8726, "tz": "America/New_York"},
    "EWR": {"name": "Newark Liberty International", "city": "New York", "city_code": "NYC", "lat": 40.6895, "lng": -74.1745, "tz": "America/New_York"},
    "SFO": {"name": "San Francisco International", "city": "San Francisco", "city_code": "SFO", "lat": 37.6213, "lng": -122.3790, "tz": "America/Los_Angeles"},
    "SEA": {"name": "Seattle-Tacoma International", "city": "Seattle", "city_code": "SEA", "lat": 47.4502, "lng": -122.3088, "tz": "America/Los_Angeles"},
    "MIA": {"name": "Miami International", "city": "Miami", "city_code": "MIA", "lat": 25.7959, "lng": -80.2870, "tz": "America/New_York"},
    "BOS": {"name": "Boston Logan International", "city": "Boston", "city_code": "BOS", "lat": 42.3656, "lng": -71.0096, "tz": "America/New_York"},
    "IAD": {"name": "Washington Dulles International", "city": "Washington", "city_code": "WAS", "lat": 38.9531, "lng": -77.4565, "tz": "America/New_York"},
    "DCA": {"name": "Ronald Reagan Washington National", "city": "Washington", "city_code": "WAS", "lat": 38.8512, "lng": -77.0402, "tz": "America/New_York"},
    "YYZ": {"name": "Toronto Pearson International", "city": "Toronto", "city_code": "YTO", "lat": 43.6777, "lng": -79.6248, "tz": "America/Toronto"},
    "MEX": {"name": "Benito Juarez International", "city": "Mexico City", "city_code": "MEX", "lat": 19.4363, "lng": -99.0721, "tz": "America/Mexico_City"},
    # Europe
    "LHR": {"name": "Heathrow", "city": "London", "city_code": "LON", "lat": 51.4700, "lng": -0.4543, "tz": "Europe/London"},
    "LGW": {"name": "Gatwick", "city": "London", "city_code": "LON", "lat": 51.1537, "lng": -0.1821, "tz": "Europe/London"},
    "CDG": {"name": "Charles de Gaulle", "city": "Paris", "city_code": "PAR", "lat": 49.0097, "lng": 2.5479, "tz": "Europe/Paris"},
    "ORY": {"name": "Orly", "city": "Paris", "city_code": "PAR", "lat": 48.7262, "lng": 2.3652, "tz": "Europe/Paris"},
    "FRA": {"name": "Frankfurt am Main", "city": "Frankfurt", "city_code": "FRA", "lat": 50.0379, "lng": 8.5622, "tz": "Europe/Berlin"},
    "AMS": {"name": "Amsterdam Schiphol", "city": "Amsterdam", "city_code": "AMS", "lat": 52.3105, "lng": 4.7683, "tz": "Europe/Amsterdam"},
    "MAD": {"name": "Adolfo Suarez Madrid-Barajas", "city": "Madrid", "city_code": "MAD", "lat": 40.4983, "lng": -3.5676, "tz": "Europe/Madrid"},
    "IST": {"name": "Istanbul Airport", "city": "Istanbul", "city_code": "IST", "lat": 41.2753, "lng": 28.7519, "tz": "Europe/Istanbul"},
    # Middle East / Asia
    "DXB": {"name": "Dubai International", "city": "Dubai", "city_code": "DXB", "lat": 25.2532, "lng": 55.3657, "tz": "Asia/Dubai"},
    "DOH": {"name": "Hamad International", "city": "Doha", "city_code": "DOH", "lat": 25.2731, "lng": 51.6081, "tz": "Asia/Qatar"},
    "DEL": {"name": "Indira Gandhi International", "city": "Delhi", "city_code": "DEL", "lat": 28.5562, "lng": 77.1000, "tz": "Asia/Kolkata"},
    "BOM": {"name": "Chhatrapati Shivaji Maharaj International", "city": "Mumbai", "city_code": "BOM", "lat": 19.0896, "lng": 72.8656, "tz": "Asia/Kolkata"},
    "BLR": {"name": "Kempegowda International", "city": "Bengaluru", "city_code": "BLR", "lat": 13.1986, "lng": 77.7066, "tz": "Asia/Kolkata"},
    "SIN": {"name": "Singapore Changi", "city": "Singapore", "city_code": "SIN", "lat": 1.3644, "lng": 103.9915, "tz": "Asia/Singapore"},
    "NRT": {"name": "Narita International", "city": "Tokyo", "city_code": "TYO", "lat": 35.7720, "lng": 140.3929, "tz": "Asia/Tokyo"},
    "HND": {"name": "Haneda", "city": "Tokyo", "city_code": "TYO", "lat": 35.5494, "lng": 139.7798, "tz": "Asia/Tokyo"},
    # Oceania
    "SYD": {"name": "Sydney Kingsford Smith", "city": "Sydney", "city_code": "SYD", "lat": -33.9399, "lng": 151.1753, "tz": "Australia/Sydney"},
}

# ── Airline database ─────────────────────────────────────────────────

AIRLINES = {
    "UA": "United Airlines",
    "DL": "Delta Air Lines",
    "AA": "American Airlines",
    "B6": "JetBlue Airways",
    "AC": "Air Canada",
    "AM": "Aeromexico",
    "BA": "British Airways",
    "VS": "Virgin Atlantic",
    "AF": "Air France",
    "LH": "Lufthansa",
    "KL": "KLM Royal Dutch Airlines",
    "IB": "Iberia",
    "TK": "Turkish Airlines",
    "EK": "Emirates",
    "QR": "Qatar Airways",
    "AI": "Air India",
    "6E": "IndiGo",
    "SQ": "Singapore Airlines",
    "NH": "All Nippon Airways",
    "JL": "Japan Airlines",
    "QF": "Qantas",
}

_AIRLINE_HUBS = {
    "DL": {"ATL", "JFK", "LAX", "SEA", "BOS"},
    "UA": {"ORD", "EWR", "DEN", "SFO", "IAD"},
    "AA": {"DFW", "MIA", "ORD", "LAX", "JFK", "DCA"},
    "B6": {"JFK", "BOS"},
    "AC": {"YYZ"},
    "AM": {"MEX"},
    "BA": {"LHR", "LGW"},
    "VS": {"LHR"},
    "AF": {"CDG", "ORY"},
    "LH": {"FRA"},
    "KL": {"AMS"},
    "IB": {"MAD"},
    "TK": {"IST"},
    "EK": {"DXB"},
    "QR": {"DOH"},
    "AI": {"DEL", "BOM"},
    "6E": {"DEL", "BOM", "BLR"},
    "SQ": {"SIN"},
    "NH": {"NRT", "HND"},
    "JL": {"NRT", "HND"},
    "QF": {"SYD"},
}

AIRCRAFT = ["738", "739", "320", "321", "77W", "789", "359", "388"]

# Hub airports for generating connections
HUBS = ["ORD", "DFW", "ATL", "DEN", "EWR", "LHR", "FRA", "AMS", "IST", "DXB", "DOH", "SIN"]

TERMINALS = [None, None, "1", "2", "3", "4", "5", "A", "B"]

HOTEL_CHAINS = ["Grand", "Plaza", "Central", "Harbour View", "Airport Inn"]


def _maybe_delay(lo=1, hi=5):
    """Sleep for a random interval when MOCK_DELAYS is enabled."""
    if config.MOCK_DELAYS:
        time.sleep(random.uniform(lo, hi))


# ── Utility functions ────────────────────────────────────────────────

def _haversine_miles(lat1, lng1, lat2, lng2):
    """Great-circle distance in miles."""
    R = 3959
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)
    a = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(dlng / 2) ** 2)
    return R * 2 * math.asin(math.sqrt(a))


def _flight_duration_minutes(distance_miles):
    """Estimate flight time: ~500 mph cruise + 30 min taxi/climb/descent."""
    return int(distance_miles / 500 * 60) + 30


def _format_iso_duration(minutes):
    """Convert minutes to ISO 8601 duration string."""
    h, m = divmod(minutes, 60)
    if m:
        return f"PT{h}H{m}M"
    return f"PT{h}H"


def _make_times(origin_tz, dest_tz, departure, flight_minutes):
    """Departure and arrival in local time.

    ``departure`` is a naive local datetime at the origin. Returns the two
    ISO strings and the naive local arrival at the destination.
    """
    dep_local = departure.replace(tzinfo=zoneinfo.ZoneInfo(origin_tz))
    arr_local = (dep_local + timedelta(minutes=flight_minutes)).astimezone(
        zoneinfo.ZoneInfo(dest_tz)
    )
    return (
        dep_local.strftime("%Y-%m-%dT%H:%M:%S"),
        arr_local.strftime("%Y-%m-%dT%H:%M:%S"),
        arr_local.replace(tzinfo=None),
    )


def city_airports(code):
    """Airport codes belonging to a city code, or the airport itself."""
    code = (code or "").upper()
    if code in AIRPORTS:
        return [code]
    return [iata for iata, info in AIRPORTS.items() if info["city_code"] == code]


def _location_record(iata, info, sub_type):
    return {
        "type": "location",
        "subType": sub_type,
        "iataCode": iata if sub_type == "AIRPORT" else info["city_code"],
        "name": (info["name"] if sub_type == "AIRPORT" else info["city"]).upper(),
        "address": {"cityName": info["city"].upper()},
    }


class MockAmadeusClient:
    """Same public surface as AmadeusClient, backed by generated data."""

    def __init__(self, seed=None):
        self._random = random.Random(seed)
        self._orders = {}

    # ── Reference data ───────────────────────────────────────────────

    def search_locations(self, keyword, sub_type="AIRPORT,CITY", limit=None):
        """Match on IATA code, city code, airport name and city name.

        Records whose code equals the keyword rank first, airports before
        cities, like the real ranking.
        """
        _maybe_delay(1, 5)
        if not keyword:
            return []
        kw = keyword.lower()
        sub_types = set(sub_type.split(","))
        results = []
        seen_cities = set()

        for iata, info in AIRPORTS.items():
            if not (kw in (iata.lower(), info["city_code"].lower())
                    or kw in info["name"].lower() or kw in info["city"].lower()):
                continue
            if "AIRPORT" in sub_types:
                results.append(_location_record(iata, info, "AIRPORT"))
            if info["city_code"] in seen_cities:
                continue
            seen_cities.add(info["city_code"])
            if "CITY" in sub_types:
                results.append(_location_record(iata, info, "CITY"))
            if "HOTEL" in sub_types:
                results.append({
                    "type": "location",
                    "subType": "HOTEL",
                    "iataCode": info["city_code"],
                    "name": f"{info['city'].upper()} {self._random.choice(HOTEL_CHAINS).upper()} HOTEL",
                })

        def rank(record):
            if record["iataCode"].lower() != kw:
                return 2
            return 0 if record["subType"] == "AIRPORT" else 1

        results.sort(key=rank)
        return results[:limit] if limit else results

    def lookup_airlines(self, codes):
        _maybe_delay(1, 3)
        if isinstance(codes, str):
            codes = [codes]
        return [
            {
                "type": "airline",
                "iataCode": code,
                "businessName": AIRLINES[code].upper(),
                "commonName": AIRLINES[code].upper(),
            }
            for code in codes if code in AIRLINES
        ]

    # ── Flights ──────────────────────────────────────────────────────

    def _pick_airlines(self, origin, dest, count=3):
        """Prefer carriers that hub at either end of the route."""
        hub_carriers = [c for c, hubs in _AIRLINE_HUBS.items() if origin in hubs or dest in hubs]
        others = [c for c in AIRLINES if c not in hub_carriers]
        self._random.shuffle(hub_carriers)
        self._random.shuffle(others)
        return (hub_carriers + others)[:count]

    def _pick_hub(self, origin, dest):
        candidates = [h for h in HUBS if h not in (origin, dest)]
        o, d = AIRPORTS[origin], AIRPORTS[dest]
        direct = _haversine_miles(o["lat"], o["lng"], d["lat"], d["lng"])

        def detour(hub):
            h = AIRPORTS[hub]
            return (_haversine_miles(o["lat"], o["lng"], h["lat"], h["lng"]) +
                    _haversine_miles(h["lat"], h["lng"], d["lat"], d["lng"]) - direct)

        candidates.sort(key=detour)
        return self._random.choice(candidates[:3])

    def _segment(self, origin, dest, departure, airline):
        """One leg. Returns (segment, local arrival at dest, minutes flown)."""
        o, d = AIRPORTS[origin], AIRPORTS[dest]
        minutes = _flight_duration_minutes(
            _haversine_miles(o["lat"], o["lng"], d["lat"], d["lng"]))
        dep_str, arr_str, landed = _make_times(o["tz"], d["tz"], departure, minutes)
        dep = {"iataCode": origin, "at": dep_str}
        arr = {"iataCode": dest, "at": arr_str}
        for endpoint in (dep, arr):
            terminal = self._random.choice(TERMINALS)
            if terminal:
                endpoint["terminal"] = terminal
        segment = {
            "departure": dep,
            "arrival": arr,
            "carrierCode": airline,
            "number": str(self._random.randint(100, 9999)),
            "aircraft": {"code": self._random.choice(AIRCRAFT)},
            "operating": {"carrierCode": airline},
            "duration": _format_iso_duration(minutes),
            "numberOfStops": 0,
        }
        return segment, landed, minutes

    def _build_itinerary(self, origin, dest, departure, airline, nonstop):
        if nonstop:
            segment, _, total = self._segment(origin, dest, departure, airline)
            return {"duration": _format_iso_duration(total), "segments": [segment]}

        hub = self._pick_hub(origin, dest)
        first, landed, leg1 = self._segment(origin, hub, departure, airline)
        layover = self._random.randint(60, 180)
        second, _, leg2 = self._segment(hub, dest, landed + timedelta(minutes=layover), airline)
        return {
            "duration": _format_iso_duration(leg1 + layover + leg2),
            "segments": [first, second],
        }

    def flight_offers_search(self, origin, destination, departure_date, adults=1):
        """Generate offers for one adult between two airports or cities."""
        _maybe_delay(1, 5)
        try:
            day = datetime.strptime(departure_date or "", "%Y-%m-%d")
        except ValueError as e:
            raise UpstreamSearchFailure(
                "Amadeus 400 on GET /v2/shopping/flight-offers",
                upstream_status=400,
                errors=[{"code": 425, "title": "INVALID DATE", "status": 400,
                         "source": {"parameter": "departureDate"}}],
                cause=e,
            )
        origins = city_airports(origin)
        destinations = [d for d in city_airports(destination) if d not in origins]
        if not origins or not destinations:
            return []

        num_offers = self._random.randint(3, 6)
        airlines = self._pick_airlines(origins[0], destinations[0])
        offers = []
        for i in range(num_offers):
            dep_airport = self._random.choice(origins)
            arr_airport = self._random.choice(destinations)
            airline = airlines[i % len(airlines)]
            departure = day.replace(hour=self._random.choice([6, 8, 10, 13, 16, 19, 21]))
            nonstop = self._random.random() < 0.6

            o, d = AIRPORTS[dep_airport], AIRPORTS[arr_airport]
            distance = _haversine_miles(o["lat"], o["lng"], d["lat"], d["lng"])
            base = distance * 0.12 + 80
            if not nonstop:
                base *= 0.8
            total = round(max(base * self._random.uniform(0.85, 1.15), 89.0) * adults, 2)

            offers.append({
                "type": "flight-offer",
                "id": str(i + 1),
                "source": "GDS",
                "oneWay": False,
                "lastTicketingDate": departure_date,
                "numberOfBookableSeats": self._random.randint(3, 9),
                "itineraries": [self._build_itinerary(
                    dep_airport, arr_airport, departure, airline, nonstop)],
                "price": {
                    "currency": "EUR",
                    "total": f"{total:.2f}",
                    "base": f"{total * 0.85:.2f}",
                    "grandTotal": f"{total:.2f}",
                },
                "validatingAirlineCodes": [airline],
            })
        return offers

    def flight_offers_price(self, offer):
        """Price an offer. Always succeeds, with a small live-price bump."""
        _maybe_delay(1, 5)
        original = float((offer.get("price") or {}).get("grandTotal") or 0)
        new_total = round(original * self._random.uniform(1.00, 1.03), 2)
        priced = dict(offer)
        priced["price"] = {
            "currency": (offer.get("price") or {}).get("currency", "EUR"),
            "total": f"{new_total:.2f}",
            "base": f"{new_total * 0.85:.2f}",
            "grandTotal": f"{new_total:.2f}",
            "totalTaxes": f"{new_total * 0.15:.2f}",
        }
        return {"type": "flight-offers-pricing", "flightOffers": [priced]}

    def flight_create_order(self, offer, travelers):
        """Create a booking. Always succeeds and is retrievable afterwards."""
        _maybe_delay(2, 5)
        order_id = f"eJz{uuid4().hex[:16]}"
        order = {
            "type": "flight-order",
            "id": order_id,
            "associatedRecords": [{
                "reference": "".join(self._random.choices(string.ascii_uppercase + string.digits, k=6)),
                "creationDate": datetime.now().isoformat(),
                "originSystemCode": "GDS",
                "flightOfferId": offer.get("id"),
            }],
            "flightOffers": [offer],
            "travelers": travelers,
        }
        self._orders[order_id] = order
        return order

    def flight_order(self, order_id):
        _maybe_delay(1, 3)
        order = self._orders.get(order_id)
        if order is None:
            raise UpstreamSearchFailure(
                f"Amadeus 404 on GET /v1/booking/flight-orders/{order_id}",
                upstream_status=404,
                errors=[{"code": 1797, "title": "NOT FOUND", "status": 404}],
            )
        return order

    # ── Hotels ───────────────────────────────────────────────────────

    def hotel_offers_search(self, city_code, check_in, check_out, adults=1):
        _maybe_delay(1, 5)
        airports = city_airports(city_code)
        if not airports:
            return []
        city = AIRPORTS[airports[0]]["city"]
        results = []
        for i, chain in enumerate(HOTEL_CHAINS[:self._random.randint(2, len(HOTEL_CHAINS))]):
            total = round(self._random.uniform(80, 450) * adults, 2)
            results.append({
                "type": "hotel-offers",
                "hotel": {
                    "hotelId": f"MK{city_code.upper()}{i:03d}",
                    "name": f"{city.upper()} {chain.upper()} HOTEL",
                    "cityCode": city_code.upper(),
                },
                "available": True,
                "offers": [{
                    "id": uuid4().hex[:10].upper(),
                    "checkInDate": check_in,
                    "checkOutDate": check_out,
                    "guests": {"adults": adults},
                    "price": {"currency": "EUR", "total": f"{total:.2f}"},
                }],
            })
        return results
