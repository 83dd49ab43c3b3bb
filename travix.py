#!/usr/bin/env python3
"""Travix - travel search and booking orchestrator over the Amadeus API."""

import logging
from typing import Optional

import uvicorn
from fastapi import Body, FastAPI, Request
from fastapi.responses import JSONResponse

import config
from airlines import AirlineResolver
from amadeus_client import AmadeusClient
from booking import BookingOrchestrator
from enrichment import FlightEnricher
from errors import TravixError, ValidationFailure
from flights import FlightSearch
from hotels import HotelSearch
from locations import LocationResolver
from lookup_cache import LookupCache

logger = logging.getLogger(__name__)


class Services:
    """Every service a route needs, built around one upstream client."""

    def __init__(self, client, lookup_ttl=3600, offer_ttl=900, workers=8,
                 country_calling_code="91"):
        self.client = client
        self.lookup_cache = LookupCache(ttl=lookup_ttl, max_size=5000, name="lookups")
        self.offer_cache = LookupCache(ttl=offer_ttl, max_size=500, name="offers")
        self.locations = LocationResolver(client, cache=self.lookup_cache)
        self.airlines = AirlineResolver(client, cache=self.lookup_cache)
        self.flights = FlightSearch(client, self.locations, offer_cache=self.offer_cache)
        self.enricher = FlightEnricher(self.locations, self.airlines, max_workers=workers)
        self.booking = BookingOrchestrator(
            client, self.flights, self.enricher,
            country_calling_code=country_calling_code,
        )
        self.hotels = HotelSearch(client)


def build_client():
    """Upstream client selected by configuration."""
    if config.USE_MOCK_API:
        from mock_flight_api import MockAmadeusClient
        logger.info("Using mock Amadeus API")
        return MockAmadeusClient()
    return AmadeusClient(
        config.AMADEUS_CLIENT_ID,
        config.AMADEUS_CLIENT_SECRET,
        config.AMADEUS_BASE_URL,
        timeout=config.AMADEUS_TIMEOUT,
        retries=config.AMADEUS_RETRIES,
    )


def _require(**params):
    missing = [name for name, value in params.items() if not value]
    if missing:
        raise ValidationFailure(f"Missing required parameters: {', '.join(missing)}",
                                missing=missing)


def create_app(client=None, services=None):
    """Create the FastAPI application and register the routes."""
    if services is None:
        services = Services(
            client or build_client(),
            lookup_ttl=config.LOOKUP_CACHE_TTL,
            offer_ttl=config.OFFER_CACHE_TTL,
            workers=config.ENRICHMENT_WORKERS,
            country_calling_code=config.PHONE_COUNTRY_CODE,
        )
    app = FastAPI(title="Travix - Travel Booking")
    app.state.services = services

    @app.exception_handler(TravixError)
    async def travix_error(request: Request, exc: TravixError):
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        body = {"error": exc.message}
        if isinstance(exc, ValidationFailure) and exc.missing:
            body["missing"] = exc.missing
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.get("/")
    def index():
        return {"title": "Travix - Travel Booking"}

    @app.get("/api/health")
    def health():
        """Cache statistics for the dashboard."""
        return {
            "status": "ok",
            "lookups": services.lookup_cache.stats(),
            "offers": services.offer_cache.stats(),
        }

    @app.get("/suggestions")
    def suggestions(query: str = ""):
        return services.locations.suggest(query)

    @app.get("/flight-offers")
    def flight_offers(originCode: str = "", destinationCode: str = "", departureDate: str = ""):
        _require(originCode=originCode, destinationCode=destinationCode,
                 departureDate=departureDate)
        flights = services.flights.search_flights(originCode, destinationCode, departureDate)
        airlines = services.airlines.resolve_airlines(flights)
        return {
            "title": "Flight Offers",
            "flights": services.enricher.enrich_offers(flights, airlines=airlines),
            "originCode": originCode,
            "destinationCode": destinationCode,
            "originCity": services.locations.resolve_city_name(originCode),
            "destinationCity": services.locations.resolve_city_name(destinationCode),
            "airlines": [{"code": a.code, "name": a.name} for a in airlines],
        }

    @app.get("/flight-details")
    def flight_details(offerId: str = "", originCode: str = "", destinationCode: str = "",
                       departureDate: str = ""):
        details = services.booking.price_offer(offerId, originCode, destinationCode, departureDate)
        return {"title": "Flight Details", **details}

    @app.post("/confirm-booking")
    def confirm_booking(payload: Optional[dict] = Body(None)):
        confirmation = services.booking.confirm_booking(payload)
        return confirmation.to_dict()

    @app.get("/booked-flight")
    def booked_flight(bookingId: str = "", name: str = "", email: str = "", phone: str = "",
                      dob: str = "", gender: str = ""):
        traveler = {"name": name, "email": email, "phone": phone, "dob": dob, "gender": gender}
        booking = services.booking.get_booking(bookingId, traveler=traveler)
        return {"title": "Booking Confirmation", **booking}

    @app.get("/hotel-offers")
    def hotel_offers(cityCode: str = "", checkInDate: str = "", checkOutDate: str = "",
                     adults: int = 1):
        _require(cityCode=cityCode)
        hotels = services.hotels.search_hotels(cityCode, checkInDate, checkOutDate, adults=adults)
        return {"title": "Hotel Offers", "hotels": hotels}

    @app.get("/hotel-suggestions")
    def hotel_suggestions(query: str = ""):
        return services.hotels.suggest(query)

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, force=True)
    config.validate()
    logger.info(f"Server is running on http://{config.HOST}:{config.PORT}")
    uvicorn.run(create_app(), host=config.HOST, port=config.PORT)
