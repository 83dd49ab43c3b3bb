"""Price, book and retrieve flight orders.

A booking attempt moves SEARCHING -> PRICING -> CREATING and ends in
CONFIRMED or FAILED. Traveler contact details are sent upstream once, at
creation, and otherwise only travel inside the booking reference URL.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import quote, urlencode

from enrichment import flatten_segments
from errors import BookingFailure, NotFoundFailure, TravixError, UpstreamError, ValidationFailure

logger = logging.getLogger(__name__)

BOOKED_FLIGHT_PATH = "/booked-flight"


class BookingState(Enum):
    SEARCHING = "SEARCHING"
    PRICING = "PRICING"
    CREATING = "CREATING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"


# Payload key -> BookingRequest attribute
REQUIRED_FIELDS = {
    "travelerName": "traveler_name",
    "travelerEmail": "traveler_email",
    "travelerPhone": "traveler_phone",
    "travelerDOB": "traveler_dob",
    "travelerGender": "traveler_gender",
    "offerId": "offer_id",
    "originCode": "origin_code",
    "destinationCode": "destination_code",
    "departureDate": "departure_date",
}


@dataclass
class BookingRequest:
    traveler_name: str
    traveler_email: str
    traveler_phone: str
    traveler_dob: str
    traveler_gender: str
    offer_id: str
    origin_code: str
    destination_code: str
    departure_date: str

    @classmethod
    def from_payload(cls, payload):
        """Build a request from the client's JSON body.

        Raises ValidationFailure naming every missing or blank field.
        """
        payload = payload or {}
        values = {}
        missing = []
        for key, attr in REQUIRED_FIELDS.items():
            value = payload.get(key)
            if isinstance(value, str):
                value = value.strip()
            if value in (None, ""):
                missing.append(key)
            else:
                values[attr] = str(value)
        if missing:
            logger.error(f"Missing required fields: {missing}")
            raise ValidationFailure("Missing required fields", missing=missing)
        return cls(**values)

    def traveler_info(self):
        return {
            "name": self.traveler_name,
            "email": self.traveler_email,
            "phone": self.traveler_phone,
            "dob": self.traveler_dob,
            "gender": self.traveler_gender,
        }


@dataclass
class BookingConfirmation:
    booking_id: str
    traveler: dict
    reference: str
    states: list = field(default_factory=list)

    def to_dict(self):
        return {
            "bookingId": self.booking_id,
            "redirect": self.reference,
            "travelerInfo": self.traveler,
            "states": [s.value for s in self.states],
        }


def split_name(full_name):
    """Split on the first space only: ``"Ada King Lovelace"`` -> ``("Ada", "King Lovelace")``."""
    first, _, last = full_name.strip().partition(" ")
    return first, last.strip()


def build_traveler(request, country_calling_code):
    """The single traveler record sent with a flight order."""
    first_name, last_name = split_name(request.traveler_name)
    return {
        "id": "1",
        "dateOfBirth": request.traveler_dob,
        "name": {
            "firstName": first_name,
            "lastName": last_name,
        },
        "gender": request.traveler_gender.upper(),
        "contact": {
            "emailAddress": request.traveler_email,
            "phones": [{
                "deviceType": "MOBILE",
                "countryCallingCode": country_calling_code,
                "number": request.traveler_phone,
            }],
        },
    }


def booking_reference(booking_id, traveler):
    """Relative URL that carries the booking id and traveler contact details."""
    query = urlencode({
        "name": traveler["name"],
        "email": traveler["email"],
        "phone": traveler["phone"],
        "dob": traveler["dob"],
        "gender": traveler["gender"],
        "bookingId": booking_id,
    }, quote_via=quote)
    return f"{BOOKED_FLIGHT_PATH}?{query}"


class BookingOrchestrator:
    """Runs pricing, booking creation and booking retrieval."""

    def __init__(self, client, flights, enricher, country_calling_code="91"):
        self.client = client
        self.flights = flights
        self.enricher = enricher
        self.country_calling_code = country_calling_code

    def _priced_offer(self, offer):
        priced = self.client.flight_offers_price(offer)
        offers = (priced or {}).get("flightOffers") or []
        if not offers:
            logger.error(f"Pricing returned no flight offers for offer {offer.get('id')}")
            raise BookingFailure("Pricing was not successful")
        return offers[0]

    def price_offer(self, offer_id, origin_code, destination_code, departure_date):
        """Confirm the price of a searched offer and enrich it for display."""
        if not offer_id:
            raise ValidationFailure("Flight offer ID is required", missing=["offerId"])
        offer = self.flights.find_offer(offer_id, origin_code, destination_code, departure_date)
        priced = self._priced_offer(offer)

        airlines = self.enricher.airlines.resolve_airlines([offer])
        flight = self.enricher.enrich_offer(priced, airlines=airlines)
        price = flight.get("price") or {}
        return {
            "flight": flight,
            "totalPrice": price.get("total"),
            "totalTax": price.get("totalTaxes") or "N/A",
        }

    def confirm_booking(self, payload):
        """Validate, re-find, price and book an offer for one traveler.

        Returns a BookingConfirmation; raises ValidationFailure before any
        upstream call, NotFoundFailure when the offer is gone, and
        BookingFailure when the order is not confirmed.
        """
        request = BookingRequest.from_payload(payload)
        states = [BookingState.SEARCHING]

        try:
            logger.info(f"Fetching flight offers for booking: {request.origin_code}->"
                        f"{request.destination_code} {request.departure_date}")
            offer = self.flights.find_offer(
                request.offer_id, request.origin_code,
                request.destination_code, request.departure_date,
            )

            states.append(BookingState.PRICING)
            priced = self._priced_offer(offer)

            states.append(BookingState.CREATING)
            traveler = build_traveler(request, self.country_calling_code)
            order = self.client.flight_create_order(priced, [traveler])
            booking_id = (order or {}).get("id")
            if not booking_id:
                logger.error(f"Booking response was not successful: {order}")
                raise BookingFailure("Booking was not successful")
        except TravixError:
            states.append(BookingState.FAILED)
            logger.error(f"Booking failed after {' -> '.join(s.value for s in states)}")
            raise

        states.append(BookingState.CONFIRMED)
        logger.info(f"Booking confirmed: {booking_id}")
        info = request.traveler_info()
        return BookingConfirmation(
            booking_id=booking_id,
            traveler=info,
            reference=booking_reference(booking_id, info),
            states=states,
        )

    def get_booking(self, booking_id, traveler=None):
        """Fetch a booking and enrich every segment of its offers."""
        if not booking_id:
            raise ValidationFailure("Missing booking ID", missing=["bookingId"])
        try:
            record = self.client.flight_order(booking_id)
        except UpstreamError as e:
            if e.upstream_status == 404:
                raise NotFoundFailure("Booking not found", cause=e)
            raise
        if not record:
            raise NotFoundFailure("Booking not found")

        offers = self.enricher.enrich_offers(record.get("flightOffers") or [])
        details = dict(record)
        details["flightOffers"] = offers
        details["segments"] = flatten_segments(offers)
        return {
            "travelerInfo": traveler or {},
            "bookingDetails": details,
        }
