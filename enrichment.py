"""Attach display names and durations to flight offer segments.

Enrichment is a transform: it returns new offers and leaves its input
untouched, so one cached offer can be enriched any number of times.
Segments keep their count and order; only derived fields are added:

    departure/arrival.cityName, departure/arrival.airportName,
    departure/arrival.terminal ("N/A" when absent), airlineName,
    flightDuration ("<h>h <m>m")
"""

import copy
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from airlines import airline_names

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


def format_duration(departure_at, arrival_at):
    """Whole minutes between two ISO timestamps as ``"<h>h <m>m"``.

    Minutes are floored. A negative span is passed through as is: hours
    are floored and the minute part keeps the sign (-30 min is ``"-1h -30m"``).
    """
    try:
        departure = datetime.fromisoformat(departure_at)
        arrival = datetime.fromisoformat(arrival_at)
        delta = arrival - departure
    except (TypeError, ValueError):
        logger.warning(f"Cannot compute duration for {departure_at!r} -> {arrival_at!r}")
        return NOT_AVAILABLE
    minutes = int(delta.total_seconds() // 60)
    hours = minutes // 60
    return f"{hours}h {int(math.fmod(minutes, 60))}m"


def _endpoint(raw, location):
    endpoint = dict(raw or {})
    endpoint["cityName"] = location.city_name
    endpoint["airportName"] = location.airport_name
    endpoint["terminal"] = endpoint.get("terminal") or NOT_AVAILABLE
    return endpoint


def enrich_segment(segment, departure, arrival, names):
    """New segment with resolved locations, airline name and duration."""
    enriched = copy.deepcopy(segment)
    enriched["departure"] = _endpoint(enriched.get("departure"), departure)
    enriched["arrival"] = _endpoint(enriched.get("arrival"), arrival)
    carrier = enriched.get("carrierCode")
    enriched["airlineName"] = names.get(carrier, carrier)
    enriched["flightDuration"] = format_duration(
        enriched["departure"].get("at"), enriched["arrival"].get("at"),
    )
    return enriched


class FlightEnricher:
    """Runs location lookups concurrently and reassembles offers in order."""

    def __init__(self, locations, airlines, max_workers=8):
        self.locations = locations
        self.airlines = airlines
        self.max_workers = max(1, max_workers)

    def enrich_offer(self, offer, airlines=None):
        return self.enrich_offers([offer], airlines=airlines)[0]

    def enrich_offers(self, offers, airlines=None):
        """Enrich every segment of every offer.

        The airline set is resolved once for the whole batch unless given.
        """
        offers = list(offers or [])
        if airlines is None:
            airlines = self.airlines.resolve_airlines(offers)
        names = airline_names(airlines)

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            # Submit every lookup up front; collecting in submission order
            # keeps the output aligned with the input segments.
            pending = []
            for offer in offers:
                for itinerary in offer.get("itineraries") or []:
                    for segment in itinerary.get("segments") or []:
                        pending.append((
                            pool.submit(self.locations.resolve_city_and_airport,
                                        (segment.get("departure") or {}).get("iataCode")),
                            pool.submit(self.locations.resolve_city_and_airport,
                                        (segment.get("arrival") or {}).get("iataCode")),
                        ))

            resolved = iter(pending)
            enriched_offers = []
            for offer in offers:
                enriched_offer = copy.deepcopy(offer)
                for itinerary in enriched_offer.get("itineraries") or []:
                    segments = []
                    for segment in itinerary.get("segments") or []:
                        departure, arrival = next(resolved)
                        segments.append(enrich_segment(
                            segment, departure.result(), arrival.result(), names,
                        ))
                    if itinerary.get("segments") is not None:
                        itinerary["segments"] = segments
                enriched_offers.append(enriched_offer)
        return enriched_offers


def flatten_segments(offers):
    """Every segment of every offer, in order."""
    return [
        segment
        for offer in offers
        for itinerary in offer.get("itineraries") or []
        for segment in itinerary.get("segments") or []
    ]
