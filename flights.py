"""Flight offer search with city-to-airport expansion."""

import logging

from errors import NotFoundFailure
from lookup_cache import LookupCache

logger = logging.getLogger(__name__)


def first_segment(offer):
    """First segment of the first itinerary, or None."""
    try:
        return offer["itineraries"][0]["segments"][0]
    except (KeyError, IndexError, TypeError):
        return None


def filter_offers(offers, origin_code, destination_codes):
    """Keep offers whose first leg departs ``origin_code`` and lands in ``destination_codes``.

    Only the first segment of the first itinerary is checked.
    """
    kept = []
    for offer in offers:
        segment = first_segment(offer)
        if segment is None:
            continue
        departure_code = (segment.get("departure") or {}).get("iataCode")
        arrival_code = (segment.get("arrival") or {}).get("iataCode")
        if departure_code == origin_code and arrival_code in destination_codes:
            kept.append(offer)
    return kept


class FlightSearch:
    """Searches offers upstream and resolves offers by id."""

    def __init__(self, client, locations, offer_cache=None):
        self.client = client
        self.locations = locations
        self.offer_cache = offer_cache or LookupCache(ttl=0, name="offers")

    def fetch_offers(self, origin_code, destination_code, departure_date):
        """Unfiltered upstream offers for one adult, cached per query."""
        key = f"{origin_code}:{destination_code}:{departure_date}"
        return self.offer_cache.get_or_compute(
            "flight-offers", key,
            lambda: self.client.flight_offers_search(
                origin_code, destination_code, departure_date, adults=1,
            ),
        )

    def search_flights(self, origin_code, destination_code, departure_date):
        """Offers from ``origin_code`` to any airport of ``destination_code``."""
        offers = self.fetch_offers(origin_code, destination_code, departure_date)
        destination_codes = self.locations.resolve_related_airport_codes(destination_code)
        filtered = filter_offers(offers, origin_code, destination_codes)
        logger.info(f"search_flights {origin_code}->{destination_code} {departure_date}: "
                    f"{len(filtered)}/{len(offers)} offers kept "
                    f"(destination airports {destination_codes})")
        return filtered

    def find_offer(self, offer_id, origin_code, destination_code, departure_date):
        """The offer with ``offer_id`` in the result set of the same query."""
        offers = self.fetch_offers(origin_code, destination_code, departure_date)
        for offer in offers:
            if offer.get("id") == offer_id:
                return offer
        logger.error(f"Flight offer not found for offerId: {offer_id}")
        raise NotFoundFailure("Flight offer not found")
