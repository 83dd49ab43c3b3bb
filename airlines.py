"""Resolve carrier codes into airline display names."""

import logging
from dataclasses import dataclass

from errors import UpstreamError
from flights import first_segment
from lookup_cache import LookupCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Airline:
    code: str
    name: str


def first_carrier_code(offer):
    """Carrier code of the first segment of the first itinerary, or None."""
    segment = first_segment(offer)
    return segment.get("carrierCode") if segment else None


def unique_carrier_codes(offers):
    """First-segment carrier codes in order of first appearance."""
    codes = []
    for offer in offers:
        code = first_carrier_code(offer)
        if code and code not in codes:
            codes.append(code)
    return codes


def airline_names(airlines):
    """Map of carrier code to display name."""
    return {a.code: a.name for a in airlines}


class AirlineResolver:
    """Looks up each unique carrier code once per result set."""

    def __init__(self, client, cache=None):
        self.client = client
        self.cache = cache or LookupCache(ttl=0, name="airlines")

    def resolve_airline(self, code):
        """Airline for one carrier code. Raises UpstreamError or LookupError."""
        records = self.cache.get_or_compute(
            "airline", code, lambda: self.client.lookup_airlines([code]),
        )
        if not records:
            raise LookupError(f"no airline record for {code}")
        record = records[0]
        name = (record.get("commonName") or record.get("officialName")
                or record.get("businessName"))
        if not name:
            raise LookupError(f"airline record for {code} has no name")
        return Airline(code=record.get("iataCode") or code, name=name)

    def resolve_airlines(self, offers):
        """Resolve the first-segment carriers of ``offers``.

        A code whose lookup fails is logged and left out; callers fall back
        to the raw code for it.
        """
        airlines = []
        for code in unique_carrier_codes(offers):
            try:
                airlines.append(self.resolve_airline(code))
            except (UpstreamError, LookupError) as e:
                logger.error(f"Error fetching airline with code {code}: {e}")
        return airlines
