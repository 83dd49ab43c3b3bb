"""Resolve IATA codes and keywords into city and airport names."""

import logging
from dataclasses import dataclass

from errors import UpstreamError
from lookup_cache import LookupCache

logger = logging.getLogger(__name__)

AIRPORT_OR_CITY = "AIRPORT,CITY"
AIRPORT = "AIRPORT"
UNKNOWN_AIRPORT = "Unknown Airport"


@dataclass(frozen=True)
class Location:
    iata_code: str
    city_name: str
    airport_name: str


class LocationResolver:
    """Location lookups with named fallbacks.

    Every resolve_* method absorbs upstream failures and returns a fallback
    built from the input code, so a partial outage degrades display fields
    instead of aborting a request. The first upstream match is taken as the
    identity of a code.
    """

    def __init__(self, client, cache=None):
        self.client = client
        self.cache = cache or LookupCache(ttl=0, name="locations")

    def _search(self, keyword, sub_type):
        """Cached location search. Raises UpstreamError, which is never cached."""
        return self.cache.get_or_compute(
            f"locations:{sub_type}", keyword,
            lambda: self.client.search_locations(keyword, sub_type=sub_type),
        )

    def suggest(self, keyword):
        """Autocomplete airports and cities for a free-text keyword.

        Failures propagate: the caller asked for this lookup directly.
        """
        if not keyword or not keyword.strip():
            return []
        matches = self._search(keyword.strip(), AIRPORT_OR_CITY)
        return [
            {
                "city": (item.get("address") or {}).get("cityName"),
                "airport": item.get("name"),
                "code": item.get("iataCode"),
            }
            for item in matches
        ]

    def resolve_city_name(self, code):
        """City name of the first match, or ``code`` itself."""
        try:
            matches = self._search(code, AIRPORT_OR_CITY)
        except UpstreamError as e:
            logger.error(f"Error fetching city name for IATA code {code}: {e}")
            return code
        if not matches:
            return code
        return (matches[0].get("address") or {}).get("cityName") or code

    def resolve_city_and_airport(self, code):
        """City and airport name of the first match as a Location."""
        try:
            matches = self._search(code, AIRPORT_OR_CITY)
        except UpstreamError as e:
            logger.error(f"Error fetching city and airport name for {code}: {e}")
            return Location(code, code, UNKNOWN_AIRPORT)
        if not matches:
            logger.warning(f"No location found for {code}")
            return Location(code, code, UNKNOWN_AIRPORT)

        first = matches[0]
        return Location(
            iata_code=code,
            city_name=(first.get("address") or {}).get("cityName") or code,
            airport_name=first.get("name") or UNKNOWN_AIRPORT,
        )

    def resolve_related_airport_codes(self, code):
        """Every airport code matching a city or airport code, in upstream order.

        Never empty: falls back to ``[code]``.
        """
        try:
            matches = self._search(code, AIRPORT)
        except UpstreamError as e:
            logger.error(f"Error fetching related airport codes for {code}: {e}")
            return [code]
        codes = [m["iataCode"] for m in matches if m.get("iataCode")]
        return codes or [code]
