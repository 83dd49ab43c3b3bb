"""Hotel offers and hotel/city autocomplete."""

import logging

logger = logging.getLogger(__name__)

CITY_OR_HOTEL = "CITY,HOTEL"


class HotelSearch:
    """Thin pass-through to the hotel endpoints. Failures propagate."""

    def __init__(self, client):
        self.client = client

    def search_hotels(self, city_code, check_in, check_out, adults=1):
        offers = self.client.hotel_offers_search(
            city_code, check_in, check_out, adults=int(adults or 1),
        )
        logger.info(f"search_hotels {city_code} {check_in}..{check_out}: {len(offers)} offers")
        return offers

    def suggest(self, keyword):
        if not keyword or not keyword.strip():
            return []
        matches = self.client.search_locations(keyword.strip(), sub_type=CITY_OR_HOTEL)
        return [{"name": m.get("name"), "iataCode": m.get("iataCode")} for m in matches]
