"""Amadeus Self-Service API client.

Authentication is delegated to a CredentialProvider; every call made here
checks the shared token first and refreshes it once on a 401.
"""

import time
import logging
import requests

from credentials import CredentialProvider
from errors import (
    AuthFailure, UpstreamError, UpstreamLookupFailure, UpstreamSearchFailure,
)

logger = logging.getLogger(__name__)


class AmadeusClient:
    """Authenticated requests against the Amadeus Self-Service API."""

    def __init__(self, client_id, client_secret, base_url, credentials=None,
                 session=None, timeout=30, retries=0):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.retries = retries
        self.credentials = credentials or CredentialProvider(
            client_id, client_secret, self.base_url,
            session=self.session, timeout=timeout,
        )

    def _authenticate(self):
        auth = self.credentials.ensure_authenticated()
        if not auth.ok:
            raise AuthFailure("Travel service unavailable", cause=auth.error)
        return auth.token

    def _send(self, method, url, token, params, json_body):
        headers = {"Authorization": f"Bearer {token}"}
        if json_body is not None:
            headers["Content-Type"] = "application/json"
        return self.session.request(
            method, url,
            headers=headers,
            params=params or {},
            json=json_body,
            timeout=self.timeout,
        )

    def _request(self, method, path, params=None, json_body=None,
                 failure=UpstreamError):
        """Authenticated request, raising ``failure`` on any upstream error.

        A 401 refreshes the token and replays the request once. Upstream
        5xx responses are retried ``self.retries`` times.
        """
        token = self._authenticate()
        url = f"{self.base_url}{path}"

        for attempt in range(self.retries + 1):
            try:
                resp = self._send(method, url, token, params, json_body)
                if resp.status_code == 401:
                    logger.warning(f"Amadeus 401 on {method} {path}, refreshing token")
                    auth = self.credentials.force_refresh(stale_token=token)
                    if not auth.ok:
                        raise AuthFailure("Travel service unavailable", cause=auth.error)
                    token = auth.token
                    resp = self._send(method, url, token, params, json_body)
            except requests.RequestException as e:
                logger.error(f"Amadeus {method} {path} failed: {e}")
                raise failure(f"Amadeus {method} {path} failed", cause=e)

            if resp.status_code < 500 or attempt == self.retries:
                break

            wait = 0.5 * (attempt + 1)
            logger.warning(f"Amadeus {resp.status_code} on {method} {path}, "
                           f"retry {attempt + 1}/{self.retries} in {wait}s")
            time.sleep(wait)

        if resp.status_code >= 400:
            errors = self._log_errors(resp)
            raise failure(
                f"Amadeus {resp.status_code} on {method} {path}",
                upstream_status=resp.status_code,
                errors=errors,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise failure(f"Amadeus {method} {path} returned invalid JSON", cause=e)

    @staticmethod
    def _log_errors(resp):
        """Log Amadeus error details and return the ``errors`` list."""
        try:
            errors = resp.json().get("errors", [])
        except (ValueError, AttributeError):
            logger.error(f"Amadeus {resp.status_code}: {resp.text[:500]}")
            return []
        for e in errors:
            logger.error(
                f"Amadeus {resp.status_code}: "
                f"[{e.get('code')}] {e.get('title', '')} - "
                f"{e.get('detail', '')} "
                f"(source: {e.get('source', {})})"
            )
        return errors

    # --- Reference data ---

    def search_locations(self, keyword, sub_type="AIRPORT,CITY", limit=None):
        """Keyword search for airports, cities or hotels.

        GET /v1/reference-data/locations
        """
        params = {"keyword": keyword, "subType": sub_type}
        if limit:
            params["page[limit]"] = limit
        data = self._request("GET", "/v1/reference-data/locations", params=params,
                             failure=UpstreamLookupFailure)
        return data.get("data", [])

    def lookup_airlines(self, codes):
        """Airline records for one or more carrier codes.

        GET /v1/reference-data/airlines
        """
        if isinstance(codes, str):
            codes = [codes]
        data = self._request("GET", "/v1/reference-data/airlines",
                             params={"airlineCodes": ",".join(codes)},
                             failure=UpstreamLookupFailure)
        return data.get("data", [])

    # --- Flights ---

    def flight_offers_search(self, origin, destination, departure_date, adults=1):
        """Search for flight offers.

        GET /v2/shopping/flight-offers
        """
        data = self._request("GET", "/v2/shopping/flight-offers", params={
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDate": departure_date,
            "adults": adults,
        }, failure=UpstreamSearchFailure)
        return data.get("data", [])

    def flight_offers_price(self, offer):
        """Confirm live price on a flight offer.

        POST /v1/shopping/flight-offers/pricing
        Returns the ``data`` object holding ``flightOffers``.
        """
        data = self._request("POST", "/v1/shopping/flight-offers/pricing", json_body={
            "data": {
                "type": "flight-offers-pricing",
                "flightOffers": [offer],
            }
        }, failure=UpstreamSearchFailure)
        return data.get("data", {})

    def flight_create_order(self, offer, travelers):
        """Create a flight booking.

        POST /v1/booking/flight-orders
        """
        data = self._request("POST", "/v1/booking/flight-orders", json_body={
            "data": {
                "type": "flight-order",
                "flightOffers": [offer],
                "travelers": travelers,
            }
        }, failure=UpstreamSearchFailure)
        return data.get("data", {})

    def flight_order(self, order_id):
        """Retrieve a flight booking.

        GET /v1/booking/flight-orders/{id}
        """
        data = self._request("GET", f"/v1/booking/flight-orders/{order_id}",
                             failure=UpstreamSearchFailure)
        return data.get("data", {})

    # --- Hotels ---

    def hotel_offers_search(self, city_code, check_in, check_out, adults=1):
        """Search hotel offers in a city.

        GET /v2/shopping/hotel-offers
        """
        params = {"cityCode": city_code, "adults": adults}
        if check_in:
            params["checkInDate"] = check_in
        if check_out:
            params["checkOutDate"] = check_out
        data = self._request("GET", "/v2/shopping/hotel-offers", params=params,
                             failure=UpstreamSearchFailure)
        return data.get("data", [])
