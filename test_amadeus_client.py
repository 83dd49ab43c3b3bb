"""Tests for the Amadeus client transport."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from amadeus_client import AmadeusClient
from credentials import AuthResult
from errors import AuthFailure, UpstreamLookupFailure, UpstreamSearchFailure


def response(status, body):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body
    resp.text = str(body)
    return resp


@pytest.fixture
def credentials():
    creds = MagicMock()
    creds.ensure_authenticated.return_value = AuthResult(ok=True, token="old")
    creds.force_refresh.return_value = AuthResult(ok=True, token="new")
    return creds


@pytest.fixture
def session():
    return MagicMock()


def make_client(session, credentials, retries=0):
    return AmadeusClient("id", "secret", "https://test.api.amadeus.com",
                         credentials=credentials, session=session, retries=retries)


class TestRequests:

    def test_location_search_sends_bearer_token_and_params(self, session, credentials):
        session.request.return_value = response(200, {"data": [{"iataCode": "LHR"}]})
        client = make_client(session, credentials)

        data = client.search_locations("LHR", sub_type="AIRPORT")

        assert data == [{"iataCode": "LHR"}]
        method, url = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        assert method == "GET"
        assert url == "https://test.api.amadeus.com/v1/reference-data/locations"
        assert kwargs["headers"]["Authorization"] == "Bearer old"
        assert kwargs["params"] == {"keyword": "LHR", "subType": "AIRPORT"}

    def test_pricing_wraps_offer(self, session, credentials):
        session.request.return_value = response(200, {"data": {"flightOffers": [{"id": "1"}]}})
        client = make_client(session, credentials)

        data = client.flight_offers_price({"id": "1"})

        assert data == {"flightOffers": [{"id": "1"}]}
        body = session.request.call_args.kwargs["json"]
        assert body == {"data": {"type": "flight-offers-pricing", "flightOffers": [{"id": "1"}]}}

    def test_unauthorized_refreshes_token_and_replays_once(self, session, credentials):
        session.request.side_effect = [
            response(401, {"errors": [{"code": 38190, "title": "Invalid access token"}]}),
            response(200, {"data": []}),
        ]
        client = make_client(session, credentials)

        assert client.flight_offers_search("JFK", "LHR", "2024-01-01") == []

        credentials.force_refresh.assert_called_once_with(stale_token="old")
        replay = session.request.call_args_list[1]
        assert replay.kwargs["headers"]["Authorization"] == "Bearer new"

    def test_auth_failure_short_circuits(self, session, credentials):
        credentials.ensure_authenticated.return_value = AuthResult(ok=False, error="bad secret")
        client = make_client(session, credentials)

        with pytest.raises(AuthFailure) as exc:
            client.flight_offers_search("JFK", "LHR", "2024-01-01")

        assert exc.value.status_code == 503
        session.request.assert_not_called()

    def test_reference_data_error_raises_lookup_failure(self, session, credentials):
        errors = [{"code": 477, "title": "INVALID FORMAT", "detail": "keyword", "status": 400}]
        session.request.return_value = response(400, {"errors": errors})
        client = make_client(session, credentials)

        with pytest.raises(UpstreamLookupFailure) as exc:
            client.search_locations("?")

        assert exc.value.upstream_status == 400
        assert exc.value.errors == errors

    def test_transport_error_raises_search_failure(self, session, credentials):
        session.request.side_effect = requests.ConnectionError("reset")
        client = make_client(session, credentials)

        with pytest.raises(UpstreamSearchFailure):
            client.flight_order("ORDER1")

    def test_no_retry_on_server_error_by_default(self, session, credentials):
        session.request.return_value = response(500, {"errors": []})
        client = make_client(session, credentials)

        with pytest.raises(UpstreamSearchFailure) as exc:
            client.hotel_offers_search("PAR", "2024-01-01", "2024-01-03")

        assert exc.value.upstream_status == 500
        assert session.request.call_count == 1

    @patch("amadeus_client.time.sleep")
    def test_configured_retries_on_server_error(self, sleep, session, credentials):
        session.request.side_effect = [response(500, {}), response(200, {"data": [{"id": "1"}]})]
        client = make_client(session, credentials, retries=1)

        assert client.flight_offers_search("JFK", "LHR", "2024-01-01") == [{"id": "1"}]
        sleep.assert_called_once_with(0.5)
