"""Shared Amadeus bearer token with lazy acquisition and single-flight refresh."""

import logging
import threading
import time
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)

TOKEN_PATH = "/v1/security/oauth2/token"


@dataclass
class AuthResult:
    """Outcome of a credential step. ``error`` is set when ``ok`` is False."""

    ok: bool
    token: str = ""
    error: str = ""


class CredentialProvider:
    """Holds one bearer token shared by every upstream call.

    The token is acquired on first need and re-acquired when it expires or
    when a caller reports it stale. A lock makes concurrent refreshes
    collapse into a single exchange.
    """

    def __init__(self, client_id, client_secret, base_url, session=None, timeout=30):
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self._token = ""
        self._token_expiry = 0
        self._lock = threading.Lock()

    @property
    def token(self):
        return self._token

    def _valid(self):
        return bool(self._token) and time.time() < self._token_expiry - 60

    def ensure_authenticated(self):
        """Return the current token, exchanging credentials first if absent or expired."""
        if self._valid():
            return AuthResult(ok=True, token=self._token)
        with self._lock:
            # Another thread may have finished the exchange while we waited
            if self._valid():
                return AuthResult(ok=True, token=self._token)
            return self._exchange()

    def force_refresh(self, stale_token=None):
        """Discard the token and exchange credentials again.

        When ``stale_token`` is given and another thread has already replaced
        it, the fresh token is reused instead of exchanging a second time.
        """
        with self._lock:
            if stale_token is not None and self._valid() and self._token != stale_token:
                return AuthResult(ok=True, token=self._token)
            return self._exchange()

    def _exchange(self):
        """Perform the client_credentials grant. Caller holds the lock."""
        try:
            resp = self.session.post(
                f"{self.base_url}{TOKEN_PATH}",
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
            token = data["access_token"]
            expires_in = float(data.get("expires_in", 1799))
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.error(f"Amadeus authentication failed: {e}")
            self._token = ""
            self._token_expiry = 0
            return AuthResult(ok=False, error=str(e))

        self._token = token
        self._token_expiry = time.time() + expires_in
        logger.info("Amadeus token refreshed")
        return AuthResult(ok=True, token=token)
