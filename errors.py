"""Typed failures raised by the Travix services.

Each failure carries the HTTP status the route layer answers with. Lookup
failures are absorbed by the resolvers; everything else reaches the caller.
"""


class TravixError(Exception):
    """Base error for every Travix failure."""

    status_code = 500

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self):
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


class ValidationFailure(TravixError):
    """Required request fields are missing. No upstream call was made."""

    status_code = 400

    def __init__(self, message, missing=None):
        super().__init__(message)
        self.missing = list(missing or [])


class NotFoundFailure(TravixError):
    """An offer id or booking id is absent upstream."""

    status_code = 404


class BookingFailure(TravixError):
    """Upstream accepted the request but did not confirm the booking."""


class UpstreamError(TravixError):
    """An Amadeus call failed.

    Attributes:
        upstream_status: HTTP status returned by Amadeus, None on transport errors
        errors: the ``errors`` list from the Amadeus error body, if any
    """

    def __init__(self, message, upstream_status=None, errors=None, cause=None):
        super().__init__(message, cause=cause)
        self.upstream_status = upstream_status
        self.errors = list(errors or [])


class AuthFailure(UpstreamError):
    """The credential exchange failed, so no call could be authenticated."""

    status_code = 503


class UpstreamLookupFailure(UpstreamError):
    """A reference-data call (locations, airlines) failed."""


class UpstreamSearchFailure(UpstreamError):
    """A shopping or booking call failed."""
