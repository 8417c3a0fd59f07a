"""
Error taxonomy for the chained autocomplete engine.

Every failure is classified into one of these types so callers (and the
observer) always receive a label describing what went wrong.
"""

from __future__ import annotations


__all__: list[str] = [
    "ApiStatusError",
    "HttpStatusError",
    "MalformedDetailsError",
    "MalformedPayloadError",
    "MalformedPredictionError",
    "MissingApiKeyError",
    "NoResponseError",
    "PlacesAutocompleteError",
    "RequestError",
    "TransportError",
]


class PlacesAutocompleteError(Exception):
    """Base exception for all autocomplete errors."""

    kind: str = "error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RequestError(PlacesAutocompleteError):
    """Base class for failures of a single Places API request."""

    kind = "request"


class TransportError(RequestError):
    """Raised on DNS, connection or timeout failures."""

    kind = "transport"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Transport failure: {detail}")


class NoResponseError(RequestError):
    """Raised when the transport returned without a response object."""

    kind = "no_response"

    def __init__(self) -> None:
        super().__init__("No response from API")


class HttpStatusError(RequestError):
    """Raised when the API answers with a status code other than 200."""

    kind = "http_status"

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"Invalid status code {status_code} from API")


class MalformedPayloadError(RequestError):
    """Raised when the body is not a JSON object."""

    kind = "malformed_payload"

    def __init__(self, detail: str = "Response body is not a JSON object") -> None:
        super().__init__(detail)


class ApiStatusError(RequestError):
    """
    Raised when the payload carries a top-level ``status`` other than ``OK``.

    Typical values are ``ZERO_RESULTS``, ``OVER_QUERY_LIMIT``,
    ``REQUEST_DENIED`` and ``INVALID_REQUEST``.
    """

    kind = "api_status"

    def __init__(self, status: str, error_message: str | None = None) -> None:
        self.status = status
        self.error_message = error_message
        message = f"API status {status}"
        if error_message:
            message = f"{message}: {error_message}"
        super().__init__(message)


class MalformedPredictionError(RequestError):
    """Raised for a single prediction record lacking ``place_id`` or ``description``."""

    kind = "malformed_prediction"

    def __init__(self, index: int, detail: str) -> None:
        self.index = index
        super().__init__(f"Malformed prediction at index {index}: {detail}")


class MalformedDetailsError(RequestError):
    """Raised when a details payload misses a required field."""

    kind = "malformed_details"

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Malformed place details: missing or invalid {path!r}")


class MissingApiKeyError(RequestError):
    """Raised when a details fetch is attempted for a place without an API key."""

    kind = "missing_api_key"

    def __init__(self, place_id: str) -> None:
        self.place_id = place_id
        super().__init__(f"Place {place_id!r} has no API key; cannot fetch details")
