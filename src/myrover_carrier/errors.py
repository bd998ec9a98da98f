"""Domain-specific exceptions for the MyRover carrier app."""

from __future__ import annotations

from typing import Any


class MissingParameterError(Exception):
    """A required query or body field is absent or empty."""

    def __init__(self, parameter: str) -> None:
        self.parameter = parameter
        super().__init__(f"Missing required parameter: {parameter}")


class TokenExchangeError(Exception):
    """The identity provider did not return an access token.

    Attributes:
        status_code: HTTP status of the token endpoint response, or None
            when the request never got a response.
        detail: Upstream error body (parsed JSON or raw text) for diagnosis.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        detail: Any = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class SignatureInvalidError(Exception):
    """Raised when a ``signed_payload`` fails HMAC verification or decoding."""


class UpstreamUnavailableError(Exception):
    """Pricing provider could not be reached or returned an unusable body."""


class NoQuotableOfferingError(Exception):
    """No service offering produced a positive cost for the shipment."""
