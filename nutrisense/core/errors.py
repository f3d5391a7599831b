"""
Error taxonomy shared by the validation, dispatch and HTTP layers.

Only errors flagged with ``expose`` carry a message that may be returned to the
client unmodified. Everything else is reduced to an operation-specific generic
message by :func:`classify_error` before it crosses the API boundary.
"""

from __future__ import annotations

from http import HTTPStatus

RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please try again in a moment."
QUOTA_EXCEEDED_MESSAGE = "Usage limit reached. Please add credits to continue."
CONFIGURATION_MESSAGE = "Service configuration error."


class NutriSenseError(Exception):
    """Base class for errors raised inside the service."""

    status_code: int = HTTPStatus.BAD_REQUEST
    expose: bool = False
    default_message: str = "Request failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0])


class PayloadValidationError(NutriSenseError):
    """Raised when an inbound payload is malformed, oversized or empty."""

    expose = True
    default_message = "Invalid request body"


class ParseError(NutriSenseError):
    """Raised when no JSON object can be located in the model output."""

    default_message = "Failed to process analysis"


class ConfigurationError(NutriSenseError):
    """Raised when no upstream provider credentials are configured."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = CONFIGURATION_MESSAGE


class ProviderError(NutriSenseError):
    """Base class for classified upstream provider failures."""

    def __init__(self, message: str | None = None, *, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


class ProviderRateLimited(ProviderError):
    """Upstream answered HTTP 429 or reported exhausted resources."""

    status_code = HTTPStatus.TOO_MANY_REQUESTS
    expose = True
    default_message = RATE_LIMITED_MESSAGE


class ProviderQuotaExceeded(ProviderError):
    """Upstream answered HTTP 402 (credits exhausted)."""

    status_code = HTTPStatus.PAYMENT_REQUIRED
    expose = True
    default_message = QUOTA_EXCEEDED_MESSAGE


class ProviderUnavailable(ProviderError):
    """Any other upstream failure: non-2xx, transport error, empty content."""

    default_message = "AI service temporarily unavailable"


def classify_error(exc: BaseException, generic_message: str) -> tuple[int, str]:
    """Map an exception to the ``(status, message)`` pair returned to clients."""
    if isinstance(exc, NutriSenseError) and exc.expose:
        if isinstance(exc, ProviderError):
            return int(exc.status_code), exc.default_message
        return int(exc.status_code), exc.message
    if isinstance(exc, ConfigurationError):
        return int(exc.status_code), CONFIGURATION_MESSAGE
    return int(HTTPStatus.BAD_REQUEST), generic_message


__all__ = [
    "ConfigurationError",
    "NutriSenseError",
    "ParseError",
    "PayloadValidationError",
    "ProviderError",
    "ProviderQuotaExceeded",
    "ProviderRateLimited",
    "ProviderUnavailable",
    "classify_error",
]
