"""Structured exceptions for the BitPay SDK."""

from __future__ import annotations

from typing import Any, Optional


class BitPayError(Exception):
    """Base exception for everything raised by the BitPay SDK."""


class ConfigurationError(BitPayError):
    """Client is missing a host, key or token needed before dispatch."""


class ValidationError(BitPayError):
    """Caller input rejected locally; no request was sent."""


class FormatError(ValidationError):
    """Price or amount string that cannot be used on the wire."""


class TransportError(BitPayError):
    """Network, TLS or timeout failure raised by a transport."""


class ProtocolError(BitPayError):
    """Response does not match the expected ``{"data": ...}`` envelope."""


class DecodeError(ProtocolError):
    """Payload is missing a mandatory field or holds an invalid value."""


class ApiError(BitPayError):
    """Server answered with an ``error``/``errors`` field or a failing status."""

    def __init__(
        self,
        status_code: int,
        message: str,
        detail: Any = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.detail = detail
        super().__init__(f"[{status_code}] {message}")


class AuthError(ApiError):
    """401 Unauthorized — unknown identity or bad signature."""
    pass


class ForbiddenError(ApiError):
    """403 Forbidden — token facade lacks the capability."""
    pass


class NotFoundError(ApiError):
    """404 Not Found — invoice, payout or token does not exist."""
    pass


class RateLimitError(ApiError):
    """429 Too Many Requests."""
    pass


class ServerError(ApiError):
    """500+ — server-side error."""
    pass


def api_error_for_status(
    status_code: int, message: str, detail: Optional[Any] = None
) -> ApiError:
    """Pick the ApiError subclass matching an HTTP status code."""
    if status_code == 401:
        return AuthError(status_code, message, detail)
    if status_code == 403:
        return ForbiddenError(status_code, message, detail)
    if status_code == 404:
        return NotFoundError(status_code, message, detail)
    if status_code == 429:
        return RateLimitError(status_code, message, detail)
    if status_code >= 500:
        return ServerError(status_code, message, detail)
    return ApiError(status_code, message, detail)
