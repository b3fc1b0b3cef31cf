"""Transport capability and the default httpx-backed implementation."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from bitpay_sdk.errors import TransportError
from bitpay_sdk.request import Request, Response

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Sends one request and returns the raw response.

    Implementations raise TransportError for network, TLS and timeout
    failures; HTTP error statuses are returned, not raised.
    """

    def send(self, request: Request) -> Response:
        ...


class HttpxTransport:
    """Transport over a shared ``httpx.Client``.

    Usage::

        transport = HttpxTransport(timeout=30.0)
        response = transport.send(request)
        transport.close()
    """

    def __init__(
        self,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._timeout = timeout
        self._client = client or httpx.Client(timeout=self._timeout)

    def send(self, request: Request) -> Response:
        try:
            resp = self._client.request(
                request.method.value,
                request.full_uri,
                content=request.body or None,
                headers=request.headers,
            )
        except httpx.HTTPError as exc:
            logger.debug("transport failure for %s %s: %s", request.method.value, request.full_uri, exc)
            raise TransportError(f"{request.method.value} {request.full_uri} failed: {exc}") from exc
        return Response(
            status_code=resp.status_code,
            body=resp.content,
            headers=dict(resp.headers),
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
