"""Attaches standard and authentication headers, then hands off to a Transport."""

from __future__ import annotations

import logging
import platform
from dataclasses import replace
from typing import Dict, Optional

from bitpay_sdk.auth import PublicKeyRef, SigningKey, build_auth_headers
from bitpay_sdk.config import DEFAULT_ACCEPT_VERSION
from bitpay_sdk.request import Request, Response
from bitpay_sdk.transport import Transport

logger = logging.getLogger(__name__)

CLIENT_NAME = "bitpay-sdk-python"
CLIENT_VERSION = "1.0.0"


class SignedRequestDispatcher:
    """Sends one request per call; never retries and never inspects the status."""

    def __init__(
        self,
        transport: Transport,
        accept_version: str = DEFAULT_ACCEPT_VERSION,
        plugin_info: str = "",
    ) -> None:
        self._transport = transport
        self._accept_version = accept_version
        self._plugin_info = plugin_info

    def standard_headers(self) -> Dict[str, str]:
        plugin = f"{CLIENT_NAME}/{CLIENT_VERSION}"
        if self._plugin_info:
            plugin = f"{plugin} {self._plugin_info}"
        return {
            "User-Agent": f"{CLIENT_NAME}/{CLIENT_VERSION} (Python {platform.python_version()})",
            "X-BitPay-Plugin-Info": plugin,
            "Content-Type": "application/json",
            "X-Accept-Version": self._accept_version,
        }

    def prepare(
        self,
        request: Request,
        identity: Optional[PublicKeyRef] = None,
        signing_key: Optional[SigningKey] = None,
    ) -> Request:
        """Return *request* with every header it will be sent with.

        Raises ConfigurationError before anything is sent when the request
        requires authentication and a key is missing.
        """
        auth_headers = build_auth_headers(request, identity, signing_key)
        return request.with_headers(self.standard_headers()).with_headers(auth_headers)

    def send(
        self,
        request: Request,
        identity: Optional[PublicKeyRef] = None,
        signing_key: Optional[SigningKey] = None,
    ) -> Response:
        return self.dispatch(self.prepare(request, identity, signing_key))

    def dispatch(self, prepared: Request) -> Response:
        """Send an already prepared request exactly as it is."""
        logger.debug(
            "dispatch %s %s signed=%s",
            prepared.method.value,
            prepared.full_uri,
            prepared.header("x-signature") is not None,
        )
        response = self._transport.send(prepared)
        logger.debug("response %s (%d bytes)", response.status_code, len(response.body))
        return replace(response, request=prepared)
