"""BitPayClient — typed Python SDK for the BitPay API."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from bitpay_sdk import codec
from bitpay_sdk.auth import PublicKeyRef, SigningKey
from bitpay_sdk.builder import RequestBuilder
from bitpay_sdk.config import Settings, load_settings
from bitpay_sdk.dispatcher import SignedRequestDispatcher
from bitpay_sdk.errors import ProtocolError, api_error_for_status
from bitpay_sdk.models import Currency, Envelope, Invoice, Payout, Token
from bitpay_sdk.request import Request, Response
from bitpay_sdk.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)


class BitPayClient:
    """Synchronous client for the BitPay API.

    One client per logical session: it holds a single token and key pair
    (last set wins) and is not safe to share between threads.

    Usage::

        from bitpay_sdk import BitPayClient, EcdsaPrivateKey

        key = EcdsaPrivateKey.generate()
        c = BitPayClient(base_url="https://test.bitpay.com",
                         private_key=key, public_key=key.public_key())
        token = c.create_token(id=sin, pairing_code="AbC1234")
        c.token = token
        invoice = c.create_invoice(Invoice(currency="USD", item=Item(price="10.00")))
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        token: Optional[Token] = None,
        public_key: Optional[PublicKeyRef] = None,
        private_key: Optional[SigningKey] = None,
        transport: Optional[Transport] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or load_settings()
        if base_url is not None:
            self._settings = replace(self._settings, api_url=base_url)
        self._base_url = self._settings.base_url()
        self._transport = transport or HttpxTransport(timeout=self._settings.timeout)
        self._builder = RequestBuilder(self._base_url)
        self._dispatcher = SignedRequestDispatcher(
            self._transport,
            accept_version=self._settings.accept_version,
            plugin_info=self._settings.plugin_info,
        )
        self.token = token
        self.public_key = public_key
        self.private_key = private_key
        self._last_request: Optional[Request] = None
        self._last_response: Optional[Response] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def last_request(self) -> Optional[Request]:
        """The request (headers included) sent by the most recent call."""
        return self._last_request

    @property
    def last_response(self) -> Optional[Response]:
        return self._last_response

    def close(self) -> None:
        close = getattr(self._transport, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "BitPayClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── Internal helpers ─────────────────────────────────────────

    def _send(self, request: Request) -> Response:
        self._last_request = None
        self._last_response = None
        prepared = self._dispatcher.prepare(request, self.public_key, self.private_key)
        self._last_request = prepared
        response = self._dispatcher.dispatch(prepared)
        self._last_response = response
        return response

    def _raise_for_errors(self, response: Response) -> Envelope:
        """Decode the envelope and raise before any entity is built.

        Order: ``errors`` > ``error`` > HTTP status >= 400.
        """
        try:
            envelope = codec.decode_envelope(response.body)
        except ProtocolError:
            if response.status_code >= 400:
                raise api_error_for_status(
                    response.status_code,
                    response.text or f"invalid status code: {response.status_code}",
                ) from None
            raise

        message = envelope.error_message
        if message is not None:
            logger.warning("BitPay API error [%s]: %s", response.status_code, message)
            raise api_error_for_status(response.status_code, message, envelope.errors or envelope.error)
        if response.status_code >= 400:
            raise api_error_for_status(
                response.status_code, f"invalid status code: {response.status_code}"
            )
        return envelope

    def _data(self, response: Response, allow_empty: bool = False) -> Any:
        envelope = self._raise_for_errors(response)
        if not envelope.has_data or envelope.data is None:
            raise ProtocolError("Error with request: no data returned")
        if not allow_empty and not envelope.data:
            raise ProtocolError("Error with request: no data returned")
        return envelope.data

    # ── Invoices ─────────────────────────────────────────────────

    def create_invoice(self, invoice: Invoice) -> Invoice:
        """POST invoices — returns a new Invoice; *invoice* is left untouched."""
        logger.debug("create_invoice currency=%s", invoice.currency)
        resp = self._send(self._builder.create_invoice(invoice, self.token))
        return codec.decode_invoice(self._data(resp), template=invoice)

    def get_invoice(self, invoice_id: str) -> Invoice:
        """GET invoices/{id} — signed when a merchant token is held."""
        logger.debug("get_invoice id=%s", invoice_id)
        resp = self._send(self._builder.get_invoice(invoice_id, self.token))
        return codec.decode_invoice(self._data(resp))

    # ── Payouts ──────────────────────────────────────────────────

    def create_payout(self, payout: Payout) -> Payout:
        """POST payouts — returns a copy with server ids, token and status."""
        logger.debug("create_payout instructions=%d", len(payout.instructions))
        resp = self._send(self._builder.create_payout(payout, self.token))
        return codec.apply_payout_echo(payout, self._data(resp))

    def get_payouts(self, status: Optional[str] = None) -> List[Payout]:
        """GET payouts?token=...[&status=...]"""
        resp = self._send(self._builder.get_payouts(self.token, status))
        return codec.decode_payouts(self._data(resp, allow_empty=True))

    def get_payout(self, payout_id: str) -> Payout:
        """GET payouts/{id}?token=..."""
        resp = self._send(self._builder.get_payout(payout_id, self.token))
        return codec.decode_payout(self._data(resp))

    def delete_payout(self, payout: Payout) -> Payout:
        """DELETE payouts/{id} — returns a copy carrying the new status."""
        resp = self._send(self._builder.delete_payout(payout))
        data = self._data(resp)
        if not isinstance(data, dict):
            raise ProtocolError(f"payout payload must be an object, got {type(data).__name__}")
        return payout.model_copy(update={"status": str(data.get("status") or "")})

    # ── Tokens ───────────────────────────────────────────────────

    def get_tokens(self) -> Dict[str, Token]:
        """GET tokens — tokens held by this identity, keyed by facade."""
        resp = self._send(self._builder.get_tokens())
        return codec.decode_tokens(self._data(resp))

    def create_token(
        self,
        *,
        id: Optional[str] = None,
        pairing_code: Optional[str] = None,
        facade: Optional[str] = None,
        label: Optional[str] = None,
    ) -> Token:
        """POST tokens — unsigned pairing request.

        Pass ``pairing_code`` to claim a code generated in the dashboard, or
        ``id`` (the client SIN) plus ``facade`` to request a new one.
        """
        request = self._builder.create_token(
            id=id, pairing_code=pairing_code, facade=facade, label=label
        )
        resp = self._send(request)
        data = self._data(resp)
        if not isinstance(data, list):
            raise ProtocolError(f"token payload must be an array, got {type(data).__name__}")
        return codec.decode_token(data[0])

    # ── Currencies ───────────────────────────────────────────────

    def get_currencies(self) -> List[Currency]:
        """GET currencies — an empty list when the server lists none."""
        resp = self._send(self._builder.get_currencies())
        return codec.decode_currencies(self._data(resp, allow_empty=True))
