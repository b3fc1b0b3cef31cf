"""Builds the Request for each API operation.

Building is pure: it validates caller input, serializes the body and picks the
auth mode, but never signs, sends or touches key material.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote, urlencode

from bitpay_sdk import codec
from bitpay_sdk.errors import ConfigurationError, ValidationError
from bitpay_sdk.models import Facade, Invoice, Payout, Token
from bitpay_sdk.request import AuthMode, Method, Request

PAIRING_CODE_RE = re.compile(r"[A-Za-z0-9]{7}")


def validate_pairing_code(pairing_code: str) -> str:
    if not isinstance(pairing_code, str) or not PAIRING_CODE_RE.fullmatch(pairing_code):
        raise ValidationError(f"the pairing code provided is not legal: {pairing_code!r}")
    return pairing_code


def _segment(value: str, what: str) -> str:
    if not value:
        raise ValidationError(f"{what} must not be empty")
    return quote(str(value), safe="")


def _token_value(token: Optional[Token], operation: str) -> str:
    if token is None or not token.token:
        raise ConfigurationError(f"no token set: {operation} needs a token")
    return token.token


class RequestBuilder:
    def __init__(self, base_url: str) -> None:
        self._base_url = base_url

    def _request(
        self,
        method: Method,
        path: str,
        body: bytes = b"",
        auth: AuthMode = AuthMode.REQUIRED,
    ) -> Request:
        return Request(method=method, base_url=self._base_url, path=path, body=body, auth=auth)

    # ── Invoices ─────────────────────────────────────────────────

    def create_invoice(self, invoice: Invoice, token: Optional[Token] = None) -> Request:
        """POST invoices — signed when a key pair is configured."""
        body = codec.dumps(codec.encode_invoice(invoice, token))
        return self._request(Method.POST, "invoices", body, AuthMode.OPTIONAL)

    def get_invoice(self, invoice_id: str, token: Optional[Token] = None) -> Request:
        """GET invoices/{id} — signed and token-scoped only for merchant tokens."""
        segment = _segment(invoice_id, "invoice id")
        if token is not None and token.facade is Facade.MERCHANT:
            query = urlencode({"token": token.token})
            return self._request(Method.GET, f"invoices/{segment}?{query}")
        return self._request(Method.GET, f"invoices/{segment}", auth=AuthMode.NONE)

    # ── Payouts ──────────────────────────────────────────────────

    def create_payout(self, payout: Payout, token: Optional[Token] = None) -> Request:
        """POST payouts; the payout's own token wins over the client token."""
        value = payout.token or _token_value(token, "create_payout")
        body = codec.dumps(codec.encode_payout(payout, value))
        return self._request(Method.POST, "payouts", body)

    def get_payouts(self, token: Optional[Token], status: Optional[str] = None) -> Request:
        params = {"token": _token_value(token, "get_payouts")}
        if status is not None:
            params["status"] = status
        return self._request(Method.GET, f"payouts?{urlencode(params)}")

    def get_payout(self, payout_id: str, token: Optional[Token]) -> Request:
        query = urlencode({"token": _token_value(token, "get_payout")})
        return self._request(Method.GET, f"payouts/{_segment(payout_id, 'payout id')}?{query}")

    def delete_payout(self, payout: Payout) -> Request:
        """DELETE payouts/{id}, authorized by the payout's response token."""
        if not payout.response_token:
            raise ValidationError("payout has no response token; was it created or fetched?")
        query = urlencode({"token": payout.response_token})
        return self._request(Method.DELETE, f"payouts/{_segment(payout.id, 'payout id')}?{query}")

    # ── Tokens & currencies ──────────────────────────────────────

    def get_tokens(self) -> Request:
        return self._request(Method.GET, "tokens")

    def create_token(
        self,
        *,
        id: Optional[str] = None,
        pairing_code: Optional[str] = None,
        facade: Optional[str] = None,
        label: Optional[str] = None,
    ) -> Request:
        """POST tokens — unsigned, since pairing happens before any key is trusted."""
        if pairing_code is not None:
            validate_pairing_code(pairing_code)
        if isinstance(facade, Facade):
            facade = facade.value
        payload = codec.encode_token_request(
            id=id, pairing_code=pairing_code, facade=facade, label=label
        )
        return self._request(Method.POST, "tokens", codec.dumps(payload), AuthMode.NONE)

    def get_currencies(self) -> Request:
        return self._request(Method.GET, "currencies", auth=AuthMode.NONE)
