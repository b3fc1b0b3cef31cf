"""Wire codec: JSON payloads to/from BitPay entities.

Pure functions, no I/O. Decoders are tolerant: only the fields the API always
sends are required, everything else falls back to an explicit default so that
fields added or dropped server-side never break decoding.
"""

from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

import pydantic

from bitpay_sdk.errors import DecodeError, FormatError, ProtocolError
from bitpay_sdk.models import (
    Currency,
    Envelope,
    Invoice,
    Payout,
    PayoutInstruction,
    PayoutTransaction,
    Token,
)
from bitpay_sdk.utils import check_price_format, coerce_decimal, generate_guid

M = TypeVar("M", bound=pydantic.BaseModel)

INVOICE_REQUIRED = ("price", "taxIncluded")
TOKEN_REQUIRED = ("token", "facade")
CURRENCY_REQUIRED = ("code",)
PAYOUT_REQUIRED = ("id",)


# ── Helpers ──────────────────────────────────────────────────────

def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, Decimal, str)):
        try:
            return Decimal(str(value).strip()).is_finite()
        except ArithmeticError:
            return False
    return False


def normalize_time(value: Any) -> Any:
    """Convert a millisecond timestamp to whole seconds since the epoch.

    Numbers (and numeric strings) are divided by 1000 and truncated toward
    zero. Anything else, e.g. an ISO date some endpoints send, is returned
    unchanged.
    """
    if not _is_numeric(value):
        return value
    return int(Decimal(str(value).strip()) / 1000)


def ms_to_datetime(value: Any) -> Optional[datetime]:
    """Millisecond timestamp -> aware UTC datetime, floored to the second."""
    if value is None or not _is_numeric(value):
        return None
    seconds = math.floor(Decimal(str(value).strip()) / 1000)
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise DecodeError(f"timestamp out of range: {value}") from exc


def _require(data: Any, fields: Iterable[str], entity: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise DecodeError(f"{entity} payload must be an object, got {type(data).__name__}")
    missing = [f for f in fields if data.get(f) is None]
    if missing:
        raise DecodeError(f"{entity} payload missing required field(s): {', '.join(missing)}")
    return data


def _build(model: Type[M], **fields: Any) -> M:
    try:
        return model(**fields)
    except pydantic.ValidationError as exc:
        raise DecodeError(f"invalid {model.__name__} payload: {exc}") from exc


def _decimal(value: Any) -> Decimal:
    try:
        return coerce_decimal(value)
    except FormatError as exc:
        raise DecodeError(str(exc)) from exc


def _or_default(value: Any, default: Any) -> Any:
    return default if value is None else value


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _as_list(value: Any) -> List[Any]:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, list):
        return value
    raise DecodeError(f"expected a list, got {type(value).__name__}")


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def dumps(payload: Mapping[str, Any]) -> bytes:
    """Serialize a request payload to the exact bytes that get signed and sent."""
    return json.dumps(payload, default=_json_default, separators=(",", ":")).encode("utf-8")


# ── Envelope ─────────────────────────────────────────────────────

def _error_text(value: Any) -> Optional[List[str]]:
    if not value:
        return None
    if isinstance(value, list):
        return [item if isinstance(item, str) else json.dumps(item) for item in value]
    if isinstance(value, str):
        return [value]
    return [json.dumps(value)]


def decode_envelope(body: bytes) -> Envelope:
    """Parse a response body into its ``data``/``error``/``errors`` parts.

    Raises ProtocolError for an empty or non-JSON body, or a top level that is
    not an object.
    """
    if not body or not body.strip():
        raise ProtocolError("Error with request: no data returned")
    try:
        decoded = json.loads(body)
    except ValueError as exc:
        raise ProtocolError(f"response is not JSON: {exc}") from exc
    if not isinstance(decoded, dict):
        raise ProtocolError(f"response must be a JSON object, got {type(decoded).__name__}")

    error = _error_text(decoded.get("error"))
    return Envelope(
        data=decoded.get("data"),
        has_data="data" in decoded,
        error="\n".join(error) if error else None,
        errors=_error_text(decoded.get("errors")),
    )


# ── Invoice ──────────────────────────────────────────────────────

def decode_invoice(data: Any, template: Optional[Invoice] = None) -> Invoice:
    """Build an Invoice from the ``data`` object of an invoice response.

    When *template* is given (the caller's request-side invoice), the result
    keeps its item, buyer and notification settings and takes every
    server-side field from *data*. *template* itself is never modified.
    """
    data = _require(data, INVOICE_REQUIRED, "invoice")
    token = data.get("token")
    fields: Dict[str, Any] = {
        "id": _text(data.get("id")),
        "token": Token(token=str(token)) if token else None,
        "url": _text(data.get("url")),
        "pos_data": data.get("posData", ""),
        "status": data.get("status") or None,
        "price": _decimal(data["price"]),
        "btc_price": _decimal(data.get("btcPrice")),
        "btc_paid": _decimal(data.get("btcPaid")),
        "currency": _text(data.get("currency")),
        "tax_included": _decimal(data["taxIncluded"]),
        "order_id": _text(data.get("orderId")),
        "invoice_time": normalize_time(data.get("invoiceTime")),
        "expiration_time": normalize_time(data.get("expirationTime")),
        "current_time": normalize_time(data.get("currentTime")),
        "amount_paid": _decimal(data.get("amountPaid")),
        "rate": _decimal(data.get("rate")),
        "exception_status": _or_default(data.get("exceptionStatus"), False),
        "refund_addresses": _as_list(data.get("refundAddresses")),
        "transaction_currency": data.get("transactionCurrency"),
        "payment_totals": data.get("paymentTotals"),
        "payment_subtotals": data.get("paymentSubtotals"),
        "exchange_rates": data.get("exchangeRates"),
        "payment_urls": data.get("paymentUrls"),
    }
    decoded = _build(Invoice, **fields)
    if template is None:
        return decoded
    return template.model_copy(update={name: getattr(decoded, name) for name in fields})


def encode_invoice(invoice: Invoice, token: Optional[Token] = None) -> Dict[str, Any]:
    """Body of ``POST invoices``; always carries a fresh ``guid``."""
    item = invoice.item
    buyer = invoice.buyer
    check_price_format(item.price, invoice.currency)

    body: Dict[str, Any] = {
        "price": item.price,
        "taxIncluded": item.tax_included,
        "currency": invoice.currency,
        "posData": invoice.pos_data,
        "notificationURL": invoice.notification_url,
        "transactionSpeed": invoice.transaction_speed.value,
        "fullNotifications": invoice.full_notifications,
        "extendedNotifications": invoice.extended_notifications,
        "notificationEmail": invoice.notification_email,
        "redirectURL": invoice.redirect_url,
        "orderID": invoice.order_id,
        "itemDesc": item.description,
        "itemCode": item.code,
        "physical": item.physical,
        "buyerName": f"{buyer.first_name} {buyer.last_name}".strip(),
        "buyerAddress1": buyer.address[0] if len(buyer.address) > 0 else "",
        "buyerAddress2": buyer.address[1] if len(buyer.address) > 1 else "",
        "buyerCity": buyer.city,
        "buyerState": buyer.state,
        "buyerZip": buyer.zip,
        "buyerCountry": buyer.country,
        "buyerEmail": buyer.email,
        "buyerPhone": buyer.phone,
        "buyerNotify": buyer.notify,
        "guid": generate_guid(),
    }
    if token is not None:
        body["token"] = token.token
    return body


# ── Tokens ───────────────────────────────────────────────────────

def decode_token(data: Any) -> Token:
    """Build a Token from one entry of a ``POST tokens`` response."""
    data = _require(data, TOKEN_REQUIRED, "token")
    pairing_code = data.get("pairingCode")
    return _build(
        Token,
        token=data["token"],
        facade=data["facade"],
        pairing_code=pairing_code,
        pairing_expiration=ms_to_datetime(data.get("pairingExpiration")) if pairing_code else None,
        created_at=ms_to_datetime(data.get("dateCreated")),
        policies=_as_list(data.get("policies")),
        resource=data.get("resource"),
    )


def decode_tokens(data: Any) -> Dict[str, Token]:
    """``GET tokens`` answers ``[{facade: token}, ...]``; key the result by facade."""
    if not isinstance(data, list):
        raise DecodeError(f"token list payload must be an array, got {type(data).__name__}")
    tokens: Dict[str, Token] = {}
    for entry in data:
        if not isinstance(entry, Mapping) or not entry:
            raise DecodeError(f"token entry must be a non-empty object: {entry!r}")
        facade, value = next(iter(entry.items()))
        tokens[facade] = _build(Token, token=value, facade=facade)
    return tokens


def encode_token_request(
    *,
    id: Optional[str] = None,
    pairing_code: Optional[str] = None,
    facade: Optional[str] = None,
    label: Optional[str] = None,
) -> Dict[str, Any]:
    """Body of ``POST tokens``; only supplied fields are sent, plus ``guid``."""
    optional: List[Tuple[str, Optional[str]]] = [
        ("id", id),
        ("pairingCode", pairing_code),
        ("facade", facade),
        ("label", label),
    ]
    body: Dict[str, Any] = {key: value for key, value in optional if value is not None}
    body["guid"] = generate_guid()
    return body


# ── Currencies ───────────────────────────────────────────────────

def decode_currency(data: Any) -> Currency:
    data = _require(data, CURRENCY_REQUIRED, "currency")
    return _build(
        Currency,
        code=data["code"],
        symbol=_text(data.get("symbol")),
        precision=data.get("precision") or 0,
        exchange_pct_fee=_decimal(data.get("exchangePctFee")),
        payout_enabled=bool(data.get("payoutEnabled", False)),
        name=_text(data.get("name")),
        plural_name=_text(data.get("plural")),
        alts=_as_list(data.get("alts")),
        payout_fields=_as_list(data.get("payoutFields")),
    )


def decode_currencies(data: Any) -> List[Currency]:
    if not isinstance(data, list):
        raise DecodeError(f"currency list payload must be an array, got {type(data).__name__}")
    return [decode_currency(entry) for entry in data]


# ── Payouts ──────────────────────────────────────────────────────

def decode_transaction(data: Any) -> PayoutTransaction:
    data = _require(data, (), "payout transaction")
    return _build(
        PayoutTransaction,
        transaction_id=_text(data.get("txid")),
        amount=_decimal(data.get("amount")),
        date=data.get("date"),
    )


def decode_instruction(data: Any) -> PayoutInstruction:
    data = _require(data, (), "payout instruction")
    return _build(
        PayoutInstruction,
        id=_text(data.get("id")),
        label=_text(data.get("label")),
        address=_text(data.get("address")),
        amount=_decimal(data.get("amount")),
        status=_text(data.get("status")),
        btc=data.get("btc"),
        transactions=[decode_transaction(tx) for tx in _as_list(data.get("transactions"))],
    )


def decode_payout(data: Any) -> Payout:
    """Build a Payout, keeping instructions and their transactions in wire order."""
    data = _require(data, PAYOUT_REQUIRED, "payout")
    return _build(
        Payout,
        id=_text(data["id"]),
        account_id=_text(data.get("account")),
        response_token=_text(data.get("token")),
        currency=_text(data.get("currency")),
        amount=_decimal(data.get("amount")),
        btc_amount=_decimal(data.get("btc")),
        rate=_decimal(data.get("rate")),
        effective_date=data.get("effectiveDate"),
        request_date=data.get("requestDate"),
        pricing_method=data.get("pricingMethod"),
        status=_text(data.get("status")),
        reference=data.get("reference"),
        notification_url=data.get("notificationURL"),
        notification_email=data.get("notificationEmail"),
        instructions=[decode_instruction(i) for i in _as_list(data.get("instructions"))],
    )


def decode_payouts(data: Any) -> List[Payout]:
    if not isinstance(data, list):
        raise DecodeError(f"payout list payload must be an array, got {type(data).__name__}")
    return [decode_payout(entry) for entry in data]


def apply_payout_echo(payout: Payout, data: Any) -> Payout:
    """Merge the server's answer to ``POST payouts`` into a copy of *payout*.

    Instruction ids are assigned by position; the echo must list exactly as
    many instructions as were sent.
    """
    data = _require(data, PAYOUT_REQUIRED, "payout")
    echoed = _as_list(data.get("instructions"))
    if len(echoed) != len(payout.instructions):
        raise ProtocolError(
            f"payout echo lists {len(echoed)} instruction(s), "
            f"{len(payout.instructions)} were sent"
        )
    instructions = [
        sent.model_copy(update={"id": _text(_require(echo, (), "payout instruction").get("id"))})
        for sent, echo in zip(payout.instructions, echoed)
    ]
    return payout.model_copy(
        update={
            "id": _text(data["id"]),
            "account_id": _text(data.get("account")),
            "response_token": _text(data.get("token")),
            "status": _text(data.get("status")),
            "instructions": instructions,
        }
    )


def encode_payout(payout: Payout, token: str) -> Dict[str, Any]:
    """Body of ``POST payouts``; optional fields are sent only when set."""
    body: Dict[str, Any] = {
        "token": token,
        "amount": payout.amount,
        "currency": payout.currency,
        "instructions": [
            {
                "label": instruction.label,
                "address": instruction.address,
                "amount": instruction.amount,
            }
            for instruction in payout.instructions
        ],
        "effectiveDate": payout.effective_date,
        "pricingMethod": payout.pricing_method,
        "guid": generate_guid(),
    }
    optional: List[Tuple[str, Optional[str]]] = [
        ("reference", payout.reference),
        ("notificationURL", payout.notification_url),
        ("notificationEmail", payout.notification_email),
    ]
    for key, value in optional:
        if value is not None:
            body[key] = value
    return body
