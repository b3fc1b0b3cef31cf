"""Pydantic value objects for the BitPay API.

Entities are frozen: the codec builds a complete instance per response and
callers derive variants with ``model_copy(update=...)``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bitpay_sdk.utils import coerce_decimal


class _Value(BaseModel):
    model_config = ConfigDict(frozen=True)


# ── Enums ────────────────────────────────────────────────────────

class Facade(str, Enum):
    MERCHANT = "merchant"
    POS = "pos"
    PAYROLL = "payroll"
    USER = "user"


class InvoiceStatus(str, Enum):
    NEW = "new"
    PAID = "paid"
    CONFIRMED = "confirmed"
    COMPLETE = "complete"
    EXPIRED = "expired"
    INVALID = "invalid"


class TransactionSpeed(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ── Token ────────────────────────────────────────────────────────

class Token(_Value):
    token: str
    facade: Optional[Facade] = None
    pairing_code: Optional[str] = None
    pairing_expiration: Optional[datetime] = None
    created_at: Optional[datetime] = None
    policies: List[Any] = Field(default_factory=list)
    resource: Optional[str] = None


# ── Invoice ──────────────────────────────────────────────────────

class Item(_Value):
    """A line item; price-like fields accept numbers or en_US strings."""

    code: str = ""
    description: str = ""
    price: Decimal = Decimal("0")
    tax_included: Decimal = Decimal("0")
    quantity: Optional[int] = None
    physical: bool = False

    @field_validator("price", "tax_included", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal:
        return coerce_decimal(value)


class Buyer(_Value):
    first_name: str = ""
    last_name: str = ""
    address: List[str] = Field(default_factory=list)
    city: str = ""
    state: str = ""
    zip: str = ""
    country: str = ""
    email: str = ""
    phone: str = ""
    notify: bool = False


class Invoice(_Value):
    """An invoice as sent to (request side) and returned by the API.

    Time fields hold seconds since the epoch when the server sent a number,
    or the server's own string when it sent a pre-formatted date.
    """

    id: str = ""
    token: Optional[Token] = None
    url: str = ""
    pos_data: Any = ""
    # unrecognised statuses are kept as the raw string
    status: Optional[Union[InvoiceStatus, str]] = Field(default=None, union_mode="left_to_right")
    price: Decimal = Decimal("0")
    btc_price: Decimal = Decimal("0")
    btc_paid: Decimal = Decimal("0")
    currency: str = ""
    tax_included: Decimal = Decimal("0")
    order_id: str = ""
    invoice_time: Optional[Union[int, str]] = None
    expiration_time: Optional[Union[int, str]] = None
    current_time: Optional[Union[int, str]] = None
    amount_paid: Decimal = Decimal("0")
    rate: Decimal = Decimal("0")
    exception_status: Union[bool, str] = False
    refund_addresses: List[Any] = Field(default_factory=list)
    transaction_currency: Optional[str] = None
    payment_totals: Any = None
    payment_subtotals: Any = None
    exchange_rates: Any = None
    payment_urls: Any = None

    # Request-side settings, never returned by the server.
    item: Item = Field(default_factory=Item)
    buyer: Buyer = Field(default_factory=Buyer)
    notification_url: str = ""
    notification_email: str = ""
    redirect_url: str = ""
    transaction_speed: TransactionSpeed = TransactionSpeed.MEDIUM
    full_notifications: bool = True
    extended_notifications: bool = False


# ── Currency ─────────────────────────────────────────────────────

class Currency(_Value):
    code: str
    symbol: str = ""
    precision: int = 0
    exchange_pct_fee: Decimal = Decimal("0")
    payout_enabled: bool = False
    name: str = ""
    plural_name: str = ""
    alts: List[str] = Field(default_factory=list)
    payout_fields: List[Any] = Field(default_factory=list)


# ── Payouts ──────────────────────────────────────────────────────

class PayoutTransaction(_Value):
    transaction_id: str = ""
    amount: Decimal = Decimal("0")
    date: Any = None


class PayoutInstruction(_Value):
    id: str = ""
    label: str = ""
    address: str = ""
    amount: Decimal = Decimal("0")
    status: str = ""
    btc: Any = None
    transactions: List[PayoutTransaction] = Field(default_factory=list)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal:
        return coerce_decimal(value)


class Payout(_Value):
    """A batch of instructions paid out from the merchant account.

    ``token`` is the payroll token used to create it; ``response_token`` is
    the per-payout token the server hands back for later lookups/cancels.
    """

    id: str = ""
    account_id: str = ""
    token: Optional[str] = None
    response_token: str = ""
    currency: str = ""
    amount: Decimal = Decimal("0")
    btc_amount: Decimal = Decimal("0")
    rate: Decimal = Decimal("0")
    effective_date: Any = None
    request_date: Any = None
    pricing_method: Optional[str] = None
    status: str = ""
    reference: Optional[str] = None
    notification_url: Optional[str] = None
    notification_email: Optional[str] = None
    instructions: List[PayoutInstruction] = Field(default_factory=list)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal:
        return coerce_decimal(value)


# ── Response envelope ────────────────────────────────────────────

class Envelope(_Value):
    """Decoded ``{"data": ..., "error": ..., "errors": [...]}`` wrapper."""

    data: Any = None
    has_data: bool = False
    error: Optional[str] = None
    errors: Optional[List[str]] = None

    @property
    def error_message(self) -> Optional[str]:
        """Error text with ``errors`` taking precedence over ``error``."""
        if self.errors:
            return "\n".join(self.errors)
        if self.error:
            return self.error
        return None
