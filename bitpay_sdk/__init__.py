"""BitPay Python SDK — signed, typed client for the BitPay API."""

from bitpay_sdk.client import BitPayClient
from bitpay_sdk.config import Settings, load_settings
from bitpay_sdk.dispatcher import CLIENT_VERSION
from bitpay_sdk.errors import (
    ApiError,
    AuthError,
    BitPayError,
    ConfigurationError,
    DecodeError,
    ForbiddenError,
    FormatError,
    NotFoundError,
    ProtocolError,
    RateLimitError,
    ServerError,
    TransportError,
    ValidationError,
)
from bitpay_sdk.keys import EcdsaPrivateKey, EcdsaPublicKey
from bitpay_sdk.models import (
    Buyer,
    Currency,
    Facade,
    Invoice,
    InvoiceStatus,
    Item,
    Payout,
    PayoutInstruction,
    PayoutTransaction,
    Token,
    TransactionSpeed,
)
from bitpay_sdk.request import Request, Response
from bitpay_sdk.transport import HttpxTransport, Transport

__version__ = CLIENT_VERSION

__all__ = [
    "BitPayClient",
    "Settings",
    "load_settings",
    "ApiError",
    "AuthError",
    "BitPayError",
    "ConfigurationError",
    "DecodeError",
    "ForbiddenError",
    "FormatError",
    "NotFoundError",
    "ProtocolError",
    "RateLimitError",
    "ServerError",
    "TransportError",
    "ValidationError",
    "EcdsaPrivateKey",
    "EcdsaPublicKey",
    "Buyer",
    "Currency",
    "Facade",
    "Invoice",
    "InvoiceStatus",
    "Item",
    "Payout",
    "PayoutInstruction",
    "PayoutTransaction",
    "Token",
    "TransactionSpeed",
    "Request",
    "Response",
    "HttpxTransport",
    "Transport",
]
