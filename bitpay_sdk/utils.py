"""Utilities: request guids, decimal coercion, price-format checks."""

from __future__ import annotations

import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from bitpay_sdk.errors import FormatError

# BTC amounts are quoted in satoshis at most.
BTC_PRECISION = 8


def generate_guid() -> str:
    """Generate a UUID4 string used to deduplicate write requests server-side."""
    return str(uuid.uuid4())


def coerce_decimal(value: Any, default: Optional[Decimal] = None) -> Decimal:
    """Turn a JSON number or en_US formatted numeric string into a Decimal.

    ``None`` and ``""`` map to *default* (or ``Decimal("0")``). Strings may
    carry ``,`` thousands separators. Anything else raises FormatError.
    """
    if value is None or value == "":
        return default if default is not None else Decimal("0")
    if isinstance(value, bool):
        raise FormatError(f"not a number: {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, str):
        try:
            result = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            raise FormatError(f"not a number: {value!r}") from None
        if not result.is_finite():
            raise FormatError(f"not a number: {value!r}")
        return result
    raise FormatError(f"not a number: {value!r}")


def fractional_digits(value: Decimal) -> int:
    exponent = value.normalize().as_tuple().exponent
    return -exponent if isinstance(exponent, int) and exponent < 0 else 0


def check_price_format(
    value: Any,
    currency: Optional[str] = None,
    precision: Optional[int] = None,
) -> Decimal:
    """Validate a price against the precision its currency allows.

    BTC prices may carry at most 8 fractional digits; an explicit *precision*
    (a Currency's ``precision``) overrides that. Without either, any number of
    digits passes. Returns the coerced Decimal.
    """
    amount = coerce_decimal(value)
    limit = precision
    if limit is None and currency is not None and currency.upper() == "BTC":
        limit = BTC_PRECISION
    if limit is not None and fractional_digits(amount) > limit:
        raise FormatError(
            f"{value!r} has more than {limit} decimal places"
            + (f" for {currency}" if currency else "")
        )
    return amount
