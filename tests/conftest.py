"""Shared fixtures for BitPay SDK tests.

A recording in-memory transport stands in for the network; no test opens a
socket.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional

import pytest

from bitpay_sdk import BitPayClient, EcdsaPrivateKey, Facade, Token
from bitpay_sdk.request import Request, Response

BASE_URL = "https://test.bitpay.com"


def json_response(payload: Any, status_code: int = 200) -> Response:
    return Response(status_code=status_code, body=json.dumps(payload).encode("utf-8"))


class FakeTransport:
    """Returns queued responses in order and records every request sent."""

    def __init__(self, *responses: Response) -> None:
        self.responses: List[Response] = list(responses)
        self.sent: List[Request] = []

    def queue(self, payload: Any, status_code: int = 200) -> None:
        self.responses.append(json_response(payload, status_code))

    def send(self, request: Request) -> Response:
        self.sent.append(request)
        if not self.responses:
            raise AssertionError(f"unexpected request: {request.method.value} {request.full_uri}")
        return self.responses.pop(0)

    @property
    def last(self) -> Optional[Request]:
        return self.sent[-1] if self.sent else None


@pytest.fixture(scope="session")
def private_key() -> EcdsaPrivateKey:
    return EcdsaPrivateKey.generate()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def merchant_token() -> Token:
    return Token(token="MerchantTok3n", facade=Facade.MERCHANT)


@pytest.fixture
def client(transport, private_key, merchant_token) -> BitPayClient:
    """Client holding a merchant token and a key pair."""
    return BitPayClient(
        base_url=BASE_URL,
        token=merchant_token,
        public_key=private_key.public_key(),
        private_key=private_key,
        transport=transport,
    )


@pytest.fixture
def anonymous_client(transport) -> BitPayClient:
    """Client with neither token nor keys."""
    return BitPayClient(base_url=BASE_URL, transport=transport)


@pytest.fixture
def invoice_payload() -> dict:
    return {
        "id": "5NxFkXcJbCSivtQRJa4kHP",
        "url": "https://test.bitpay.com/invoice?id=5NxFkXcJbCSivtQRJa4kHP",
        "posData": "{\"ref\": 711}",
        "status": "new",
        "btcPrice": "0.043022",
        "price": 10,
        "taxIncluded": 0,
        "currency": "USD",
        "orderId": "order-1001",
        "invoiceTime": 1440994025331,
        "expirationTime": 1440994925331,
        "currentTime": 1440994030005,
        "amountPaid": 0,
        "rate": 232.44,
        "exceptionStatus": False,
        "refundAddresses": [],
        "transactionCurrency": "BTC",
        "paymentTotals": {"BTC": 4302200},
        "paymentSubtotals": {"BTC": 4302200},
        "exchangeRates": {"BTC": {"USD": 232.44}},
        "paymentUrls": {"BIP21": "bitcoin:mxkm?amount=0.043022"},
        "token": "8Gbf9bK2Y5qVwqMi1JkLsR",
    }


@pytest.fixture
def payout_payload() -> dict:
    return {
        "id": "7AboMecD4jSMXbH7DaJJvm",
        "account": "YJCgTf3jrXHkUVzLQ7y4eg",
        "currency": "USD",
        "amount": 10,
        "btc": 0.0431,
        "rate": 232.0,
        "effectiveDate": 1415853007000,
        "requestDate": 1415853000000,
        "pricingMethod": "vwap_24hr",
        "status": "complete",
        "token": "3h8Lf2PiQzjf3xbYcpuYK3",
        "reference": "payroll-oct",
        "notificationURL": "https://merchant.example/ipn",
        "notificationEmail": "ops@merchant.example",
        "instructions": [
            {
                "id": "Sra19AFU57Gwp",
                "label": "alice",
                "address": "mzDTjhkfJfatXHRUWKcE2BXxHt4Pfz2PK7",
                "amount": 7,
                "status": "paid",
                "btc": {"unpaid": 0, "paid": 0.0301},
                "transactions": [
                    {"txid": "tx-a1", "amount": 0.02, "date": "2014-11-13T04:30:09.000Z"},
                    {"txid": "tx-a2", "amount": 0.0101, "date": "2014-11-13T04:31:10.000Z"},
                ],
            },
            {
                "id": "Sra19AFU57Gwq",
                "label": "bob",
                "address": "mvHbzUbjJ7gKCBGazdjMdR3s4kTuBjqhJ8",
                "amount": 3,
                "status": "unpaid",
                "btc": {"unpaid": 0.013, "paid": 0},
                "transactions": [],
            },
        ],
    }
