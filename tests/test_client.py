"""End-to-end tests for BitPayClient over an in-memory transport."""

from __future__ import annotations

import json
from decimal import Decimal

import pytest

from bitpay_sdk import (
    ApiError,
    AuthError,
    BitPayClient,
    ConfigurationError,
    Facade,
    Invoice,
    Item,
    NotFoundError,
    Payout,
    PayoutInstruction,
    ProtocolError,
    ServerError,
    Token,
    TransportError,
    ValidationError,
)
from bitpay_sdk.request import Response


# ── Invoices ─────────────────────────────────────────────────────

class TestInvoices:
    def test_create_invoice(self, client, transport, invoice_payload) -> None:
        transport.queue({"facade": "merchant/invoice", "data": invoice_payload})
        request_invoice = Invoice(currency="USD", item=Item(code="sku-1", price="10.00"))

        invoice = client.create_invoice(request_invoice)

        assert invoice.id == "5NxFkXcJbCSivtQRJa4kHP"
        assert invoice.invoice_time == 1440994025
        assert invoice.item.code == "sku-1"
        assert request_invoice.id == ""
        sent = transport.last
        assert sent.full_uri == "https://test.bitpay.com/invoices"
        assert sent.header("x-signature") is not None
        body = json.loads(sent.body)
        assert body["token"] == "MerchantTok3n"
        assert body["guid"]

    def test_create_invoice_unsigned_without_keys(self, anonymous_client, transport, invoice_payload) -> None:
        transport.queue({"data": invoice_payload})
        anonymous_client.create_invoice(Invoice(currency="USD", item=Item(price=10)))
        assert transport.last.header("x-identity") is None
        assert "token" not in json.loads(transport.last.body)

    def test_create_invoice_with_public_key_only_fails(
        self, transport, private_key, merchant_token
    ) -> None:
        c = BitPayClient(
            base_url="https://test.bitpay.com",
            token=merchant_token,
            public_key=private_key.public_key(),
            transport=transport,
        )
        with pytest.raises(ConfigurationError, match="no private key set"):
            c.create_invoice(Invoice(currency="USD", item=Item(price=10)))
        assert transport.sent == []

    def test_get_invoice_signed_with_merchant_token(self, client, transport, invoice_payload) -> None:
        transport.queue({"data": invoice_payload})
        client.get_invoice("5NxFkXcJbCSivtQRJa4kHP")
        sent = transport.last
        assert sent.path == "invoices/5NxFkXcJbCSivtQRJa4kHP?token=MerchantTok3n"
        assert sent.header("x-identity") is not None

    def test_get_invoice_anonymous(self, anonymous_client, transport, invoice_payload) -> None:
        transport.queue({"data": invoice_payload})
        invoice = anonymous_client.get_invoice("5NxFkXcJbCSivtQRJa4kHP")
        assert invoice.btc_price == Decimal("0.043022")
        assert transport.last.path == "invoices/5NxFkXcJbCSivtQRJa4kHP"
        assert transport.last.header("x-signature") is None

    def test_error_envelope_wins_over_partial_data(self, client, transport, invoice_payload) -> None:
        transport.queue({"error": "bad token", "data": invoice_payload})
        with pytest.raises(ApiError) as exc_info:
            client.get_invoice("5NxFkXcJbCSivtQRJa4kHP")
        assert exc_info.value.message == "bad token"
        assert exc_info.value.status_code == 200

    def test_errors_list_with_status(self, client, transport) -> None:
        transport.queue({"errors": ["Invalid price", "Invalid currency"]}, status_code=400)
        with pytest.raises(ApiError) as exc_info:
            client.create_invoice(Invoice(currency="XXX", item=Item(price=1)))
        assert exc_info.value.message == "Invalid price\nInvalid currency"
        assert str(exc_info.value) == "[400] Invalid price\nInvalid currency"


# ── Errors ───────────────────────────────────────────────────────

class TestErrors:
    def test_401_maps_to_auth_error(self, client, transport) -> None:
        transport.queue({"error": "Unauthorized sin"}, status_code=401)
        with pytest.raises(AuthError):
            client.get_tokens()

    def test_404_without_error_field(self, client, transport) -> None:
        transport.queue({}, status_code=404)
        with pytest.raises(NotFoundError, match="invalid status code: 404"):
            client.get_payout("missing")

    def test_non_json_502(self, client, transport) -> None:
        transport.responses.append(Response(status_code=502, body=b"<html>Bad gateway</html>"))
        with pytest.raises(ServerError):
            client.get_tokens()

    def test_non_json_200_is_protocol_error(self, client, transport) -> None:
        transport.responses.append(Response(status_code=200, body=b"OK"))
        with pytest.raises(ProtocolError):
            client.get_tokens()

    def test_empty_body_is_protocol_error(self, client, transport) -> None:
        transport.responses.append(Response(status_code=200, body=b""))
        with pytest.raises(ProtocolError, match="no data returned"):
            client.get_payout("p1")

    def test_transport_error_propagates(self, client) -> None:
        class DownTransport:
            def send(self, request):
                raise TransportError("connection refused")

        client._dispatcher._transport = DownTransport()
        with pytest.raises(TransportError, match="connection refused"):
            client.get_currencies()
        assert client.last_response is None

    def test_signed_request_kept_when_transport_fails(self, client) -> None:
        class DownTransport:
            def send(self, request):
                raise TransportError("connection refused")

        client._dispatcher._transport = DownTransport()
        with pytest.raises(TransportError):
            client.get_tokens()
        assert client.last_response is None
        assert client.last_request.full_uri == "https://test.bitpay.com/tokens"
        assert client.last_request.header("x-signature") is not None

    def test_missing_keys_fail_before_dispatch(self, transport, merchant_token) -> None:
        c = BitPayClient(base_url="https://test.bitpay.com", token=merchant_token, transport=transport)
        with pytest.raises(ConfigurationError, match="no public key set"):
            c.get_tokens()
        assert transport.sent == []

    def test_missing_host(self, monkeypatch, transport) -> None:
        monkeypatch.delenv("BITPAY_API_URL", raising=False)
        monkeypatch.delenv("BITPAY_NETWORK", raising=False)
        with pytest.raises(ConfigurationError):
            BitPayClient(transport=transport)


# ── Currencies ───────────────────────────────────────────────────

class TestCurrencies:
    def test_empty_list(self, anonymous_client, transport) -> None:
        transport.queue({"data": []})
        assert anonymous_client.get_currencies() == []

    def test_missing_data(self, anonymous_client, transport) -> None:
        transport.queue({"meta": {}})
        with pytest.raises(ProtocolError):
            anonymous_client.get_currencies()

    def test_list(self, anonymous_client, transport) -> None:
        transport.queue({"data": [{"code": "BTC", "precision": 8}, {"code": "USD", "precision": 2}]})
        codes = [c.code for c in anonymous_client.get_currencies()]
        assert codes == ["BTC", "USD"]
        assert transport.last.header("x-signature") is None


# ── Payouts ──────────────────────────────────────────────────────

class TestPayouts:
    def _payout(self) -> Payout:
        return Payout(
            amount="10",
            currency="USD",
            effective_date="1415853007000",
            pricing_method="vwap_24hr",
            instructions=[
                PayoutInstruction(label="alice", address="addr-a", amount="7"),
                PayoutInstruction(label="bob", address="addr-b", amount="3"),
                PayoutInstruction(label="carol", address="addr-c", amount="0"),
            ],
        )

    def test_create_payout_round_trip(self, client, transport) -> None:
        transport.queue(
            {
                "data": {
                    "id": "7AboMecD",
                    "account": "acct-1",
                    "token": "resp-tok",
                    "status": "new",
                    "instructions": [{"id": "i-1"}, {"id": "i-2"}, {"id": "i-3"}],
                }
            }
        )
        payout = client.create_payout(self._payout())

        sent = json.loads(transport.last.body)
        assert [i["label"] for i in sent["instructions"]] == ["alice", "bob", "carol"]
        assert [(i.label, i.id) for i in payout.instructions] == [
            ("alice", "i-1"),
            ("bob", "i-2"),
            ("carol", "i-3"),
        ]
        assert payout.response_token == "resp-tok"
        assert payout.account_id == "acct-1"

    def test_create_payout_error(self, client, transport) -> None:
        transport.queue({"error": "Insufficient balance"}, status_code=400)
        with pytest.raises(ApiError, match="Insufficient balance"):
            client.create_payout(self._payout())

    def test_get_payouts(self, client, transport, payout_payload) -> None:
        transport.queue({"data": [payout_payload]})
        payouts = client.get_payouts(status="complete")
        assert transport.last.path == "payouts?token=MerchantTok3n&status=complete"
        assert len(payouts) == 1
        assert [i.id for i in payouts[0].instructions] == ["Sra19AFU57Gwp", "Sra19AFU57Gwq"]

    def test_get_payouts_empty(self, client, transport) -> None:
        transport.queue({"data": []})
        assert client.get_payouts() == []

    def test_get_payout(self, client, transport, payout_payload) -> None:
        transport.queue({"data": payout_payload})
        payout = client.get_payout("7AboMecD4jSMXbH7DaJJvm")
        assert payout.status == "complete"
        assert payout.request_date == 1415853000000

    def test_delete_payout(self, client, transport, payout_payload) -> None:
        existing = Payout(id="7AboMecD", response_token="resp-tok", status="new")
        transport.queue({"data": {"status": "cancelled"}})
        cancelled = client.delete_payout(existing)
        assert cancelled.status == "cancelled"
        assert existing.status == "new"
        assert transport.last.method.value == "DELETE"
        assert transport.last.path == "payouts/7AboMecD?token=resp-tok"


# ── Tokens ───────────────────────────────────────────────────────

class TestTokens:
    def test_create_token_is_unsigned(self, client, transport) -> None:
        transport.queue(
            {
                "data": [
                    {
                        "policies": [],
                        "token": "5kJKzYkGn7dWMfgqmE1e3K",
                        "facade": "pos",
                        "dateCreated": 1440994025331,
                        "pairingExpiration": 1441080425331,
                        "pairingCode": "AB12345",
                    }
                ]
            }
        )
        token = client.create_token(id="TfFVQhy2hQvZmh", facade="pos")
        assert token.facade is Facade.POS
        assert token.pairing_code == "AB12345"
        assert transport.last.header("x-signature") is None
        assert transport.last.header("x-identity") is None

    def test_bad_pairing_code_sends_nothing(self, client, transport) -> None:
        with pytest.raises(ValidationError):
            client.create_token(pairing_code="AB123")
        assert transport.sent == []

    def test_create_token_http_error_without_message(self, client, transport) -> None:
        transport.queue({"data": []}, status_code=500)
        with pytest.raises(ServerError, match="invalid status code: 500"):
            client.create_token(pairing_code="AB12345")

    def test_get_tokens(self, client, transport) -> None:
        transport.queue({"data": [{"merchant": "m-tok"}, {"payroll": "p-tok"}]})
        tokens = client.get_tokens()
        assert tokens["merchant"].token == "m-tok"
        assert transport.last.header("x-signature") is not None

    def test_token_is_last_set_wins(self, client, transport, invoice_payload) -> None:
        client.token = Token(token="PosTok", facade=Facade.POS)
        transport.queue({"data": invoice_payload})
        client.get_invoice("5NxFkXcJbCSivtQRJa4kHP")
        assert transport.last.path == "invoices/5NxFkXcJbCSivtQRJa4kHP"


# ── Introspection ────────────────────────────────────────────────

class TestIntrospection:
    def test_last_request_and_response(self, anonymous_client, transport) -> None:
        assert anonymous_client.last_request is None
        transport.queue({"data": []})
        anonymous_client.get_currencies()
        assert anonymous_client.last_request is transport.last
        assert anonymous_client.last_response.status_code == 200
        assert anonymous_client.last_request.header("x-accept-version") == "2.0.0"

    def test_kept_after_api_error(self, client, transport) -> None:
        transport.queue({"error": "nope"}, status_code=403)
        with pytest.raises(ApiError):
            client.get_tokens()
        assert client.last_response.status_code == 403
