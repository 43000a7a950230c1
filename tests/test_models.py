import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from interledger_payments.core.codec import ResourceCodec
from interledger_payments.core.models import (
    AccessAction,
    AccessItem,
    AccessItemType,
    ApiError,
    GrantAccessRequest,
    InterledgerAmount,
    PaymentPointer,
    PaymentRequest,
    Quote,
    WalletAddress,
)

codec = ResourceCodec()


def _receiver(code: str = "EUR", scale: int = 2) -> PaymentPointer:
    return PaymentPointer(
        address="https://ilp.test/bob",
        asset_code=code,
        asset_scale=scale,
        auth_server="https://auth.test",
        resource_server="https://ilp.test",
    )


def test_amount_rounds_to_cents_before_scaling() -> None:
    amount = InterledgerAmount.build(12.3456, "EUR")
    assert amount.amount == "1235"
    assert amount.asset_scale == 2
    assert amount.as_decimal() == Decimal("12.35")


@pytest.mark.parametrize(
    "value, scale, expected",
    [
        (Decimal("0.005"), 2, "1"),
        (Decimal("0.015"), 2, "2"),
        (2.675, 2, "268"),
        ("10", 2, "1000"),
        (7, 0, "7"),
        (Decimal("12.345"), 0, "12"),
        (Decimal("12.3456"), 3, "12350"),
        (Decimal("0"), 2, "0"),
    ],
)
def test_amount_scaling(value, scale, expected) -> None:
    assert InterledgerAmount.build(value, "USD", scale).amount == expected


def test_amount_keeps_precision_for_large_values() -> None:
    amount = InterledgerAmount.build(Decimal("12345678901234567890.12345"), "USD")
    assert amount.amount == "1234567890123456789012"
    assert amount.as_decimal() == Decimal("12345678901234567890.12")


@pytest.mark.parametrize(
    "value, code, message",
    [
        (None, "EUR", "amount cannot be null or empty."),
        (Decimal("1"), None, "assetCode cannot be null or empty."),
        (Decimal("1"), " ", "assetCode cannot be null or empty."),
        (
            Decimal("1"),
            "EU",
            "assetCode must be 3 characters long / ISO4217 currency code, but was: 'EU'.",
        ),
        (Decimal("-0.01"), "EUR", "amount cannot be negative."),
    ],
)
def test_amount_validation_messages(value, code, message) -> None:
    with pytest.raises(ValueError, match=re.escape(message)):
        InterledgerAmount.build(value, code)


def test_amount_from_wire_requires_unsigned_integer() -> None:
    with pytest.raises(ValueError):
        InterledgerAmount.from_payload({"value": "-5", "assetCode": "EUR", "assetScale": 2}, codec)
    with pytest.raises(ValueError):
        InterledgerAmount.from_payload({"value": "1.5", "assetCode": "EUR", "assetScale": 2}, codec)


def test_wallet_address_expands_payment_pointers() -> None:
    assert WalletAddress("$ilp.test/alice").uri == "https://ilp.test/alice"
    assert str(WalletAddress(" https://ilp.test/alice ")) == "https://ilp.test/alice"


@pytest.mark.parametrize("value", ["not a uri", "ilp.test/alice", ""])
def test_wallet_address_rejects_invalid_values(value) -> None:
    with pytest.raises(ValueError):
        WalletAddress(value)


def test_access_enums_map_wire_values() -> None:
    assert AccessAction.from_value("read-all") is AccessAction.READ_ALL
    assert AccessItemType.from_value("outgoing-payment") is AccessItemType.OUTGOING_PAYMENT
    with pytest.raises(ValueError, match="Unknown AccessItemType"):
        AccessItemType.from_value("refund")


def test_identifier_and_limits_only_for_outgoing_payments() -> None:
    with pytest.raises(ValueError):
        AccessItem(type=AccessItemType.QUOTE, actions={AccessAction.READ}, identifier="https://ilp.test/a")


def test_outgoing_grant_request_payload() -> None:
    debit = InterledgerAmount(asset_code="EUR", asset_scale=2, amount="1241")
    request = GrantAccessRequest.outgoing(
        WalletAddress("https://ilp.test/client"),
        {AccessAction.READ, AccessAction.CREATE},
        "https://ilp.test/alice",
        debit,
    ).redirect_interact("https://shop.test/return", "nonce-1")

    assert codec.encode_text(request) == (
        '{"client":"https://ilp.test/client",'
        '"access_token":{"access":[{"type":"outgoing-payment","actions":["create","read"],'
        '"identifier":"https://ilp.test/alice",'
        '"limits":{"debitAmount":{"assetCode":"EUR","assetScale":2,"value":"1241"}}}]},'
        '"interact":{"start":["redirect"],'
        '"finish":{"method":"redirect","uri":"https://shop.test/return","nonce":"nonce-1"}}}'
    )


def test_redirect_interaction_requires_nonce() -> None:
    request = GrantAccessRequest.build(WalletAddress("https://ilp.test/c"), AccessItemType.QUOTE, {AccessAction.READ})
    with pytest.raises(ValueError):
        request.redirect_interact("https://shop.test/return", "")


@pytest.mark.parametrize("scale", [-1, 256])
def test_amount_scale_range(scale) -> None:
    with pytest.raises(ValueError, match="assetScale must be between 0 and 255"):
        InterledgerAmount.build(Decimal("1"), "EUR", scale)


def test_payment_pointer_asset_scale_range() -> None:
    with pytest.raises(ValueError):
        _receiver(scale=256)


def test_payment_request_scales_to_receiver_asset() -> None:
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    request = PaymentRequest.build(_receiver("USD", 3), Decimal("1.5"), 600, now=now)
    assert request.incoming_amount == InterledgerAmount(asset_code="USD", asset_scale=3, amount="1500")
    assert request.expires_at == now + timedelta(minutes=10)
    assert codec.encode_text(request) == (
        '{"walletAddress":"https://ilp.test/bob",'
        '"incomingAmount":{"assetCode":"USD","assetScale":3,"value":"1500"},'
        '"expiresAt":"2026-01-01T00:10:00.000Z"}'
    )


@pytest.mark.parametrize("value, expiry", [(Decimal("0"), 600), (Decimal("-1"), 600), (Decimal("1"), 0)])
def test_payment_request_rejects_invalid_input(value, expiry) -> None:
    with pytest.raises(ValueError):
        PaymentRequest.build(_receiver(), value, expiry)


def test_quote_expiry_and_method() -> None:
    payload = {
        "id": "https://ilp.test/quotes/q",
        "walletAddress": "https://ilp.test/alice",
        "receiver": "https://ilp.test/incoming-payments/p",
        "debitAmount": {"value": "100", "assetCode": "EUR", "assetScale": 2},
        "receiveAmount": {"value": "99", "assetCode": "EUR", "assetScale": 2},
        "method": "ilp",
        "expiresAt": "2026-01-01T00:05:00Z",
    }
    quote = Quote.from_payload(payload, codec)
    assert not quote.is_expired(datetime(2026, 1, 1, 0, 4, 59, tzinfo=timezone.utc))
    assert quote.is_expired(datetime(2026, 1, 1, 0, 5, tzinfo=timezone.utc))

    with pytest.raises(ValueError, match="Unsupported payment method"):
        Quote.from_payload(dict(payload, method="card"), codec)


def test_api_error_envelopes() -> None:
    nested = ApiError.from_payload({"error": {"code": "invalid_client", "description": "bad key"}}, codec)
    assert nested == ApiError(code="invalid_client", description="bad key")
    flat = ApiError.from_payload({"message": "Not found"}, codec)
    assert flat == ApiError(code=None, description="Not found")
