from decimal import Decimal
from typing import Any

import pytest

from domain.transaction import (
    AddRequest,
    BuyRequest,
    InvestRequest,
    SellRequest,
    SendRequest,
    TransferRequest,
    WithdrawRequest,
    parse_request,
)
from domain.validation import TransactionValidator, parse_amount
from tests.constants import BTC_P2PKH_ADDRESS, ETH_ADDRESS, TRON_ADDRESS, USER_ID, USERNAME


def _validate(payload: dict[str, Any]) -> str | None:
    result = TransactionValidator().validate(USER_ID, parse_request(payload))
    assert result.is_valid == (result.error is None)
    return result.error


@pytest.mark.parametrize(
    ("payload", "minimum"),
    [
        ({"type": "add", "amount": "9.99", "payment_method": "apple_pay"}, "10"),
        ({"type": "withdraw", "amount": "1", "payment_method": "bank_account"}, "10"),
        ({"type": "send", "amount": "4.99", "recipient": USERNAME}, "5"),
        ({"type": "receive", "amount": "0.5", "recipient": USERNAME}, "5"),
        ({"type": "transfer", "amount": "9", "recipient": ETH_ADDRESS}, "10"),
        ({"type": "buy", "amount": "9", "asset": "BTC"}, "10"),
        ({"type": "sell", "amount": "9", "asset": "ETH"}, "10"),
        ({"type": "invest", "amount": "9", "asset": "PAXG"}, "10"),
    ],
)
def test_amount_below_minimum_quotes_minimum(payload: dict[str, Any], minimum: str) -> None:
    assert _validate(payload) == f"Minimum amount for {payload['type']} is ${minimum}"


@pytest.mark.parametrize(
    ("payload", "maximum"),
    [
        ({"type": "add", "amount": "50000.01", "payment_method": "apple_pay"}, "50000"),
        ({"type": "withdraw", "amount": "100001", "payment_method": "bank_account"}, "100000"),
        ({"type": "send", "amount": "1e30", "recipient": USERNAME}, "100000"),
        ({"type": "buy", "amount": "25000.5", "asset": "BTC"}, "25000"),
        ({"type": "sell", "amount": "250000", "asset": "ETH"}, "100000"),
        ({"type": "invest", "amount": "2000000", "asset": "PAXG"}, "1000000"),
    ],
)
def test_amount_above_maximum_quotes_maximum(payload: dict[str, Any], maximum: str) -> None:
    assert _validate(payload) == f"Maximum amount for {payload['type']} is ${maximum}"


def test_buy_at_maximum_is_accepted() -> None:
    assert _validate({"type": "buy", "amount": "25000", "asset": "ETH"}) is None


def test_send_at_minimum_is_accepted() -> None:
    assert _validate({"type": "send", "amount": "5.00", "recipient": USERNAME}) is None
    assert _validate({"type": "send", "amount": "4.99", "recipient": USERNAME}) == "Minimum amount for send is $5"


@pytest.mark.parametrize("amount", [None, "", "   "])
def test_missing_amount(amount: Any) -> None:
    assert _validate({"type": "buy", "amount": amount, "asset": "BTC"}) == "Missing required fields"


@pytest.mark.parametrize("amount", ["abc", "0", "-10", "NaN", "Infinity", Decimal("-1")])
def test_invalid_amount(amount: Any) -> None:
    assert _validate({"type": "buy", "amount": amount, "asset": "BTC"}) == "Invalid amount"


@pytest.mark.parametrize(
    ("recipient", "error"),
    [
        (None, "Recipient is required"),
        ("", "Recipient is required"),
        ("john", "Invalid diBoaS username"),
        ("@jo", "Invalid diBoaS username"),
        ("@" + "a" * 21, "Invalid diBoaS username"),
        ("@john-doe", "Invalid diBoaS username"),
        ("@john_doe", None),
    ],
)
def test_send_recipient_rules(recipient: str | None, error: str | None) -> None:
    assert _validate({"type": "send", "amount": "10", "recipient": recipient}) == error


@pytest.mark.parametrize(
    ("recipient", "error"),
    [
        (None, "Wallet address is required"),
        ("  ", "Wallet address is required"),
        ("not-a-wallet", "Invalid wallet address format"),
        (TRON_ADDRESS, "TRON addresses are not currently supported"),
        (ETH_ADDRESS, None),
    ],
)
def test_transfer_recipient_rules(recipient: str | None, error: str | None) -> None:
    assert _validate({"type": "transfer", "amount": "100", "recipient": recipient}) == error


def test_withdraw_recipient_only_checked_for_external_wallet() -> None:
    validator = TransactionValidator()

    to_bank = WithdrawRequest(amount="100", payment_method="bank_account")
    to_wallet = WithdrawRequest(amount="100", payment_method="external_wallet")
    to_btc = WithdrawRequest(amount="100", payment_method="external_wallet", recipient=BTC_P2PKH_ADDRESS)

    assert validator.validate(USER_ID, to_bank).is_valid
    assert validator.validate(USER_ID, to_wallet).error == "Wallet address is required"
    assert validator.validate(USER_ID, to_btc).is_valid


@pytest.mark.parametrize(
    ("request_", "error"),
    [
        (BuyRequest(amount="100"), "Asset selection is required"),
        (BuyRequest(amount="100", asset="USD"), "Cannot buy USD. Please select a cryptocurrency or tokenized asset"),
        (BuyRequest(amount="100", asset="usd"), "Cannot buy USD. Please select a cryptocurrency or tokenized asset"),
        (BuyRequest(amount="100", asset="DOGE"), "Invalid asset for buy transaction"),
        (SellRequest(amount="100"), "Asset selection is required"),
        (SellRequest(amount="100", asset="DOGE"), "Invalid asset for sell transaction"),
        (SellRequest(amount="100", asset="PAXG"), None),
        (BuyRequest(amount="100", asset="xaut"), None),
        (InvestRequest(amount="100"), "Asset selection is required"),
        (InvestRequest(amount="100", asset="BTC"), "Invalid asset for invest transaction"),
        (BuyRequest(amount="100", asset="sol"), None),
        (InvestRequest(amount="100", asset="XAUT"), None),
    ],
)
def test_asset_rules(request_: Any, error: str | None) -> None:
    assert TransactionValidator().validate(USER_ID, request_).error == error


def test_buy_usd_is_rejected_for_any_amount_and_payment_method() -> None:
    validator = TransactionValidator()

    for amount in ("10", "1000", "999999"):
        for payment_method in (None, "diboas_wallet", "apple_pay"):
            request = BuyRequest(amount=amount, asset="USD", payment_method=payment_method)
            assert not validator.validate(USER_ID, request).is_valid


def test_payment_method_rules() -> None:
    validator = TransactionValidator()

    assert validator.validate(USER_ID, AddRequest(amount="50")).error == "Please select a payment method to add funds"
    assert validator.validate(USER_ID, WithdrawRequest(amount="50")).error == "Please select where to withdraw funds"
    assert validator.validate(USER_ID, AddRequest(amount="50", payment_method="venmo")).error == (
        "Unsupported payment method"
    )
    assert validator.validate(USER_ID, AddRequest(amount="50", payment_method="paypal")).is_valid


def test_first_failing_step_wins() -> None:
    # Below minimum and missing recipient: the amount check runs first.
    request = SendRequest(amount="1")

    assert TransactionValidator().validate(USER_ID, request).error == "Minimum amount for send is $5"


def test_transfer_request_requires_wallet_before_asset_checks() -> None:
    request = TransferRequest(amount="50", recipient="@john")

    assert TransactionValidator().validate(USER_ID, request).error == "Invalid wallet address format"


def test_validate_rejects_non_request_objects() -> None:
    with pytest.raises(TypeError):
        TransactionValidator().validate(USER_ID, {"type": "buy", "amount": "10"})  # type: ignore[arg-type]


def test_parse_amount() -> None:
    assert parse_amount(" 12.50 ") == Decimal("12.50")
    assert parse_amount(Decimal("3")) == Decimal("3")
    assert parse_amount("1e3") == Decimal("1000")
    assert parse_amount("sNaN") is None
    assert parse_amount(None) is None
