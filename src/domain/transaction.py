from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class TransactionType(StrEnum):
    ADD = "add"
    WITHDRAW = "withdraw"
    SEND = "send"
    RECEIVE = "receive"
    TRANSFER = "transfer"
    BUY = "buy"
    SELL = "sell"
    INVEST = "invest"


class PaymentMethod(StrEnum):
    # Platform-internal funding sources.
    DIBOAS_WALLET = "diboas_wallet"
    EXTERNAL_WALLET = "external_wallet"
    INVESTED_BALANCE = "invested_balance"
    # Traditional rails.
    APPLE_PAY = "apple_pay"
    GOOGLE_PAY = "google_pay"
    CREDIT_DEBIT_CARD = "credit_debit_card"
    BANK_ACCOUNT = "bank_account"
    PAYPAL = "paypal"


PLATFORM_PAYMENT_METHODS: frozenset[str] = frozenset(
    {PaymentMethod.DIBOAS_WALLET, PaymentMethod.EXTERNAL_WALLET, PaymentMethod.INVESTED_BALANCE}
)


def is_traditional_rail(payment_method: str | None) -> bool:
    return payment_method is not None and payment_method not in PLATFORM_PAYMENT_METHODS


class _BaseRequest(BaseModel):
    """Fields shared by every transaction request.

    ``amount`` keeps the caller's raw value; the validator decides whether it is a usable decimal so
    that a bad amount is reported as a validation failure instead of a construction error.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    amount: Decimal | str | None = None
    asset: str | None = None
    payment_method: str | None = None
    source_user_id: str | None = None


class _RecipientRequest(_BaseRequest):
    recipient: str | None = None


class AddRequest(_BaseRequest):
    type: Literal["add"] = "add"
    asset: str | None = "USD"


class WithdrawRequest(_RecipientRequest):
    type: Literal["withdraw"] = "withdraw"
    asset: str | None = "USD"

    @property
    def is_external_wallet(self) -> bool:
        return self.payment_method == PaymentMethod.EXTERNAL_WALLET


class SendRequest(_RecipientRequest):
    type: Literal["send"] = "send"
    asset: str | None = "USDC"


class ReceiveRequest(_RecipientRequest):
    type: Literal["receive"] = "receive"
    asset: str | None = "USDC"


class TransferRequest(_RecipientRequest):
    type: Literal["transfer"] = "transfer"
    asset: str | None = "USDC"


class BuyRequest(_BaseRequest):
    type: Literal["buy"] = "buy"


class SellRequest(_BaseRequest):
    type: Literal["sell"] = "sell"


class InvestRequest(_BaseRequest):
    type: Literal["invest"] = "invest"


TransactionRequest = Annotated[
    Union[
        AddRequest,
        WithdrawRequest,
        SendRequest,
        ReceiveRequest,
        TransferRequest,
        BuyRequest,
        SellRequest,
        InvestRequest,
    ],
    Field(discriminator="type"),
]

REQUEST_TYPES: tuple[type[_BaseRequest], ...] = (
    AddRequest,
    WithdrawRequest,
    SendRequest,
    ReceiveRequest,
    TransferRequest,
    BuyRequest,
    SellRequest,
    InvestRequest,
)

_request_adapter: TypeAdapter[TransactionRequest] = TypeAdapter(TransactionRequest)


def parse_request(payload: Mapping[str, Any]) -> TransactionRequest:
    """Build the request variant matching ``payload["type"]``.

    Raises ``pydantic.ValidationError`` for malformed payloads (unknown type, wrong field types,
    fields that do not belong to the type).
    """
    return _request_adapter.validate_python(dict(payload))


def recipient_of(request: TransactionRequest) -> str | None:
    return getattr(request, "recipient", None)


def has_wallet_destination(request: TransactionRequest) -> bool:
    """True when the recipient is an on-chain wallet address rather than a username or a payment rail."""
    return isinstance(request, TransferRequest) or (isinstance(request, WithdrawRequest) and request.is_external_wallet)


__all__ = [
    "AddRequest",
    "BuyRequest",
    "InvestRequest",
    "PaymentMethod",
    "ReceiveRequest",
    "REQUEST_TYPES",
    "SellRequest",
    "SendRequest",
    "TransactionRequest",
    "TransactionType",
    "TransferRequest",
    "WithdrawRequest",
    "has_wallet_destination",
    "is_traditional_rail",
    "parse_request",
    "recipient_of",
]
