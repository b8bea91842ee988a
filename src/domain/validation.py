from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Callable

from pydantic import BaseModel, ConfigDict

from .addresses import AddressClassifier
from .chains import FIAT_ASSET, is_tokenized, is_tradable
from .transaction import (
    REQUEST_TYPES,
    PaymentMethod,
    TransactionRequest,
    TransactionType,
    has_wallet_destination,
    recipient_of,
)

logger = logging.getLogger(__name__)

MISSING_REQUIRED_FIELDS = "Missing required fields"

MINIMUM_AMOUNTS: dict[TransactionType, Decimal] = {
    TransactionType.ADD: Decimal(10),
    TransactionType.WITHDRAW: Decimal(10),
    TransactionType.SEND: Decimal(5),
    TransactionType.RECEIVE: Decimal(5),
    TransactionType.TRANSFER: Decimal(10),
    TransactionType.BUY: Decimal(10),
    TransactionType.SELL: Decimal(10),
    TransactionType.INVEST: Decimal(10),
}

# Stateless per-request caps; rolling daily or monthly limits need history and live elsewhere.
MAXIMUM_AMOUNTS: dict[TransactionType, Decimal] = {
    TransactionType.ADD: Decimal(50000),
    TransactionType.WITHDRAW: Decimal(100000),
    TransactionType.SEND: Decimal(100000),
    TransactionType.RECEIVE: Decimal(100000),
    TransactionType.TRANSFER: Decimal(100000),
    TransactionType.BUY: Decimal(25000),
    TransactionType.SELL: Decimal(100000),
    TransactionType.INVEST: Decimal(1000000),
}

USERNAME_PATTERN = re.compile(r"^@[A-Za-z0-9_]{3,20}$")

_KNOWN_PAYMENT_METHODS = frozenset(method.value for method in PaymentMethod)


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_valid: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(is_valid=True)

    @classmethod
    def fail(cls, error: str) -> ValidationResult:
        return cls(is_valid=False, error=error)


def parse_amount(raw: Decimal | str | None) -> Decimal | None:
    """Return the amount as a positive finite Decimal, or None when it is not one."""
    if raw is None:
        return None
    try:
        amount = Decimal(raw.strip()) if isinstance(raw, str) else Decimal(raw)
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


# A step returns None to pass, or the failure reason.
ValidationStep = Callable[[TransactionRequest], str | None]


class TransactionValidator:
    """Ordered structural and business-rule checks; stops at the first failure.

    Balance sufficiency is not checked here, that is the routing planner's job.
    """

    def __init__(self, *, address_classifier: AddressClassifier | None = None) -> None:
        self._address_classifier = address_classifier or AddressClassifier()
        self._steps: tuple[ValidationStep, ...] = (
            self._check_required_fields,
            self._check_amount,
            self._check_minimum,
            self._check_maximum,
            self._check_recipient,
            self._check_asset,
            self._check_payment_method,
        )

    def validate(self, user_id: str, request: TransactionRequest) -> ValidationResult:
        if not isinstance(request, REQUEST_TYPES):
            raise TypeError(f"expected a transaction request, got {type(request).__name__}")

        for step in self._steps:
            error = step(request)
            if error is not None:
                logger.info("Rejected %s request for user=%s: %s", request.type, user_id, error)
                return ValidationResult.fail(error)
        return ValidationResult.ok()

    @staticmethod
    def _check_required_fields(request: TransactionRequest) -> str | None:
        amount = request.amount
        if amount is None or (isinstance(amount, str) and not amount.strip()):
            return MISSING_REQUIRED_FIELDS
        return None

    @staticmethod
    def _check_amount(request: TransactionRequest) -> str | None:
        if parse_amount(request.amount) is None:
            return "Invalid amount"
        return None

    @staticmethod
    def _check_minimum(request: TransactionRequest) -> str | None:
        amount = parse_amount(request.amount)
        minimum = MINIMUM_AMOUNTS[TransactionType(request.type)]
        if amount is not None and amount < minimum:
            return f"Minimum amount for {request.type} is ${minimum}"
        return None

    @staticmethod
    def _check_maximum(request: TransactionRequest) -> str | None:
        amount = parse_amount(request.amount)
        maximum = MAXIMUM_AMOUNTS[TransactionType(request.type)]
        if amount is not None and amount > maximum:
            return f"Maximum amount for {request.type} is ${maximum}"
        return None

    def _check_recipient(self, request: TransactionRequest) -> str | None:
        transaction_type = TransactionType(request.type)
        recipient = recipient_of(request)
        stripped = recipient.strip() if recipient else ""

        if transaction_type in (TransactionType.SEND, TransactionType.RECEIVE):
            if not stripped:
                return "Recipient is required"
            if USERNAME_PATTERN.match(stripped) is None:
                return "Invalid diBoaS username"
            return None

        if not has_wallet_destination(request):
            return None
        if not stripped:
            return "Wallet address is required"
        classification = self._address_classifier.classify(stripped)
        if not classification.is_supported:
            return classification.reason
        return None

    @staticmethod
    def _check_asset(request: TransactionRequest) -> str | None:
        transaction_type = TransactionType(request.type)
        asset = (request.asset or "").strip().upper()

        if transaction_type in (TransactionType.BUY, TransactionType.SELL):
            if not asset:
                return "Asset selection is required"
            if transaction_type == TransactionType.BUY and asset == FIAT_ASSET:
                return "Cannot buy USD. Please select a cryptocurrency or tokenized asset"
            if not is_tradable(asset):
                return f"Invalid asset for {transaction_type} transaction"
        elif transaction_type == TransactionType.INVEST:
            if not asset:
                return "Asset selection is required"
            if not is_tokenized(asset):
                return f"Invalid asset for {transaction_type} transaction"
        return None

    @staticmethod
    def _check_payment_method(request: TransactionRequest) -> str | None:
        transaction_type = TransactionType(request.type)
        payment_method = request.payment_method

        if not payment_method:
            if transaction_type == TransactionType.ADD:
                return "Please select a payment method to add funds"
            if transaction_type == TransactionType.WITHDRAW:
                return "Please select where to withdraw funds"
            return None
        if payment_method not in _KNOWN_PAYMENT_METHODS:
            return "Unsupported payment method"
        return None


__all__ = [
    "MAXIMUM_AMOUNTS",
    "MINIMUM_AMOUNTS",
    "MISSING_REQUIRED_FIELDS",
    "TransactionValidator",
    "ValidationResult",
    "parse_amount",
]
