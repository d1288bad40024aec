"""
Payment Gateways - One Contract, Many Backends

The application layer talks to ``PaymentGateway`` only:

    process_payment(amount, card_number, expiry_date, cvv) -> bool
    refund_payment(transaction_id) -> bool

The legacy processor speaks a different language:

    make_payment(value, credit_card_number, exp_month, exp_year) -> bool
    (no refunds at all)

``LegacyPaymentAdapter`` translates between the two. Translation of the
expiry date is a pure function (``parse_expiry_date``) so it can be tested
without any backend.

Known limitation of the legacy integration:
Refunds are NOT supported. ``refund_payment`` always returns False and the
event is logged as ``unsupported_operation``. This is permanent, not a
transient fault - retrying will never help, a human has to reconcile.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Protocol

import structlog
from pydantic import BaseModel, ConfigDict

from order_workflow.domain.errors import (
    FailureKind,
    InvalidExpiryDateError,
    describe,
    require,
)
from order_workflow.domain.value_objects import TransactionIdentifier, mask_card_number
from order_workflow.infrastructure.legacy_processor import LegacyPaymentProcessor

logger = structlog.get_logger(__name__)

# Two-digit years are always read as 20YY. Not configurable.
FIXED_CENTURY = 2000

# The legacy API takes 32-bit signed ints for month and year.
LEGACY_INT_MAX = 2**31 - 1


class PaymentGateway(Protocol):
    """Interface every payment backend is adapted to."""

    @property
    def supports_refunds(self) -> bool:
        """False when the backend has no refund capability at all."""
        ...

    def process_payment(
        self, amount: Decimal, card_number: str, expiry_date: str, cvv: str
    ) -> bool:
        """Authorize a card payment. False means declined or invalid input."""
        ...

    def refund_payment(self, transaction_id: TransactionIdentifier | str) -> bool:
        """Refund a previously authorized payment."""
        ...


class ExpiryDate(BaseModel):
    """Card expiry as the legacy backend wants it: month + four-digit year."""

    model_config = ConfigDict(frozen=True)

    month: int
    year: int


def parse_expiry_date(expiry_date: str) -> ExpiryDate:
    """
    Parse an ``MM/YY`` expiry date.

    Rules:
    1. Exactly two '/'-separated components
    2. Each component made only of ASCII digits (no signs, no spaces)
    3. Year gets FIXED_CENTURY added: "12/25" -> month 12, year 2025

    4. Month and expanded year must fit the legacy API's int fields

    The month is not range-checked beyond that; the backend decides what it
    accepts.

    Raises:
        InvalidExpiryDateError: On any other shape.
    """
    require(expiry_date, "expiry_date")
    parts = expiry_date.split("/")
    if len(parts) != 2:
        raise InvalidExpiryDateError(
            expiry_date, f"expected MM/YY, got {len(parts)} component(s)"
        )

    month_text, year_text = parts
    for part in parts:
        if not (part.isascii() and part.isdigit()):
            raise InvalidExpiryDateError(
                expiry_date, f"component {part!r} is not numeric"
            )

    month, year = int(month_text), FIXED_CENTURY + int(year_text)
    if month > LEGACY_INT_MAX or year > LEGACY_INT_MAX:
        raise InvalidExpiryDateError(expiry_date, "component out of range")

    return ExpiryDate(month=month, year=year)


class LegacyPaymentAdapter:
    """
    Makes ``LegacyPaymentProcessor`` usable as a ``PaymentGateway``.

    Pure translation: no business rules live here.
    """

    supports_refunds = False

    def __init__(self, legacy_processor: LegacyPaymentProcessor):
        self._legacy_processor = require(legacy_processor, "legacy_processor")

    def process_payment(
        self, amount: Decimal, card_number: str, expiry_date: str, cvv: str
    ) -> bool:
        try:
            expiry = parse_expiry_date(expiry_date)
        except InvalidExpiryDateError as e:
            logger.warning(
                "payment_adapter.invalid_expiry_date",
                **describe(
                    FailureKind.VALIDATION,
                    expiry_date=expiry_date,
                    reason=e.reason,
                    card=mask_card_number(card_number),
                ),
            )
            return False

        # The legacy API has no CVV parameter; it is dropped here.
        logger.info(
            "payment_adapter.forwarding",
            amount=str(amount),
            card=mask_card_number(card_number),
            exp_month=expiry.month,
            exp_year=expiry.year,
        )
        return self._legacy_processor.make_payment(
            amount, card_number, expiry.month, expiry.year
        )

    def refund_payment(self, transaction_id: TransactionIdentifier | str) -> bool:
        logger.warning(
            "payment_adapter.refund_unsupported",
            **describe(
                FailureKind.UNSUPPORTED_OPERATION,
                transaction_id=str(transaction_id),
                manual_reconciliation_required=True,
            ),
        )
        return False


class InMemoryPaymentGateway:
    """
    Refund-capable gateway kept entirely in memory.

    Useful for:
    - Local runs where the refund path should succeed
    - Tests that need to see every charge and refund

    Blank card numbers and cards listed in ``declined_cards`` are declined.
    Each transaction id can be refunded once.
    """

    supports_refunds = True

    def __init__(self, declined_cards: Iterable[str] = ()):
        self._declined_cards = frozenset(declined_cards)
        self.charges: list[tuple[Decimal, str, ExpiryDate]] = []
        self.refunded: list[str] = []

    def process_payment(
        self, amount: Decimal, card_number: str, expiry_date: str, cvv: str
    ) -> bool:
        try:
            expiry = parse_expiry_date(expiry_date)
        except InvalidExpiryDateError as e:
            logger.warning(
                "memory_gateway.invalid_expiry_date",
                **describe(FailureKind.VALIDATION, expiry_date=expiry_date, reason=e.reason),
            )
            return False

        if not card_number.strip() or card_number in self._declined_cards:
            logger.info("memory_gateway.declined", card=mask_card_number(card_number))
            return False

        self.charges.append((amount, mask_card_number(card_number), expiry))
        return True

    def refund_payment(self, transaction_id: TransactionIdentifier | str) -> bool:
        key = str(transaction_id)
        if key in self.refunded:
            logger.warning("memory_gateway.duplicate_refund", transaction_id=key)
            return False
        self.refunded.append(key)
        logger.info("memory_gateway.refunded", transaction_id=key)
        return True
