"""
Receivers - The Objects That Actually Change State

Commands decide WHEN something happens; receivers decide WHAT happens.

OrderProcessor:
- place_order / cancel_order are guarded: placing an order twice or
  cancelling an order that isn't placed is a no-op that returns False and
  logs ``protocol_misuse``. Nothing is raised.

PaymentSystem:
- authorize_payment delegates to the gateway
- rollback_payment never raises for business outcomes, even when the
  gateway can't refund at all (that case needs manual reconciliation)
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

import structlog

from order_workflow.domain.errors import FailureKind, describe, require
from order_workflow.domain.models import Order
from order_workflow.domain.value_objects import TransactionIdentifier, mask_card_number
from order_workflow.infrastructure.payment_gateway import PaymentGateway

logger = structlog.get_logger(__name__)


class RollbackOutcome(str, Enum):
    """What happened when a payment rollback was attempted."""

    REFUNDED = "refunded"
    REFUND_FAILED = "refund_failed"  # Gateway refused this refund
    UNSUPPORTED = "unsupported"  # Gateway can never refund; reconcile manually


class OrderProcessor:
    """Places and cancels orders. Tracks which orders are currently placed."""

    def __init__(self) -> None:
        self._placed: set[str] = set()

    def is_placed(self, order: Order) -> bool:
        return str(order.order_id) in self._placed

    def place_order(self, order: Order) -> bool:
        order = require(order, "order")
        order_id = str(order.order_id)
        if order_id in self._placed:
            logger.warning(
                "order_processor.already_placed",
                **describe(FailureKind.PROTOCOL_MISUSE, order_id=order_id),
            )
            return False

        self._placed.add(order_id)
        logger.info(
            "order_processor.order_placed",
            order_id=order_id,
            total_amount=str(order.total_amount),
            item_count=len(order.items),
            details=order.display_order_details(),
        )
        return True

    def cancel_order(self, order: Order) -> bool:
        order = require(order, "order")
        order_id = str(order.order_id)
        if order_id not in self._placed:
            logger.warning(
                "order_processor.not_placed",
                **describe(FailureKind.PROTOCOL_MISUSE, order_id=order_id),
            )
            return False

        self._placed.discard(order_id)
        logger.info("order_processor.order_cancelled", order_id=order_id)
        return True


class PaymentSystem:
    """Handles payment authorization and rollback through a ``PaymentGateway``."""

    def __init__(self, payment_gateway: PaymentGateway):
        self._payment_gateway = require(payment_gateway, "payment_gateway")

    def authorize_payment(
        self, amount: Decimal, card_number: str, expiry_date: str, cvv: str
    ) -> bool:
        logger.info(
            "payment_system.authorizing",
            amount=str(amount),
            card=mask_card_number(card_number),
        )
        return self._payment_gateway.process_payment(
            amount, card_number, expiry_date, cvv
        )

    def rollback_payment(
        self, transaction_id: TransactionIdentifier | str
    ) -> RollbackOutcome:
        transaction_id = require(transaction_id, "transaction_id")
        logger.info("payment_system.rolling_back", transaction_id=str(transaction_id))

        refunded = self._payment_gateway.refund_payment(transaction_id)
        if refunded:
            return RollbackOutcome.REFUNDED

        if not self._payment_gateway.supports_refunds:
            logger.warning(
                "payment_system.rollback_unsupported",
                **describe(
                    FailureKind.UNSUPPORTED_OPERATION,
                    transaction_id=str(transaction_id),
                    manual_reconciliation_required=True,
                ),
            )
            return RollbackOutcome.UNSUPPORTED

        logger.error("payment_system.rollback_failed", transaction_id=str(transaction_id))
        return RollbackOutcome.REFUND_FAILED
