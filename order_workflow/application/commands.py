"""
Workflow Commands - Reversible Actions

Each command wraps ONE workflow action plus what it needs to reverse it.

State machine:
    PENDING → EXECUTED → UNDONE
        ↓
      FAILED

- execute() only runs from PENDING
- undo() only reverses from EXECUTED
- Everything else is reported (log + return value), never raised

Undo outcomes:
    NEVER_EXECUTED      undo before execute
    NOTHING_TO_UNDO     execute ran but failed (e.g. card declined)
    ALREADY_UNDONE      second undo
    REVERSED            order cancelled
    ROLLBACK_ATTEMPTED  payment rollback sent to the gateway (see rollback_outcome)
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

import structlog

from order_workflow.application.receivers import (
    OrderProcessor,
    PaymentSystem,
    RollbackOutcome,
)
from order_workflow.domain.errors import FailureKind, describe, require
from order_workflow.domain.models import Order
from order_workflow.domain.value_objects import CardDetails, TransactionIdentifier

logger = structlog.get_logger(__name__)


class CommandState(str, Enum):
    """Command lifecycle states."""

    PENDING = "pending"
    EXECUTED = "executed"
    FAILED = "failed"
    UNDONE = "undone"


class UndoOutcome(str, Enum):
    """Result of asking a command (or the invoker) to undo."""

    REVERSED = "reversed"
    ROLLBACK_ATTEMPTED = "rollback_attempted"
    NOTHING_TO_UNDO = "nothing_to_undo"
    NEVER_EXECUTED = "never_executed"
    ALREADY_UNDONE = "already_undone"


class Command(ABC):
    """
    Base class for reversible workflow actions.

    Subclasses implement:
    - _execute(): do the work, return True on success
    - _undo(): reverse a successful _execute()
    """

    name = "command"

    def __init__(self) -> None:
        self.command_id = str(uuid.uuid4())
        self.state = CommandState.PENDING
        self.executed_at: datetime | None = None
        self.undone_at: datetime | None = None

    def execute(self) -> CommandState:
        if self.state is not CommandState.PENDING:
            logger.warning(
                "command.execute_rejected",
                **describe(
                    FailureKind.PROTOCOL_MISUSE,
                    command=self.name,
                    command_id=self.command_id,
                    state=self.state.value,
                ),
            )
            return self.state

        logger.info("command.executing", command=self.name, command_id=self.command_id)
        succeeded = self._execute()
        self.state = CommandState.EXECUTED if succeeded else CommandState.FAILED
        self.executed_at = datetime.now(timezone.utc)
        logger.info(
            "command.executed",
            command=self.name,
            command_id=self.command_id,
            state=self.state.value,
        )
        return self.state

    def undo(self) -> UndoOutcome:
        if self.state is CommandState.PENDING:
            logger.warning(
                "command.undo_never_executed",
                **describe(
                    FailureKind.PROTOCOL_MISUSE,
                    command=self.name,
                    command_id=self.command_id,
                ),
            )
            return UndoOutcome.NEVER_EXECUTED

        if self.state is CommandState.FAILED:
            logger.info(
                "command.nothing_to_undo",
                command=self.name,
                command_id=self.command_id,
                reason="execution failed",
            )
            return UndoOutcome.NOTHING_TO_UNDO

        if self.state is CommandState.UNDONE:
            logger.warning(
                "command.already_undone",
                **describe(
                    FailureKind.PROTOCOL_MISUSE,
                    command=self.name,
                    command_id=self.command_id,
                ),
            )
            return UndoOutcome.ALREADY_UNDONE

        logger.info("command.undoing", command=self.name, command_id=self.command_id)
        outcome = self._undo()
        self.state = CommandState.UNDONE
        self.undone_at = datetime.now(timezone.utc)
        logger.info(
            "command.undone",
            command=self.name,
            command_id=self.command_id,
            outcome=outcome.value,
        )
        return outcome

    @abstractmethod
    def _execute(self) -> bool:
        ...

    @abstractmethod
    def _undo(self) -> UndoOutcome:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.command_id}, state={self.state.value})"


class PlaceOrderCommand(Command):
    """Places an order; undo cancels it."""

    name = "place_order"

    def __init__(self, processor: OrderProcessor, order: Order):
        super().__init__()
        self._processor = require(processor, "processor")
        self.order = require(order, "order")

    def _execute(self) -> bool:
        return self._processor.place_order(self.order)

    def _undo(self) -> UndoOutcome:
        # False means someone else already cancelled it.
        if self._processor.cancel_order(self.order):
            return UndoOutcome.REVERSED
        return UndoOutcome.NOTHING_TO_UNDO


class ProcessPaymentCommand(Command):
    """
    Authorizes a card payment; undo rolls it back.

    On success a TransactionIdentifier is minted and kept on the command.
    On failure no identifier exists, so undo has nothing to reverse.
    """

    name = "process_payment"

    def __init__(
        self,
        payment_system: PaymentSystem,
        amount: Decimal,
        card_number: str,
        expiry_date: str,
        cvv: str,
    ):
        super().__init__()
        self._payment_system = require(payment_system, "payment_system")
        self.amount = require(amount, "amount")
        self.card = CardDetails(
            card_number=require(card_number, "card_number"),
            expiry_date=require(expiry_date, "expiry_date"),
            cvv=require(cvv, "cvv"),
        )
        self.transaction_id: TransactionIdentifier | None = None
        self.rollback_outcome: RollbackOutcome | None = None

    @classmethod
    def for_order(
        cls,
        payment_system: PaymentSystem,
        order: Order,
        card_number: str,
        expiry_date: str,
        cvv: str,
    ) -> ProcessPaymentCommand:
        """Pay for an order. The amount is the order total at this moment."""
        return cls(payment_system, order.total_amount, card_number, expiry_date, cvv)

    @property
    def payment_successful(self) -> bool:
        return self.transaction_id is not None

    def _execute(self) -> bool:
        authorized = self._payment_system.authorize_payment(
            self.amount, self.card.card_number, self.card.expiry_date, self.card.cvv
        )
        if not authorized:
            logger.warning(
                "payment_command.payment_failed",
                **describe(
                    FailureKind.AUTHORIZATION,
                    command_id=self.command_id,
                    amount=str(self.amount),
                    card=self.card.masked_number,
                ),
            )
            return False

        self.transaction_id = TransactionIdentifier.generate()
        logger.info(
            "payment_command.payment_successful",
            command_id=self.command_id,
            transaction_id=str(self.transaction_id),
        )
        return True

    def _undo(self) -> UndoOutcome:
        if self.transaction_id is None:
            logger.warning(
                "payment_command.missing_transaction_id", command_id=self.command_id
            )
            return UndoOutcome.NOTHING_TO_UNDO

        self.rollback_outcome = self._payment_system.rollback_payment(self.transaction_id)
        logger.info(
            "payment_command.rollback_attempted",
            command_id=self.command_id,
            transaction_id=str(self.transaction_id),
            rollback_outcome=self.rollback_outcome.value,
        )
        return UndoOutcome.ROLLBACK_ATTEMPTED
