"""Tests for order_workflow.application.commands."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from structlog.testing import capture_logs

from order_workflow.application.commands import (
    CommandState,
    PlaceOrderCommand,
    ProcessPaymentCommand,
    UndoOutcome,
)
from order_workflow.application.receivers import (
    OrderProcessor,
    PaymentSystem,
    RollbackOutcome,
)
from order_workflow.domain.errors import ContractViolationError, FailureKind
from order_workflow.domain.value_objects import TransactionIdentifier
from order_workflow.infrastructure.legacy_processor import LegacyPaymentProcessor
from order_workflow.infrastructure.payment_gateway import (
    InMemoryPaymentGateway,
    LegacyPaymentAdapter,
)

CARD = "1234-5678-9012-3456"


def _payment(payment_system, expiry="12/25", card=CARD, amount="229.98"):
    return ProcessPaymentCommand(payment_system, Decimal(amount), card, expiry, "123")


# ------------------------------------------------------------------ #
#  PlaceOrderCommand                                                   #
# ------------------------------------------------------------------ #


class TestPlaceOrderCommand:
    @pytest.mark.unit
    def test_starts_pending(self, order_processor, digital_order):
        command = PlaceOrderCommand(order_processor, digital_order)
        assert command.state is CommandState.PENDING
        assert command.executed_at is None

    @pytest.mark.unit
    def test_execute_places_order(self, order_processor, digital_order):
        command = PlaceOrderCommand(order_processor, digital_order)
        assert command.execute() is CommandState.EXECUTED
        assert order_processor.is_placed(digital_order)
        assert command.executed_at is not None

    @pytest.mark.unit
    def test_undo_cancels_order_once(self, digital_order):
        processor = MagicMock(spec=OrderProcessor)
        processor.place_order.return_value = True
        processor.cancel_order.return_value = True
        command = PlaceOrderCommand(processor, digital_order)

        command.execute()
        assert command.undo() is UndoOutcome.REVERSED
        assert command.state is CommandState.UNDONE
        processor.cancel_order.assert_called_once_with(digital_order)

    @pytest.mark.unit
    def test_undo_before_execute_is_reported(self, order_processor, digital_order):
        command = PlaceOrderCommand(order_processor, digital_order)
        with capture_logs() as logs:
            assert command.undo() is UndoOutcome.NEVER_EXECUTED

        assert command.state is CommandState.PENDING
        assert logs[0]["event"] == "command.undo_never_executed"
        assert logs[0]["failure_kind"] == FailureKind.PROTOCOL_MISUSE.value

    @pytest.mark.unit
    def test_second_undo_is_reported(self, digital_order):
        processor = MagicMock(spec=OrderProcessor)
        processor.place_order.return_value = True
        processor.cancel_order.return_value = True
        command = PlaceOrderCommand(processor, digital_order)
        command.execute()
        command.undo()

        assert command.undo() is UndoOutcome.ALREADY_UNDONE
        processor.cancel_order.assert_called_once()

    @pytest.mark.unit
    def test_execute_twice_is_rejected(self, digital_order):
        processor = MagicMock(spec=OrderProcessor)
        processor.place_order.return_value = True
        command = PlaceOrderCommand(processor, digital_order)
        command.execute()

        with capture_logs() as logs:
            assert command.execute() is CommandState.EXECUTED

        processor.place_order.assert_called_once()
        assert logs[0]["event"] == "command.execute_rejected"

    @pytest.mark.unit
    def test_already_placed_order_fails_command(self, order_processor, digital_order):
        order_processor.place_order(digital_order)
        command = PlaceOrderCommand(order_processor, digital_order)

        assert command.execute() is CommandState.FAILED
        assert command.undo() is UndoOutcome.NOTHING_TO_UNDO
        # The earlier placement is left alone
        assert order_processor.is_placed(digital_order)

    @pytest.mark.unit
    def test_requires_collaborators(self, order_processor, digital_order):
        with pytest.raises(ContractViolationError, match="processor is required"):
            PlaceOrderCommand(None, digital_order)
        with pytest.raises(ContractViolationError, match="order is required"):
            PlaceOrderCommand(order_processor, None)


# ------------------------------------------------------------------ #
#  ProcessPaymentCommand                                               #
# ------------------------------------------------------------------ #


class TestProcessPaymentCommand:
    @pytest.mark.unit
    def test_success_mints_transaction_id(self, payment_system, legacy_processor):
        command = _payment(payment_system)

        assert command.execute() is CommandState.EXECUTED
        assert isinstance(command.transaction_id, TransactionIdentifier)
        assert command.payment_successful
        legacy_processor.make_payment.assert_called_once_with(
            Decimal("229.98"), CARD, 12, 2025
        )

    @pytest.mark.unit
    def test_each_success_gets_its_own_transaction_id(self, payment_system):
        first, second = _payment(payment_system), _payment(payment_system)
        first.execute()
        second.execute()
        assert first.transaction_id != second.transaction_id

    @pytest.mark.unit
    def test_decline_records_failure(self, payment_system, legacy_processor):
        legacy_processor.make_payment.return_value = False
        command = _payment(payment_system)

        with capture_logs() as logs:
            assert command.execute() is CommandState.FAILED

        assert command.transaction_id is None
        assert not command.payment_successful
        failed = next(log for log in logs if log["event"] == "payment_command.payment_failed")
        assert failed["failure_kind"] == FailureKind.AUTHORIZATION.value

    @pytest.mark.unit
    def test_invalid_expiry_records_failure(self, payment_system, legacy_processor):
        command = _payment(payment_system, expiry="1225")
        assert command.execute() is CommandState.FAILED
        legacy_processor.make_payment.assert_not_called()

    @pytest.mark.unit
    def test_undo_failed_payment_does_not_roll_back(self):
        payment_system = MagicMock(spec=PaymentSystem)
        payment_system.authorize_payment.return_value = False
        command = _payment(payment_system)
        command.execute()

        with capture_logs() as logs:
            outcome = command.undo()

        assert outcome is UndoOutcome.NOTHING_TO_UNDO
        payment_system.rollback_payment.assert_not_called()
        assert [log["event"] for log in logs] == ["command.nothing_to_undo"]

    @pytest.mark.unit
    def test_undo_successful_payment_attempts_rollback(self):
        payment_system = MagicMock(spec=PaymentSystem)
        payment_system.authorize_payment.return_value = True
        payment_system.rollback_payment.return_value = RollbackOutcome.UNSUPPORTED
        command = _payment(payment_system)
        command.execute()

        assert command.undo() is UndoOutcome.ROLLBACK_ATTEMPTED
        payment_system.rollback_payment.assert_called_once_with(command.transaction_id)
        assert command.rollback_outcome is RollbackOutcome.UNSUPPORTED

    @pytest.mark.unit
    def test_transaction_id_used_for_one_rollback_only(self):
        payment_system = MagicMock(spec=PaymentSystem)
        payment_system.authorize_payment.return_value = True
        payment_system.rollback_payment.return_value = RollbackOutcome.REFUNDED
        command = _payment(payment_system)
        command.execute()
        transaction_id = command.transaction_id

        command.undo()
        assert command.undo() is UndoOutcome.ALREADY_UNDONE
        payment_system.rollback_payment.assert_called_once()
        assert command.transaction_id == transaction_id

    @pytest.mark.unit
    @pytest.mark.parametrize("card", ["", "   "])
    def test_blank_card_is_declined_not_raised(self, card):
        payment_system = PaymentSystem(LegacyPaymentAdapter(LegacyPaymentProcessor()))
        command = _payment(payment_system, card=card)

        with capture_logs() as logs:
            assert command.execute() is CommandState.FAILED

        assert command.transaction_id is None
        assert "payment_command.payment_failed" in [log["event"] for log in logs]
        assert command.undo() is UndoOutcome.NOTHING_TO_UNDO

    @pytest.mark.unit
    def test_missing_card_fields_are_contract_violations(self, payment_system):
        with pytest.raises(ContractViolationError, match="card_number is required"):
            _payment(payment_system, card=None)
        with pytest.raises(ContractViolationError, match="expiry_date is required"):
            _payment(payment_system, expiry=None)

    @pytest.mark.unit
    def test_undo_never_executed(self):
        payment_system = MagicMock(spec=PaymentSystem)
        command = _payment(payment_system)
        assert command.undo() is UndoOutcome.NEVER_EXECUTED
        payment_system.rollback_payment.assert_not_called()

    @pytest.mark.unit
    def test_rollback_through_refund_capable_gateway(self):
        gateway = InMemoryPaymentGateway()
        command = _payment(PaymentSystem(gateway))
        command.execute()

        command.undo()
        assert command.rollback_outcome is RollbackOutcome.REFUNDED
        assert gateway.refunded == [str(command.transaction_id)]

    @pytest.mark.unit
    def test_for_order_snapshots_total(self, payment_system, digital_factory, digital_order):
        command = ProcessPaymentCommand.for_order(
            payment_system, digital_order, CARD, "12/25", "123"
        )
        digital_order.add_item(
            digital_factory.create_digital_product("Extra", Decimal("1.00"), "http://x")
        )
        assert command.amount == Decimal("229.98")

    @pytest.mark.unit
    def test_card_secrets_not_logged(self, payment_system):
        command = _payment(payment_system)
        with capture_logs() as logs:
            command.execute()
            command.undo()
        assert CARD not in repr(logs)
        assert "'123'" not in repr(logs)
