"""
Pytest configuration and fixtures for order workflow tests.
"""

import logging
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import structlog

from order_workflow.application.invoker import CommandInvoker
from order_workflow.application.receivers import OrderProcessor, PaymentSystem
from order_workflow.domain.factories import DigitalOrderFactory, PhysicalOrderFactory
from order_workflow.domain.models import Order
from order_workflow.infrastructure.legacy_processor import LegacyPaymentProcessor
from order_workflow.infrastructure.payment_gateway import (
    InMemoryPaymentGateway,
    LegacyPaymentAdapter,
)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no I/O")


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any setup_logging() a test performed."""
    yield
    structlog.reset_defaults()
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)


@pytest.fixture
def digital_factory() -> DigitalOrderFactory:
    return DigitalOrderFactory()


@pytest.fixture
def physical_factory() -> PhysicalOrderFactory:
    return PhysicalOrderFactory()


@pytest.fixture
def digital_order(digital_factory) -> Order:
    """Reference digital order: 29.99 + 199.99."""
    order = digital_factory.create_order()
    order.add_item(
        digital_factory.create_digital_product(
            "Clean Code eBook",
            Decimal("29.99"),
            "http://downloads.example.com/clean-code.pdf",
        )
    )
    order.add_item(
        digital_factory.create_digital_product(
            "Design Patterns Course",
            Decimal("199.99"),
            "http://courses.example.com/dp",
        )
    )
    return order


@pytest.fixture
def legacy_processor() -> MagicMock:
    """Legacy backend double that approves everything."""
    processor = MagicMock(spec=LegacyPaymentProcessor)
    processor.make_payment.return_value = True
    return processor


@pytest.fixture
def legacy_adapter(legacy_processor) -> LegacyPaymentAdapter:
    return LegacyPaymentAdapter(legacy_processor)


@pytest.fixture
def memory_gateway() -> InMemoryPaymentGateway:
    return InMemoryPaymentGateway(declined_cards={"4000-0000-0000-0002"})


@pytest.fixture
def order_processor() -> OrderProcessor:
    return OrderProcessor()


@pytest.fixture
def payment_system(legacy_adapter) -> PaymentSystem:
    return PaymentSystem(legacy_adapter)


@pytest.fixture
def invoker() -> CommandInvoker:
    return CommandInvoker()
