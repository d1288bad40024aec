"""CLI for the order workflow.

Presentation only: builds orders, runs commands through an invoker and
prints what happened. All behaviour lives in the library.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from order_workflow.application.commands import PlaceOrderCommand, ProcessPaymentCommand
from order_workflow.application.invoker import CommandInvoker
from order_workflow.application.receivers import OrderProcessor, PaymentSystem
from order_workflow.config import Settings
from order_workflow.domain.errors import InvalidExpiryDateError
from order_workflow.domain.factories import create_order_factory
from order_workflow.infrastructure.legacy_processor import LegacyPaymentProcessor
from order_workflow.infrastructure.logging import get_logger, setup_logging
from order_workflow.infrastructure.payment_gateway import (
    InMemoryPaymentGateway,
    LegacyPaymentAdapter,
    PaymentGateway,
    parse_expiry_date,
)

app = typer.Typer(
    name="order-workflow",
    help="Order workflow demo - factories, payment adapter and undoable commands",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


class GatewayChoice(str, Enum):
    LEGACY = "legacy"
    MEMORY = "memory"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def build_gateway(choice: GatewayChoice) -> PaymentGateway:
    if choice is GatewayChoice.MEMORY:
        return InMemoryPaymentGateway()
    return LegacyPaymentAdapter(LegacyPaymentProcessor())


@app.command()
def demo(
    gateway: GatewayChoice = typer.Option(
        GatewayChoice.LEGACY,
        "--gateway",
        "-g",
        help="Payment backend to use",
    ),
    expiry: Optional[str] = typer.Option(
        None,
        "--expiry",
        "-e",
        help="Card expiry (MM/YY) used for every payment; defaults per scenario",
    ),
    log_level: LogLevel = typer.Option(
        LogLevel.WARNING, "--log-level", case_sensitive=False, help="Log level"
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON logs"),
) -> None:
    """Run the digital and physical checkout scenarios."""
    setup_logging(Settings(log_level=log_level.value, log_json=json_logs))

    digital_factory = create_order_factory("digital")
    physical_factory = create_order_factory("physical")

    order_processor = OrderProcessor()
    payment_system = PaymentSystem(build_gateway(gateway))
    invoker = CommandInvoker()

    results = Table(title="Command results")
    results.add_column("Step")
    results.add_column("Command")
    results.add_column("Outcome")

    console.rule("Scenario 1: digital order")
    ebook = digital_factory.create_digital_product(
        "Clean Code eBook", Decimal("29.99"), "http://downloads.example.com/clean-code.pdf"
    )
    course = digital_factory.create_digital_product(
        "Design Patterns Course", Decimal("199.99"), "http://courses.example.com/dp"
    )
    digital_order = digital_factory.create_order()
    digital_order.add_item(ebook)
    digital_order.add_item(course)
    console.print(Panel(digital_order.display_order_details(), title="Digital order"))

    for command in (
        PlaceOrderCommand(order_processor, digital_order),
        ProcessPaymentCommand.for_order(
            payment_system, digital_order, "1234-5678-9012-3456", expiry or "12/25", "123"
        ),
    ):
        state = invoker.execute_command(command)
        results.add_row("execute", command.name, state.value)

    console.rule("Scenario 2: physical order")
    shirt = physical_factory.create_physical_product(
        "Developer T-Shirt", Decimal("25.00"), 0.2
    )
    mug = physical_factory.create_physical_product("Coffee Mug", Decimal("15.00"), 0.5)
    physical_order = physical_factory.create_order()
    physical_order.add_item(shirt)
    physical_order.add_item(mug)
    console.print(Panel(physical_order.display_order_details(), title="Physical order"))

    physical_payment = ProcessPaymentCommand.for_order(
        payment_system, physical_order, "9876-5432-1098-7654", expiry or "01/26", "456"
    )
    for command in (PlaceOrderCommand(order_processor, physical_order), physical_payment):
        state = invoker.execute_command(command)
        results.add_row("execute", command.name, state.value)

    console.rule("Undo last two operations")
    for _ in range(2):
        last = invoker.history[-1] if invoker.can_undo else None
        outcome = invoker.undo_last_command()
        results.add_row("undo", last.name if last else "-", outcome.value)

    console.print(results)
    if physical_payment.rollback_outcome is not None:
        console.print(f"Payment rollback: {physical_payment.rollback_outcome.value}")
    console.print(f"Commands left in history: {len(invoker)}")
    logger.info("demo_completed", history_size=len(invoker))


@app.command("check-expiry")
def check_expiry(
    expiry_date: str = typer.Argument(..., help="Card expiry in MM/YY form"),
) -> None:
    """Show how an expiry date is translated for the legacy processor."""
    try:
        parsed = parse_expiry_date(expiry_date)
    except InvalidExpiryDateError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"month={parsed.month} year={parsed.year}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
