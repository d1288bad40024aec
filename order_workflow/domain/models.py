"""
Products and Orders

Products are immutable values. An order is the aggregate that owns them.

Key invariants:
1. ``Order.add_item`` is the ONLY way an order changes
2. ``Order.total_amount`` is derived on every read, never cached
3. ``total_amount`` equals the exact Decimal sum of item prices (never negative)

Rendering (``display``) returns text and never touches state. Printing it is
the caller's business.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from order_workflow.domain.errors import require
from order_workflow.domain.value_objects import OrderIdentifier


class ProductFamily(str, Enum):
    """Product catalogues a factory can specialise in."""

    DIGITAL = "digital"
    PHYSICAL = "physical"


class DigitalProduct(BaseModel):
    """Downloadable product (eBook, online course)."""

    model_config = ConfigDict(frozen=True)

    family: Literal[ProductFamily.DIGITAL] = ProductFamily.DIGITAL
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    download_url: str = Field(min_length=1)

    def display(self) -> str:
        return (
            f"Digital Product: {self.name}, Price: {self.price:.2f}, "
            f"Download: {self.download_url}"
        )


class PhysicalProduct(BaseModel):
    """Shippable product. Weight is in kilograms."""

    model_config = ConfigDict(frozen=True)

    family: Literal[ProductFamily.PHYSICAL] = ProductFamily.PHYSICAL
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    weight: float = Field(ge=0)

    def display(self) -> str:
        return (
            f"Physical Product: {self.name}, Price: {self.price:.2f}, "
            f"Weight: {self.weight}kg"
        )


# Tagged union: ``family`` picks the variant when parsing raw data.
Product = Annotated[Union[DigitalProduct, PhysicalProduct], Field(discriminator="family")]


@dataclass
class Order:
    """
    Order Aggregate Root.

    Family-agnostic: a single order may hold digital and physical items.
    Items keep insertion order.
    """

    order_id: OrderIdentifier = field(default_factory=OrderIdentifier.generate)
    _items: list[Product] = field(default_factory=list, init=False, repr=False)

    @property
    def items(self) -> tuple[Product, ...]:
        """Read-only view of the items, in the order they were added."""
        return tuple(self._items)

    @property
    def total_amount(self) -> Decimal:
        return sum((item.price for item in self._items), Decimal("0"))

    def add_item(self, product: Product) -> None:
        self._items.append(require(product, "product"))

    def display_order_details(self) -> str:
        lines = [f"Order ID: {self.order_id}", "Items:"]
        lines.extend(f"  {item.display()}" for item in self._items)
        lines.append(f"Total: {self.total_amount:.2f}")
        return "\n".join(lines)
