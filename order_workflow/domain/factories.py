"""
Order Factories - One Factory per Product Family

Callers never construct products directly. They ask a factory, and the
factory hands back the right concrete product plus an order to hold it.

Cross-family creation:
A digital factory asked for a physical product still builds it. Orders are
family-agnostic containers, so refusing would buy nothing. The request is
logged as a warning and counted, so it shows up in dashboards and tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

import structlog

from order_workflow.domain.models import (
    DigitalProduct,
    Order,
    PhysicalProduct,
    ProductFamily,
)

logger = structlog.get_logger(__name__)


class OrderFactory(ABC):
    """
    Creates products and orders for one product family.

    Subclasses only declare which family they specialise in; creation is
    shared so every family gets the same cross-family diagnostics.
    """

    def __init__(self) -> None:
        self.cross_family_count = 0

    @property
    @abstractmethod
    def family(self) -> ProductFamily:
        """The family this factory specialises in."""

    def create_digital_product(
        self, name: str, price: Decimal, download_url: str
    ) -> DigitalProduct:
        self._check_family(ProductFamily.DIGITAL, name)
        return DigitalProduct(name=name, price=price, download_url=download_url)

    def create_physical_product(
        self, name: str, price: Decimal, weight: float
    ) -> PhysicalProduct:
        self._check_family(ProductFamily.PHYSICAL, name)
        return PhysicalProduct(name=name, price=price, weight=weight)

    def create_order(self) -> Order:
        order = Order()
        logger.debug(
            "order_factory.order_created",
            factory_family=self.family.value,
            order_id=str(order.order_id),
        )
        return order

    def _check_family(self, requested: ProductFamily, name: str) -> None:
        if requested is self.family:
            return
        self.cross_family_count += 1
        logger.warning(
            "order_factory.cross_family_product",
            factory=type(self).__name__,
            factory_family=self.family.value,
            product_family=requested.value,
            product_name=name,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(family={self.family.value})"


class DigitalOrderFactory(OrderFactory):
    """Factory for digital catalogues (eBooks, courses)."""

    @property
    def family(self) -> ProductFamily:
        return ProductFamily.DIGITAL


class PhysicalOrderFactory(OrderFactory):
    """Factory for physical catalogues (merchandise)."""

    @property
    def family(self) -> ProductFamily:
        return ProductFamily.PHYSICAL


_FACTORIES: dict[ProductFamily, type[OrderFactory]] = {
    ProductFamily.DIGITAL: DigitalOrderFactory,
    ProductFamily.PHYSICAL: PhysicalOrderFactory,
}


def create_order_factory(family: str | ProductFamily) -> OrderFactory:
    """
    Create the factory for a product family.

    Args:
        family: Family name ('digital', 'physical'), case-insensitive,
            or a ``ProductFamily`` member.

    Raises:
        ValueError: If the family is not supported.
    """
    try:
        key = ProductFamily(family.lower() if isinstance(family, str) else family)
    except ValueError:
        supported = ", ".join(sorted(f.value for f in _FACTORIES))
        raise ValueError(
            f"Unsupported product family: {family!r}. Supported: {supported}"
        ) from None
    return _FACTORIES[key]()
