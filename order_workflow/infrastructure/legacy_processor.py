"""
Legacy Payment Processor

A third-party card processor with an interface we cannot change:
- amounts go in as ``value``
- expiry comes in as separate month and four-digit year
- no CVV, no refunds

Anything that wants to talk to it goes through ``LegacyPaymentAdapter``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

import structlog

from order_workflow.domain.value_objects import mask_card_number

logger = structlog.get_logger(__name__)


class LegacyPaymentProcessor:
    """
    Simulated legacy processor.

    Approves every payment except those made with a blank card number or a
    card listed in ``declined_cards``.
    """

    def __init__(self, declined_cards: Iterable[str] = ()):
        self._declined_cards = frozenset(declined_cards)

    def make_payment(
        self,
        value: Decimal,
        credit_card_number: str,
        exp_month: int,
        exp_year: int,
    ) -> bool:
        approved = (
            bool(credit_card_number.strip())
            and credit_card_number not in self._declined_cards
        )
        logger.info(
            "legacy_processor.make_payment",
            value=str(value),
            card=mask_card_number(credit_card_number),
            exp_month=exp_month,
            exp_year=exp_year,
            approved=approved,
        )
        return approved

    def get_transaction_status(self, transaction_ref: str) -> str:
        """Status lookup exposed by the legacy API. Always 'Completed'."""
        return "Completed"
