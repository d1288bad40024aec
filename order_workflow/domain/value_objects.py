"""
Value Objects - Identifiers and Card Details

Value objects have no identity - two value objects are equal if their values are equal.

Why typed identifiers instead of raw strings?
- Type safety: can't pass an order id where a transaction id is expected
- Validation: the prefix tells you what you are looking at in a log line
- Generation lives in one place (``generate()``)
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator


def mask_card_number(card_number: str) -> str:
    """
    Mask all but the last four digits of a card number.

    Example: "1234-5678-9012-3456" -> "****3456"
    """
    digits = [c for c in card_number if c.isdigit()]
    if len(digits) <= 4:
        return "****"
    return "****" + "".join(digits[-4:])


class OrderIdentifier(BaseModel):
    """
    Unique identifier for an order.

    Format: ord_{32 hex chars}
    Example: ord_3f2c9a0e7b5d4c1a8e6f0b9d2a7c4e15
    """

    model_config = ConfigDict(frozen=True)

    value: str

    @field_validator("value")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if not v.startswith("ord_"):
            raise ValueError(f"Order ID must start with 'ord_', got {v}")
        if len(v) <= len("ord_"):
            raise ValueError(f"Order ID too short: {v}")
        return v

    @classmethod
    def generate(cls) -> OrderIdentifier:
        return cls(value=f"ord_{uuid.uuid4().hex}")

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"OrderIdentifier({self.value})"


class TransactionIdentifier(BaseModel):
    """
    Token minted when a payment is authorized.

    CRITICAL: Only a successful authorization produces one.
    No identifier = no reversible payment happened.
    """

    model_config = ConfigDict(frozen=True)

    value: str

    @field_validator("value")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if not v.startswith("txn_"):
            raise ValueError(f"Transaction ID must start with 'txn_', got {v}")
        if len(v) <= len("txn_"):
            raise ValueError(f"Transaction ID too short: {v}")
        return v

    @classmethod
    def generate(cls) -> TransactionIdentifier:
        return cls(value=f"txn_{uuid.uuid4().hex}")

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"TransactionIdentifier({self.value})"


class CardDetails(BaseModel):
    """
    Card data captured by a payment command.

    The expiry date is kept as the raw string the customer typed; turning it
    into month/year is the gateway's job, since only the gateway knows what
    its backend expects.

    Card number and CVV are excluded from repr so they never end up in logs.
    """

    model_config = ConfigDict(frozen=True)

    card_number: str = Field(repr=False)
    expiry_date: str
    cvv: str = Field(repr=False)

    @property
    def masked_number(self) -> str:
        return mask_card_number(self.card_number)
