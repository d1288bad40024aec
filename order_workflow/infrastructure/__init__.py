"""
Infrastructure Layer - External Dependencies

This layer contains:
- The legacy card processor (third-party interface we cannot change)
- Payment gateways (legacy adapter, in-memory gateway)
- Structured logging setup

Key principle: All infrastructure is REPLACEABLE.
The application layer only sees the ``PaymentGateway`` protocol.
"""
