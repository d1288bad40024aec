"""
Order Workflow - Orders, Payments and Undo

This package models a small e-commerce checkout through:
1. Product families created by factories (digital vs physical catalogues)
2. A payment gateway adapter over a legacy card processor
3. Reversible workflow commands recorded in a LIFO history

Business failures (declined card, unsupported refund) are never raised.
They come back as return values and structured log events.
"""

__version__ = "0.1.0"
