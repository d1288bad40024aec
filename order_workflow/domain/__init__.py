"""
Domain Layer - Products, Orders and Factories

This layer contains:
- Products and orders (value objects and the order aggregate)
- Identifiers and card details (immutable domain concepts)
- Product family factories
- The error taxonomy shared by every layer

Key principle: ZERO dependencies on infrastructure.
"""
