"""
Application Layer - Workflow Actions and Undo

This layer contains:
- Receivers that do the real work (OrderProcessor, PaymentSystem)
- Commands wrapping one workflow action each, with undo
- The invoker that records executed commands and undoes them LIFO

Each workflow session owns its own invoker. There is no global history.
"""
