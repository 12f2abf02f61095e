"""Ownership-scoped task tracking: store, guard and HTTP gateway."""

__version__ = "0.1.0"
