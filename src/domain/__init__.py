"""Domain models and rules for drawer cash reconciliation.

This package contains in-memory (Pydantic) models for denomination counts,
drawer settings, count records and bank deposits, plus the pure cash-out and
reconciliation rules. They are independent from persistence models so that
business logic and testing can evolve without DB coupling.
"""

__all__ = [
    "bank_deposit",
    "cash_out",
    "count_record",
    "denominations",
    "drawer",
    "filters",
    "reconciliation",
]
