"""Domain models and decision logic for the transaction core.

This package validates transaction requests, plans how funds move across
chains, and prices the result. Rate tables and balances come in through
protocols so that the core stays free of I/O and can be tested in memory.
"""

__all__ = [
    "addresses",
    "balance",
    "chains",
    "engine",
    "errors",
    "fee_calculator",
    "fees",
    "routing",
    "transaction",
    "validation",
]
