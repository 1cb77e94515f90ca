"""
Token Ledger

A fixed-supply fungible token ledger with balance and allowance
bookkeeping, delegated transfers, notification events and a
hash-chained audit trail.
"""

__version__ = "1.0.0"
