"""
Ledger Kernel

Keeps costs, debts and transactions of a services back office consistent:
- Supplier costs derive PAYABLE debts automatically
- Posted transactions keep each debt's paid amount in step
- Edits and deletions reverse their ledger effects
"""

__version__ = "0.1.0"
