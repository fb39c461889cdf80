"""
Budgeting - Source Package

A personal budgeting backend: passcode login, per-category budgets,
recurring subscriptions and payments, and spending totals.

DESIGN PRINCIPLES:
1. Recurring items are stored once and projected on demand
2. Spent amounts are recorded, never inferred
3. Fail visibly (duplicate categories, wrong passcodes)
4. Every change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Budgeting Team"
