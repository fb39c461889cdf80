"""Spending summary package."""

from budgeting.reports.summary import (
    budget_breakdown,
    describe_cadence,
    describe_period,
    occurrence_breakdown,
    summarize_budgets,
)

__all__ = [
    "budget_breakdown",
    "describe_cadence",
    "describe_period",
    "occurrence_breakdown",
    "summarize_budgets",
]
