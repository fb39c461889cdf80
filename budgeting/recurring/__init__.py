"""Recurring occurrence projection package."""

from budgeting.recurring.projection import (
    monthly_total,
    occurrences_in_period,
    period_window,
    project_occurrences,
    total_amount,
)

__all__ = [
    "monthly_total",
    "occurrences_in_period",
    "period_window",
    "project_occurrences",
    "total_amount",
]
