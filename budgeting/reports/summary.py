"""
Spending Summaries

Deterministic aggregation over budgets and projected occurrences:
budgeted vs. spent per category, totals, and per-category recurring costs.
Nothing here estimates; it only adds up what it is given.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from budgeting.models.budget import Budget, BudgetSummary
from budgeting.models.recurring import AnyRecurringItem, Occurrence


_ONE_DAY = timedelta(days=1)


def summarize_budgets(budgets: Iterable[Budget]) -> BudgetSummary:
    """Total budgeted and spent across all budgets."""
    budgets = list(budgets)

    return BudgetSummary(
        total_budgeted=sum((b.total_amount for b in budgets), Decimal("0")),
        total_spent=sum((b.spent_amount for b in budgets), Decimal("0")),
        budget_count=len(budgets),
        over_budget_categories=[b.category for b in budgets if b.is_over_budget],
    )


def budget_breakdown(budgets: Iterable[Budget]) -> dict[str, dict[str, Decimal]]:
    """Budgeted, spent and remaining amounts keyed by category value."""
    result = {}
    for budget in sorted(budgets, key=lambda b: b.category.value):
        result[budget.category.value] = {
            "budgeted": budget.total_amount,
            "spent": budget.spent_amount,
            "remaining": budget.remaining_amount,
        }
    return result


def occurrence_breakdown(occurrences: Iterable[Occurrence]) -> dict[str, Decimal]:
    """Projected recurring cost keyed by category value."""
    groups: dict[str, Decimal] = {}
    for occurrence in occurrences:
        groups[occurrence.category] = (
            groups.get(occurrence.category, Decimal("0")) + occurrence.amount
        )
    return dict(sorted(groups.items()))


def describe_period(
    date_from: Optional[date],
    date_to: Optional[date],
) -> str:
    """Format a date range for display."""
    if date_from and date_to:
        if date_from == date_to:
            return f"on {date_from.strftime('%d %b %Y')}"
        elif (
            date_from.day == 1
            and date_from.month == 1
            and date_to.month == 12
            and date_to.day == 31
            and date_from.year == date_to.year
        ):
            return f"in {date_from.year}"
        elif date_from.month == date_to.month and date_from.year == date_to.year:
            if date_from.day == 1 and (date_to + _ONE_DAY).month != date_to.month:
                return f"in {date_from.strftime('%B %Y')}"
            return f"from {date_from.strftime('%d %b %Y')} to {date_to.strftime('%d %b %Y')}"
        elif date_from.year == date_to.year:
            return f"from {date_from.strftime('%d %b')} to {date_to.strftime('%d %b %Y')}"
        else:
            return f"from {date_from.strftime('%d %b %Y')} to {date_to.strftime('%d %b %Y')}"
    elif date_from:
        return f"from {date_from.strftime('%d %b %Y')}"
    elif date_to:
        return f"until {date_to.strftime('%d %b %Y')}"
    return ""


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def describe_cadence(item: AnyRecurringItem) -> str:
    """Cadence label for a recurring item, e.g. 'Every month on 15th'."""
    return f"Every month on {_ordinal(item.start_date.day)}"
