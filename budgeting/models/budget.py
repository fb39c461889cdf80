"""
Budget Models

A budget is a spending limit for one category together with a running
total of what has been spent against it.

DESIGN DECISION: spent_amount is recorded, not derived. Nothing in the
system recomputes it from other data; it only changes when spending is
recorded or reset explicitly.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BudgetCategory(str, Enum):
    """
    Budget categories.

    Each category can have at most one budget.
    """
    GROCERIES = "groceries"
    DINING = "dining"
    TRANSPORT = "transport"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    UTILITIES = "utilities"
    HOUSING = "housing"
    HEALTH = "health"
    EDUCATION = "education"
    TRAVEL = "travel"
    PERSONAL_CARE = "personal_care"
    GIFTS = "gifts"
    OTHER = "other"


class Budget(BaseModel):
    """A per-category spending limit and running total."""

    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique budget ID"
    )
    category: BudgetCategory = Field(
        ...,
        description="Budget category (unique across budgets)"
    )
    total_amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Budgeted limit"
    )
    spent_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        decimal_places=2,
        description="Amount spent so far"
    )

    is_favorite: bool = False
    favorited_at: Optional[datetime] = Field(
        default=None,
        description="When the budget was last marked as favorite"
    )

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def remaining_amount(self) -> Decimal:
        """Budget left to spend. Negative when over budget."""
        return self.total_amount - self.spent_amount

    @property
    def progress(self) -> float:
        """Fraction of the budget spent (can exceed 1.0)."""
        if self.total_amount == 0:
            return 0.0
        return float(self.spent_amount / self.total_amount)

    @property
    def is_over_budget(self) -> bool:
        return self.spent_amount > self.total_amount


class BudgetSummary(BaseModel):
    """Totals across all budgets."""

    total_budgeted: Decimal = Decimal("0")
    total_spent: Decimal = Decimal("0")
    budget_count: int = Field(default=0, ge=0)
    over_budget_categories: list[BudgetCategory] = Field(default_factory=list)

    @property
    def total_remaining(self) -> Decimal:
        return self.total_budgeted - self.total_spent
