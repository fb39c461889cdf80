"""
Data Models Package

This package contains all Pydantic models used in the Budgeting system.
"""

from budgeting.models.budget import (
    Budget,
    BudgetCategory,
    BudgetSummary,
)
from budgeting.models.recurring import (
    AnyRecurringItem,
    Occurrence,
    Payment,
    PaymentCategory,
    RecurringItem,
    RecurringKind,
    Subscription,
    SubscriptionCategory,
    TimePeriod,
    recurring_item_from_dict,
)
from budgeting.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Budget models
    "Budget",
    "BudgetCategory",
    "BudgetSummary",
    # Recurring models
    "AnyRecurringItem",
    "Occurrence",
    "Payment",
    "PaymentCategory",
    "RecurringItem",
    "RecurringKind",
    "Subscription",
    "SubscriptionCategory",
    "TimePeriod",
    "recurring_item_from_dict",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
