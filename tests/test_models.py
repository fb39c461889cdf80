"""
Tests for Budgeting models

Test strategy:
1. Unit tests for individual components (models, projection, passcode)
2. Flow tests against in-memory storage
3. No real API calls in tests (Sheets is replaced by a fake worksheet)
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from budgeting.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from budgeting.models.budget import Budget, BudgetCategory
from budgeting.models.recurring import (
    Payment,
    PaymentCategory,
    RecurringKind,
    Subscription,
    SubscriptionCategory,
    recurring_item_from_dict,
)


class TestBudgetModels:
    """Tests for the Budget model."""

    def test_budget_creation_defaults(self):
        budget = Budget(category=BudgetCategory.GROCERIES, total_amount=Decimal("500.00"))
        assert budget.spent_amount == Decimal("0")
        assert budget.is_favorite is False
        assert budget.favorited_at is None

    def test_budget_rejects_negative_total(self):
        with pytest.raises(ValueError):
            Budget(category=BudgetCategory.GROCERIES, total_amount=Decimal("-1"))

    def test_budget_rejects_negative_spent_on_assignment(self):
        budget = Budget(category=BudgetCategory.DINING, total_amount=Decimal("100"))
        with pytest.raises(ValueError):
            budget.spent_amount = Decimal("-5")

    def test_budget_rejects_more_than_two_decimal_places(self):
        with pytest.raises(ValueError):
            Budget(category=BudgetCategory.DINING, total_amount=Decimal("10.123"))

    def test_remaining_and_progress(self):
        budget = Budget(
            category=BudgetCategory.TRANSPORT,
            total_amount=Decimal("200.00"),
            spent_amount=Decimal("50.00"),
        )
        assert budget.remaining_amount == Decimal("150.00")
        assert budget.progress == pytest.approx(0.25)
        assert budget.is_over_budget is False

    def test_spent_can_exceed_total(self):
        """Spent is tracked independently of the limit."""
        budget = Budget(
            category=BudgetCategory.SHOPPING,
            total_amount=Decimal("100.00"),
            spent_amount=Decimal("130.00"),
        )
        assert budget.is_over_budget is True
        assert budget.remaining_amount == Decimal("-30.00")
        assert budget.progress == pytest.approx(1.3)

    def test_progress_with_zero_total(self):
        budget = Budget(
            category=BudgetCategory.GIFTS,
            total_amount=Decimal("0"),
            spent_amount=Decimal("10"),
        )
        assert budget.progress == 0.0

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError):
            Budget(category="yachts", total_amount=Decimal("1"))


class TestRecurringModels:
    """Tests for subscriptions and payments."""

    def test_subscription_creation(self):
        sub = Subscription(
            description="  Streaming  ",
            amount=Decimal("12.99"),
            start_date=date(2026, 1, 15),
            category=SubscriptionCategory.VIDEO_STREAMING,
        )
        assert sub.description == "Streaming"
        assert sub.kind == RecurringKind.SUBSCRIPTION

    def test_payment_kind(self):
        payment = Payment(
            description="Rent",
            amount=Decimal("1200"),
            start_date=date(2026, 1, 1),
            category=PaymentCategory.RENT,
        )
        assert payment.kind == RecurringKind.PAYMENT

    def test_amount_must_be_positive(self):
        with pytest.raises(ValueError):
            Subscription(description="Free", amount=Decimal("0"), start_date=date(2026, 1, 1))

    def test_description_required(self):
        with pytest.raises(ValueError):
            Payment(description="   ", amount=Decimal("5"), start_date=date(2026, 1, 1))

    def test_payment_rejects_subscription_category(self):
        with pytest.raises(ValueError):
            Payment(
                description="Music",
                amount=Decimal("9.99"),
                start_date=date(2026, 1, 1),
                category="music",
            )

    def test_item_from_dict_picks_subclass(self):
        payment = Payment(
            description="Loan",
            amount=Decimal("300"),
            start_date=date(2026, 3, 5),
            category=PaymentCategory.LOAN,
        )
        rebuilt = recurring_item_from_dict(payment.model_dump())
        assert isinstance(rebuilt, Payment)
        assert rebuilt == payment


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.BUDGET_CREATED,
            description="Budget created",
        )
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        event = AuditEvent(
            event_type=AuditEventType.SPENDING_RECORDED,
            description="Spending recorded",
            details={"category": "groceries", "amount": "20.00"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "spending_recorded"
        assert log_dict["details"]["category"] == "groceries"

    def test_audit_event_to_sheets_row(self):
        event = AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            description="Login succeeded",
            is_user_action=True,
        )
        row = event.to_sheets_row()
        assert len(row) == 11
        assert row[2] == "login_succeeded"
        assert row[10] == "True"

    def test_builder_duplicate_category_is_warning(self):
        event = AuditEventBuilder.duplicate_category_rejected(category="dining")
        assert event.event_type == AuditEventType.DUPLICATE_CATEGORY_REJECTED
        assert event.severity == AuditSeverity.WARNING

    def test_builder_budget_created(self):
        budget_id = uuid4()
        correlation_id = uuid4()
        event = AuditEventBuilder.budget_created(
            budget_id=budget_id,
            category="groceries",
            amount="500.00",
            correlation_id=correlation_id,
        )
        assert event.entity_id == budget_id
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_builder_save_failed_is_error(self):
        event = AuditEventBuilder.save_failed(
            entity_type="budget",
            entity_id=None,
            error_message="boom",
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "boom"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
