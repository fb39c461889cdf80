"""
Tests for the Google Sheets storage against a fake worksheet.

No network: the fake client hands out in-process worksheets that
behave like gspread's for the calls the storage makes.
"""

import asyncio

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from tenacity import wait_none

from budgeting.models.audit import AuditEventBuilder
from budgeting.models.budget import Budget, BudgetCategory
from budgeting.models.recurring import (
    Payment,
    PaymentCategory,
    RecurringKind,
    Subscription,
    SubscriptionCategory,
)
from budgeting.services.storage.google_sheets import (
    AUDIT_COLUMNS,
    BUDGET_COLUMNS,
    CREDENTIAL_COLUMNS,
    PASSCODE_HASH_KEY,
    RECURRING_COLUMNS,
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetStorage,
    GoogleSheetsCredentialStorage,
    GoogleSheetsRecurringStorage,
)
from budgeting.services.storage.interface import DuplicateCategoryError, StorageError


def run_async(coro):
    return asyncio.run(coro)


class FakeWorksheet:

    def __init__(self, columns):
        self.rows = [list(columns)]

    def append_row(self, row, value_input_option=None):
        self.rows.append([str(v) for v in row])

    def get_all_values(self):
        return [list(r) for r in self.rows]

    def update_cell(self, row, col, value):
        target = self.rows[row - 1]
        while len(target) < col:
            target.append("")
        target[col - 1] = str(value)

    def delete_rows(self, index):
        del self.rows[index - 1]


class FlakyWorksheet(FakeWorksheet):
    """Fails the first append, like a transient Sheets API error."""

    def __init__(self, columns, failures=1):
        super().__init__(columns)
        self.failures = failures
        self.append_calls = 0

    def append_row(self, row, value_input_option=None):
        self.append_calls += 1
        if self.append_calls <= self.failures:
            raise RuntimeError("503 Service Unavailable")
        super().append_row(row, value_input_option)


class FakeSheetsClient:

    def __init__(self):
        self.budgets = FakeWorksheet(BUDGET_COLUMNS)
        self.recurring = FakeWorksheet(RECURRING_COLUMNS)
        self.credentials = FakeWorksheet(CREDENTIAL_COLUMNS)
        self.audit = FakeWorksheet(AUDIT_COLUMNS)

    def get_budgets_sheet(self):
        return self.budgets

    def get_recurring_sheet(self):
        return self.recurring

    def get_credentials_sheet(self):
        return self.credentials

    def get_audit_sheet(self):
        return self.audit


@pytest.fixture
def client():
    return FakeSheetsClient()


@pytest.fixture
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(GoogleSheetsBudgetStorage.save_budget.retry, "wait", wait_none())


class TestBudgetSheet:

    def test_save_and_read_back(self, client):
        storage = GoogleSheetsBudgetStorage(client)
        budget = Budget(
            category=BudgetCategory.GROCERIES,
            total_amount=Decimal("400.00"),
            spent_amount=Decimal("12.50"),
            is_favorite=True,
            favorited_at=datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc),
        )
        run_async(storage.save_budget(budget))

        assert client.budgets.rows[1][1] == "groceries"
        loaded = run_async(storage.get_budget(budget.id))
        assert loaded == budget
        assert run_async(storage.get_budget_by_category(BudgetCategory.GROCERIES)) == budget

    def test_duplicate_category(self, client):
        storage = GoogleSheetsBudgetStorage(client)
        run_async(storage.save_budget(Budget(category=BudgetCategory.DINING, total_amount=Decimal("50"))))

        with pytest.raises(DuplicateCategoryError):
            run_async(storage.save_budget(
                Budget(category=BudgetCategory.DINING, total_amount=Decimal("80"))
            ))
        assert len(client.budgets.rows) == 2

    def test_update_rewrites_row(self, client):
        storage = GoogleSheetsBudgetStorage(client)
        budget = Budget(category=BudgetCategory.TRAVEL, total_amount=Decimal("900"))
        run_async(storage.save_budget(budget))

        budget.spent_amount = Decimal("150.25")
        run_async(storage.update_budget(budget))

        assert client.budgets.rows[1][3] == "150.25"
        assert run_async(storage.get_budget(budget.id)).spent_amount == Decimal("150.25")

    def test_delete(self, client):
        storage = GoogleSheetsBudgetStorage(client)
        first = Budget(category=BudgetCategory.HEALTH, total_amount=Decimal("60"))
        second = Budget(category=BudgetCategory.GIFTS, total_amount=Decimal("40"))
        run_async(storage.save_budget(first))
        run_async(storage.save_budget(second))

        assert run_async(storage.delete_budget(first.id)) is True
        assert run_async(storage.delete_budget(first.id)) is False
        assert run_async(storage.list_budgets()) == [second]

    def test_malformed_rows_skipped(self, client):
        storage = GoogleSheetsBudgetStorage(client)
        budget = Budget(category=BudgetCategory.OTHER, total_amount=Decimal("5"))
        run_async(storage.save_budget(budget))
        client.budgets.rows.append(["not-a-uuid", "groceries", "1"])
        client.budgets.rows.append([])

        assert run_async(storage.list_budgets()) == [budget]

    def test_list_sorted_by_category(self, client):
        storage = GoogleSheetsBudgetStorage(client)
        for category in (BudgetCategory.UTILITIES, BudgetCategory.DINING, BudgetCategory.HOUSING):
            run_async(storage.save_budget(Budget(category=category, total_amount=Decimal("1"))))

        assert [b.category for b in run_async(storage.list_budgets())] == [
            BudgetCategory.DINING,
            BudgetCategory.HOUSING,
            BudgetCategory.UTILITIES,
        ]

    def test_save_retried_after_transient_failure(self, client, no_retry_wait):
        client.budgets = FlakyWorksheet(BUDGET_COLUMNS)
        storage = GoogleSheetsBudgetStorage(client)
        budget = Budget(category=BudgetCategory.EDUCATION, total_amount=Decimal("300"))

        assert run_async(storage.save_budget(budget)) is True
        assert client.budgets.append_calls == 2
        assert run_async(storage.list_budgets()) == [budget]

    def test_save_gives_up_after_three_attempts(self, client, no_retry_wait):
        client.budgets = FlakyWorksheet(BUDGET_COLUMNS, failures=5)
        storage = GoogleSheetsBudgetStorage(client)

        with pytest.raises(StorageError, match="503"):
            run_async(storage.save_budget(
                Budget(category=BudgetCategory.EDUCATION, total_amount=Decimal("300"))
            ))
        assert client.budgets.append_calls == 3


class TestRecurringSheet:

    def test_kinds_share_one_sheet(self, client):
        storage = GoogleSheetsRecurringStorage(client)
        sub = Subscription(
            description="Video",
            amount=Decimal("15.99"),
            start_date=date(2026, 2, 1),
            category=SubscriptionCategory.VIDEO_STREAMING,
        )
        payment = Payment(
            description="Rent",
            amount=Decimal("1200"),
            start_date=date(2026, 1, 1),
            category=PaymentCategory.RENT,
        )
        run_async(storage.save_item(sub))
        run_async(storage.save_item(payment))

        assert run_async(storage.list_items()) == [payment, sub]
        assert run_async(storage.list_items(RecurringKind.SUBSCRIPTION)) == [sub]
        loaded = run_async(storage.get_item(payment.id))
        assert isinstance(loaded, Payment)
        assert loaded.category == PaymentCategory.RENT

    def test_delete(self, client):
        storage = GoogleSheetsRecurringStorage(client)
        sub = Subscription(description="News", amount=Decimal("4"), start_date=date(2026, 1, 1))
        run_async(storage.save_item(sub))

        assert run_async(storage.delete_item(sub.id)) is True
        assert run_async(storage.list_items()) == []


class TestCredentialSheet:

    def test_no_passcode_yet(self, client):
        assert run_async(GoogleSheetsCredentialStorage(client).get_passcode_hash()) is None

    def test_set_then_replace(self, client):
        storage = GoogleSheetsCredentialStorage(client)
        run_async(storage.set_passcode_hash("$2b$12$first"))
        run_async(storage.set_passcode_hash("$2b$12$second"))

        assert client.credentials.rows[1:] == [[PASSCODE_HASH_KEY, "$2b$12$second"]]
        assert run_async(storage.get_passcode_hash()) == "$2b$12$second"


class TestAuditSheet:

    def test_append_and_query(self, client):
        storage = GoogleSheetsAuditStorage(client)
        budget = Budget(category=BudgetCategory.DINING, total_amount=Decimal("10"))
        created = AuditEventBuilder.budget_created(
            budget_id=budget.id, category="dining", amount="10",
        )
        deleted = AuditEventBuilder.budget_deleted(budget_id=budget.id, category="dining")
        run_async(storage.append_event(created))
        run_async(storage.append_event(deleted))

        events = run_async(storage.get_events_by_entity("budget", budget.id))
        assert [e.event_id for e in events] == [created.event_id, deleted.event_id]
        assert events[0].details == created.details
        assert len(run_async(storage.get_recent_events(limit=1))) == 1
