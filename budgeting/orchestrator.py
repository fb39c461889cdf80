"""
Main Orchestrator for Budgeting

This module ties together storage, the audit logger and the domain
logic, and defines the flows the application is driven through:
1. Budgets (create → record spending → favorite → delete)
2. Recurring items (add subscription/payment → project occurrences → totals)
3. Login (create passcode → confirm → verify on every login)

DESIGN DECISION: The orchestrator enforces the boundaries:
- One budget per category (duplicates are rejected loudly)
- Spent amounts only change through record_spending / reset_spending
- Occurrences are always projected, never stored
- Every change is audited, and failed saves are logged then re-raised
"""

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Awaitable, Callable, NamedTuple, Optional, Union
from uuid import UUID

import structlog

from budgeting.audit import AuditLogger, configure_logging, create_correlation_id
from budgeting.auth import (
    IncorrectPasscodeError,
    InvalidPasscodeFormatError,
    InvalidPasscodeHashError,
    PasscodeAlreadySetError,
    PasscodeMismatchError,
    PasscodeNotSetError,
    PasscodeSetup,
    check_passcode,
    hash_passcode,
    validate_passcode_format,
)
from budgeting.config import AppSettings, get_settings
from budgeting.models.budget import Budget, BudgetCategory, BudgetSummary
from budgeting.models.recurring import (
    AnyRecurringItem,
    Occurrence,
    Payment,
    PaymentCategory,
    RecurringKind,
    Subscription,
    SubscriptionCategory,
    TimePeriod,
)
from budgeting.recurring import (
    monthly_total,
    occurrences_in_period,
    period_window,
    total_amount,
)
from budgeting.reports import (
    budget_breakdown,
    describe_period,
    occurrence_breakdown,
    summarize_budgets,
)
from budgeting.services.storage import (
    BudgetStorageInterface,
    CredentialStorageInterface,
    DuplicateCategoryError,
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    GoogleSheetsCredentialStorage,
    GoogleSheetsRecurringStorage,
    InMemoryBudgetStorage,
    InMemoryCredentialStorage,
    InMemoryRecurringStorage,
    NotFoundError,
    RecurringStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

Amount = Union[Decimal, str, int]


def _to_amount(value: Amount, max_amount: Decimal) -> Decimal:
    """Parse an amount and reject absurd values."""
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Invalid amount: {value!r}")

    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    if amount > max_amount:
        raise ValueError(f"Amount {amount} exceeds the maximum of {max_amount}")
    return amount


class _Flow:
    """Shared plumbing: settings, audit logger, failed-save handling."""

    def __init__(
        self,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().app

    async def _write(
        self,
        operation: Callable[[], Awaitable[bool]],
        entity_type: str,
        entity_id: Optional[UUID],
        correlation_id: UUID,
    ) -> bool:
        """
        Run a storage write.

        A StorageError is logged and audited, then re-raised unchanged.
        Duplicate and not-found errors are the caller's business.
        """
        try:
            return await operation()
        except (DuplicateCategoryError, NotFoundError):
            raise
        except StorageError as e:
            logger.error(
                "save_failed",
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id else None,
                error=str(e),
            )
            if self._audit_logger:
                await self._audit_logger.log_save_failed(
                    entity_type=entity_type,
                    entity_id=entity_id,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise


class BudgetFlow(_Flow):
    """
    Orchestrates budget management.

    Each category has at most one budget. The spent amount of a budget
    is only ever changed by record_spending and reset_spending.
    """

    def __init__(
        self,
        budget_storage: BudgetStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        super().__init__(audit_logger, settings)
        self._storage = budget_storage

    async def _get(self, budget_id: UUID) -> Budget:
        budget = await self._storage.get_budget(budget_id)
        if budget is None:
            raise NotFoundError(f"Budget not found: {budget_id}")
        return budget

    async def _update(self, budget: Budget, correlation_id: UUID) -> Budget:
        budget.updated_at = datetime.now(timezone.utc)
        await self._write(
            lambda: self._storage.update_budget(budget),
            "budget", budget.id, correlation_id,
        )
        return budget

    async def create_budget(
        self,
        category: BudgetCategory,
        total_amount: Amount,
        is_favorite: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> Budget:
        """
        Create a budget for a category.

        Raises:
            DuplicateCategoryError: If the category already has a budget
            ValueError: If the amount is invalid
        """
        correlation_id = correlation_id or create_correlation_id()
        category = BudgetCategory(category)

        budget = Budget(
            category=category,
            total_amount=_to_amount(total_amount, self._settings.max_amount),
            is_favorite=is_favorite,
            favorited_at=datetime.now(timezone.utc) if is_favorite else None,
        )

        try:
            if await self._storage.get_budget_by_category(category):
                raise DuplicateCategoryError(category)
            await self._write(
                lambda: self._storage.save_budget(budget),
                "budget", budget.id, correlation_id,
            )
        except DuplicateCategoryError:
            logger.warning("duplicate_category", category=category.value)
            if self._audit_logger:
                await self._audit_logger.log_duplicate_category(
                    category=category.value,
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_budget_created(
                budget_id=budget.id,
                category=category.value,
                amount=str(budget.total_amount),
                correlation_id=correlation_id,
            )
        return budget

    async def update_budget_total(
        self,
        budget_id: UUID,
        total_amount: Amount,
        correlation_id: Optional[UUID] = None,
    ) -> Budget:
        """Change the limit of a budget. The spent amount is untouched."""
        correlation_id = correlation_id or create_correlation_id()
        budget = await self._get(budget_id)

        previous = budget.total_amount
        budget.total_amount = _to_amount(total_amount, self._settings.max_amount)
        await self._update(budget, correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_budget_updated(
                budget_id=budget.id,
                category=budget.category.value,
                changes={
                    "previous_total": str(previous),
                    "total_amount": str(budget.total_amount),
                },
                correlation_id=correlation_id,
            )
        return budget

    async def record_spending(
        self,
        category: BudgetCategory,
        amount: Amount,
        correlation_id: Optional[UUID] = None,
    ) -> Budget:
        """
        Add an expense to the budget of a category.

        Raises:
            NotFoundError: If the category has no budget
            ValueError: If amount is not positive
        """
        correlation_id = correlation_id or create_correlation_id()
        category = BudgetCategory(category)
        amount = _to_amount(amount, self._settings.max_amount)
        if amount <= 0:
            raise ValueError("Spending amount must be positive")

        budget = await self._storage.get_budget_by_category(category)
        if budget is None:
            raise NotFoundError(f"No budget for category: {category.value}")

        budget.spent_amount = budget.spent_amount + amount
        await self._update(budget, correlation_id)

        if budget.is_over_budget:
            logger.info(
                "budget_exceeded",
                category=category.value,
                total_amount=str(budget.total_amount),
                spent_amount=str(budget.spent_amount),
            )

        if self._audit_logger:
            await self._audit_logger.log_spending_recorded(
                budget_id=budget.id,
                category=category.value,
                amount=str(amount),
                spent_total=str(budget.spent_amount),
                correlation_id=correlation_id,
            )
        return budget

    async def reset_spending(
        self,
        budget_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> Budget:
        """Set the spent amount of a budget back to zero."""
        correlation_id = correlation_id or create_correlation_id()
        budget = await self._get(budget_id)

        previous = budget.spent_amount
        budget.spent_amount = Decimal("0")
        await self._update(budget, correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_budget_updated(
                budget_id=budget.id,
                category=budget.category.value,
                changes={"previous_spent": str(previous), "spent_amount": "0"},
                correlation_id=correlation_id,
            )
        return budget

    async def set_favorite(
        self,
        budget_id: UUID,
        is_favorite: bool,
        correlation_id: Optional[UUID] = None,
    ) -> Budget:
        correlation_id = correlation_id or create_correlation_id()
        budget = await self._get(budget_id)

        if budget.is_favorite == is_favorite:
            return budget

        budget.is_favorite = is_favorite
        budget.favorited_at = datetime.now(timezone.utc) if is_favorite else None
        await self._update(budget, correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_favorite_toggled(
                budget_id=budget.id,
                category=budget.category.value,
                is_favorite=is_favorite,
                correlation_id=correlation_id,
            )
        return budget

    async def delete_budget(
        self,
        budget_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Delete a budget. Returns False if it didn't exist."""
        correlation_id = correlation_id or create_correlation_id()
        budget = await self._storage.get_budget(budget_id)
        if budget is None:
            return False

        deleted = await self._write(
            lambda: self._storage.delete_budget(budget_id),
            "budget", budget_id, correlation_id,
        )
        if deleted and self._audit_logger:
            await self._audit_logger.log_budget_deleted(
                budget_id=budget_id,
                category=budget.category.value,
                correlation_id=correlation_id,
            )
        return deleted

    async def list_budgets(self) -> list[Budget]:
        return await self._storage.list_budgets()

    async def favorite_budgets(self) -> list[Budget]:
        """The most recently favorited budgets, oldest favorite first."""
        favorites = [b for b in await self._storage.list_budgets() if b.is_favorite]
        favorites.sort(key=lambda b: b.favorited_at or b.created_at)
        return favorites[-self._settings.max_favorite_budgets:]

    async def total_budgeted(self) -> Decimal:
        return summarize_budgets(await self._storage.list_budgets()).total_budgeted

    async def summary(self) -> BudgetSummary:
        return summarize_budgets(await self._storage.list_budgets())

    async def breakdown(self) -> dict[str, dict[str, Decimal]]:
        """Budgeted, spent and remaining per category."""
        return budget_breakdown(await self._storage.list_budgets())


class RecurringFlow(_Flow):
    """
    Orchestrates subscriptions and payments.

    Items are stored once; every view of them in a week, month or year is
    a projection computed on the spot.
    """

    def __init__(
        self,
        recurring_storage: RecurringStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        super().__init__(audit_logger, settings)
        self._storage = recurring_storage

    def _resolve(
        self,
        period: Optional[TimePeriod],
        reference: Optional[date],
    ) -> tuple[TimePeriod, date]:
        period = TimePeriod(period or self._settings.default_time_period)
        return period, reference or date.today()

    async def _add(
        self,
        item: AnyRecurringItem,
        correlation_id: Optional[UUID],
    ) -> AnyRecurringItem:
        correlation_id = correlation_id or create_correlation_id()

        await self._write(
            lambda: self._storage.save_item(item),
            item.kind, item.id, correlation_id,
        )

        if self._audit_logger:
            await self._audit_logger.log_recurring_added(
                item_id=item.id,
                kind=item.kind,
                description=item.description,
                amount=str(item.amount),
                correlation_id=correlation_id,
            )
        return item

    async def add_subscription(
        self,
        description: str,
        amount: Amount,
        start_date: date,
        category: SubscriptionCategory = SubscriptionCategory.OTHER,
        correlation_id: Optional[UUID] = None,
    ) -> Subscription:
        subscription = Subscription(
            description=description,
            amount=_to_amount(amount, self._settings.max_amount),
            start_date=start_date,
            category=category,
        )
        return await self._add(subscription, correlation_id)

    async def add_payment(
        self,
        description: str,
        amount: Amount,
        start_date: date,
        category: PaymentCategory = PaymentCategory.OTHER,
        correlation_id: Optional[UUID] = None,
    ) -> Payment:
        payment = Payment(
            description=description,
            amount=_to_amount(amount, self._settings.max_amount),
            start_date=start_date,
            category=category,
        )
        return await self._add(payment, correlation_id)

    async def delete_item(
        self,
        item_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Delete a subscription or payment. Returns False if it didn't exist."""
        correlation_id = correlation_id or create_correlation_id()
        item = await self._storage.get_item(item_id)
        if item is None:
            return False

        deleted = await self._write(
            lambda: self._storage.delete_item(item_id),
            item.kind, item_id, correlation_id,
        )
        if deleted and self._audit_logger:
            await self._audit_logger.log_recurring_deleted(
                item_id=item_id,
                kind=item.kind,
                description=item.description,
                correlation_id=correlation_id,
            )
        return deleted

    async def list_subscriptions(self) -> list[AnyRecurringItem]:
        return await self._storage.list_items(RecurringKind.SUBSCRIPTION)

    async def list_payments(self) -> list[AnyRecurringItem]:
        return await self._storage.list_items(RecurringKind.PAYMENT)

    async def occurrences(
        self,
        kind: Optional[RecurringKind] = None,
        period: Optional[TimePeriod] = None,
        reference: Optional[date] = None,
    ) -> list[Occurrence]:
        """
        Project stored items into the period containing reference.

        Args:
            kind: Only subscriptions or only payments; both if None
            period: Defaults to the configured default time period
            reference: Defaults to today
        """
        period, reference = self._resolve(period, reference)
        items = await self._storage.list_items(kind)
        return occurrences_in_period(
            items, period, reference, self._settings.week_start_day
        )

    async def subscription_occurrences(
        self,
        period: Optional[TimePeriod] = None,
        reference: Optional[date] = None,
    ) -> list[Occurrence]:
        return await self.occurrences(RecurringKind.SUBSCRIPTION, period, reference)

    async def payment_occurrences(
        self,
        period: Optional[TimePeriod] = None,
        reference: Optional[date] = None,
    ) -> list[Occurrence]:
        return await self.occurrences(RecurringKind.PAYMENT, period, reference)

    async def period_total(
        self,
        kind: Optional[RecurringKind] = None,
        period: Optional[TimePeriod] = None,
        reference: Optional[date] = None,
    ) -> Decimal:
        """Sum of the occurrences in the period."""
        return total_amount(await self.occurrences(kind, period, reference))

    async def category_breakdown(
        self,
        kind: Optional[RecurringKind] = None,
        period: Optional[TimePeriod] = None,
        reference: Optional[date] = None,
    ) -> dict[str, Decimal]:
        return occurrence_breakdown(await self.occurrences(kind, period, reference))

    async def overview_total(self) -> Decimal:
        """Monthly cost of every stored subscription and payment."""
        return monthly_total(await self._storage.list_items())

    def describe(
        self,
        period: Optional[TimePeriod] = None,
        reference: Optional[date] = None,
    ) -> str:
        """Label for the window a projection covers, e.g. 'in October 2026'."""
        period, reference = self._resolve(period, reference)
        date_from, date_to = period_window(
            period, reference, self._settings.week_start_day
        )
        return describe_period(date_from, date_to)


class LoginFlow(_Flow):
    """
    Orchestrates passcode creation and login.

    First run: begin_setup(pin) then confirm_setup(pin).
    Afterwards: login(pin) on every launch.
    """

    def __init__(
        self,
        credential_storage: CredentialStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        super().__init__(audit_logger, settings)
        self._storage = credential_storage
        self._setup = PasscodeSetup(self._settings.passcode_length)

    @property
    def is_confirming(self) -> bool:
        return self._setup.is_confirming

    async def is_passcode_set(self) -> bool:
        return await self._storage.get_passcode_hash() is not None

    async def begin_setup(self, passcode: str) -> None:
        """
        First entry of a new passcode.

        Raises:
            PasscodeAlreadySetError: If a passcode exists already
            InvalidPasscodeFormatError: If it isn't the right number of digits
        """
        if await self.is_passcode_set():
            raise PasscodeAlreadySetError("A passcode has already been set")
        self._setup.enter(passcode)

    async def confirm_setup(
        self,
        passcode: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Second entry; stores the passcode when both entries match.

        Raises:
            PasscodeMismatchError: If the entries differ. Setup starts over.
        """
        correlation_id = correlation_id or create_correlation_id()
        try:
            confirmed = self._setup.confirm(passcode)
        except PasscodeMismatchError:
            if self._audit_logger:
                await self._audit_logger.log_passcode_mismatch(correlation_id)
            raise

        await self._write(
            lambda: self._storage.set_passcode_hash(hash_passcode(confirmed)),
            "passcode", None, correlation_id,
        )
        if self._audit_logger:
            await self._audit_logger.log_passcode_set(correlation_id)

    async def login(
        self,
        passcode: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Verify a login attempt.

        Returns:
            True on success

        Raises:
            PasscodeNotSetError: If no passcode was created yet
            IncorrectPasscodeError: If the passcode is wrong
            InvalidPasscodeHashError: If the stored hash is corrupt
        """
        correlation_id = correlation_id or create_correlation_id()
        passcode_hash = await self._storage.get_passcode_hash()
        if passcode_hash is None:
            raise PasscodeNotSetError("No passcode has been set")

        try:
            validate_passcode_format(passcode, self._settings.passcode_length)
            correct = check_passcode(passcode, passcode_hash)
        except InvalidPasscodeFormatError:
            correct = False
        except InvalidPasscodeHashError as e:
            logger.error("passcode_hash_invalid", error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type="passcode_hash_invalid",
                    error_message=str(e),
                    details={"entity_type": "passcode"},
                    correlation_id=correlation_id,
                )
            raise

        if not correct:
            logger.warning("login_failed")
            if self._audit_logger:
                await self._audit_logger.log_login_failed(correlation_id)
            raise IncorrectPasscodeError()

        if self._audit_logger:
            await self._audit_logger.log_login_succeeded(correlation_id)
        return True


class AppComponents(NamedTuple):
    budget_flow: BudgetFlow
    recurring_flow: RecurringFlow
    login_flow: LoginFlow
    sheets_client: Optional[GoogleSheetsClient]


def create_app_components(
    use_storage: bool = True,
    settings: Optional[AppSettings] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False (or leave Sheets unconfigured) to run
                    on in-memory storage.
        settings: App settings; loaded from the environment if None
    """
    settings = settings or get_settings().app
    configure_logging(settings.debug_mode)
    sheets_client = None

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            budget_storage = GoogleSheetsBudgetStorage(sheets_client)
            recurring_storage = GoogleSheetsRecurringStorage(sheets_client)
            credential_storage = GoogleSheetsCredentialStorage(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            use_storage = False
            sheets_client = None

    if not use_storage:
        budget_storage = InMemoryBudgetStorage()
        recurring_storage = InMemoryRecurringStorage()
        credential_storage = InMemoryCredentialStorage()
        audit_logger = AuditLogger()  # Local-only logging

    return AppComponents(
        budget_flow=BudgetFlow(budget_storage, audit_logger, settings),
        recurring_flow=RecurringFlow(recurring_storage, audit_logger, settings),
        login_flow=LoginFlow(credential_storage, audit_logger, settings),
        sheets_client=sheets_client,
    )
