"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep Google Sheets as the persistent backend
2. Use in-memory storage for testing and unconfigured runs
3. Keep the flows decoupled from storage implementation

The interface is intentionally simple - just the operations the
budgeting flows need.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from budgeting.models.audit import AuditEvent
from budgeting.models.budget import Budget, BudgetCategory
from budgeting.models.recurring import AnyRecurringItem, RecurringKind


class BudgetStorageInterface(ABC):
    """
    Abstract interface for budget storage.

    Implementations must enforce one budget per category.
    """

    @abstractmethod
    async def save_budget(self, budget: Budget) -> bool:
        """
        Save a new budget.

        Returns:
            True if saved successfully

        Raises:
            DuplicateCategoryError: If a budget for the category exists
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_budget(self, budget_id: UUID) -> Optional[Budget]:
        """Retrieve a budget by ID, or None."""
        pass

    @abstractmethod
    async def get_budget_by_category(
        self,
        category: BudgetCategory,
    ) -> Optional[Budget]:
        """Retrieve the budget for a category, or None."""
        pass

    @abstractmethod
    async def update_budget(self, budget: Budget) -> bool:
        """
        Replace a stored budget.

        Raises:
            NotFoundError: If budget doesn't exist
            StorageError: If update fails
        """
        pass

    @abstractmethod
    async def delete_budget(self, budget_id: UUID) -> bool:
        """
        Delete a budget.

        Returns:
            True if deleted, False if it did not exist
        """
        pass

    @abstractmethod
    async def list_budgets(self) -> list[Budget]:
        """All budgets, ordered by category."""
        pass


class RecurringStorageInterface(ABC):
    """Abstract interface for subscription and payment storage."""

    @abstractmethod
    async def save_item(self, item: AnyRecurringItem) -> bool:
        """
        Save a new subscription or payment.

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_item(self, item_id: UUID) -> Optional[AnyRecurringItem]:
        """Retrieve an item by ID, or None."""
        pass

    @abstractmethod
    async def delete_item(self, item_id: UUID) -> bool:
        """
        Delete an item.

        Returns:
            True if deleted, False if it did not exist
        """
        pass

    @abstractmethod
    async def list_items(
        self,
        kind: Optional[RecurringKind] = None,
    ) -> list[AnyRecurringItem]:
        """
        List items, optionally only of one kind.

        Returns:
            Items ordered by start date
        """
        pass


class CredentialStorageInterface(ABC):
    """Abstract interface for storing the passcode hash."""

    @abstractmethod
    async def get_passcode_hash(self) -> Optional[str]:
        """The stored hash, or None if no passcode was set."""
        pass

    @abstractmethod
    async def set_passcode_hash(self, passcode_hash: str) -> bool:
        """Store (or replace) the passcode hash."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """All events for one entity, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """The most recent events, newest first."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class DuplicateCategoryError(DuplicateError):
    """A budget for this category already exists."""

    def __init__(self, category: BudgetCategory):
        self.category = category
        super().__init__("This category already exists.")


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
