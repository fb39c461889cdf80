"""
In-Memory Storage Implementation

Used by tests and when Google Sheets isn't configured. Data lives only as
long as the process. Stored models are copied on the way in and out so
callers can't mutate storage behind its back.
"""

from typing import Optional
from uuid import UUID

from budgeting.models.audit import AuditEvent
from budgeting.models.budget import Budget, BudgetCategory
from budgeting.models.recurring import AnyRecurringItem, RecurringKind
from budgeting.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    CredentialStorageInterface,
    DuplicateCategoryError,
    DuplicateError,
    NotFoundError,
    RecurringStorageInterface,
)


class InMemoryBudgetStorage(BudgetStorageInterface):

    def __init__(self):
        self._budgets: dict[UUID, Budget] = {}

    async def save_budget(self, budget: Budget) -> bool:
        if budget.id in self._budgets:
            raise DuplicateError(f"Budget already exists: {budget.id}")
        if await self.get_budget_by_category(budget.category):
            raise DuplicateCategoryError(budget.category)
        self._budgets[budget.id] = budget.model_copy(deep=True)
        return True

    async def get_budget(self, budget_id: UUID) -> Optional[Budget]:
        budget = self._budgets.get(budget_id)
        return budget.model_copy(deep=True) if budget else None

    async def get_budget_by_category(
        self,
        category: BudgetCategory,
    ) -> Optional[Budget]:
        for budget in self._budgets.values():
            if budget.category == category:
                return budget.model_copy(deep=True)
        return None

    async def update_budget(self, budget: Budget) -> bool:
        if budget.id not in self._budgets:
            raise NotFoundError(f"Budget not found: {budget.id}")
        self._budgets[budget.id] = budget.model_copy(deep=True)
        return True

    async def delete_budget(self, budget_id: UUID) -> bool:
        return self._budgets.pop(budget_id, None) is not None

    async def list_budgets(self) -> list[Budget]:
        budgets = [b.model_copy(deep=True) for b in self._budgets.values()]
        budgets.sort(key=lambda b: b.category.value)
        return budgets


class InMemoryRecurringStorage(RecurringStorageInterface):

    def __init__(self):
        self._items: dict[UUID, AnyRecurringItem] = {}

    async def save_item(self, item: AnyRecurringItem) -> bool:
        if item.id in self._items:
            raise DuplicateError(f"Recurring item already exists: {item.id}")
        self._items[item.id] = item.model_copy(deep=True)
        return True

    async def get_item(self, item_id: UUID) -> Optional[AnyRecurringItem]:
        item = self._items.get(item_id)
        return item.model_copy(deep=True) if item else None

    async def delete_item(self, item_id: UUID) -> bool:
        return self._items.pop(item_id, None) is not None

    async def list_items(
        self,
        kind: Optional[RecurringKind] = None,
    ) -> list[AnyRecurringItem]:
        items = [
            item.model_copy(deep=True)
            for item in self._items.values()
            if kind is None or item.kind == kind
        ]
        items.sort(key=lambda i: (i.start_date, i.description))
        return items


class InMemoryCredentialStorage(CredentialStorageInterface):

    def __init__(self):
        self._passcode_hash: Optional[str] = None

    async def get_passcode_hash(self) -> Optional[str]:
        return self._passcode_hash

    async def set_passcode_hash(self, passcode_hash: str) -> bool:
        self._passcode_hash = passcode_hash
        return True


class InMemoryAuditStorage(AuditStorageInterface):

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
