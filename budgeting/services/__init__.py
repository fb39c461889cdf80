"""Services package."""

from budgeting.services.storage import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ConnectionError,
    CredentialStorageInterface,
    DuplicateCategoryError,
    DuplicateError,
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    GoogleSheetsCredentialStorage,
    GoogleSheetsRecurringStorage,
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    InMemoryCredentialStorage,
    InMemoryRecurringStorage,
    NotFoundError,
    RecurringStorageInterface,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "BudgetStorageInterface",
    "ConnectionError",
    "CredentialStorageInterface",
    "DuplicateCategoryError",
    "DuplicateError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsBudgetStorage",
    "GoogleSheetsClient",
    "GoogleSheetsCredentialStorage",
    "GoogleSheetsRecurringStorage",
    "InMemoryAuditStorage",
    "InMemoryBudgetStorage",
    "InMemoryCredentialStorage",
    "InMemoryRecurringStorage",
    "NotFoundError",
    "RecurringStorageInterface",
    "StorageError",
]
