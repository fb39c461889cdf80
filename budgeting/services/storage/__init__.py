"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage:
Google Sheets for persistence, in-memory for tests and unconfigured runs.
"""

from budgeting.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
    ConnectionError,
    CredentialStorageInterface,
    DuplicateCategoryError,
    DuplicateError,
    NotFoundError,
    RecurringStorageInterface,
    StorageError,
)
from budgeting.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryBudgetStorage,
    InMemoryCredentialStorage,
    InMemoryRecurringStorage,
)
from budgeting.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    GoogleSheetsCredentialStorage,
    GoogleSheetsRecurringStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "BudgetStorageInterface",
    "CredentialStorageInterface",
    "RecurringStorageInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateCategoryError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryBudgetStorage",
    "InMemoryCredentialStorage",
    "InMemoryRecurringStorage",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsBudgetStorage",
    "GoogleSheetsClient",
    "GoogleSheetsCredentialStorage",
    "GoogleSheetsRecurringStorage",
]
