"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the persistent backend because:
1. The user can look at their budgets directly in Sheets
2. No database setup required
3. Built-in backup

TRADEOFFS:
- Not suitable for high-volume data (fine for one person's budgets)
- No transactions (the duplicate-category check is read-then-append)
- Limited query capabilities (we filter in Python)

Each entity gets its own worksheet, created with a header row on first use.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from budgeting.config import get_settings
from budgeting.models.audit import AuditEvent, AuditEventType, AuditSeverity
from budgeting.models.budget import Budget, BudgetCategory
from budgeting.models.recurring import (
    AnyRecurringItem,
    RecurringKind,
    recurring_item_from_dict,
)
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


BUDGET_COLUMNS = [
    "id",
    "category",
    "total_amount",
    "spent_amount",
    "is_favorite",
    "favorited_at",
    "created_at",
    "updated_at",
]

RECURRING_COLUMNS = [
    "id",
    "kind",
    "description",
    "category",
    "amount",
    "start_date",
    "created_at",
]

CREDENTIAL_COLUMNS = [
    "key",
    "value",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]

PASSCODE_HASH_KEY = "passcode_hash"

# Don't retry errors that another attempt can't fix
sheets_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_not_exception_type((DuplicateError, NotFoundError)),
    reraise=True,
)


def _safe_getter(row: list):
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default
    return safe_get


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int = 1000,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_budgets_sheet(self) -> gspread.Worksheet:
        return self._get_or_create_sheet(
            self._settings.budgets_sheet_name, BUDGET_COLUMNS
        )

    def get_recurring_sheet(self) -> gspread.Worksheet:
        return self._get_or_create_sheet(
            self._settings.recurring_sheet_name, RECURRING_COLUMNS
        )

    def get_credentials_sheet(self) -> gspread.Worksheet:
        return self._get_or_create_sheet(
            self._settings.credentials_sheet_name, CREDENTIAL_COLUMNS, rows=10
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


class GoogleSheetsBudgetStorage(BudgetStorageInterface):
    """
    Google Sheets implementation of budget storage.

    One budget per row.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _budget_to_row(self, budget: Budget) -> list:
        return [
            str(budget.id),
            budget.category.value,
            str(budget.total_amount),
            str(budget.spent_amount),
            str(budget.is_favorite),
            budget.favorited_at.isoformat() if budget.favorited_at else "",
            budget.created_at.isoformat(),
            budget.updated_at.isoformat(),
        ]

    def _row_to_budget(self, row: list) -> Budget:
        safe_get = _safe_getter(row)
        return Budget(
            id=UUID(safe_get(0)),
            category=BudgetCategory(safe_get(1)),
            total_amount=Decimal(safe_get(2, "0")),
            spent_amount=Decimal(safe_get(3, "0")),
            is_favorite=safe_get(4).lower() == "true",
            favorited_at=datetime.fromisoformat(safe_get(5)) if safe_get(5) else None,
            created_at=datetime.fromisoformat(safe_get(6)),
            updated_at=datetime.fromisoformat(safe_get(7)),
        )

    def _read_budgets(self) -> list[tuple[int, Budget]]:
        """(sheet row number, budget) for every parseable row."""
        sheet = self._client.get_budgets_sheet()
        all_rows = sheet.get_all_values()

        budgets = []
        for idx, row in enumerate(all_rows[1:], start=2):  # row 1 is header
            if not row or not row[0]:
                continue
            try:
                budgets.append((idx, self._row_to_budget(row)))
            except Exception:
                continue  # Skip malformed rows
        return budgets

    @sheets_retry
    async def save_budget(self, budget: Budget) -> bool:
        """Append a budget, refusing a second budget for the same category."""
        try:
            for _, existing in self._read_budgets():
                if existing.category == budget.category:
                    raise DuplicateCategoryError(budget.category)
            sheet = self._client.get_budgets_sheet()
            sheet.append_row(self._budget_to_row(budget), value_input_option="RAW")
            return True
        except DuplicateError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save budget: {e}")

    async def get_budget(self, budget_id: UUID) -> Optional[Budget]:
        try:
            for _, budget in self._read_budgets():
                if budget.id == budget_id:
                    return budget
            return None
        except Exception as e:
            raise StorageError(f"Failed to get budget: {e}")

    async def get_budget_by_category(
        self,
        category: BudgetCategory,
    ) -> Optional[Budget]:
        try:
            for _, budget in self._read_budgets():
                if budget.category == category:
                    return budget
            return None
        except Exception as e:
            raise StorageError(f"Failed to get budget: {e}")

    @sheets_retry
    async def update_budget(self, budget: Budget) -> bool:
        try:
            sheet = self._client.get_budgets_sheet()
            for idx, existing in self._read_budgets():
                if existing.id == budget.id:
                    new_row = self._budget_to_row(budget)
                    for col_idx, value in enumerate(new_row, start=1):
                        sheet.update_cell(idx, col_idx, value)
                    return True

            raise NotFoundError(f"Budget not found: {budget.id}")
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update budget: {e}")

    async def delete_budget(self, budget_id: UUID) -> bool:
        try:
            sheet = self._client.get_budgets_sheet()
            for idx, budget in self._read_budgets():
                if budget.id == budget_id:
                    sheet.delete_rows(idx)
                    return True
            return False
        except Exception as e:
            raise StorageError(f"Failed to delete budget: {e}")

    async def list_budgets(self) -> list[Budget]:
        try:
            budgets = [budget for _, budget in self._read_budgets()]
            budgets.sort(key=lambda b: b.category.value)
            return budgets
        except Exception as e:
            raise StorageError(f"Failed to list budgets: {e}")


class GoogleSheetsRecurringStorage(RecurringStorageInterface):
    """
    Google Sheets implementation of subscription and payment storage.

    Both kinds share one worksheet; the kind column tells them apart.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _item_to_row(self, item: AnyRecurringItem) -> list:
        return [
            str(item.id),
            RecurringKind(item.kind).value,
            item.description,
            item.category.value,
            str(item.amount),
            item.start_date.isoformat(),
            item.created_at.isoformat(),
        ]

    def _row_to_item(self, row: list) -> AnyRecurringItem:
        safe_get = _safe_getter(row)
        return recurring_item_from_dict({
            "id": UUID(safe_get(0)),
            "kind": safe_get(1),
            "description": safe_get(2),
            "category": safe_get(3),
            "amount": Decimal(safe_get(4)),
            "start_date": date.fromisoformat(safe_get(5)),
            "created_at": datetime.fromisoformat(safe_get(6)),
        })

    def _read_items(self) -> list[tuple[int, AnyRecurringItem]]:
        sheet = self._client.get_recurring_sheet()
        all_rows = sheet.get_all_values()

        items = []
        for idx, row in enumerate(all_rows[1:], start=2):
            if not row or not row[0]:
                continue
            try:
                items.append((idx, self._row_to_item(row)))
            except Exception:
                continue  # Skip malformed rows
        return items

    @sheets_retry
    async def save_item(self, item: AnyRecurringItem) -> bool:
        try:
            sheet = self._client.get_recurring_sheet()
            sheet.append_row(self._item_to_row(item), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to save recurring item: {e}")

    async def get_item(self, item_id: UUID) -> Optional[AnyRecurringItem]:
        try:
            for _, item in self._read_items():
                if item.id == item_id:
                    return item
            return None
        except Exception as e:
            raise StorageError(f"Failed to get recurring item: {e}")

    async def delete_item(self, item_id: UUID) -> bool:
        try:
            sheet = self._client.get_recurring_sheet()
            for idx, item in self._read_items():
                if item.id == item_id:
                    sheet.delete_rows(idx)
                    return True
            return False
        except Exception as e:
            raise StorageError(f"Failed to delete recurring item: {e}")

    async def list_items(
        self,
        kind: Optional[RecurringKind] = None,
    ) -> list[AnyRecurringItem]:
        try:
            items = [
                item for _, item in self._read_items()
                if kind is None or item.kind == kind
            ]
            items.sort(key=lambda i: (i.start_date, i.description))
            return items
        except Exception as e:
            raise StorageError(f"Failed to list recurring items: {e}")


class GoogleSheetsCredentialStorage(CredentialStorageInterface):
    """
    Passcode hash kept as a key/value row.

    Only the bcrypt hash is written; the sheet never sees the PIN.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    async def get_passcode_hash(self) -> Optional[str]:
        try:
            sheet = self._client.get_credentials_sheet()
            for row in sheet.get_all_values()[1:]:
                if len(row) > 1 and row[0] == PASSCODE_HASH_KEY and row[1]:
                    return row[1]
            return None
        except Exception as e:
            raise StorageError(f"Failed to read passcode: {e}")

    @sheets_retry
    async def set_passcode_hash(self, passcode_hash: str) -> bool:
        try:
            sheet = self._client.get_credentials_sheet()
            all_rows = sheet.get_all_values()
            for idx, row in enumerate(all_rows[1:], start=2):
                if row and row[0] == PASSCODE_HASH_KEY:
                    sheet.update_cell(idx, 2, passcode_hash)
                    return True

            sheet.append_row([PASSCODE_HASH_KEY, passcode_hash], value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to store passcode: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        safe_get = _safe_getter(row)
        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=UUID(safe_get(5)) if safe_get(5) else None,
            correlation_id=UUID(safe_get(6)) if safe_get(6) else None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    def _read_events(self) -> list[AuditEvent]:
        sheet = self._client.get_audit_sheet()
        events = []
        for row in sheet.get_all_values()[1:]:
            if row and row[0]:
                try:
                    events.append(self._row_to_event(row))
                except Exception:
                    continue
        return events

    @sheets_retry
    async def append_event(self, event: AuditEvent) -> bool:
        sheet = self._client.get_audit_sheet()
        sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
        return True

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        try:
            events = [
                e for e in self._read_events()
                if e.entity_type == entity_type and e.entity_id == entity_id
            ]
            events.sort(key=lambda e: e.timestamp)
            return events
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        try:
            events = self._read_events()
            events.sort(key=lambda e: e.timestamp, reverse=True)
            return events[:limit]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
