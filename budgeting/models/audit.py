"""
Audit Models for Budgeting

Every change to budgets, recurring items and the passcode is logged.
This provides:
1. Traceability of all changes to the user's money data
2. Debugging information when a save fails
3. A record of failed login attempts

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from budgeting.models.budget import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Budgets
    BUDGET_CREATED = "budget_created"
    BUDGET_UPDATED = "budget_updated"
    BUDGET_DELETED = "budget_deleted"
    DUPLICATE_CATEGORY_REJECTED = "duplicate_category_rejected"
    FAVORITE_TOGGLED = "favorite_toggled"
    SPENDING_RECORDED = "spending_recorded"

    # Recurring items
    RECURRING_ADDED = "recurring_added"
    RECURRING_DELETED = "recurring_deleted"

    # Authentication
    PASSCODE_SET = "passcode_set"
    PASSCODE_MISMATCH = "passcode_mismatch"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"

    # Persistence
    SAVE_FAILED = "save_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'budget', 'subscription', 'passcode')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.budget_created(budget_id, "groceries", "500.00", correlation_id)
        event = AuditEventBuilder.login_failed(correlation_id)
    """

    @staticmethod
    def budget_created(
        budget_id: UUID,
        category: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_CREATED,
            entity_type="budget",
            entity_id=budget_id,
            correlation_id=correlation_id,
            description=f"Budget created: {category} - {amount}",
            details={
                "category": category,
                "total_amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def budget_updated(
        budget_id: UUID,
        category: str,
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            entity_type="budget",
            entity_id=budget_id,
            correlation_id=correlation_id,
            description=f"Budget updated: {category}",
            details={"category": category, **changes},
            is_user_action=True,
        )

    @staticmethod
    def budget_deleted(
        budget_id: UUID,
        category: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_DELETED,
            entity_type="budget",
            entity_id=budget_id,
            correlation_id=correlation_id,
            description=f"Budget deleted: {category}",
            details={"category": category},
            is_user_action=True,
        )

    @staticmethod
    def duplicate_category_rejected(
        category: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DUPLICATE_CATEGORY_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"Duplicate category rejected: {category}",
            details={"category": category},
            is_user_action=True,
        )

    @staticmethod
    def favorite_toggled(
        budget_id: UUID,
        category: str,
        is_favorite: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        state = "added to" if is_favorite else "removed from"
        return AuditEvent(
            event_type=AuditEventType.FAVORITE_TOGGLED,
            entity_type="budget",
            entity_id=budget_id,
            correlation_id=correlation_id,
            description=f"Budget {category} {state} favorites",
            details={"category": category, "is_favorite": is_favorite},
            is_user_action=True,
        )

    @staticmethod
    def spending_recorded(
        budget_id: UUID,
        category: str,
        amount: str,
        spent_total: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SPENDING_RECORDED,
            entity_type="budget",
            entity_id=budget_id,
            correlation_id=correlation_id,
            description=f"Spending recorded on {category}: {amount}",
            details={
                "category": category,
                "amount": amount,
                "spent_amount": spent_total,
            },
            is_user_action=True,
        )

    @staticmethod
    def recurring_added(
        item_id: UUID,
        kind: str,
        description: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_ADDED,
            entity_type=kind,
            entity_id=item_id,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} added: {description} - {amount}",
            details={"description": description, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def recurring_deleted(
        item_id: UUID,
        kind: str,
        description: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_DELETED,
            entity_type=kind,
            entity_id=item_id,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} deleted: {description}",
            details={"description": description},
            is_user_action=True,
        )

    @staticmethod
    def passcode_set(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PASSCODE_SET,
            entity_type="passcode",
            correlation_id=correlation_id,
            description="Passcode created",
            is_user_action=True,
        )

    @staticmethod
    def passcode_mismatch(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PASSCODE_MISMATCH,
            severity=AuditSeverity.WARNING,
            entity_type="passcode",
            correlation_id=correlation_id,
            description="Passcode confirmation did not match",
            is_user_action=True,
        )

    @staticmethod
    def login_succeeded(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="passcode",
            correlation_id=correlation_id,
            description="Login succeeded",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="passcode",
            correlation_id=correlation_id,
            description="Login failed: incorrect passcode",
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        entity_type: str,
        entity_id: Optional[UUID],
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Failed to save {entity_type}",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
