"""
Audit Logger

Every change to budgets, recurring items and the passcode is logged.

The audit logger:
- Always writes a structured local log line
- Persists to audit storage when one is configured
- Never lets an audit storage failure break the calling flow
- Carries correlation IDs so one user action can be traced end to end
"""

import logging
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from budgeting.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from budgeting.services.storage import AuditStorageInterface


def configure_logging(debug: bool = False) -> None:
    """
    Route structlog through stdlib logging as one JSON object per line.

    Called once at import with INFO level; call again with debug=True
    to see debug events.
    """
    logging.basicConfig(format="%(message)s")
    logging.getLogger().setLevel(logging.DEBUG if debug else logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


_LOG_METHODS = {
    AuditSeverity.DEBUG: "debug",
    AuditSeverity.INFO: "info",
    AuditSeverity.WARNING: "warning",
    AuditSeverity.ERROR: "error",
    AuditSeverity.CRITICAL: "critical",
}


class AuditLogger:
    """
    Central audit logging service.

    Each event goes to the local structured log at a level matching its
    severity, and then to audit storage if there is one.
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Args:
            storage: Where events are persisted. None means local log only.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Record an audit event.

        Returns False only when the storage write failed.
        """
        emit = getattr(self._logger, _LOG_METHODS.get(event.severity, "info"))
        emit("audit_event", **event.to_log_dict())

        if self._storage is None:
            return True

        try:
            return await self._storage.append_event(event)
        except Exception as e:
            self._logger.error(
                "audit_storage_failed",
                error=str(e),
                event_id=str(event.event_id),
                event_type=event.event_type.value,
            )
            return False

    async def log_budget_created(
        self,
        budget_id: UUID,
        category: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.budget_created(
            budget_id=budget_id,
            category=category,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_budget_updated(
        self,
        budget_id: UUID,
        category: str,
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.budget_updated(
            budget_id=budget_id,
            category=category,
            changes=changes,
            correlation_id=correlation_id,
        ))

    async def log_budget_deleted(
        self,
        budget_id: UUID,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.budget_deleted(
            budget_id=budget_id,
            category=category,
            correlation_id=correlation_id,
        ))

    async def log_duplicate_category(
        self,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.duplicate_category_rejected(
            category=category,
            correlation_id=correlation_id,
        ))

    async def log_favorite_toggled(
        self,
        budget_id: UUID,
        category: str,
        is_favorite: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.favorite_toggled(
            budget_id=budget_id,
            category=category,
            is_favorite=is_favorite,
            correlation_id=correlation_id,
        ))

    async def log_spending_recorded(
        self,
        budget_id: UUID,
        category: str,
        amount: str,
        spent_total: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.spending_recorded(
            budget_id=budget_id,
            category=category,
            amount=amount,
            spent_total=spent_total,
            correlation_id=correlation_id,
        ))

    async def log_recurring_added(
        self,
        item_id: UUID,
        kind: str,
        description: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.recurring_added(
            item_id=item_id,
            kind=kind,
            description=description,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_recurring_deleted(
        self,
        item_id: UUID,
        kind: str,
        description: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.recurring_deleted(
            item_id=item_id,
            kind=kind,
            description=description,
            correlation_id=correlation_id,
        ))

    async def log_passcode_set(self, correlation_id: Optional[UUID] = None) -> None:
        await self.log(AuditEventBuilder.passcode_set(correlation_id))

    async def log_passcode_mismatch(self, correlation_id: Optional[UUID] = None) -> None:
        await self.log(AuditEventBuilder.passcode_mismatch(correlation_id))

    async def log_login_succeeded(self, correlation_id: Optional[UUID] = None) -> None:
        await self.log(AuditEventBuilder.login_succeeded(correlation_id))

    async def log_login_failed(self, correlation_id: Optional[UUID] = None) -> None:
        await self.log(AuditEventBuilder.login_failed(correlation_id))

    async def log_save_failed(
        self,
        entity_type: str,
        entity_id: Optional[UUID],
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a storage write that failed."""
        await self.log(AuditEventBuilder.save_failed(
            entity_type=entity_type,
            entity_id=entity_id,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action and pass it through all
    subsequent operations.
    """
    return uuid4()
