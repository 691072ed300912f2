"""
Audit Logger

DESIGN DECISION: Every question, tool call and form calculation is logged.
This provides:
1. A trail from each answer back to the figures it was built on
2. Debugging capability when a tool fails
3. A record the family can review at tax time

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace the tool calls of one chat turn
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from family_accountant.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from family_accountant.services.storage import AuditStorageInterface


# Configure structlog for local logging
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
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The Supabase audit table (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_question(self, question: str, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.question_received(question, correlation_id))

    async def log_response(self, tools_used: list[str], correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.response_generated(tools_used, correlation_id))

    async def log_tool_invoked(
        self,
        tool_name: str,
        arguments: dict,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.tool_invoked(tool_name, arguments, correlation_id))

    async def log_tool_completed(
        self,
        tool_name: str,
        duration_ms: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.tool_completed(tool_name, duration_ms, correlation_id))

    async def log_tool_failed(
        self,
        tool_name: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a tool call that returned an error to the model."""
        await self.log(AuditEventBuilder.tool_failed(tool_name, error_message, correlation_id))

    async def log_calculation(
        self,
        calculator: str,
        inputs: dict,
        financial_year: Optional[str] = None,
    ) -> None:
        """Log a calculation run from one of the calculator screens."""
        await self.log(AuditEventBuilder.calculation_performed(calculator, inputs, financial_year))

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.storage_error(operation, error_message, correlation_id))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error (Gemini, Supabase connection)."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a chat turn and pass it to every tool call
    made while answering it.
    """
    return uuid4()
