"""
Audit Models for Family Accountant

Every tool call the assistant makes is logged for audit purposes.
This provides:
1. Traceability from an answer back to the numbers behind it
2. Debugging information when a tool fails
3. A record of which rates a calculation used

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Chat turns
    QUESTION_RECEIVED = "question_received"
    RESPONSE_GENERATED = "response_generated"

    # Tool calls
    TOOL_INVOKED = "tool_invoked"
    TOOL_COMPLETED = "tool_completed"
    TOOL_FAILED = "tool_failed"

    # Calculations run outside the assistant (UI forms)
    CALCULATION_PERFORMED = "calculation_performed"

    # System events
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


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
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
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

    # Context - what is this about? (tool name, calculator name)
    subject: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Tool or calculator the event relates to"
    )

    # Correlation - ties all tool calls of one chat turn together
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
        description="Was this triggered directly by the user?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "subject": self.subject,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_row(self) -> dict:
        """
        Convert to a row for the audit table.

        `details` is stored as a JSON string so the table needs no jsonb column.
        """
        row = self.to_log_dict()
        row["details"] = json.dumps(self.details, default=str) if self.details else None
        return row


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.tool_invoked("calculate_tax", args, correlation_id)
    """

    @staticmethod
    def question_received(
        question: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.QUESTION_RECEIVED,
            correlation_id=correlation_id,
            description="User asked a question",
            details={"question": question[:500]},
            is_user_action=True,
        )

    @staticmethod
    def response_generated(
        tools_used: list[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RESPONSE_GENERATED,
            correlation_id=correlation_id,
            description=f"Answer generated using {len(tools_used)} tool call(s)",
            details={"tools_used": tools_used},
        )

    @staticmethod
    def tool_invoked(
        tool_name: str,
        arguments: dict,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TOOL_INVOKED,
            subject=tool_name,
            correlation_id=correlation_id,
            description=f"Tool invoked: {tool_name}",
            details={"arguments": arguments},
        )

    @staticmethod
    def tool_completed(
        tool_name: str,
        duration_ms: float,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TOOL_COMPLETED,
            subject=tool_name,
            correlation_id=correlation_id,
            description=f"Tool completed: {tool_name}",
            details={"duration_ms": round(duration_ms, 1)},
        )

    @staticmethod
    def tool_failed(
        tool_name: str,
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TOOL_FAILED,
            severity=AuditSeverity.WARNING,
            subject=tool_name,
            correlation_id=correlation_id,
            description=f"Tool failed: {tool_name}",
            error_message=error_message,
        )

    @staticmethod
    def calculation_performed(
        calculator: str,
        inputs: dict,
        financial_year: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CALCULATION_PERFORMED,
            subject=calculator,
            description=f"Calculation performed: {calculator}",
            details={"inputs": inputs, "financial_year": financial_year},
            is_user_action=True,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            subject=operation,
            correlation_id=correlation_id,
            description=f"Storage error during {operation}",
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

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
            correlation_id=correlation_id,
        )
