"""
Audit Models for the Finance Tracker client

Every user-visible action (a load, a create, an update, a delete, a sign-in)
is described by an AuditEvent before it is written to the local log.
This provides:
1. Traceability of what the user did and what the server answered
2. Debugging information when a request fails
3. A record of stale responses that were discarded

DESIGN DECISION: Events carry identifiers and amounts, never credentials.
Passwords and bearer tokens must not appear in `details`.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session
    USER_LOGGED_IN = "user_logged_in"
    USER_LOGGED_OUT = "user_logged_out"
    USER_REGISTERED = "user_registered"
    AUTH_FAILED = "auth_failed"

    # Loading
    DATA_LOADED = "data_loaded"
    LOAD_FAILED = "load_failed"
    STALE_LOAD_DISCARDED = "stale_load_discarded"

    # Mutations
    ENTITY_CREATED = "entity_created"
    ENTITY_UPDATED = "entity_updated"
    ENTITY_DELETED = "entity_deleted"
    MUTATION_FAILED = "mutation_failed"
    INPUT_REJECTED = "input_rejected"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of the activity log.
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
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'budget', 'category', 'session')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="Server-assigned ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    status_code: Optional[int] = None

    is_user_action: bool = False

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
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "status_code": self.status_code,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_created("budget", budget.id, {...})
        event = AuditEventBuilder.load_failed("budgets", "server", 500)
    """

    @staticmethod
    def logged_in(user_id: Optional[int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_IN,
            entity_type="session",
            entity_id=user_id,
            description="User logged in",
            is_user_action=True,
        )

    @staticmethod
    def logged_out() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_OUT,
            entity_type="session",
            description="User logged out",
            is_user_action=True,
        )

    @staticmethod
    def registered(user_id: Optional[int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            entity_type="user",
            entity_id=user_id,
            description="New account registered",
            is_user_action=True,
        )

    @staticmethod
    def auth_failed(action: str, error_message: str, status_code: Optional[int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            description=f"{action.capitalize()} failed",
            error_message=error_message,
            status_code=status_code,
            details={"action": action},
        )

    @staticmethod
    def data_loaded(
        resource: str,
        period: Optional[str],
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_LOADED,
            entity_type=resource,
            correlation_id=correlation_id,
            description=f"Loaded {count} {resource}" + (f" for {period}" if period else ""),
            details={"period": period, "count": count},
        )

    @staticmethod
    def load_failed(
        resource: str,
        period: Optional[str],
        error_message: str,
        status_code: Optional[int],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=resource,
            correlation_id=correlation_id,
            description=f"Loading {resource} failed",
            error_message=error_message,
            status_code=status_code,
            details={"period": period},
        )

    @staticmethod
    def stale_load_discarded(
        resource: str,
        requested_period: Optional[str],
        current_period: Optional[str],
        sequence: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STALE_LOAD_DISCARDED,
            severity=AuditSeverity.DEBUG,
            entity_type=resource,
            description=f"Discarded out-of-date {resource} response",
            details={
                "requested_period": requested_period,
                "current_period": current_period,
                "sequence": sequence,
            },
        )

    @staticmethod
    def entity_created(entity_type: str, entity_id: int, details: Optional[dict] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_CREATED,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} {entity_id} created",
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def entity_updated(entity_type: str, entity_id: int, details: Optional[dict] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_UPDATED,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} {entity_id} updated",
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def entity_deleted(entity_type: str, entity_id: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_DELETED,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} {entity_id} deleted",
            is_user_action=True,
        )

    @staticmethod
    def mutation_failed(
        entity_type: str,
        action: str,
        error_message: str,
        status_code: Optional[int],
        entity_id: Optional[int] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"Could not {action} {entity_type}",
            error_message=error_message,
            status_code=status_code,
            details={"action": action},
        )

    @staticmethod
    def input_rejected(entity_type: str, field: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_REJECTED,
            severity=AuditSeverity.INFO,
            entity_type=entity_type,
            description=f"Rejected {field}: {reason}",
            details={"field": field},
            is_user_action=True,
        )
