"""
Activity Logger

DESIGN DECISION: Every user action and every server answer is logged.
This provides:
1. Traceability of what the user did
2. Debugging capability when the API misbehaves
3. Visibility of stale responses discarded by the controllers

The activity logger:
- Writes structured JSON lines through structlog
- Never raises; a logging failure must not break the UI
- Supports correlation IDs to tie a load to its sub-requests
"""

import logging
from uuid import UUID, uuid4

import structlog

from finance_tracker.models.audit import AuditEvent, AuditSeverity


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


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output to stderr at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("finance_tracker").setLevel(level.upper())


class ActivityLogger:
    """
    Central activity logging service.

    Logs events to the structured local log only; the client has no
    storage of its own.
    """

    def __init__(self, name: str = "finance_tracker.activity"):
        self._logger = structlog.get_logger(name)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        log_dict = event.to_log_dict()

        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            logging.getLogger(__name__).error("audit logging failed: %s", e)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a load that fans out into several requests.
    """
    return uuid4()
