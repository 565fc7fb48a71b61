"""Activity logging package."""

from finance_tracker.audit.logger import (
    ActivityLogger,
    configure_logging,
    create_correlation_id,
)

__all__ = ["ActivityLogger", "configure_logging", "create_correlation_id"]
