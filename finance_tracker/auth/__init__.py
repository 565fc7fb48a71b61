"""Authentication session package."""

from finance_tracker.auth.session import Session

__all__ = ["Session"]
