"""Services package."""

from finance_tracker.services.api import (
    ApiClient,
    ApiError,
    FinanceClientError,
)

__all__ = [
    "ApiClient",
    "ApiError",
    "FinanceClientError",
]
