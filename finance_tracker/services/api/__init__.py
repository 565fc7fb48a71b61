"""REST API client package."""

from finance_tracker.services.api.client import (
    ApiClient,
    ApiError,
    FinanceClientError,
)

__all__ = [
    "ApiClient",
    "ApiError",
    "FinanceClientError",
]
