"""
Data Models Package

This package contains all Pydantic models used by the Finance Tracker client.
Every payload received from the API is validated against these schemas.
"""

from finance_tracker.models.finance import (
    AuthToken,
    Budget,
    BudgetCreate,
    BudgetUpdate,
    Category,
    CategoryPayload,
    CategoryType,
    LoginRequest,
    MonthSummary,
    RegisterRequest,
    Transaction,
    TransactionPayload,
)
from finance_tracker.models.forms import (
    BudgetEdit,
    BudgetForm,
    parse_amount,
)
from finance_tracker.models.period import (
    current_period,
    month_label,
    period_to_date,
    validate_period,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "AuthToken",
    "Budget",
    "BudgetCreate",
    "BudgetUpdate",
    "Category",
    "CategoryPayload",
    "CategoryType",
    "LoginRequest",
    "MonthSummary",
    "RegisterRequest",
    "Transaction",
    "TransactionPayload",
    # Forms
    "BudgetEdit",
    "BudgetForm",
    "parse_amount",
    # Periods
    "current_period",
    "month_label",
    "period_to_date",
    "validate_period",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
