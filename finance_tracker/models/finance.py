"""
Core Data Models for the Finance Tracker client

These models define the shapes exchanged with the REST API.
They are designed to:
1. Validate every server payload before it reaches controller state
2. Serialize request bodies exactly as the backend expects them
3. Keep money as Decimal inside the client

DESIGN DECISION: Money is Decimal in memory but is sent as a JSON number.
The backend decodes amounts into a float field and rejects strings, so
request payloads serialize their Decimal fields with float().
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

from finance_tracker.models.period import validate_period


# =============================================================================
# ENUMS
# =============================================================================

class CategoryType(str, Enum):
    """Whether a category (and the transactions in it) is money in or out."""
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# ENTITIES (server-owned)
# =============================================================================

class Category(BaseModel):
    """
    A user-scoped classification for transactions and budgets.

    Read-only from the budgets screen; owned by the backend.
    """
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = Field(..., min_length=1, max_length=100)
    type: CategoryType


class Budget(BaseModel):
    """
    A monthly spending cap, optionally scoped to a category.

    `category_id` may be None (an overall budget) or reference a category
    that has since been deleted; both render with a placeholder name.
    """
    model_config = ConfigDict(extra="ignore")

    id: int
    user_id: int
    category_id: Optional[int] = None
    period_month: str = Field(
        ...,
        description="Month the cap applies to (YYYY-MM)"
    )
    limit_amount: Decimal = Field(
        ...,
        ge=0,
        description="Spending cap for the month"
    )
    created_at: str = Field(
        ...,
        description="Backend-assigned ISO-8601 creation timestamp"
    )

    @field_validator('period_month')
    @classmethod
    def check_period(cls, v: str) -> str:
        return validate_period(v)


class Transaction(BaseModel):
    """A single income or expense record."""
    model_config = ConfigDict(extra="ignore")

    id: int
    user_id: Optional[int] = None
    category_id: Optional[int] = None
    amount: Decimal = Field(..., ge=0)
    type: CategoryType
    date: date
    description: Optional[str] = None
    created_at: Optional[str] = None

    @field_validator('date', mode='before')
    @classmethod
    def accept_timestamp(cls, v):
        """The backend serializes dates as full RFC 3339 timestamps."""
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        if isinstance(v, datetime):
            return v.date()
        return v


class MonthSummary(BaseModel):
    """Income and expense totals for one month."""
    model_config = ConfigDict(extra="ignore")

    month: str
    income_total: Decimal = Decimal("0")
    expense_total: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income_total - self.expense_total


# =============================================================================
# REQUEST PAYLOADS
# =============================================================================

class BudgetCreate(BaseModel):
    """Body of POST /budgets."""

    category_id: int
    period_month: str
    limit_amount: Decimal = Field(..., ge=0)

    @field_validator('period_month')
    @classmethod
    def check_period(cls, v: str) -> str:
        return validate_period(v)

    @field_serializer('limit_amount')
    def as_number(self, v: Decimal) -> float:
        return float(v)


class BudgetUpdate(BaseModel):
    """
    Body of PUT /budgets/{id}.

    CRITICAL: The period is immutable after creation, so it is not a field
    here. A None category_id is omitted from the body, which tells the
    server to keep the stored category.
    """

    limit_amount: Decimal = Field(..., ge=0)
    category_id: Optional[int] = None

    @field_serializer('limit_amount')
    def as_number(self, v: Decimal) -> float:
        return float(v)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class CategoryPayload(BaseModel):
    """Body of POST /categories and PUT /categories/{id}."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    type: CategoryType


class TransactionPayload(BaseModel):
    """Body of POST /transactions and PUT /transactions/{id}."""
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(..., ge=0)
    type: CategoryType
    date: date
    category_id: Optional[int] = None
    description: Optional[str] = Field(default=None, max_length=500)

    @field_serializer('amount')
    def as_number(self, v: Decimal) -> float:
        return float(v)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


# =============================================================================
# AUTH PAYLOADS
# =============================================================================

class LoginRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=6, max_length=72)


class AuthToken(BaseModel):
    """Response of POST /login and POST /register."""
    model_config = ConfigDict(extra="ignore")

    token: str = Field(..., min_length=1)
    id: Optional[int] = None
