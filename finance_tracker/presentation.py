"""
Presentation state.

Pure functions deriving what a screen shows from controller state, so the
Streamlit pages contain layout only and the rules can be tested without it.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

from finance_tracker.models.finance import Category
from finance_tracker.models.forms import BudgetForm, parse_amount
from finance_tracker.models.period import month_label

MISSING_CATEGORY_LABEL = "—"


class ListState(str, Enum):
    """Which of the three list renderings a screen is in."""
    LOADING = "loading"
    EMPTY = "empty"
    LIST = "list"


def list_state(fetching: bool, items: Sequence) -> ListState:
    if fetching:
        return ListState.LOADING
    if not items:
        return ListState.EMPTY
    return ListState.LIST


def category_label(categories: Sequence[Category], category_id: Optional[int]) -> str:
    """
    Display name for a category reference.

    Missing and stale (deleted) references are not errors; they render
    as a placeholder.
    """
    if category_id is None:
        return MISSING_CATEGORY_LABEL
    for category in categories:
        if category.id == category_id:
            return category.name
    return MISSING_CATEGORY_LABEL


def format_amount(value: Decimal, symbol: str = "") -> str:
    return f"{symbol}{Decimal(value):,.2f}"


def empty_budgets_title(period: str) -> str:
    return f"No budgets for {month_label(period)}"


def can_submit_budget(form: BudgetForm, pending: bool) -> bool:
    """The create action is enabled only for a complete, non-negative form."""
    if pending or form.category_id is None:
        return False
    amount = parse_amount(form.limit_amount)
    return amount is not None and amount >= 0
