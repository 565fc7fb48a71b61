"""
Form state held by the view controllers.

Amount fields keep the raw text the user typed; it is parsed only at
submission so an invalid entry can stay on screen for correction.
Category selections are Optional[int]: None means "nothing chosen".
"""

from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel


def parse_amount(raw) -> Optional[Decimal]:
    """
    Parse user-entered amount text.

    Returns None for empty, unparseable or non-finite input (NaN, Infinity).
    Sign is preserved; callers decide whether negatives are acceptable.
    """
    if raw is None:
        return None
    if isinstance(raw, Decimal):
        value = raw
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = Decimal(text)
        except (InvalidOperation, ValueError):
            return None
    if not value.is_finite():
        return None
    return value


class BudgetForm(BaseModel):
    """The "create budget" form."""

    category_id: Optional[int] = None
    limit_amount: str = ""


class BudgetEdit(BaseModel):
    """Inline edit state for the single budget row being edited."""

    budget_id: int
    category_id: Optional[int] = None
    limit_amount: str = ""

