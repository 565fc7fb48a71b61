"""
Budgets View Controller

Holds everything the Budgets screen shows: the selected month, the budgets
for that month, the categories for the selector, busy flags, the last error
and the create/inline-edit forms.

State transitions:
    idle <-> fetching   (load)
    idle <-> pending    (create / update / delete)
    row: viewing <-> editing   (start_edit / cancel_edit / successful update)

CRITICAL RULES:
1. The budget list is a cache of ONE month. Changing the month reloads it
   entirely; nothing is merged across months.
2. Local state changes only with server-confirmed data. Create prepends
   the server's entity, update replaces in place, delete removes only
   after the server said yes.
3. Only the most recently issued load may write state. Older responses
   are discarded when they arrive.
"""

from decimal import Decimal
from typing import Optional

from finance_tracker.audit import ActivityLogger, create_correlation_id
from finance_tracker.controllers.base import LoadSequence, ViewController, gather_all
from finance_tracker.models.audit import AuditEventBuilder
from finance_tracker.models.finance import (
    Budget,
    BudgetCreate,
    BudgetUpdate,
    Category,
    CategoryType,
)
from finance_tracker.models.forms import BudgetEdit, BudgetForm, parse_amount
from finance_tracker.models.period import current_period, validate_period
from finance_tracker.services.api import ApiClient, ApiError

NEGATIVE_LIMIT_MESSAGE = "Limit amount cannot be negative."
INVALID_LIMIT_MESSAGE = "Enter a limit amount as a number."


class BudgetViewController(ViewController):
    """
    Controller for the monthly budgets screen.

    All operations are coroutines. They never raise ApiError; failures end
    up in `error_message`.
    """

    entity_type = "budget"

    def __init__(
        self,
        client: ApiClient,
        activity: Optional[ActivityLogger] = None,
        period: Optional[str] = None,
    ):
        super().__init__(client, activity)
        self.period: str = validate_period(period) if period else current_period()
        self.categories: list[Category] = []
        self.budgets: list[Budget] = []
        self.pending = False
        self.fetching = False
        self.create_form = BudgetForm()
        self.edit: Optional[BudgetEdit] = None
        self._loads = LoadSequence()

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @property
    def total_limit(self) -> Decimal:
        return sum((b.limit_amount for b in self.budgets), Decimal("0"))

    @property
    def expense_categories(self) -> list[Category]:
        """Categories offered in the selector; budgets cap spending only."""
        return [c for c in self.categories if c.type == CategoryType.EXPENSE]

    @property
    def editing_id(self) -> Optional[int]:
        return self.edit.budget_id if self.edit else None

    def find(self, budget_id: int) -> Optional[Budget]:
        return next((b for b in self.budgets if b.id == budget_id), None)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def set_period(self, period: str) -> None:
        """Switch to another month and reload."""
        await self.load(validate_period(period))

    async def load(self, period: Optional[str] = None) -> None:
        """
        Fetch the month's budgets and all categories concurrently.

        On failure the budget list is emptied and categories from the
        last successful load are kept.
        """
        if period is not None:
            self.period = validate_period(period)

        ticket = self._loads.issue()
        requested = self.period
        correlation_id = create_correlation_id()
        self.fetching = True
        self.error_message = None

        try:
            try:
                budgets, categories = await gather_all(
                    self._client.list_budgets(requested),
                    self._client.list_categories(),
                )
            except ApiError as e:
                if not self._loads.is_current(ticket):
                    self._discard_stale(requested, ticket)
                    return
                self.budgets = []
                self.error_message = e.message
                self._activity.log(
                    AuditEventBuilder.load_failed(
                        "budgets", requested, e.message, e.status_code, correlation_id
                    )
                )
                return

            if not self._loads.is_current(ticket):
                self._discard_stale(requested, ticket)
                return

            self.budgets = budgets
            self.categories = categories
            self.error_message = None
            if self.edit and self.find(self.edit.budget_id) is None:
                self.edit = None
            self._activity.log(
                AuditEventBuilder.data_loaded("budgets", requested, len(budgets), correlation_id)
            )
        finally:
            if self._loads.is_current(ticket):
                self.fetching = False
                self.loaded = True

    def _discard_stale(self, requested: str, ticket: int) -> None:
        self._activity.log(
            AuditEventBuilder.stale_load_discarded("budgets", requested, self.period, ticket)
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def create(
        self,
        category_id: Optional[int],
        limit_amount: str,
    ) -> Optional[Budget]:
        """
        Create a budget for the selected month.

        Does nothing (no request, no state change) when no category is
        selected or the amount is empty or not a number.
        """
        if category_id is None:
            return None
        amount = parse_amount(limit_amount)
        if amount is None:
            return None
        if amount < 0:
            self._reject_input("limit_amount", NEGATIVE_LIMIT_MESSAGE)
            return None

        payload = BudgetCreate(
            category_id=category_id,
            period_month=self.period,
            limit_amount=amount,
        )

        self.pending = True
        self.error_message = None
        try:
            budget = await self._client.create_budget(payload)
        except ApiError as e:
            self._mutation_failed("create", e)
            return None
        finally:
            self.pending = False

        # The month may have changed while the request was in flight
        if budget.period_month == self.period:
            self.budgets = [budget, *self.budgets]
        self.create_form = BudgetForm()
        self._activity.log(
            AuditEventBuilder.entity_created(
                "budget",
                budget.id,
                {"period": budget.period_month, "limit_amount": str(budget.limit_amount)},
            )
        )
        return budget

    async def update(
        self,
        budget_id: int,
        limit_amount: str,
        category_id: Optional[int] = None,
    ) -> Optional[Budget]:
        """
        Save the row under inline edit.

        `category_id=None` leaves the stored category untouched; the client
        never asks the server to clear a category.

        An empty or non-numeric limit is rejected with a message and the row
        stays in edit mode.
        """
        if self.edit is None or self.edit.budget_id != budget_id:
            return None
        amount = parse_amount(limit_amount)
        if amount is None:
            self._reject_input("limit_amount", INVALID_LIMIT_MESSAGE)
            return None
        if amount < 0:
            self._reject_input("limit_amount", NEGATIVE_LIMIT_MESSAGE)
            return None

        payload = BudgetUpdate(limit_amount=amount, category_id=category_id)

        self.pending = True
        self.error_message = None
        try:
            updated = await self._client.update_budget(budget_id, payload)
        except ApiError as e:
            # Stay in edit mode so the user can retry
            self._mutation_failed("update", e, budget_id)
            return None
        finally:
            self.pending = False

        self.budgets = [updated if b.id == budget_id else b for b in self.budgets]
        self.edit = None
        self._activity.log(
            AuditEventBuilder.entity_updated(
                "budget",
                budget_id,
                {
                    "limit_amount": str(updated.limit_amount),
                    "category_changed": category_id is not None,
                },
            )
        )
        return updated

    async def submit_edit(self) -> Optional[Budget]:
        """Save the inline edit form as it currently stands."""
        if self.edit is None:
            return None
        return await self.update(
            self.edit.budget_id,
            self.edit.limit_amount,
            self.edit.category_id,
        )

    async def delete(self, budget_id: int) -> bool:
        """Delete a budget; the row disappears only after the server confirms."""
        self.pending = True
        self.error_message = None
        try:
            await self._client.delete_budget(budget_id)
        except ApiError as e:
            self._mutation_failed("delete", e, budget_id)
            return False
        finally:
            self.pending = False

        self.budgets = [b for b in self.budgets if b.id != budget_id]
        if self.editing_id == budget_id:
            self.edit = None
        self._activity.log(AuditEventBuilder.entity_deleted("budget", budget_id))
        return True

    # -------------------------------------------------------------------------
    # Inline edit (local only)
    # -------------------------------------------------------------------------

    def start_edit(self, budget_id: int) -> bool:
        """
        Put one row into edit mode, seeded from the cached entity.

        The category selection starts empty, meaning "keep the current one".
        """
        budget = self.find(budget_id)
        if budget is None:
            return False
        self.edit = BudgetEdit(
            budget_id=budget.id,
            category_id=None,
            limit_amount=str(budget.limit_amount),
        )
        return True

    def cancel_edit(self) -> None:
        self.edit = None
